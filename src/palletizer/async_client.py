"""asyncio flavour of PalletizerClient with an explicit deadline and cancellation handle."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Mapping

import certifi
import httpx

from palletizer.codec import (
    HEALTH_PATH,
    JSON_HEADERS,
    METRICS_PATH,
    PACK_PATH,
    decode_response,
    encode_request,
)
from palletizer.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, ClientSettings
from palletizer.errors import RequestCancelledError, RequestTimeoutError, TransportError
from palletizer.models import HealthResponse, MetricsResponse, PackingRequest, PackingResponse

logger = logging.getLogger(__name__)


class AsyncPalletizerClient:
    """
    Same contract as PalletizerClient, on httpx.AsyncClient.

    `pack` accepts `timeout` (seconds) and `cancel_event`; whichever fires
    first aborts the in-flight request, which is cancelled and awaited before
    the error is raised so no task or connection outlives the call.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float | None = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        # Deadline for a whole call (connect through body read); None leaves
        # only the transport's own per-phase timeouts.
        self.timeout = timeout
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(timeout=timeout, verify=certifi.where())
        self._http = http_client

    @classmethod
    def with_endpoint(cls, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> "AsyncPalletizerClient":
        return cls(base_url=base_url, timeout=timeout)

    @classmethod
    def with_http_client(cls, http_client: httpx.AsyncClient, timeout: float | None = None) -> "AsyncPalletizerClient":
        return cls(timeout=timeout, http_client=http_client)

    @classmethod
    def from_env(cls) -> "AsyncPalletizerClient":
        settings = ClientSettings.from_env()
        return cls(base_url=settings.api_url, timeout=settings.timeout)

    # ------------------------------------------------------------------

    async def pack(
        self,
        request: PackingRequest | Mapping[str, Any],
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PackingResponse:
        """
        Send a packing request and return the packed pallets.

        Raises RequestTimeoutError when `timeout` elapses and
        RequestCancelledError when `cancel_event` is set before the response
        is read. Other failures are raised as in PalletizerClient.pack.
        """
        payload = encode_request(request)
        status_code, body = await self._guarded(
            self._send("POST", PACK_PATH, content=payload),
            timeout=timeout,
            cancel_event=cancel_event,
        )
        return decode_response(status_code, body, PackingResponse)

    async def health(self, *, timeout: float | None = None) -> HealthResponse:
        status_code, body = await self._guarded(self._send("GET", HEALTH_PATH), timeout=timeout)
        return decode_response(status_code, body, HealthResponse)

    async def metrics(self, *, timeout: float | None = None) -> MetricsResponse:
        status_code, body = await self._guarded(self._send("GET", METRICS_PATH), timeout=timeout)
        return decode_response(status_code, body, MetricsResponse)

    async def _guarded(
        self,
        call: Awaitable[tuple[int, bytes]],
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> tuple[int, bytes]:
        """Race `call` against the deadline (the client timeout unless overridden) and the cancel event."""
        if timeout is None:
            timeout = self.timeout
        send = asyncio.ensure_future(call)
        waiters: set[asyncio.Future[Any]] = {send}
        cancel_wait: asyncio.Future[Any] | None = None
        if cancel_event is not None:
            cancel_wait = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_wait)

        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)

        if send in done:
            return send.result()
        if cancel_wait is not None and cancel_wait in done:
            logger.warning("Palletizer request cancelled by caller")
            raise RequestCancelledError("request cancelled")
        logger.warning(f"Palletizer request exceeded deadline of {timeout}s")
        raise RequestTimeoutError(f"request exceeded deadline of {timeout}s")

    async def _send(self, method: str, path: str, content: bytes | None = None) -> tuple[int, bytes]:
        url = f"{self.base_url}{path}"
        headers = JSON_HEADERS if content is not None else None
        logger.debug(f"{method} {url} ({len(content or b'')} bytes)")

        try:
            response = await self._http.request(method, url, content=content, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {url} timed out: {e!r}")
            raise RequestTimeoutError(f"request timed out: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            raise TransportError(f"failed to send request: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code} ({len(response.content)} bytes)")
        return response.status_code, response.content

    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "AsyncPalletizerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
