"""
Blocking client for the Palletizer API.

    client = PalletizerClient()
    request = PackingRequest(
        cartons=[Carton(id="BOX001", length=609.6, width=457.2, height=406.4,
                        weight=18143.68, quantity=30, allow_rotation=True)],
        packing_constraints=standard_pallet(),
        packing_options=PackingOptions(support_percentage=80.0),
    )
    response = client.pack(request)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

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
from palletizer.errors import RequestTimeoutError, TransportError
from palletizer.models import HealthResponse, MetricsResponse, PackingRequest, PackingResponse

logger = logging.getLogger(__name__)


class PalletizerClient:
    """
    Stateless client for POST /api/v1/pack.

    Holds only the base URL and an httpx.Client (connection pool + timeout),
    both fixed at construction. Safe to share between threads.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float | None = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        # Deadline for a whole call (connect through body read); None leaves
        # only the transport's own per-phase timeouts.
        self.timeout = timeout
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=timeout, verify=certifi.where())
        self._http = http_client

    @classmethod
    def with_endpoint(cls, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> "PalletizerClient":
        return cls(base_url=base_url, timeout=timeout)

    @classmethod
    def with_http_client(cls, http_client: httpx.Client, timeout: float | None = None) -> "PalletizerClient":
        """Use a caller-configured httpx.Client; the client will not close it."""
        return cls(timeout=timeout, http_client=http_client)

    @classmethod
    def from_env(cls) -> "PalletizerClient":
        settings = ClientSettings.from_env()
        return cls(base_url=settings.api_url, timeout=settings.timeout)

    # ------------------------------------------------------------------

    def pack(
        self,
        request: PackingRequest | Mapping[str, Any],
        *,
        timeout: float | None = None,
    ) -> PackingResponse:
        """
        Send a packing request and return the packed pallets.

        Args:
            request: PackingRequest (or a dict in wire format)
            timeout: per-call deadline in seconds; defaults to the client timeout

        Raises:
            TransportError: request could not be built or sent (RequestTimeoutError on deadline)
            DecodeError: response body is not a PackingResponse document
            ApplicationError: service returned a non-200 status

        A 200 response whose `error` field is set is returned, not raised.
        """
        payload = encode_request(request)
        status_code, body = self._send("POST", PACK_PATH, content=payload, timeout=timeout)
        return decode_response(status_code, body, PackingResponse)

    def health(self, *, timeout: float | None = None) -> HealthResponse:
        status_code, body = self._send("GET", HEALTH_PATH, timeout=timeout)
        return decode_response(status_code, body, HealthResponse)

    def metrics(self, *, timeout: float | None = None) -> MetricsResponse:
        status_code, body = self._send("GET", METRICS_PATH, timeout=timeout)
        return decode_response(status_code, body, MetricsResponse)

    def _send(
        self,
        method: str,
        path: str,
        content: bytes | None = None,
        timeout: float | None = None,
    ) -> tuple[int, bytes]:
        url = f"{self.base_url}{path}"
        headers = JSON_HEADERS if content is not None else None
        budget = timeout if timeout is not None else self.timeout
        call_timeout: Any = budget if budget is not None else httpx.USE_CLIENT_DEFAULT
        deadline = time.monotonic() + budget if budget is not None else None
        logger.debug(f"{method} {url} ({len(content or b'')} bytes)")

        # The deadline covers the whole call, body read included; leaving the
        # stream block releases the connection on every path.
        try:
            with self._http.stream(method, url, content=content, headers=headers, timeout=call_timeout) as response:
                chunks = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if deadline is not None and time.monotonic() > deadline:
                        logger.warning(f"{method} {url} exceeded deadline of {budget}s while reading the body")
                        raise RequestTimeoutError(f"request exceeded deadline of {budget}s")
                body = b"".join(chunks)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {url} timed out: {e!r}")
            raise RequestTimeoutError(f"request timed out: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            raise TransportError(f"failed to send request: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code} ({len(body)} bytes)")
        return response.status_code, body

    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> "PalletizerClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
