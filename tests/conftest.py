"""Shared fixtures: a stub Palletizer service built on FastAPI and a slow real HTTP server."""

from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from palletizer.models import Carton, PackingOptions, PackingRequest
from palletizer.pallets import standard_pallet

# One pallet, one carton: what the service returns for a single 24x18x16 in box.
PACK_FIXTURE: dict[str, Any] = {
    "pallets": [
        {
            "pallet_id": 1,
            "total_weight": 18143.68,
            "total_height": 406.4,
            "utilization_percentage": 95.0,
            "cartons": [
                {
                    "carton_id": "BOX001_1",
                    "position": {"x": 0, "y": 0, "z": 0},
                    "dimensions": {"length": 609.6, "width": 457.2, "height": 406.4},
                    "orientation": "original",
                    "weight": 18143.68,
                    "layer": 0,
                }
            ],
            "center_of_gravity": {"x": 304.8, "y": 228.6, "z": 203.2},
        }
    ],
    "summary": {
        "total_pallets": 1,
        "total_cartons_packed": 1,
        "average_utilization": 95.0,
        "computation_time_ms": 5,
    },
}

METRICS_FIXTURE: dict[str, Any] = {
    "total_requests": 42,
    "total_cartons": 1200,
    "total_pallets": 57,
    "average_time_ms": 12.5,
    "average_util_pct": 81.3,
    "success_rate": 0.98,
    "uptime_seconds": 3600,
    "go_version": "go1.22.1",
}


def make_stub_app(status_code: int = 200, body: Any = None, raw: str | None = None) -> FastAPI:
    """
    Build a stub service.

    POST /api/v1/pack answers `status_code` with `body` as JSON (PACK_FIXTURE by
    default) or with `raw` as plain text. Received requests are kept on
    app.state.received for assertions.
    """
    app = FastAPI()
    app.state.received = []

    @app.post("/api/v1/pack")
    async def pack(request: Request):
        app.state.received.append(
            {
                "content_type": request.headers.get("content-type"),
                "json": await request.json(),
            }
        )
        if raw is not None:
            return PlainTextResponse(raw, status_code=status_code)
        return JSONResponse(PACK_FIXTURE if body is None else body, status_code=status_code)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/metrics")
    async def metrics():
        return METRICS_FIXTURE

    return app


@pytest.fixture
def stub_app() -> FastAPI:
    return make_stub_app()


@pytest.fixture
def packing_request() -> PackingRequest:
    return PackingRequest(
        cartons=[
            Carton(
                id="BOX001",
                length=609.6,
                width=457.2,
                height=406.4,
                weight=18143.68,
                quantity=1,
                allow_rotation=True,
            )
        ],
        packing_constraints=standard_pallet(),
        packing_options=PackingOptions(support_percentage=80.0),
    )


class TrickleHandler(BaseHTTPRequestHandler):
    """Answers every request with a valid 200 body written one byte at a time."""

    body = b'{"pallets": [], "summary": {"total_pallets": 0}}'
    delay = 0.05

    def _trickle(self) -> None:
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        try:
            for i in range(len(self.body)):
                self.wfile.write(self.body[i:i + 1])
                self.wfile.flush()
                time.sleep(self.delay)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def do_POST(self) -> None:
        self.rfile.read(int(self.headers.get("Content-Length", 0)))
        self._trickle()

    def do_GET(self) -> None:
        self._trickle()

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture
def trickle_server(monkeypatch):
    """Real HTTP server whose responses take about 2.4 s to finish; yields its base URL."""
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    server = ThreadingHTTPServer(("127.0.0.1", 0), TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()
