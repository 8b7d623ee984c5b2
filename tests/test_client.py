"""Tests for the blocking client against a stub service."""

from __future__ import annotations

import time

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import METRICS_FIXTURE, make_stub_app
from palletizer.client import PalletizerClient
from palletizer.config import DEFAULT_API_URL
from palletizer.errors import (
    ApplicationError,
    DecodeError,
    RequestTimeoutError,
    TransportError,
)
from palletizer.models import PackingRequest


def client_for(app) -> PalletizerClient:
    return PalletizerClient.with_http_client(TestClient(app))


def failing_client(exc_type: type[Exception]) -> PalletizerClient:
    """Client whose transport raises `exc_type` for every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)

    return PalletizerClient.with_http_client(httpx.Client(transport=httpx.MockTransport(handler)))


def test_default_client() -> None:
    client = PalletizerClient()
    try:
        assert client.base_url == DEFAULT_API_URL
        assert client._http.timeout.read == 120.0
    finally:
        client.close()


def test_with_endpoint_strips_trailing_slash() -> None:
    with PalletizerClient.with_endpoint("http://localhost:8080/", timeout=5.0) as client:
        assert client.base_url == "http://localhost:8080"
        assert client._http.timeout.connect == 5.0


def test_pack(stub_app, packing_request: PackingRequest) -> None:
    response = client_for(stub_app).pack(packing_request, timeout=5.0)

    assert response.summary.total_pallets == 1
    assert response.summary.total_cartons_packed == 1
    assert len(response.pallets) == 1
    assert response.pallets[0].cartons[0].carton_id == "BOX001_1"
    assert response.error == ""


def test_pack_sends_json_body(stub_app, packing_request: PackingRequest) -> None:
    client_for(stub_app).pack(packing_request)

    received = stub_app.state.received
    assert len(received) == 1
    assert received[0]["content_type"] == "application/json"
    assert received[0]["json"]["cartons"][0]["id"] == "BOX001"
    assert received[0]["json"]["packing_constraints"]["max_width"] == 1828.8
    assert received[0]["json"]["packing_options"]["support_percentage"] == 80.0


def test_pack_accepts_wire_dict(stub_app, packing_request: PackingRequest) -> None:
    response = client_for(stub_app).pack(packing_request.model_dump())
    assert response.summary.total_pallets == 1


def test_pack_application_error_uses_error_field(packing_request: PackingRequest) -> None:
    app = make_stub_app(status_code=400, body={"error": "carton too large"})

    with pytest.raises(ApplicationError) as exc_info:
        client_for(app).pack(packing_request)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "carton too large"
    assert "carton too large" in str(exc_info.value)


def test_pack_application_error_falls_back_to_raw_body(packing_request: PackingRequest) -> None:
    app = make_stub_app(status_code=503, body={"pallets": []})

    with pytest.raises(ApplicationError) as exc_info:
        client_for(app).pack(packing_request)

    assert exc_info.value.status_code == 503
    assert exc_info.value.message == '{"pallets":[]}'


def test_pack_soft_error_is_returned(packing_request: PackingRequest) -> None:
    """A 200 with `error` set is handed back to the caller, not raised."""
    app = make_stub_app(body={"pallets": [], "error": "no carton fits"})

    response = client_for(app).pack(packing_request)

    assert response.error == "no carton fits"
    assert response.pallets == []


def test_pack_decode_error_keeps_body(packing_request: PackingRequest) -> None:
    app = make_stub_app(status_code=502, raw="<html>Bad Gateway</html>")

    with pytest.raises(DecodeError) as exc_info:
        client_for(app).pack(packing_request)

    assert exc_info.value.body == "<html>Bad Gateway</html>"


def test_pack_invalid_request_fails_before_sending(stub_app) -> None:
    with pytest.raises(TransportError, match="failed to marshal request"):
        client_for(stub_app).pack({"cartons": [{"id": "A"}]})

    assert stub_app.state.received == []


def test_pack_connection_error(packing_request: PackingRequest) -> None:
    with pytest.raises(TransportError) as exc_info:
        failing_client(httpx.ConnectError).pack(packing_request)

    assert not isinstance(exc_info.value, RequestTimeoutError)
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_pack_timeout(packing_request: PackingRequest) -> None:
    with pytest.raises(RequestTimeoutError):
        failing_client(httpx.ReadTimeout).pack(packing_request, timeout=0.1)


def test_caller_http_client_is_not_closed(stub_app, packing_request: PackingRequest) -> None:
    http_client = TestClient(stub_app)
    with PalletizerClient.with_http_client(http_client) as client:
        client.pack(packing_request)
    assert not http_client.is_closed


def test_health_and_metrics(stub_app) -> None:
    client = client_for(stub_app)

    assert client.health().status == "ok"

    metrics = client.metrics()
    assert metrics.total_requests == METRICS_FIXTURE["total_requests"]
    assert metrics.success_rate == 0.98
    assert metrics.num_gc == 0


def test_pack_deadline_covers_slow_body(trickle_server, packing_request: PackingRequest) -> None:
    """A server that keeps sending bytes cannot stretch the call past its deadline."""
    with PalletizerClient.with_endpoint(trickle_server) as client:
        started = time.monotonic()
        with pytest.raises(RequestTimeoutError):
            client.pack(packing_request, timeout=0.5)
        elapsed = time.monotonic() - started

    assert elapsed < 1.5


def test_client_timeout_is_the_default_deadline(trickle_server, packing_request: PackingRequest) -> None:
    with PalletizerClient.with_endpoint(trickle_server, timeout=0.5) as client:
        assert client.timeout == 0.5
        with pytest.raises(RequestTimeoutError):
            client.pack(packing_request)


def test_slow_body_within_deadline(trickle_server, packing_request: PackingRequest) -> None:
    with PalletizerClient.with_endpoint(trickle_server, timeout=10.0) as client:
        response = client.pack(packing_request)

    assert response.summary.total_pallets == 0
