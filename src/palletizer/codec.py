"""JSON encoding of requests and decoding/status handling of responses, shared by both clients."""

from __future__ import annotations

import logging
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from palletizer.errors import ApplicationError, DecodeError, TransportError
from palletizer.models import PackingRequest

logger = logging.getLogger(__name__)

PACK_PATH = "/api/v1/pack"
HEALTH_PATH = "/health"
METRICS_PATH = "/metrics"

JSON_HEADERS = {"Content-Type": "application/json"}

ModelT = TypeVar("ModelT", bound=BaseModel)


def encode_request(request: PackingRequest | Mapping[str, Any]) -> bytes:
    """Serialize a packing request; plain mappings are validated into a PackingRequest first."""
    try:
        if not isinstance(request, PackingRequest):
            request = PackingRequest.model_validate(request)
        return request.model_dump_json().encode("utf-8")
    except (ValidationError, TypeError, ValueError) as e:
        raise TransportError(f"failed to marshal request: {e}") from e


def decode_response(status_code: int, body: bytes, model: type[ModelT]) -> ModelT:
    """
    Turn a raw HTTP answer into a model instance.

    The body is parsed before the status is looked at, so a non-JSON error page
    surfaces as DecodeError. A parsed body with a non-200 status becomes
    ApplicationError, using the body's `error` field when it has one. A 200 is
    returned as decoded even if `error` is set.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        decoded = model.model_validate_json(body)
    except ValidationError as e:
        logger.warning(f"Could not decode {model.__name__} (status {status_code}, {len(body)} bytes)")
        raise DecodeError(f"failed to parse response: {e}", body=text) from e

    if status_code != 200:
        message = getattr(decoded, "error", "") or text
        logger.warning(f"Palletizer API returned status {status_code}: {message[:300]}")
        raise ApplicationError(status_code, message, body=text)

    return decoded
