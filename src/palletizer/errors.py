"""Exceptions raised by the Palletizer clients."""

from __future__ import annotations


class PalletizerError(Exception):
    """Base class for every client failure."""


class TransportError(PalletizerError):
    """The request could not be built, sent, or completed."""


class RequestTimeoutError(TransportError):
    """The call ran past its deadline."""


class RequestCancelledError(TransportError):
    """The caller cancelled the call before a response arrived."""


class DecodeError(PalletizerError):
    """The response body is not the expected JSON document."""

    def __init__(self, message: str, body: str) -> None:
        super().__init__(message)
        self.body = body


class ApplicationError(PalletizerError):
    """
    The service answered with a non-200 status.

    `message` is the `error` field of the body when the service set one,
    otherwise the raw body text.
    """

    def __init__(self, status_code: int, message: str, body: str = "") -> None:
        super().__init__(f"API error (status {status_code}): {message}")
        self.status_code = status_code
        self.message = message
        self.body = body
