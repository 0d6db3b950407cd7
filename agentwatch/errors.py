"""Error taxonomy shared by the client, commands, and dashboard."""

from __future__ import annotations


class AgentwatchError(Exception):
    """Base exception for all agentwatch errors."""


class ConfigError(AgentwatchError):
    """Raised when required configuration (e.g. the API key) is missing."""


class TransportFailure(AgentwatchError):
    """Raised when the service could not be reached (DNS, TLS, timeout)."""


class RemoteFailure(AgentwatchError):
    """Raised when the service answers with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeFailure(AgentwatchError):
    """Raised when a response body is not the JSON shape we expect."""


class ValidationFailure(AgentwatchError):
    """Raised by local guards before a request is made."""
