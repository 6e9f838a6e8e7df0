"""Error taxonomy shared by the transport, the cache and the projector."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure of a fetch, as recorded in the cache."""

    NOT_FOUND = "not_found"
    TRANSPORT = "transport"


class F1ExplorerError(Exception):
    """Base class for all errors raised by f1_explorer."""


class ConfigError(F1ExplorerError):
    """Configuration failed schema validation."""


class InvalidTransition(F1ExplorerError):
    """A fetch record was resolved or rejected outside the pending state."""

    def __init__(self, key: str, status: str | None) -> None:
        super().__init__(f"Cannot transition record {key!r} from {status or 'missing'}")
        self.key = key
        self.status = status


class ApiError(F1ExplorerError):
    """Failure talking to the statistics backend."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ResourceNotFound(ApiError):
    """The backend has no data for the requested parameters (HTTP 404)."""

    kind = ErrorKind.NOT_FOUND


class TransportError(ApiError):
    """Network failure, timeout, server error or malformed payload."""

    kind = ErrorKind.TRANSPORT


def classify_error(err: BaseException) -> ErrorKind:
    """Return the error kind recorded for a failed fetch."""
    if isinstance(err, ApiError):
        return err.kind
    return ErrorKind.TRANSPORT
