"""Derive presentation state from validation and fetch lifecycle."""

from __future__ import annotations

from collections.abc import Sized
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from .cache import FetchRecord, FetchStatus
from .errors import ErrorKind
from .validation import Invalid, InvalidReason, ValidationResult

if TYPE_CHECKING:
    from .pagination import PaginationState
    from .resources import Resource


class ViewStatus(str, Enum):
    INVALID = "invalid"
    IDLE = "idle"
    LOADING = "loading"
    EMPTY = "empty"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class ViewState:
    status: ViewStatus
    reason: Optional[InvalidReason] = None
    error_kind: Optional[ErrorKind] = None
    data: Any = None
    # paginated views only
    loading_more: bool = False
    has_more: bool = False

    @property
    def is_loading(self) -> bool:
        return self.status is ViewStatus.LOADING

    @property
    def is_ready(self) -> bool:
        return self.status is ViewStatus.READY


IDLE = ViewState(ViewStatus.IDLE)
LOADING = ViewState(ViewStatus.LOADING)
EMPTY = ViewState(ViewStatus.EMPTY)


def _count(payload: Any) -> int | None:
    if isinstance(payload, Sized):
        return len(payload)
    return None


def project(
    validation: ValidationResult,
    record: FetchRecord | None,
    pagination: PaginationState | None = None,
) -> ViewState:
    """Return the view state; first matching rule wins.

    invalid > idle > loading > error > empty > ready
    """
    if isinstance(validation, Invalid):
        return ViewState(ViewStatus.INVALID, reason=validation.reason)

    if record is None:
        # The page task has been scheduled but has not reached the cache yet
        if pagination is not None and pagination.pending:
            return LOADING
        return IDLE

    if record.status is FetchStatus.PENDING:
        return LOADING

    if record.status is FetchStatus.FAILED:
        return ViewState(ViewStatus.ERROR, error_kind=record.error_kind)

    if pagination is not None:
        # The first page may be cached before the engine has appended it
        items = pagination.items if pagination.pages else tuple(record.payload.items)
        if not items:
            return EMPTY
        return ViewState(
            ViewStatus.READY,
            data=items,
            error_kind=pagination.error_kind,
            loading_more=pagination.pending,
            has_more=not pagination.exhausted and pagination.error_kind is None,
        )

    if _count(record.payload) == 0:
        return EMPTY
    return ViewState(ViewStatus.READY, data=record.payload)


def describe(view: ViewState, resource: Resource) -> str | None:
    """Return the user-facing message for a view state, if it has one."""
    if view.status is ViewStatus.INVALID:
        return resource.invalid_message
    if view.status is ViewStatus.ERROR:
        if view.error_kind is ErrorKind.NOT_FOUND:
            return resource.not_found_message
        return resource.error_message
    if view.status is ViewStatus.EMPTY:
        return resource.empty_message
    if view.status is ViewStatus.READY and view.error_kind is not None:
        return resource.error_message
    return None
