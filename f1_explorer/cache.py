"""Process-wide fetch cache with single-flight records."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterator, Mapping, Optional
from urllib.parse import urlencode

from .errors import ErrorKind, InvalidTransition

_LOGGER = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchRecord:
    """Lifecycle of one network fetch. Replaced, never mutated."""

    key: str
    status: FetchStatus
    payload: Any = None
    error_kind: Optional[ErrorKind] = None
    created_at: float = field(default_factory=time.monotonic)

    @property
    def done(self) -> bool:
        return self.status is not FetchStatus.PENDING


def make_cache_key(
    kind: str,
    params: Optional[Mapping[str, object]] = None,
    cursor_field: Optional[str] = None,
    cursor: object = None,
) -> str:
    """
    Build a deterministic cache key from resource kind + sorted parameters.

    Values are stringified, so ``{"year": 2023}`` and ``{"year": "2023"}``
    share a key. Callers pass validated parameters whose types are fixed
    by the resource's rules.

    Parameters
    ----------
    kind : str
        Resource kind, e.g. ``"schedule"``.
    params : Mapping[str, object] | None
        Validated parameters.
    cursor_field : str | None
        Name under which the page cursor is merged into the parameters.
    cursor : object
        Page cursor; ignored when ``cursor_field`` is None.

    Returns
    -------
    str
        Stable cache key, e.g. ``"schedule:year=2023"``.
    """
    merged = dict(params or {})
    if cursor_field is not None:
        merged[cursor_field] = cursor
    if not merged:
        return f"{kind}:"
    qp = urlencode(sorted((str(k), str(v)) for k, v in merged.items()))
    return f"{kind}:{qp}"


Listener = Callable[[str, FetchRecord], None]


class QueryCache:
    """Map cache keys to fetch records; entries never expire."""

    def __init__(self) -> None:
        self._records: dict[str, FetchRecord] = {}
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))

    def get(self, key: str) -> FetchRecord | None:
        return self._records.get(key)

    def begin_fetch(self, key: str) -> FetchRecord:
        record, _ = self.try_begin_fetch(key)
        return record

    def try_begin_fetch(self, key: str) -> tuple[FetchRecord, bool]:
        """Return ``(record, created)``; ``created`` is True only for a new pending record."""
        existing = self._records.get(key)
        if existing is not None:
            if _LOGGER.isEnabledFor(logging.DEBUG):
                _LOGGER.debug("Cache HIT key=%s status=%s", key, existing.status.value)
            return existing, False

        record = FetchRecord(key=key, status=FetchStatus.PENDING)
        self._records[key] = record
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Cache MISS key=%s -> pending", key)
        self._notify(key, record)
        return record, True

    def resolve(self, key: str, payload: Any) -> FetchRecord:
        record = self._pending(key)
        record = replace(record, status=FetchStatus.FULFILLED, payload=payload)
        self._records[key] = record
        self._notify(key, record)
        return record

    def reject(self, key: str, error_kind: ErrorKind) -> FetchRecord:
        record = self._pending(key)
        record = replace(record, status=FetchStatus.FAILED, error_kind=ErrorKind(error_kind))
        self._records[key] = record
        self._notify(key, record)
        return record

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for record transitions; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def snapshot(self) -> dict[str, int]:
        counts = {status.value: 0 for status in FetchStatus}
        for record in self._records.values():
            counts[record.status.value] += 1
        return counts

    def _pending(self, key: str) -> FetchRecord:
        record = self._records.get(key)
        if record is None or record.status is not FetchStatus.PENDING:
            raise InvalidTransition(key, record.status.value if record else None)
        return record

    def _notify(self, key: str, record: FetchRecord) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, record)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Cache listener failed for key=%s", key)
