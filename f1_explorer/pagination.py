"""Cursor-based pagination layered on the fetch orchestrator."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from itertools import chain
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .cache import FetchStatus
from .coordinator import FetchOrchestrator, retrieve_task_exception
from .errors import ErrorKind
from .validation import ParameterSet

if TYPE_CHECKING:
    from .resources import Resource

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    cursor: Any
    items: tuple
    next_cursor: Any = None

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class PaginationState:
    """Ordered pages of one (kind, parameters) sequence. Append-only."""

    kind: str
    params: ParameterSet
    next_cursor: Any
    pages: list[Page] = field(default_factory=list)
    pending: bool = False
    pending_cursor: Any = None
    error_kind: Optional[ErrorKind] = None
    exhausted: bool = False
    task: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    @property
    def items(self) -> tuple:
        return tuple(chain.from_iterable(page.items for page in self.pages))

    @property
    def fetched_cursors(self) -> list[Any]:
        return [page.cursor for page in self.pages]

    @property
    def can_continue(self) -> bool:
        return not (self.pending or self.exhausted or self.error_kind is not None)


class PaginationCursorEngine:
    """Drive one pagination sequence per resource kind."""

    def __init__(self, orchestrator: FetchOrchestrator) -> None:
        self._orchestrator = orchestrator
        self._states: dict[str, PaginationState] = {}

    def peek(self, resource: Resource) -> PaginationState | None:
        return self._states.get(resource.kind)

    def states(self) -> dict[str, PaginationState]:
        return dict(self._states)

    def state(self, resource: Resource, params: Mapping[str, Any]) -> PaginationState:
        """Return the state for these parameters, starting over if they changed."""
        params = ParameterSet(params)
        current = self._states.get(resource.kind)
        if current is None or current.params != params:
            if current is not None:
                _LOGGER.debug(
                    "Pagination reset kind=%s params=%s -> %s",
                    resource.kind,
                    current.params,
                    params,
                )
            current = PaginationState(
                kind=resource.kind,
                params=params,
                next_cursor=resource.initial_cursor,
            )
            self._states[resource.kind] = current
        return current

    def advance(self, resource: Resource, params: Mapping[str, Any]) -> PaginationState:
        """Request the next page unless one is pending or the sequence has ended."""
        state = self.state(resource, params)
        if not state.can_continue:
            if _LOGGER.isEnabledFor(logging.DEBUG):
                _LOGGER.debug(
                    "Advance ignored kind=%s pending=%s exhausted=%s error=%s",
                    state.kind,
                    state.pending,
                    state.exhausted,
                    state.error_kind,
                )
            return state

        loop = asyncio.get_running_loop()
        cursor = state.next_cursor
        state.pending = True
        state.pending_cursor = cursor
        state.task = loop.create_task(self._async_fetch_page(resource, state, cursor))
        state.task.add_done_callback(retrieve_task_exception)
        return state

    async def async_advance(self, resource: Resource, params: Mapping[str, Any]) -> PaginationState:
        state = self.advance(resource, params)
        if state.pending and state.task is not None:
            await asyncio.shield(state.task)
        return state

    async def _async_fetch_page(
        self, resource: Resource, state: PaginationState, cursor: Any
    ) -> None:
        try:
            record = await self._orchestrator.async_ensure_fetch(resource, state.params, cursor)
        except Exception:
            state.error_kind = ErrorKind.TRANSPORT
            raise
        finally:
            state.pending = False
            state.pending_cursor = None

        if record.status is FetchStatus.FAILED:
            state.error_kind = record.error_kind
            _LOGGER.warning(
                "Page fetch failed kind=%s cursor=%s error=%s",
                state.kind,
                cursor,
                record.error_kind.value if record.error_kind else None,
            )
            return

        page = replace(record.payload, cursor=cursor)
        seen = state.fetched_cursors
        state.pages.append(page)
        next_cursor = page.next_cursor
        if next_cursor is None:
            state.exhausted = True
        elif next_cursor == cursor or next_cursor in seen:
            _LOGGER.warning(
                "Cursor %s for kind=%s was already fetched; ending sequence",
                next_cursor,
                state.kind,
            )
            state.exhausted = True
        else:
            state.next_cursor = next_cursor
