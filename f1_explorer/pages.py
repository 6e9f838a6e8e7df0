"""Page controllers: route parameters in, view state out."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .cache import FetchRecord
from .const import MAX_YEAR, MIN_YEAR, MSG_YEAR_RANGE
from .coordinator import FetchOrchestrator
from .pagination import PaginationCursorEngine, PaginationState
from .resources import Resource, ResourceData
from .validation import (
    CODE_MISSING,
    Invalid,
    ParamValidator,
    Valid,
    ValidationResult,
    year_rule,
)
from .view_state import IDLE, ViewState, ViewStatus, describe, project

_LOGGER = logging.getLogger(__name__)


class ResourcePage:
    """A page showing one non-paginated resource."""

    def __init__(self, orchestrator: FetchOrchestrator, resource: Resource) -> None:
        self._orchestrator = orchestrator
        self._resource = resource
        self._validation: Optional[ValidationResult] = None

    @property
    def resource(self) -> Resource:
        return self._resource

    @property
    def validation(self) -> Optional[ValidationResult]:
        return self._validation

    @property
    def key(self) -> str | None:
        if not isinstance(self._validation, Valid):
            return None
        return self._orchestrator.key_for(self._resource, self._validation.params)

    def navigate(self, raw: Mapping[str, Any] | None = None) -> ViewState:
        """Validate new route parameters and start fetching when they are valid.

        A resource without defaults stays idle until some parameter is given;
        only present but malformed input is invalid.
        """
        validator = self._resource.validator
        if validator.rules and validator.defaults is None and not validator.has_input(raw):
            _LOGGER.debug("No %s parameters given, nothing to fetch", self._resource.kind)
            self._validation = None
            return self.view

        self._validation = validator.validate(raw)
        if isinstance(self._validation, Invalid):
            reason = self._validation.reason
            _LOGGER.debug(
                "Invalid %s parameters: %s (%s)", self._resource.kind, reason.field, reason.message
            )
        else:
            self._start()
        return self.view

    def _start(self) -> None:
        self._orchestrator.ensure_fetch(self._resource, self._validation.params)

    def _record(self) -> FetchRecord | None:
        key = self.key
        return self._orchestrator.cache.get(key) if key is not None else None

    @property
    def view(self) -> ViewState:
        if self._validation is None:
            return IDLE
        return project(self._validation, self._record())

    @property
    def message(self) -> str | None:
        return describe(self.view, self._resource)

    @property
    def data(self) -> ResourceData | None:
        view = self.view
        return view.data if view.status is ViewStatus.READY else None

    async def async_wait(self) -> ViewState:
        """Wait for the current fetch, if any, and return the resulting view."""
        if isinstance(self._validation, Valid):
            await self._orchestrator.async_ensure_fetch(self._resource, self._validation.params)
        return self.view


class FeedPage(ResourcePage):
    """Infinite feed; the first page starts on navigate, the rest on demand."""

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        resource: Resource,
        pagination: PaginationCursorEngine,
    ) -> None:
        super().__init__(orchestrator, resource)
        self._pagination = pagination

    @property
    def key(self) -> str | None:
        if not isinstance(self._validation, Valid):
            return None
        return self._orchestrator.key_for(
            self._resource, self._validation.params, self._resource.initial_cursor
        )

    @property
    def state(self) -> PaginationState | None:
        if not isinstance(self._validation, Valid):
            return None
        state = self._pagination.peek(self._resource)
        if state is None or state.params != self._validation.params:
            return None
        return state

    def _start(self) -> None:
        state = self._pagination.state(self._resource, self._validation.params)
        # Returning to an already loaded feed keeps its pages
        if not state.pages:
            self._pagination.advance(self._resource, self._validation.params)

    def load_more(self) -> ViewState:
        if isinstance(self._validation, Valid):
            self._pagination.advance(self._resource, self._validation.params)
        return self.view

    @property
    def view(self) -> ViewState:
        if self._validation is None:
            return IDLE
        return project(self._validation, self._record(), self.state)

    @property
    def items(self) -> tuple:
        state = self.state
        return state.items if state is not None else ()

    async def async_wait(self) -> ViewState:
        state = self.state
        if state is not None and state.task is not None and not state.task.done():
            await state.task
        return self.view


class SeasonPicker:
    """Free-text season field and the enabled state of its submit button."""

    def __init__(self, min_year: int = MIN_YEAR, max_year: int = MAX_YEAR) -> None:
        self._validator = ParamValidator([year_rule(min_year, max_year)])
        self._range_message = MSG_YEAR_RANGE.format(min_year=min_year, max_year=max_year)
        self._selected: int | None = None
        self._error: str | None = None

    @property
    def selected(self) -> int | None:
        return self._selected

    @property
    def error(self) -> str | None:
        return self._error

    def select(self, text: str | None) -> bool:
        """Validate the typed value; returns True when it is a usable season."""
        result = self._validator.validate({"year": text})
        if isinstance(result, Valid):
            self._selected = result.params["year"]
            self._error = None
            return True
        self._selected = None
        # An empty field is not an error, just nothing to submit
        self._error = None if result.reason.code == CODE_MISSING else self._range_message
        return False

    def can_submit(self, view: ViewState | None = None) -> bool:
        if view is not None and view.is_loading:
            return False
        return self._error is None and self._selected is not None

    def route_params(self) -> dict[str, str]:
        if self._selected is None:
            return {}
        return {"year": str(self._selected)}
