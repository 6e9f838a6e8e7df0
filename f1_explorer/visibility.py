"""Bridge viewport visibility events to feed pagination."""

from __future__ import annotations

import logging
from typing import Callable

from .pages import FeedPage
from .view_state import ViewState

_LOGGER = logging.getLogger(__name__)


class VisibilityTrigger:
    """Advance a feed when its end-of-list sentinel becomes visible.

    Only the hidden -> visible transition counts; repeated "visible"
    events without an intermediate "hidden" are ignored.
    """

    def __init__(self, page: FeedPage) -> None:
        self._page = page
        self._visible = False
        self._listeners: list[Callable[[ViewState], None]] = []

    @property
    def visible(self) -> bool:
        return self._visible

    def add_listener(self, listener: Callable[[ViewState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def set_visible(self, visible: bool) -> ViewState | None:
        if visible == self._visible:
            return None
        self._visible = visible
        if not visible:
            return None

        _LOGGER.debug("Sentinel visible for %s, requesting next page", self._page.resource.kind)
        view = self._page.load_more()
        for listener in list(self._listeners):
            listener(view)
        return view
