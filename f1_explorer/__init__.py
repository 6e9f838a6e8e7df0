"""Data layer for the F1 statistics browser."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Mapping, Optional

import aiohttp
from aiohttp import ClientSession

from .api import F1ApiClient
from .cache import QueryCache
from .config import ExplorerConfig, load_config
from .const import DOMAIN
from .coordinator import FetchOrchestrator
from .errors import F1ExplorerError
from .pages import FeedPage, ResourcePage, SeasonPicker
from .pagination import PaginationCursorEngine
from .resources import Resource, build_registry
from .visibility import VisibilityTrigger

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "F1Explorer",
    "async_setup",
    "build_user_agent",
]


def build_user_agent() -> str:
    """Return the User-Agent sent with every backend request."""
    try:
        own_version = version("f1-explorer")
    except PackageNotFoundError:
        own_version = "dev"
    return "F1Explorer/%s aiohttp/%s" % (own_version, aiohttp.__version__)


class F1Explorer:
    """Wire the client, cache, orchestrator and pagination engine together."""

    def __init__(
        self,
        config: ExplorerConfig,
        client: F1ApiClient,
        *,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.config = config
        self.client = client
        self.cache = QueryCache()
        self.orchestrator = FetchOrchestrator(client, self.cache)
        self.pagination = PaginationCursorEngine(self.orchestrator)
        self.resources = build_registry(config.min_year, config.max_year, config.default_year)
        self._session = session

    def resource(self, kind: str) -> Resource:
        try:
            return self.resources[kind]
        except KeyError:
            raise F1ExplorerError(f"Unknown resource kind {kind!r}") from None

    def page(self, kind: str) -> ResourcePage:
        resource = self.resource(kind)
        if resource.paginated:
            return FeedPage(self.orchestrator, resource, self.pagination)
        return ResourcePage(self.orchestrator, resource)

    def visibility_trigger(self, page: FeedPage) -> VisibilityTrigger:
        return VisibilityTrigger(page)

    def season_picker(self) -> SeasonPicker:
        return SeasonPicker(self.config.min_year, self.config.max_year)

    async def async_close(self) -> None:
        """Wait for outstanding requests and close the session we created."""
        await self.orchestrator.async_wait_idle()
        if self._session is not None and not self._session.closed:
            await self._session.close()


async def async_setup(
    config: Mapping[str, Any] | ExplorerConfig | None = None,
    *,
    session: Optional[ClientSession] = None,
) -> F1Explorer:
    """Create an explorer; a session is created (and later closed) when none is given."""
    if not isinstance(config, ExplorerConfig):
        config = load_config(config)

    owned: Optional[ClientSession] = None
    if session is None:
        ua_string = config.user_agent or build_user_agent()
        owned = session = ClientSession(headers={"User-Agent": ua_string})
        _LOGGER.debug("Using User-Agent for %s: %s", DOMAIN, ua_string)

    client = F1ApiClient(session, config.base_url, timeout=config.request_timeout)
    return F1Explorer(config, client, session=owned)
