"""Single-flight fetch orchestration on top of the query cache."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Mapping

from .cache import FetchRecord, QueryCache, make_cache_key
from .errors import ApiError, ErrorKind, classify_error
from .validation import ParameterSet, Valid
from .view_state import ViewState, project

if TYPE_CHECKING:
    from .api import F1ApiClient
    from .resources import Resource

_LOGGER = logging.getLogger(__name__)


def retrieve_task_exception(task: asyncio.Task) -> None:
    """Mark a background task's exception as retrieved; it was logged where it happened."""
    if not task.cancelled():
        task.exception()


class FetchOrchestrator:
    """Issue at most one request per cache key and record its outcome."""

    def __init__(self, client: F1ApiClient, cache: QueryCache) -> None:
        self._client = client
        self._cache = cache
        self._inflight: dict[str, asyncio.Task] = {}

    @property
    def cache(self) -> QueryCache:
        return self._cache

    @property
    def inflight_keys(self) -> list[str]:
        return sorted(self._inflight)

    def key_for(self, resource: Resource, params: Mapping[str, Any], cursor: Any = None) -> str:
        if resource.paginated:
            return make_cache_key(resource.kind, params, resource.cursor_field, cursor)
        return make_cache_key(resource.kind, params)

    def ensure_fetch(
        self, resource: Resource, params: Mapping[str, Any], cursor: Any = None
    ) -> FetchRecord:
        """Return the record for these parameters, dispatching the request if it is new.

        Must be called from within the running event loop; outside of one it
        raises ``RuntimeError`` before touching the cache.
        """
        loop = asyncio.get_running_loop()
        key = self.key_for(resource, params, cursor)
        record, created = self._cache.try_begin_fetch(key)
        if created:
            body = dict(params)
            if resource.paginated:
                body[resource.cursor_field] = cursor
            task = loop.create_task(self._async_fetch(key, resource, body))
            task.add_done_callback(retrieve_task_exception)
            self._inflight[key] = task
        elif not record.done and _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Request COALESCED key=%s (awaiting in-flight)", key)
        return record

    def load(self, resource: Resource, params: Mapping[str, Any], cursor: Any = None) -> ViewState:
        record = self.ensure_fetch(resource, params, cursor)
        return project(Valid(ParameterSet(params)), record)

    async def async_ensure_fetch(
        self, resource: Resource, params: Mapping[str, Any], cursor: Any = None
    ) -> FetchRecord:
        """Like ensure_fetch, but wait until the record leaves the pending state."""
        record = self.ensure_fetch(resource, params, cursor)
        task = self._inflight.get(record.key)
        if task is not None:
            await asyncio.shield(task)
        return self._cache.get(record.key)

    async def async_load(
        self, resource: Resource, params: Mapping[str, Any], cursor: Any = None
    ) -> ViewState:
        record = await self.async_ensure_fetch(resource, params, cursor)
        return project(Valid(ParameterSet(params)), record)

    async def async_wait_idle(self) -> None:
        """Wait for every request dispatched so far."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight.values()), return_exceptions=True)

    async def _async_fetch(self, key: str, resource: Resource, body: dict[str, Any]) -> None:
        try:
            payload = await self._client.async_fetch(resource.endpoint, body)
            data = resource.parse(payload)
        except ApiError as err:
            kind = classify_error(err)
            _LOGGER.warning("Fetch failed key=%s kind=%s: %s", key, kind.value, err)
            self._cache.reject(key, kind)
        except Exception:
            _LOGGER.exception("Unexpected error while fetching key=%s", key)
            self._cache.reject(key, ErrorKind.TRANSPORT)
            raise
        else:
            self._cache.resolve(key, data)
        finally:
            self._inflight.pop(key, None)
