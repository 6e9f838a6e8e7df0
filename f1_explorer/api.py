import asyncio
import json
import logging
from json import JSONDecodeError
from typing import Any, Dict, Mapping, Optional

import aiohttp
import async_timeout
from aiohttp import ClientSession
from yarl import URL

from .const import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from .errors import ResourceNotFound, TransportError

_LOGGER = logging.getLogger(__name__)


class F1ApiClient:
    """Client for the statistics backend (JSON bodies over HTTP POST)."""

    def __init__(
        self,
        session: ClientSession,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session
        # join() drops the last path segment unless it ends with a slash
        self._base_url = URL(base_url if base_url.endswith("/") else f"{base_url}/")
        self._timeout = timeout

    @property
    def base_url(self) -> URL:
        return self._base_url

    def url_for(self, endpoint: str) -> URL:
        return self._base_url.join(URL(endpoint.lstrip("/")))

    async def _request(self, url: URL, body: Dict[str, Any]) -> Dict[str, Any]:
        """Perform a single POST and classify any failure."""
        try:
            async with async_timeout.timeout(self._timeout):
                async with self._session.post(str(url), json=body) as resp:
                    if resp.status == 404:
                        raise ResourceNotFound(f"No data at {url} for {body}", status=404)
                    if resp.status >= 400:
                        raise TransportError(
                            f"HTTP {resp.status} from {url}", status=resp.status
                        )
                    raw = await resp.read()
        except asyncio.TimeoutError as err:
            raise TransportError(f"Timed out after {self._timeout}s: {url}") from err
        except aiohttp.ClientError as err:
            raise TransportError(f"Request to {url} failed: {err}") from err

        try:
            data = json.loads(raw.decode("utf-8").lstrip("\ufeff"))
        except (UnicodeDecodeError, JSONDecodeError) as err:
            raise TransportError(f"Malformed JSON from {url}") from err
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected payload type {type(data).__name__} from {url}")
        return data

    async def async_fetch(
        self, endpoint: str, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Return the JSON object for ``endpoint`` with ``params`` as the request body."""
        url = self.url_for(endpoint)
        body = dict(params or {})
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("POST %s body=%s", url, body)
        return await self._request(url, body)
