from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import voluptuous as vol

from .const import (
    CONF_BASE_URL,
    CONF_DEFAULT_YEAR,
    CONF_MAX_YEAR,
    CONF_MIN_YEAR,
    CONF_REQUEST_TIMEOUT,
    CONF_USER_AGENT,
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_YEAR,
    MAX_YEAR,
    MIN_YEAR,
)
from .errors import ConfigError

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_BASE_URL, default=DEFAULT_BASE_URL): vol.Url(),
        vol.Optional(CONF_REQUEST_TIMEOUT, default=DEFAULT_REQUEST_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_MIN_YEAR, default=MIN_YEAR): vol.Coerce(int),
        vol.Optional(CONF_MAX_YEAR, default=MAX_YEAR): vol.Coerce(int),
        vol.Optional(CONF_DEFAULT_YEAR, default=DEFAULT_YEAR): vol.Coerce(int),
        vol.Optional(CONF_USER_AGENT): vol.Any(None, str),
    }
)


@dataclass(frozen=True)
class ExplorerConfig:
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    min_year: int = MIN_YEAR
    max_year: int = MAX_YEAR
    default_year: int = DEFAULT_YEAR
    user_agent: Optional[str] = None


def load_config(data: Mapping[str, Any] | None = None) -> ExplorerConfig:
    """Validate a raw options mapping and return the engine configuration."""
    try:
        conf = CONFIG_SCHEMA(dict(data or {}))
    except vol.Invalid as err:
        raise ConfigError(f"Invalid configuration: {err}") from err

    if conf[CONF_MIN_YEAR] > conf[CONF_MAX_YEAR]:
        raise ConfigError(
            f"{CONF_MIN_YEAR} ({conf[CONF_MIN_YEAR]}) is after {CONF_MAX_YEAR} ({conf[CONF_MAX_YEAR]})"
        )
    if not conf[CONF_MIN_YEAR] <= conf[CONF_DEFAULT_YEAR] <= conf[CONF_MAX_YEAR]:
        raise ConfigError(f"{CONF_DEFAULT_YEAR} {conf[CONF_DEFAULT_YEAR]} is outside the season range")

    return ExplorerConfig(
        base_url=conf[CONF_BASE_URL],
        request_timeout=conf[CONF_REQUEST_TIMEOUT],
        min_year=conf[CONF_MIN_YEAR],
        max_year=conf[CONF_MAX_YEAR],
        default_year=conf[CONF_DEFAULT_YEAR],
        user_agent=conf.get(CONF_USER_AGENT),
    )
