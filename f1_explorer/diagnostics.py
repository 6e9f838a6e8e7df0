"""Diagnostics for a running explorer.

Exposes compact runtime stats to aid troubleshooting without verbose logging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from . import F1Explorer


def _pagination_diag(state: Any) -> dict[str, Any]:
    return {
        "params": state.params.as_dict(),
        "pages": len(state.pages),
        "items": len(state.items),
        "next_cursor": state.next_cursor,
        "pending": state.pending,
        "exhausted": state.exhausted,
        "error": state.error_kind.value if state.error_kind else None,
    }


async def async_get_diagnostics(explorer: F1Explorer) -> dict[str, Any]:
    """Return diagnostics for an explorer instance."""
    config = explorer.config
    cache = explorer.cache

    return {
        "options": {
            "base_url": config.base_url,
            "request_timeout": config.request_timeout,
            "season_range": [config.min_year, config.max_year],
            "default_year": config.default_year,
        },
        "cache": {
            "entries": len(cache),
            "by_status": cache.snapshot(),
            "keys": sorted(cache),
        },
        "inflight": explorer.orchestrator.inflight_keys,
        "pagination": {
            kind: _pagination_diag(state)
            for kind, state in explorer.pagination.states().items()
        },
    }
