"""Resource definitions for the pages that read from the statistics backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .const import (
    CIRCUITS_ENDPOINT,
    CONSTRUCTORS_ENDPOINT,
    DEFAULT_ROUND,
    DEFAULT_YEAR,
    FEED_INITIAL_PAGE,
    KIND_CIRCUITS,
    KIND_CONSTRUCTORS,
    KIND_QUALIFYING_RESULT,
    KIND_RACE_RESULT,
    KIND_RECENT_POSTS,
    KIND_SCHEDULE,
    MAX_YEAR,
    MIN_YEAR,
    MSG_GENERIC_ERROR,
    MSG_INVALID_YEAR_ROUND_URL,
    MSG_INVALID_YEAR_URL,
    MSG_POSTS_UNAVAILABLE,
    QUALIFYING_RESULT_ENDPOINT,
    RACE_RESULT_ENDPOINT,
    RECENT_POSTS_ENDPOINT,
    SCHEDULE_ENDPOINT,
)
from .errors import TransportError
from .pagination import Page
from .validation import ParamValidator, round_rule, year_rule


@dataclass(frozen=True)
class ResourceData:
    """Parsed payload of a non-paginated resource."""

    year: Optional[int]
    round: Optional[int]
    title: Optional[str]
    items: tuple

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Resource:
    kind: str
    endpoint: str
    validator: ParamValidator
    parse: Callable[[dict], Any]
    invalid_message: str = MSG_GENERIC_ERROR
    not_found_message: str = MSG_GENERIC_ERROR
    error_message: str = MSG_GENERIC_ERROR
    empty_message: Optional[str] = None
    paginated: bool = False
    cursor_field: Optional[str] = None
    initial_cursor: Any = None


def _dig(payload: Any, path: Sequence[str]) -> Any:
    node = payload
    for part in path:
        if not isinstance(node, dict) or part not in node:
            raise TransportError(f"Payload missing {'.'.join(path)}")
        node = node[part]
    return node


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _item_parser(root: str, items_path: Sequence[str]) -> Callable[[dict], ResourceData]:
    """Build a parser for ``{root: {year, round?, race?, <items_path>: [...]}}``."""

    def _parse(payload: dict) -> ResourceData:
        body = _dig(payload, (root,))
        items = _dig(body, items_path)
        if not isinstance(items, list):
            raise TransportError(f"Expected a list at {root}.{'.'.join(items_path)}")
        race = body.get("race") if isinstance(body.get("race"), dict) else {}
        return ResourceData(
            year=_as_int(body.get("year")),
            round=_as_int(body.get("round")),
            title=race.get("raceName"),
            items=tuple(items),
        )

    return _parse


def parse_posts_page(payload: dict) -> Page:
    posts = _dig(payload, ("posts",))
    if not isinstance(posts, list):
        raise TransportError("Expected a list at posts")
    # cursor is filled in by the pagination engine
    return Page(cursor=None, items=tuple(posts), next_cursor=payload.get("nextPage"))


def build_registry(
    min_year: int = MIN_YEAR,
    max_year: int = MAX_YEAR,
    default_year: int = DEFAULT_YEAR,
) -> dict[str, Resource]:
    """Return the resources keyed by kind for the given season bounds."""
    year = year_rule(min_year, max_year)
    season_only = ParamValidator([year], defaults={"year": default_year})

    resources = [
        Resource(
            kind=KIND_SCHEDULE,
            endpoint=SCHEDULE_ENDPOINT,
            validator=season_only,
            parse=_item_parser("schedule", ("schedule", "raceschedule")),
            invalid_message=MSG_INVALID_YEAR_URL,
            not_found_message="Schedule data for the requested year is not available.",
        ),
        Resource(
            kind=KIND_CONSTRUCTORS,
            endpoint=CONSTRUCTORS_ENDPOINT,
            validator=season_only,
            parse=_item_parser("constructors", ("constructors", "constructors")),
            invalid_message=MSG_INVALID_YEAR_URL,
            not_found_message="Constructors data for the requested year is not available.",
        ),
        Resource(
            kind=KIND_CIRCUITS,
            endpoint=CIRCUITS_ENDPOINT,
            validator=season_only,
            parse=_item_parser("circuits", ("circuits", "circuits")),
            invalid_message=MSG_INVALID_YEAR_URL,
            not_found_message="Circuit data for the requested year is not available.",
        ),
        Resource(
            kind=KIND_QUALIFYING_RESULT,
            endpoint=QUALIFYING_RESULT_ENDPOINT,
            validator=ParamValidator([year, round_rule()]),
            parse=_item_parser("result", ("result", "result")),
            invalid_message=MSG_INVALID_YEAR_ROUND_URL,
            not_found_message="Qualifying data for the requested year is not available.",
        ),
        Resource(
            kind=KIND_RACE_RESULT,
            endpoint=RACE_RESULT_ENDPOINT,
            validator=ParamValidator(
                [year, round_rule()],
                defaults={"year": default_year, "round": DEFAULT_ROUND},
            ),
            parse=_item_parser("result", ("result", "result")),
            invalid_message=MSG_INVALID_YEAR_ROUND_URL,
            not_found_message="Race result data for the requested year is not available.",
        ),
        Resource(
            kind=KIND_RECENT_POSTS,
            endpoint=RECENT_POSTS_ENDPOINT,
            validator=ParamValidator([]),
            parse=parse_posts_page,
            not_found_message=MSG_POSTS_UNAVAILABLE,
            error_message=MSG_POSTS_UNAVAILABLE,
            empty_message=MSG_POSTS_UNAVAILABLE,
            paginated=True,
            cursor_field="page",
            initial_cursor=FEED_INITIAL_PAGE,
        ),
    ]
    return {resource.kind: resource for resource in resources}
