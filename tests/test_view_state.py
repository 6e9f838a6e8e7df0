from f1_explorer.cache import FetchRecord, FetchStatus
from f1_explorer.errors import ErrorKind
from f1_explorer.pagination import Page, PaginationState
from f1_explorer.resources import ResourceData
from f1_explorer.validation import Invalid, InvalidReason, ParameterSet, Valid
from f1_explorer.view_state import ViewStatus, describe, project

VALID = Valid(ParameterSet(year=2023))
INVALID = Invalid(InvalidReason("year", "domain", "year must be between 1950 and 2024"))
DATA = ResourceData(year=2023, round=None, title=None, items=({"round": 1},))


def _record(status, payload=None, error_kind=None):
    return FetchRecord(key="schedule:year=2023", status=status, payload=payload, error_kind=error_kind)


def test_invalid_wins_over_everything():
    ready = _record(FetchStatus.FULFILLED, DATA)
    view = project(INVALID, ready)
    assert view.status is ViewStatus.INVALID
    assert view.reason.field == "year"
    assert view.data is None


def test_idle_before_any_fetch():
    assert project(VALID, None).status is ViewStatus.IDLE


def test_loading_while_pending():
    view = project(VALID, _record(FetchStatus.PENDING))
    assert view.status is ViewStatus.LOADING
    assert view.is_loading


def test_failed_not_found_is_error_not_empty():
    view = project(VALID, _record(FetchStatus.FAILED, error_kind=ErrorKind.NOT_FOUND))
    assert view.status is ViewStatus.ERROR
    assert view.error_kind is ErrorKind.NOT_FOUND


def test_fulfilled_empty_is_empty():
    empty = ResourceData(year=2023, round=None, title=None, items=())
    assert project(VALID, _record(FetchStatus.FULFILLED, empty)).status is ViewStatus.EMPTY


def test_fulfilled_with_items_is_ready():
    view = project(VALID, _record(FetchStatus.FULFILLED, DATA))
    assert view.is_ready
    assert view.data is DATA


def _pagination(pages, **kwargs):
    state = PaginationState(kind="recent_posts", params=ParameterSet(), next_cursor=None, **kwargs)
    state.pages.extend(pages)
    return state


def test_pagination_pending_before_record_exists_is_loading():
    state = _pagination([], pending=True)
    assert project(VALID, None, state).status is ViewStatus.LOADING


def test_pagination_ready_exposes_flattened_items():
    pages = [Page(0, ("a", "b"), 1), Page(1, ("c",), 2)]
    state = _pagination(pages, pending=True)
    view = project(VALID, _record(FetchStatus.FULFILLED, pages[0]), state)
    assert view.status is ViewStatus.READY
    assert view.data == ("a", "b", "c")
    assert view.loading_more is True
    assert view.has_more is True


def test_pagination_first_page_empty_is_empty():
    page = Page(0, (), None)
    state = _pagination([page], exhausted=True)
    assert project(VALID, _record(FetchStatus.FULFILLED, page), state).status is ViewStatus.EMPTY


def test_pagination_uses_cached_first_page_before_append():
    page = Page(None, ("a",), 1)
    view = project(VALID, _record(FetchStatus.FULFILLED, page), _pagination([]))
    assert view.data == ("a",)


def test_describe_messages(registry):
    schedule = registry["schedule"]
    not_found = project(VALID, _record(FetchStatus.FAILED, error_kind=ErrorKind.NOT_FOUND))
    transport = project(VALID, _record(FetchStatus.FAILED, error_kind=ErrorKind.TRANSPORT))

    assert describe(project(INVALID, None), schedule) == "Invalid Year specified in URL."
    assert describe(not_found, schedule) == "Schedule data for the requested year is not available."
    assert describe(transport, schedule) == "Something went wrong. Please try again later."
    assert describe(project(VALID, _record(FetchStatus.PENDING)), schedule) is None


def test_describe_feed_messages(registry):
    feed = registry["recent_posts"]
    page = Page(0, (), None)
    empty = project(VALID, _record(FetchStatus.FULFILLED, page), _pagination([page], exhausted=True))
    assert describe(empty, feed) == "Uh oh! Couldn't fetch posts."

    later_failure = _pagination([Page(0, ("a",), 1)], error_kind=ErrorKind.TRANSPORT)
    view = project(VALID, _record(FetchStatus.FULFILLED, Page(0, ("a",), 1)), later_failure)
    assert view.is_ready
    assert view.has_more is False
    assert describe(view, feed) == "Uh oh! Couldn't fetch posts."
