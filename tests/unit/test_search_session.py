"""Tests for SearchSession: debounce, fencing, aggregation and selection together."""

import asyncio
import random

import pytest

from tests.fakes import FakeSourceAdapter, report_item
from typeahead.application.dtos.search import SearchMessages
from typeahead.core.constants import (
    EVENT_RESULT_SELECTED,
    MESSAGE_NO_RESULTS,
    MESSAGE_PARTIAL_FAILURE,
    MESSAGE_TOTAL_FAILURE,
)
from typeahead.domain.enums import NavigationKey, RoundOutcome, SelectionState, SourceKind
from typeahead.domain.exceptions import (
    SearchSessionClosedException,
    SourceQueryException,
    ValidationException,
)


def _fail(adapter: FakeSourceAdapter) -> None:
    adapter.error = SourceQueryException(adapter.kind.value, "HTTP 500", "HTTP_ERROR")


async def _search(session, term: str):
    session.on_term_changed(term)
    await session.wait_idle()
    return session.state


async def test_all_sources_succeed(make_session) -> None:
    """Term "Tehran": 2 reports + 1 individual + 0 organizations."""
    session = make_session()
    state = await _search(session, "Tehran")

    assert state.round_outcome is RoundOutcome.SUCCESS
    assert [r.id for r in state.results] == ["r1-report", "r2-report", "p1-individual"]
    assert state.results[0].title == "Protest in Tehran"
    assert state.results[1].subtitle == "Jan 5, 2024"
    assert state.selection_state is SelectionState.OPEN_RESULTS
    assert state.highlighted_index == 0
    assert state.loading is False
    assert state.error_message is None
    assert state.notice_message is None


async def test_one_source_failing_is_partial(make_session, adapters) -> None:
    adapters[SourceKind.ORGANIZATION].items = [{"shareableUuid": "o1", "nameEn": "Ministry"}]
    _fail(adapters[SourceKind.INDIVIDUAL])
    session = make_session()
    state = await _search(session, "Tehran")

    assert state.round_outcome is RoundOutcome.PARTIAL_FAILURE
    assert state.notice_message == MESSAGE_PARTIAL_FAILURE
    assert state.error_message is None
    assert {r.type for r in state.results} == {SourceKind.REPORT, SourceKind.ORGANIZATION}


async def test_no_matches_is_open_empty(make_session, adapters) -> None:
    for adapter in adapters.values():
        adapter.items = []
    session = make_session()
    state = await _search(session, "xyz123")

    assert state.round_outcome is RoundOutcome.SUCCESS
    assert state.selection_state is SelectionState.OPEN_EMPTY
    assert state.empty_message == MESSAGE_NO_RESULTS
    assert state.error_message is None
    assert state.results == ()


async def test_all_sources_failing_is_total_failure(make_session, adapters) -> None:
    for adapter in adapters.values():
        _fail(adapter)
    session = make_session()
    state = await _search(session, "Tehran")

    assert state.round_outcome is RoundOutcome.TOTAL_FAILURE
    assert state.selection_state is SelectionState.OPEN_ERROR
    assert state.error_message == MESSAGE_TOTAL_FAILURE
    assert state.notice_message is None
    assert state.empty_message is None
    assert state.results == ()


async def test_partial_failure_with_no_surviving_items_is_open_empty(make_session, adapters) -> None:
    adapters[SourceKind.REPORT].items = []
    _fail(adapters[SourceKind.INDIVIDUAL])
    session = make_session()
    state = await _search(session, "Tehran")

    assert state.round_outcome is RoundOutcome.PARTIAL_FAILURE
    assert state.selection_state is SelectionState.OPEN_EMPTY
    assert state.notice_message == MESSAGE_PARTIAL_FAILURE


async def test_fast_typing_dispatches_one_round(make_session, adapters) -> None:
    """Typing "A" then "Ab" within the interval queries only "Ab"."""
    session = make_session()
    session.on_term_changed("A")
    await asyncio.sleep(0.005)
    session.on_term_changed("Ab")
    await session.wait_idle()

    for adapter in adapters.values():
        assert adapter.calls == ["Ab"]
    assert session.current_round_id >= 1


async def test_arrow_down_wraps_from_last_result(make_session) -> None:
    session = make_session()
    await _search(session, "Tehran")
    session.on_key(NavigationKey.ARROW_UP)
    assert session.state.highlighted_index == 2

    session.on_key(NavigationKey.ARROW_DOWN)
    assert session.state.highlighted_index == 0
    assert session.state.results[session.state.highlighted_index].id == "r1-report"


async def test_typing_shows_loading_immediately(make_session, recorder) -> None:
    session = make_session()
    session.on_term_changed("Teh")

    assert session.state.loading is True
    assert session.state.term == "Teh"
    assert session.state.selection_state is SelectionState.OPEN_LOADING
    assert recorder.states[-1] is session.state
    await session.wait_idle()


async def test_older_round_finishing_last_is_discarded(make_session, adapters, recorder) -> None:
    """An older round that resolves after a newer one never overwrites it."""
    adapters[SourceKind.REPORT].items_by_term = {
        "old": [report_item("old1", title_en="Old")],
        "new": [report_item("new1", title_en="New")],
    }
    old_gate = adapters[SourceKind.REPORT].hold("old")
    session = make_session()

    session.on_term_changed("old")
    while adapters[SourceKind.REPORT].calls != ["old"]:  # round for "old" is in flight
        await asyncio.sleep(0.005)
    session.on_term_changed("new")
    while adapters[SourceKind.REPORT].calls != ["old", "new"]:
        await asyncio.sleep(0.005)
    while session.state.loading:
        await asyncio.sleep(0.005)
    assert session.state.results[0].id == "new1-report"

    old_gate.set()
    await session.wait_idle()
    assert session.state.term == "new"
    assert session.state.results[0].id == "new1-report"
    assert all(r.id != "old1-report" for s in recorder.states for r in s.results)


async def test_clearing_term_discards_in_flight_round(make_session, adapters, recorder) -> None:
    gate = adapters[SourceKind.REPORT].hold("Tehran")
    session = make_session()
    session.on_term_changed("Tehran")
    while adapters[SourceKind.REPORT].calls != ["Tehran"]:
        await asyncio.sleep(0.005)

    session.on_term_changed("  ")
    assert session.state.term == ""
    assert session.state.selection_state is SelectionState.CLOSED
    published = len(recorder.states)

    gate.set()
    await session.wait_idle()
    assert session.state.results == ()
    assert session.state.selection_state is SelectionState.CLOSED
    assert len(recorder.states) == published


async def test_clear_then_retype_shows_only_new_results(make_session, adapters) -> None:
    adapters[SourceKind.REPORT].items_by_term = {"new": [report_item("n1", title_en="N")]}
    gate = adapters[SourceKind.REPORT].hold("old")
    session = make_session()
    session.on_term_changed("old")
    await asyncio.sleep(0.06)
    session.on_term_changed("")
    session.on_term_changed("new")
    gate.set()
    await session.wait_idle()

    assert session.state.term == "new"
    assert session.state.results[0].id == "n1-report"


@pytest.mark.parametrize("seed", range(10))
async def test_only_latest_round_is_ever_admitted(make_session, adapters, seed: int) -> None:
    """Random completion order across several rounds still leaves the last term's results."""
    rng = random.Random(seed)
    terms = [f"t{i}" for i in range(4)]
    report = adapters[SourceKind.REPORT]
    report.items_by_term = {t: [report_item(t, title_en=t)] for t in terms}
    gates = {t: report.hold(t) for t in terms}
    session = make_session()

    for term in terms:
        session.on_term_changed(term)
        await asyncio.sleep(0.05)
    for term in rng.sample(terms, len(terms)):
        gates[term].set()
        await asyncio.sleep(0)
    await session.wait_idle()

    assert session.state.term == "t3"
    assert [r.id for r in session.state.results if r.type is SourceKind.REPORT] == ["t3-report"]


async def test_escape_dismisses_and_keeps_term(make_session) -> None:
    session = make_session()
    await _search(session, "Tehran")
    session.on_key(NavigationKey.ESCAPE)

    assert session.state.selection_state is SelectionState.DISMISSED
    assert session.state.term == "Tehran"
    assert session.state.results == ()
    assert session.state.error_message is None


async def test_escape_while_loading_drops_pending_round(make_session, adapters) -> None:
    session = make_session()
    session.on_term_changed("Tehran")
    session.on_key("Escape")
    await session.wait_idle()

    assert adapters[SourceKind.REPORT].calls == []
    assert session.state.selection_state is SelectionState.DISMISSED


async def test_enter_selects_highlighted_result(make_session, recorder) -> None:
    session = make_session()
    await _search(session, "Tehran")
    session.on_key(NavigationKey.ARROW_DOWN)
    chosen = session.on_key(NavigationKey.ENTER)

    assert chosen.id == "r2-report"
    assert recorder.selected == [chosen]
    assert session.state.term == ""
    assert session.state.selection_state is SelectionState.CLOSED
    assert recorder.events == [
        (
            EVENT_RESULT_SELECTED,
            {"query_length": 6, "result_type": "report", "result_url": "/reports/r2"},
        )
    ]


async def test_enter_without_results_does_nothing(make_session, recorder) -> None:
    session = make_session()
    assert session.on_key(NavigationKey.ENTER) is None
    assert recorder.selected == []


async def test_unknown_key_is_ignored(make_session) -> None:
    session = make_session()
    await _search(session, "Tehran")
    before = session.state
    assert session.on_key("Tab") is None
    assert session.state is before


async def test_select_by_id(make_session, recorder) -> None:
    session = make_session()
    await _search(session, "Tehran")
    chosen = session.select("p1-individual")

    assert chosen.url == "/person/p1"
    assert recorder.selected == [chosen]


async def test_select_unknown_id_raises(make_session) -> None:
    session = make_session()
    await _search(session, "Tehran")
    with pytest.raises(ValidationException):
        session.select("missing-report")


async def test_analytics_failure_does_not_block_selection(make_session, recorder) -> None:
    class BrokenAnalytics:
        def capture(self, event, properties):
            raise RuntimeError("analytics down")

    session = make_session(analytics=BrokenAnalytics())
    await _search(session, "Tehran")
    chosen = session.on_key(NavigationKey.ENTER)

    assert chosen.id == "r1-report"
    assert recorder.selected == [chosen]
    assert session.state.term == ""


async def test_session_without_analytics_still_selects(make_session, recorder) -> None:
    session = make_session(analytics=None)
    await _search(session, "Tehran")
    assert session.on_key(NavigationKey.ENTER) is not None
    assert recorder.selected


async def test_custom_messages_are_used(make_session, adapters) -> None:
    for adapter in adapters.values():
        _fail(adapter)
    messages = SearchMessages(total_failure="جستجو ناموفق بود")
    session = make_session(messages=messages)
    state = await _search(session, "Tehran")
    assert state.error_message == "جستجو ناموفق بود"


async def test_close_makes_in_flight_round_a_no_op(make_session, adapters, recorder) -> None:
    gate = adapters[SourceKind.REPORT].hold("Tehran")
    session = make_session()
    session.on_term_changed("Tehran")
    await asyncio.sleep(0.06)
    published = len(recorder.states)

    session.close()
    gate.set()
    await asyncio.sleep(0.02)

    assert session.closed
    assert session.state.results == ()
    assert len(recorder.states) == published
    session.close()  # idempotent


async def test_close_drops_pending_trigger(make_session, adapters) -> None:
    session = make_session()
    session.on_term_changed("Tehran")
    session.close()
    await asyncio.sleep(0.06)
    assert adapters[SourceKind.REPORT].calls == []


async def test_closed_session_rejects_input(make_session) -> None:
    session = make_session()
    session.close()
    with pytest.raises(SearchSessionClosedException):
        session.on_term_changed("Tehran")
    with pytest.raises(SearchSessionClosedException):
        session.on_key(NavigationKey.ENTER)


async def test_async_context_manager_closes(make_session) -> None:
    async with make_session() as session:
        session.on_term_changed("Tehran")
    assert session.closed


@pytest.mark.parametrize(
    "incident_date", ["0001-01-01T00:00:00+05:00", "9999-12-31T23:00:00-05:00"]
)
async def test_out_of_range_incident_date_does_not_stall_round(
    make_session, adapters, incident_date: str
) -> None:
    """A date that cannot be shifted to UTC drops the date, not the round."""
    adapters[SourceKind.REPORT].items = [
        report_item("r1", title_en="Protest in Tehran"),
        report_item("r2", title_en="Old record", incidentDate=incident_date),
    ]
    session = make_session()
    state = await _search(session, "Tehran")

    assert state.loading is False
    assert state.round_outcome is RoundOutcome.SUCCESS
    assert state.selection_state is SelectionState.OPEN_RESULTS
    assert [r.id for r in state.results][:2] == ["r1-report", "r2-report"]
    assert state.results[1].subtitle is None


async def test_submit_navigates_to_full_search(make_session, adapters, recorder) -> None:
    session = make_session()
    session.on_term_changed("Tehran city")

    url = session.submit()
    await session.wait_idle()

    assert url == "/?search=Tehran%20city"
    assert recorder.submitted == [url]
    assert recorder.selected == []
    assert adapters[SourceKind.REPORT].calls == []
    assert session.state.term == ""
    assert session.state.selection_state is SelectionState.CLOSED


async def test_submit_explicit_term_is_trimmed_and_encoded(make_session, recorder) -> None:
    session = make_session()
    assert session.submit("  a&b/ج ") == "/?search=a%26b%2F%D8%AC"
    assert recorder.submitted == ["/?search=a%26b%2F%D8%AC"]


async def test_submit_discards_in_flight_round(make_session, adapters, recorder) -> None:
    gate = adapters[SourceKind.REPORT].hold("Tehran")
    session = make_session()
    session.on_term_changed("Tehran")
    while adapters[SourceKind.REPORT].calls != ["Tehran"]:
        await asyncio.sleep(0.005)

    session.submit()
    published = len(recorder.states)
    gate.set()
    await session.wait_idle()

    assert session.state.results == ()
    assert len(recorder.states) == published


@pytest.mark.parametrize("term", ["", "   "])
async def test_submit_blank_term_does_nothing(make_session, recorder, term: str) -> None:
    session = make_session()
    assert session.submit(term) is None
    assert session.submit() is None
    assert recorder.submitted == []
    assert recorder.states == []


async def test_closed_session_rejects_submit(make_session) -> None:
    session = make_session()
    session.close()
    with pytest.raises(SearchSessionClosedException):
        session.submit("Tehran")
