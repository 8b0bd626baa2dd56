"""Search session: the one engine behind every search surface.

A SearchSession owns the SearchUiState of one mounted search box. It wires
the debounce scheduler, round fence, fan-out aggregator and selection
machine together; surfaces (WebSocket, tests, a future CLI) only feed it
input and render the states it publishes.

Lifecycle: created empty on mount; reset to empty whenever the term becomes
blank; replaced wholesale each time a current round is admitted; closed on
unmount, after which any in-flight round completes as a no-op.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

from typeahead.application.dtos.search import RoundResult, SearchMessages, SearchUiState
from typeahead.application.interfaces.sources import (
    IAnalyticsCapture,
    ISourceQueryAdapter,
    OnSelect,
    OnStateChange,
    OnSubmit,
)
from typeahead.application.services.aggregator import FanOutAggregator
from typeahead.application.services.debounce import DebounceScheduler
from typeahead.application.services.fencing import RoundFence
from typeahead.application.services.normalizer import ResultNormalizer
from typeahead.application.services.selection import SelectionStateMachine
from typeahead.core.constants import DEBOUNCE_MS, EVENT_RESULT_SELECTED, FULL_SEARCH_URL
from typeahead.domain.enums import NavigationKey, RoundOutcome, SelectionState
from typeahead.domain.exceptions import SearchSessionClosedException, ValidationException
from typeahead.domain.value_objects import AggregatedResult, SearchTerm

logger = logging.getLogger(__name__)


class SearchSession:
    """State and scheduling for one search surface instance.

    Single event loop, no locks: every state write happens on the loop
    thread and is preceded by a fencing check.
    """

    def __init__(
        self,
        aggregator: FanOutAggregator,
        *,
        debounce_seconds: float = DEBOUNCE_MS / 1000.0,
        on_state_change: OnStateChange | None = None,
        on_select: OnSelect | None = None,
        on_submit: OnSubmit | None = None,
        analytics: IAnalyticsCapture | None = None,
        messages: SearchMessages | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize a mounted, empty session.

        Args:
            aggregator: Runs rounds against the source adapters.
            debounce_seconds: Quiet interval before a round starts.
            on_state_change: Called with every new SearchUiState.
            on_select: Navigation side effect for a chosen result.
            on_submit: Navigation side effect for a submitted term (full search url).
            analytics: Optional event capture; its failures are swallowed.
            messages: User-visible strings for error/notice/empty states.
            session_id: Identifier for logs; generated when omitted.
        """
        self.session_id = session_id or uuid.uuid4().hex
        self._aggregator = aggregator
        self._on_state_change = on_state_change
        self._on_select = on_select
        self._on_submit = on_submit
        self._analytics = analytics
        self._messages = messages or SearchMessages()
        self._fence = RoundFence()
        self._selection = SelectionStateMachine()
        self._debounce = DebounceScheduler(
            debounce_seconds, on_fire=self._start_round, on_clear=self._clear
        )
        self._round_tasks: set[asyncio.Task[None]] = set()
        self._state = SearchUiState.empty()
        self._closed = False

    @property
    def state(self) -> SearchUiState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current_round_id(self) -> int:
        return self._fence.current

    async def __aenter__(self) -> "SearchSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    # ---- Input ----

    def on_term_changed(self, raw_term: str) -> None:
        """React to the search box content changing.

        A blank term clears state synchronously. Otherwise the list opens in
        loading state, any in-flight round is retired, and a round is
        scheduled once input is quiet for the debounce interval.
        """
        self._ensure_open()
        term = SearchTerm.parse(raw_term)
        if term.is_empty:
            self._debounce.on_term_changed(term.raw)
            return
        self._fence.invalidate()
        self._selection.on_term_changed(term_empty=False)
        self._set_state(
            SearchUiState(
                term=term.raw,
                loading=True,
                selection_state=self._selection.state,
            )
        )
        self._debounce.on_term_changed(term.raw)

    def on_key(self, key: NavigationKey | str) -> AggregatedResult | None:
        """Apply a keyboard key. Unknown keys are ignored.

        Returns:
            The selected result when Enter chose one, else None.
        """
        self._ensure_open()
        try:
            nav = NavigationKey(key)
        except ValueError:
            return None

        if nav is NavigationKey.ESCAPE:
            self._dismiss()
            return None

        if nav is NavigationKey.ENTER:
            results = self._state.results
            index = self._selection.on_key(nav)
            if index is None or index >= len(results):
                return None
            return self._choose(results[index])

        before = self._selection.highlighted_index
        self._selection.on_key(nav)
        if self._selection.highlighted_index != before:
            self._set_state(
                SearchUiState(
                    term=self._state.term,
                    round_outcome=self._state.round_outcome,
                    results=self._state.results,
                    highlighted_index=self._selection.highlighted_index,
                    notice_message=self._state.notice_message,
                    selection_state=self._selection.state,
                )
            )
        return None

    def select(self, result: AggregatedResult | str) -> AggregatedResult:
        """Choose a visible result directly (pointer click), by record or id.

        Raises:
            ValidationException: the result is not in the visible list.
        """
        self._ensure_open()
        result_id = result if isinstance(result, str) else result.id
        chosen = next((r for r in self._state.results if r.id == result_id), None)
        if chosen is None:
            raise ValidationException(f"Result not in current list: {result_id}", field="id")
        return self._choose(chosen)

    def submit(self, raw_term: str | None = None) -> str | None:
        """Submit a term to the full search page instead of picking a result.

        Uses raw_term when given, else the term currently in the box. A blank
        term does nothing. Otherwise pending and in-flight rounds are dropped,
        the on_submit side effect receives the page url, and the session
        resets to empty.

        Returns:
            The full search url, or None for a blank term.
        """
        self._ensure_open()
        term = SearchTerm.parse(self._state.term if raw_term is None else raw_term)
        if term.is_empty:
            return None
        url = FULL_SEARCH_URL.format(query=quote(term.value, safe="-_.!~*'()"))
        self._debounce.cancel()
        self._fence.invalidate()
        try:
            if self._on_submit is not None:
                self._on_submit(url)
        finally:
            self._selection.close()
            self._set_state(SearchUiState.empty())
        logger.debug("Session %s submitted %d-char term", self.session_id, len(term.value))
        return url

    # ---- Lifecycle ----

    def close(self) -> None:
        """Tear down (unmount). Idempotent.

        Pending triggers are dropped and in-flight rounds are retired and
        cancelled; their completion can no longer touch state.
        """
        if self._closed:
            return
        self._closed = True
        self._debounce.cancel()
        self._fence.invalidate()
        for task in list(self._round_tasks):
            task.cancel()
        self._selection.close()
        self._state = SearchUiState.empty()
        logger.debug("Search session %s closed", self.session_id)

    async def wait_idle(self) -> None:
        """Wait until no trigger is pending and no round is in flight."""
        while True:
            await self._debounce.wait()
            pending = [t for t in self._round_tasks if not t.done()]
            if pending:
                await asyncio.wait(pending)
                continue
            if not self._debounce.pending:
                return

    # ---- Rounds ----

    def _start_round(self, term: str) -> None:
        if self._closed:
            return
        round_id = self._fence.begin_round()
        task = asyncio.get_running_loop().create_task(
            self._run_round(term, round_id), name=f"search-round-{round_id}"
        )
        self._round_tasks.add(task)
        task.add_done_callback(self._on_round_done)
        logger.debug("Session %s started round %s for %d-char term", self.session_id, round_id, len(term))

    async def _run_round(self, term: str, round_id: int) -> None:
        result = await self._aggregator.run_round(term, round_id)
        self._admit(result)

    def _admit(self, result: RoundResult) -> bool:
        """Commit a round's outcome if its token is still current."""
        if self._closed or not self._fence.is_current(result.round_id):
            logger.debug(
                "Session %s discarded stale round %s (current=%s)",
                self.session_id,
                result.round_id,
                self._fence.current,
            )
            return False

        total_failure = result.outcome is RoundOutcome.TOTAL_FAILURE
        results = () if total_failure else result.results
        self._selection.on_round_admitted(result.outcome, len(results))
        state = self._selection.state
        self._set_state(
            SearchUiState(
                term=self._state.term,
                round_outcome=result.outcome,
                results=results,
                highlighted_index=self._selection.highlighted_index,
                loading=False,
                error_message=self._messages.total_failure if total_failure else None,
                notice_message=(
                    self._messages.partial_failure
                    if result.outcome is RoundOutcome.PARTIAL_FAILURE
                    else None
                ),
                empty_message=(
                    self._messages.no_results if state is SelectionState.OPEN_EMPTY else None
                ),
                selection_state=state,
            )
        )
        return True

    def _on_round_done(self, task: asyncio.Task[None]) -> None:
        self._round_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Search round task crashed in session %s", self.session_id, exc_info=exc
            )

    # ---- Transitions ----

    def _clear(self) -> None:
        """Blank term: drop everything, including whatever is in flight."""
        self._fence.invalidate()
        self._selection.close()
        self._set_state(SearchUiState.empty())

    def _dismiss(self) -> None:
        """Escape: hide the list and errors, keep the term in the box."""
        if not self._selection.state.is_open:
            return
        self._debounce.cancel()
        self._fence.invalidate()
        self._selection.on_key(NavigationKey.ESCAPE)
        self._set_state(
            SearchUiState(term=self._state.term, selection_state=self._selection.state)
        )

    def _choose(self, result: AggregatedResult) -> AggregatedResult:
        """Emit the select side effect, then close and clear the term."""
        self._capture_selection(self._state.term, result)
        self._debounce.cancel()
        self._fence.invalidate()
        try:
            if self._on_select is not None:
                self._on_select(result)
        finally:
            self._selection.close()
            self._set_state(SearchUiState.empty())
        return result

    def _capture_selection(self, term: str, result: AggregatedResult) -> None:
        if self._analytics is None:
            return
        # Title is left out on purpose: it carries names.
        properties: dict[str, Any] = {
            "query_length": len(term),
            "result_type": result.type.value,
            "result_url": result.url,
        }
        try:
            self._analytics.capture(EVENT_RESULT_SELECTED, properties)
        except Exception as e:
            logger.warning("Analytics capture failed (ignored): %s", e)

    def _set_state(self, state: SearchUiState) -> None:
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SearchSessionClosedException(self.session_id)


class SearchSessionFactory:
    """Builds sessions that share source adapters but not state."""

    def __init__(
        self,
        adapters: Sequence[ISourceQueryAdapter],
        *,
        debounce_seconds: float = DEBOUNCE_MS / 1000.0,
        default_locale: str = "en",
        analytics: IAnalyticsCapture | None = None,
        messages: SearchMessages | None = None,
    ) -> None:
        self._adapters = list(adapters)
        self.debounce_seconds = debounce_seconds
        self.default_locale = default_locale
        self._analytics = analytics
        self._messages = messages

    def create(
        self,
        *,
        locale: str | None = None,
        on_state_change: OnStateChange | None = None,
        on_select: OnSelect | None = None,
        on_submit: OnSubmit | None = None,
        session_id: str | None = None,
    ) -> SearchSession:
        aggregator = FanOutAggregator(
            self._adapters, ResultNormalizer(locale or self.default_locale)
        )
        return SearchSession(
            aggregator,
            debounce_seconds=self.debounce_seconds,
            on_state_change=on_state_change,
            on_select=on_select,
            on_submit=on_submit,
            analytics=self._analytics,
            messages=self._messages,
            session_id=session_id,
        )


class SearchService:
    """One-shot search: a single round, no debounce, no session state."""

    def __init__(
        self,
        adapters: Sequence[ISourceQueryAdapter],
        *,
        fence: RoundFence | None = None,
        default_locale: str = "en",
    ) -> None:
        self._adapters = list(adapters)
        self._fence = fence or RoundFence()
        self.default_locale = default_locale

    async def search(self, q: str, locale: str | None = None) -> RoundResult:
        """Run one round for q.

        Raises:
            ValidationException: q is blank.
        """
        term = SearchTerm.parse(q)
        if term.is_empty:
            raise ValidationException("Search term must not be blank", field="q")
        aggregator = FanOutAggregator(
            self._adapters, ResultNormalizer(locale or self.default_locale)
        )
        return await aggregator.run_round(term.value, self._fence.begin_round())
