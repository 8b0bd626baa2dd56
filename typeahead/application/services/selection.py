"""Keyboard selection state machine for the result list.

Independent of the network layer: it only sees term changes, admitted
round outcomes, and navigation keys.
"""

from __future__ import annotations

from typeahead.domain.enums import NavigationKey, RoundOutcome, SelectionState


class SelectionStateMachine:
    """Tracks which result is highlighted.

    States: CLOSED (no term), OPEN_LOADING, OPEN_ERROR, OPEN_EMPTY,
    OPEN_RESULTS (with a highlighted index), DISMISSED (Escape: term kept,
    list hidden). Arrow keys wrap around and only act in OPEN_RESULTS.
    """

    def __init__(self) -> None:
        self._state = SelectionState.CLOSED
        self._highlighted: int | None = None
        self._count = 0

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def highlighted_index(self) -> int | None:
        return self._highlighted

    def on_term_changed(self, term_empty: bool) -> None:
        if term_empty:
            self.close()
            return
        self._state = SelectionState.OPEN_LOADING
        self._highlighted = None
        self._count = 0

    def on_round_admitted(self, outcome: RoundOutcome, result_count: int) -> None:
        if outcome is RoundOutcome.TOTAL_FAILURE:
            self._state = SelectionState.OPEN_ERROR
            self._highlighted = None
            self._count = 0
        elif result_count == 0:
            self._state = SelectionState.OPEN_EMPTY
            self._highlighted = None
            self._count = 0
        else:
            self._state = SelectionState.OPEN_RESULTS
            self._highlighted = 0
            self._count = result_count

    def on_key(self, key: NavigationKey) -> int | None:
        """Apply a navigation key.

        Returns:
            The index to select when Enter is pressed in OPEN_RESULTS (the
            machine is then CLOSED); None for every other key or state.
        """
        if key is NavigationKey.ESCAPE:
            if self._state.is_open:
                self._state = SelectionState.DISMISSED
                self._highlighted = None
                self._count = 0
            return None

        if self._state is not SelectionState.OPEN_RESULTS or self._count == 0:
            return None

        if key is NavigationKey.ARROW_DOWN:
            self._highlighted = 0 if self._highlighted is None else (self._highlighted + 1) % self._count
        elif key is NavigationKey.ARROW_UP:
            if self._highlighted is None:
                self._highlighted = self._count - 1
            else:
                self._highlighted = (self._highlighted - 1) % self._count
        elif key is NavigationKey.ENTER:
            index = self._highlighted if self._highlighted is not None else 0
            self.close()
            return index
        return None

    def close(self) -> None:
        self._state = SelectionState.CLOSED
        self._highlighted = None
        self._count = 0
