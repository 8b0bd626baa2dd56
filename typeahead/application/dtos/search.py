"""DTOs for search rounds and the renderable search state."""

from dataclasses import dataclass

from typeahead.core.constants import (
    MESSAGE_NO_RESULTS,
    MESSAGE_PARTIAL_FAILURE,
    MESSAGE_TOTAL_FAILURE,
)
from typeahead.domain.enums import RoundOutcome, SelectionState, SourceKind
from typeahead.domain.value_objects import AggregatedResult


@dataclass(frozen=True)
class RoundResult:
    """Aggregated outcome of one round, before any currency check."""

    round_id: int
    term: str
    outcome: RoundOutcome
    results: tuple[AggregatedResult, ...]
    failed_sources: tuple[SourceKind, ...] = ()


@dataclass(frozen=True)
class SearchMessages:
    """User-visible strings; injected so a surface can pass translated text."""

    total_failure: str = MESSAGE_TOTAL_FAILURE
    partial_failure: str = MESSAGE_PARTIAL_FAILURE
    no_results: str = MESSAGE_NO_RESULTS


@dataclass(frozen=True)
class SearchUiState:
    """Everything a presentation layer needs to render the search surface.

    Owned by one SearchSession and replaced wholesale on every change;
    read-only to presentation.
    """

    term: str = ""
    round_outcome: RoundOutcome | None = None
    results: tuple[AggregatedResult, ...] = ()
    highlighted_index: int | None = None
    loading: bool = False
    error_message: str | None = None
    notice_message: str | None = None  # PartialFailure inline notice
    empty_message: str | None = None  # Open-Empty "no results"
    selection_state: SelectionState = SelectionState.CLOSED

    @classmethod
    def empty(cls) -> "SearchUiState":
        return cls()

