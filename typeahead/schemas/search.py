"""Search API schemas: REST round response and WebSocket messages."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from typeahead.application.dtos.search import RoundResult, SearchUiState
from typeahead.domain.enums import RoundOutcome, SelectionState, SourceKind
from typeahead.domain.value_objects import AggregatedResult


class AggregatedResultResponse(BaseModel):
    """One normalized hit (report, individual, or organization)."""

    id: str
    type: SourceKind
    title: str
    subtitle: str | None = None
    url: str

    @classmethod
    def from_result(cls, result: AggregatedResult) -> "AggregatedResultResponse":
        return cls(
            id=result.id,
            type=result.type,
            title=result.title,
            subtitle=result.subtitle,
            url=result.url,
        )


class SearchRoundResponse(BaseModel):
    """Response for GET /search: one aggregated round."""

    round_id: int
    term: str
    outcome: RoundOutcome
    results: list[AggregatedResultResponse]
    failed_sources: list[SourceKind] = Field(default_factory=list)

    @classmethod
    def from_round(cls, result: RoundResult) -> "SearchRoundResponse":
        return cls(
            round_id=result.round_id,
            term=result.term,
            outcome=result.outcome,
            results=[AggregatedResultResponse.from_result(r) for r in result.results],
            failed_sources=list(result.failed_sources),
        )


class SearchUiStateResponse(BaseModel):
    """Renderable search state pushed to WebSocket clients."""

    term: str
    round_outcome: RoundOutcome | None = None
    results: list[AggregatedResultResponse]
    highlighted_index: int | None = None
    loading: bool
    error_message: str | None = None
    notice_message: str | None = None
    empty_message: str | None = None
    selection_state: SelectionState

    @classmethod
    def from_state(cls, state: SearchUiState) -> "SearchUiStateResponse":
        return cls(
            term=state.term,
            round_outcome=state.round_outcome,
            results=[AggregatedResultResponse.from_result(r) for r in state.results],
            highlighted_index=state.highlighted_index,
            loading=state.loading,
            error_message=state.error_message,
            notice_message=state.notice_message,
            empty_message=state.empty_message,
            selection_state=state.selection_state,
        )


class SearchClientMessage(BaseModel):
    """Message from a WebSocket client.

    input: {"type": "input", "term": "..."}
    key: {"type": "key", "key": "ArrowDown"}
    select: {"type": "select", "id": "<result id>"}
    submit: {"type": "submit", "term": "..."} (term optional; defaults to the box)
    """

    model_config = ConfigDict(extra="ignore")

    type: Literal["input", "key", "select", "submit"]
    term: str = Field(default="", max_length=500)
    key: str = ""
    id: str = ""
