"""Data transfer objects for the search engine (no dependency on transport)."""

from typeahead.application.dtos.search import RoundResult, SearchMessages, SearchUiState

__all__ = ["RoundResult", "SearchMessages", "SearchUiState"]
