"""Collaborator interfaces (ports) for the search engine.

Protocols define contracts that infrastructure implementations must fulfill.
No infrastructure imports here.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from typeahead.domain.enums import SourceKind

if TYPE_CHECKING:
    from typeahead.application.dtos.search import SearchUiState
    from typeahead.domain.value_objects import AggregatedResult


class ISourceQueryAdapter(Protocol):
    """Issues one read-only query against one collection.

    Must be safe to call concurrently with sibling adapters and with itself
    across rounds.
    """

    kind: SourceKind

    async def query(self, term: str) -> Sequence[Mapping[str, Any]]:
        """Return collection-native items matching term.

        Raises:
            SourceQueryException: transport failure or non-success envelope.
        """


class IAnalyticsCapture(Protocol):
    """Auxiliary event capture (e.g. result selection). Failures must not matter."""

    def capture(self, event: str, properties: dict[str, Any]) -> None:
        """Record one analytics event."""


OnSelect = Callable[["AggregatedResult"], None]
OnSubmit = Callable[[str], None]
OnStateChange = Callable[["SearchUiState"], None]
