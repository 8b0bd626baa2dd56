"""Domain value objects for the type-ahead aggregator.

Value objects are immutable; they have no identity, only value.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from typeahead.domain.enums import SourceKind


@dataclass(frozen=True)
class SearchTerm:
    """Raw text from the search box.

    The trimmed value is what gets queried. A blank term is the distinct
    "cleared" state, not a zero-result search.
    """

    raw: str

    @property
    def value(self) -> str:
        return self.raw.strip()

    @property
    def is_empty(self) -> bool:
        return not self.value

    @classmethod
    def parse(cls, raw: str | None) -> "SearchTerm":
        """Build from possibly-None input (None is treated as empty)."""
        return cls(raw or "")


@dataclass(frozen=True)
class AggregatedResult:
    """Uniform record for one hit from any collection.

    id is unique within a round: stable entity identifier plus source kind.
    """

    id: str
    type: SourceKind
    title: str
    url: str
    subtitle: str | None = None


@dataclass(frozen=True)
class SourceOutcome:
    """Settled outcome of one source query within one round.

    Either ok (items holds the collection-native records) or failed
    (reason holds why). Produced once per source per round.
    """

    kind: SourceKind
    items: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)
    reason: str | None = None

    @classmethod
    def ok(cls, kind: SourceKind, items: Sequence[Mapping[str, Any]]) -> "SourceOutcome":
        return cls(kind=kind, items=tuple(items))

    @classmethod
    def failed(cls, kind: SourceKind, reason: str) -> "SourceOutcome":
        return cls(kind=kind, reason=reason or "unknown error")

    @property
    def is_failed(self) -> bool:
        return self.reason is not None
