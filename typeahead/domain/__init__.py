"""Domain layer: enums, value objects, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from typeahead.domain.enums import (
    NavigationKey,
    RoundOutcome,
    SelectionState,
    SourceKind,
)
from typeahead.domain.exceptions import (
    NormalizationDefect,
    SearchSessionClosedException,
    SourceQueryException,
    TypeaheadException,
    UnknownSourceKindException,
    ValidationException,
)
from typeahead.domain.value_objects import AggregatedResult, SearchTerm, SourceOutcome

__all__ = [
    # Enums
    "NavigationKey",
    "RoundOutcome",
    "SelectionState",
    "SourceKind",
    # Exceptions
    "NormalizationDefect",
    "SearchSessionClosedException",
    "SourceQueryException",
    "TypeaheadException",
    "UnknownSourceKindException",
    "ValidationException",
    # Value objects
    "AggregatedResult",
    "SearchTerm",
    "SourceOutcome",
]
