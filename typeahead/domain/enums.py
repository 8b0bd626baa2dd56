"""Domain enumerations for the type-ahead aggregator.

Enums represent fixed sets of domain values (source collections, round
outcomes, selection states, navigation keys).
"""

from enum import Enum


class SourceKind(str, Enum):
    """Queryable collection behind the search box.

    Declaration order is the display priority: results are grouped
    report → individual → organization regardless of arrival order.
    """

    REPORT = "report"
    INDIVIDUAL = "individual"
    ORGANIZATION = "organization"

    @classmethod
    def in_priority_order(cls) -> tuple["SourceKind", ...]:
        """Return kinds in display priority order."""
        return tuple(cls)

    @property
    def priority(self) -> int:
        """Position of this kind in the display order (0 = first)."""
        return self.in_priority_order().index(self)


class RoundOutcome(str, Enum):
    """Classification of one round by how many branches failed."""

    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"


class SelectionState(str, Enum):
    """States of the result list / keyboard selection machine.

    DISMISSED is the Escape target: the term stays in the box but the
    list is hidden until the term changes again.
    """

    CLOSED = "closed"
    OPEN_LOADING = "open_loading"
    OPEN_ERROR = "open_error"
    OPEN_EMPTY = "open_empty"
    OPEN_RESULTS = "open_results"
    DISMISSED = "dismissed"

    @property
    def is_open(self) -> bool:
        return self not in (SelectionState.CLOSED, SelectionState.DISMISSED)


class NavigationKey(str, Enum):
    """Keyboard keys the selection machine reacts to (DOM key names)."""

    ARROW_DOWN = "ArrowDown"
    ARROW_UP = "ArrowUp"
    ENTER = "Enter"
    ESCAPE = "Escape"
