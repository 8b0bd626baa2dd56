"""Search engine building blocks: normalizer, fence, aggregator, debounce, selection."""

from typeahead.application.services.aggregator import FanOutAggregator, classify_outcome
from typeahead.application.services.debounce import DebounceScheduler
from typeahead.application.services.fencing import RoundFence
from typeahead.application.services.normalizer import ResultNormalizer
from typeahead.application.services.selection import SelectionStateMachine

__all__ = [
    "DebounceScheduler",
    "FanOutAggregator",
    "ResultNormalizer",
    "RoundFence",
    "SelectionStateMachine",
    "classify_outcome",
]
