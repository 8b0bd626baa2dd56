"""Fan-out aggregation and failure classification for one search round.

Every source is queried concurrently and the round waits for all of them
to settle. A branch that raises becomes a failed SourceOutcome; it never
cancels or corrupts its siblings. Results are grouped in source priority
order, not arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from typeahead.application.dtos.search import RoundResult
from typeahead.application.interfaces.sources import ISourceQueryAdapter
from typeahead.application.services.normalizer import ResultNormalizer
from typeahead.domain.enums import RoundOutcome, SourceKind
from typeahead.domain.exceptions import SourceQueryException
from typeahead.domain.value_objects import AggregatedResult, SourceOutcome
from typeahead.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    add_span_event,
)

logger = logging.getLogger(__name__)


def classify_outcome(failed: int, total: int) -> RoundOutcome:
    """Classify a round from its failed-branch count.

    Uniform count-based policy: which source failed does not matter.

    Raises:
        ValueError: total is not positive or failed is outside 0..total.
    """
    if total <= 0:
        raise ValueError(f"total must be positive, got {total}")
    if not 0 <= failed <= total:
        raise ValueError(f"failed must be between 0 and {total}, got {failed}")
    if failed == 0:
        return RoundOutcome.SUCCESS
    if failed == total:
        return RoundOutcome.TOTAL_FAILURE
    return RoundOutcome.PARTIAL_FAILURE


class FanOutAggregator:
    """Runs one round across all source adapters with settle-all semantics.

    Performs no state writes; callers apply the fencing check before
    committing a RoundResult.
    """

    def __init__(
        self,
        adapters: Sequence[ISourceQueryAdapter],
        normalizer: ResultNormalizer,
    ) -> None:
        """Initialize with one adapter per source kind.

        Raises:
            ValueError: no adapters, or two adapters for the same kind.
        """
        if not adapters:
            raise ValueError("At least one source adapter is required")
        kinds = [SourceKind(a.kind) for a in adapters]
        if len(set(kinds)) != len(kinds):
            raise ValueError(f"Duplicate source adapters: {[k.value for k in kinds]}")
        self._adapters = sorted(adapters, key=lambda a: SourceKind(a.kind).priority)
        self._normalizer = normalizer

    @property
    def normalizer(self) -> ResultNormalizer:
        return self._normalizer

    @property
    def kinds(self) -> tuple[SourceKind, ...]:
        return tuple(SourceKind(a.kind) for a in self._adapters)

    async def run_round(self, term: str, round_id: int) -> RoundResult:
        """Query every source for term and aggregate the settled outcomes.

        Args:
            term: Trimmed, non-empty search term.
            round_id: Fencing token of this round (echoed in the result).

        Returns:
            RoundResult with the classified outcome and the normalized results
            of every successful branch, grouped by source priority.
        """
        async with TracedOperation(
            "search.round",
            {"search.round_id": round_id, "search.term_length": len(term)},
        ):
            outcomes = await asyncio.gather(
                *(self._run_branch(adapter, term, round_id) for adapter in self._adapters)
            )
            failed = tuple(o.kind for o in outcomes if o.is_failed)
            outcome = classify_outcome(len(failed), len(outcomes))

            results: list[AggregatedResult] = []
            for branch in outcomes:
                if not branch.is_failed:
                    results.extend(self._normalizer.normalize_many(branch.kind, branch.items))

            add_span_attributes(
                **{
                    "search.outcome": outcome.value,
                    "search.failed_sources": len(failed),
                    "search.result_count": len(results),
                }
            )

        logger.debug(
            "Round %s settled: outcome=%s results=%d failed=%s",
            round_id,
            outcome.value,
            len(results),
            [k.value for k in failed],
        )
        return RoundResult(
            round_id=round_id,
            term=term,
            outcome=outcome,
            results=tuple(results),
            failed_sources=failed,
        )

    async def _run_branch(
        self, adapter: ISourceQueryAdapter, term: str, round_id: int
    ) -> SourceOutcome:
        """Run one adapter; convert any error into a failed outcome."""
        kind = SourceKind(adapter.kind)
        try:
            items = await adapter.query(term)
        except SourceQueryException as e:
            reason = f"{e.error_code}: {e.reason}"
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
        else:
            if isinstance(items, (list, tuple)):
                return SourceOutcome.ok(kind, items)
            reason = f"MALFORMED_RESPONSE: expected a list, got {type(items).__name__}"

        logger.warning("Search branch %s failed in round %s: %s", kind.value, round_id, reason)
        add_span_event(
            "search.branch_failed",
            {"search.source": kind.value, "search.reason": reason},
        )
        return SourceOutcome.failed(kind, reason)
