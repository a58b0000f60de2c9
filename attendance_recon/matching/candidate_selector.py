"""Candidate selection for one target name against a pool of names.

The reconciliation loop depends only on the CandidateSelector protocol,
so the rule-based selector here and the embedding selector are
interchangeable.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from attendance_recon.matching.normalizer import variations
from attendance_recon.matching.schemas import CandidateMatch
from attendance_recon.matching.similarity import similarity


@runtime_checkable
class CandidateSelector(Protocol):
    """Protocol for strategies that pick the best candidate from a pool."""

    async def select(
        self, target_name: str, pool: Sequence[str]
    ) -> CandidateMatch | None:
        """Return the best (name, score) pair or None for an empty pool."""
        ...


class RuleCandidateSelector:
    """Rule-based candidate selection over name variations.

    Every pool entry is scored by its best variation pair against the
    target. The strict maximum wins and ties keep the first-seen entry,
    so the result is stable with respect to pool order.
    """

    def best_match(
        self,
        target_name: str,
        pool: Sequence[str],
    ) -> CandidateMatch | None:
        """Find the best-scoring pool entry for a name.

        Args:
            target_name: Name to search for
            pool: Candidate names, in priority order for ties

        Returns:
            CandidateMatch for the best entry, or None if pool is empty
        """
        if not pool:
            return None

        target_variations = variations(target_name)
        best: CandidateMatch | None = None

        for entry in pool:
            entry_variations = variations(entry)
            score = max(
                similarity(target_var, entry_var)
                for target_var in target_variations
                for entry_var in entry_variations
            )
            if best is None or score > best.score:
                best = CandidateMatch(name=entry, score=score)

        return best

    async def select(
        self, target_name: str, pool: Sequence[str]
    ) -> CandidateMatch | None:
        return self.best_match(target_name, pool)
