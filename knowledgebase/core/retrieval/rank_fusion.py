"""
Reciprocal Rank Fusion.

Combines ranked id lists by rank rather than score: an item at 0-based
rank r in a list contributes 1 / (k_rrf + r + 1). Contributions are summed
across lists. Ties break by semantic rank, then lexical rank, then id.

Dependencies: None
System role: Result fusion for hybrid search
"""

import math
from dataclasses import dataclass
from typing import Hashable, Iterable

DEFAULT_RRF_K = 60


@dataclass(frozen=True)
class FusedHit:
    """Fused score plus the per-list ranks it came from (None when absent)."""

    item_id: Hashable
    score: float
    semantic_rank: int | None = None
    lexical_rank: int | None = None


class RankAccumulator:
    """Associative accumulator of RRF contributions keyed by item id."""

    def __init__(self, k_rrf: int = DEFAULT_RRF_K) -> None:
        if k_rrf < 0:
            raise ValueError("k_rrf must not be negative")
        self.k_rrf = k_rrf
        self._scores: dict[Hashable, float] = {}
        self._ranks: dict[str, dict[Hashable, int]] = {}

    def add_list(self, name: str, item_ids: Iterable[Hashable]) -> None:
        """
        Add one ranked list.

        Only the first occurrence of an id in a list counts.

        Args:
            name: List label ("semantic", "lexical")
            item_ids: Ids in rank order
        """
        ranks = self._ranks.setdefault(name, {})
        for rank, item_id in enumerate(item_ids):
            if item_id in ranks:
                continue
            ranks[item_id] = rank
            self._scores[item_id] = self._scores.get(item_id, 0.0) + 1.0 / (self.k_rrf + rank + 1)

    def rank_of(self, name: str, item_id: Hashable) -> int | None:
        return self._ranks.get(name, {}).get(item_id)

    def results(self) -> list[FusedHit]:
        """Fused hits, best first."""
        hits = [
            FusedHit(
                item_id=item_id,
                score=score,
                semantic_rank=self.rank_of("semantic", item_id),
                lexical_rank=self.rank_of("lexical", item_id),
            )
            for item_id, score in self._scores.items()
        ]
        hits.sort(key=_sort_key)
        return hits


def _sort_key(hit: FusedHit) -> tuple:
    return (
        -hit.score,
        hit.semantic_rank if hit.semantic_rank is not None else math.inf,
        hit.lexical_rank if hit.lexical_rank is not None else math.inf,
        str(hit.item_id),
    )


def reciprocal_rank_fusion(
    semantic_ids: Iterable[Hashable],
    lexical_ids: Iterable[Hashable],
    k_rrf: int = DEFAULT_RRF_K,
) -> list[FusedHit]:
    """
    Fuse a semantic and a lexical ranking.

    Args:
        semantic_ids: Ids from vector search, best first
        lexical_ids: Ids from lexical search, best first
        k_rrf: Rank damping constant

    Returns:
        list[FusedHit]: Every id from either list, best first
    """
    accumulator = RankAccumulator(k_rrf)
    accumulator.add_list("semantic", semantic_ids)
    accumulator.add_list("lexical", lexical_ids)
    return accumulator.results()
