"""Participant standing against everyone persisted on the leaderboard."""

import logging
import math
from typing import Iterable

from .state import RankSnapshot
from .store import GameStore, StoreError


logger = logging.getLogger(__name__)


def compute_rank(final_score: int, scores: Iterable[int]) -> RankSnapshot:
    """
    Rank a score against a collection of totals.

    Rank counts strictly higher scores, so tied participants share a rank
    and the next lower score skips past the whole tie.

    Returns:
        RankSnapshot; the zeroed snapshot when there are no scores.
    """
    scores = list(scores)
    total_players = len(scores)
    if total_players == 0:
        return RankSnapshot.unknown()

    rank = 1 + sum(1 for other in scores if other > final_score)
    # half-up, so 12.5 reports as 13
    percentile = math.floor((total_players - rank + 1) / total_players * 100 + 0.5)
    return RankSnapshot(rank=rank, total_players=total_players, percentile=percentile)


class RankResolver:
    """Reads the leaderboard and ranks a score against it.

    Each call is a fresh, non-atomic read; results go stale as soon as any
    other participant writes, so callers re-query after every score change.
    """

    def __init__(self, store: GameStore):
        self.store = store

    async def rank_stats(self, final_score: int) -> RankSnapshot:
        try:
            rows = await self.store.list_participants()
        except StoreError as e:
            logger.warning(f"Rank lookup failed, reporting unknown rank: {e}")
            return RankSnapshot.unknown()

        return compute_rank(final_score, (row.final_score for row in rows))
