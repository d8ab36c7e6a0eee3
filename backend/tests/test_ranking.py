"""Tests for rank computation and the store-backed resolver."""

from unittest.mock import AsyncMock

import pytest

from words_of_healing.core.ranking import RankResolver, compute_rank
from words_of_healing.core.state import ParticipantRecord, RankSnapshot
from words_of_healing.core.store import MemoryGameStore, StoreError


def _record(code: str, final_score: int) -> ParticipantRecord:
    return ParticipantRecord(name=f"player-{code}", region="", security_code=code, final_score=final_score)


class TestComputeRank:
    def test_empty(self):
        assert compute_rank(100, []) == RankSnapshot(0, 0, 0)

    def test_nobody_higher_is_first(self):
        snapshot = compute_rank(500, [100, 200, 500])
        assert snapshot.rank == 1
        assert snapshot.total_players == 3
        assert snapshot.percentile == 100

    def test_ties_share_rank_and_skip(self):
        scores = [900, 900, 400]
        assert compute_rank(900, scores).rank == 1
        assert compute_rank(400, scores).rank == 3

    def test_percentile_rounding(self):
        # rank 2 of 3 -> (3 - 2 + 1) / 3 * 100 = 66.67
        assert compute_rank(400, [500, 400, 300]).percentile == 67

    def test_last_place(self):
        snapshot = compute_rank(0, [10, 20, 30, 40])
        assert snapshot.rank == 5
        assert snapshot.percentile == 0


class TestRankResolver:
    @pytest.mark.asyncio
    async def test_scenario_third_player_between_two(self):
        store = MemoryGameStore()
        await store.upsert_participant(_record("111111", 500))
        await store.upsert_participant(_record("222222", 300))

        snapshot = await RankResolver(store).rank_stats(400)
        assert snapshot.rank == 2
        assert snapshot.total_players == 2
        assert snapshot.percentile == 50

        # once the querying player's own row exists it counts too
        await store.upsert_participant(_record("333333", 400))
        snapshot = await RankResolver(store).rank_stats(400)
        assert snapshot == RankSnapshot(rank=2, total_players=3, percentile=67)

    @pytest.mark.asyncio
    async def test_empty_store(self):
        assert await RankResolver(MemoryGameStore()).rank_stats(10) == RankSnapshot.unknown()

    @pytest.mark.asyncio
    async def test_store_failure_reports_unknown(self):
        store = MemoryGameStore()
        store.list_participants = AsyncMock(side_effect=StoreError("connection refused"))

        assert await RankResolver(store).rank_stats(10) == RankSnapshot(0, 0, 0)


def test_percentile_rounds_half_up():
    # rank 8 of 8 -> 1 / 8 * 100 = 12.5
    assert compute_rank(1, [8, 7, 6, 5, 4, 3, 2, 1]).percentile == 13
