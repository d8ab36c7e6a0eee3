"""Leaderboard service on top of the game store."""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from words_of_healing.core.ranking import RankResolver
from words_of_healing.core.state import ParticipantRecord, RankSnapshot
from words_of_healing.core.store import GameStore


logger = logging.getLogger(__name__)


class InvalidAdminPassword(Exception):
    """Raised when an administrative action is attempted with a wrong password."""

    pass


@dataclass
class LeaderboardEntry:
    """A single leaderboard entry."""

    record: ParticipantRecord
    rank: int = 0


class LeaderboardService:
    """Reads, ranks and wipes persisted participant rows."""

    def __init__(self, store: GameStore, ranks: RankResolver, admin_password: str, default_limit: int = 100):
        self.store = store
        self.ranks = ranks
        self.default_limit = default_limit
        self._admin_password = admin_password

    async def get_leaderboard(self, limit: Optional[int] = None) -> list[LeaderboardEntry]:
        """
        Get leaderboard entries.

        Args:
            limit: Maximum entries to return (defaults to the configured limit)

        Returns:
            Entries ordered by final score (descending); tied scores share a rank

        Raises:
            StoreError: If the rows cannot be read
        """
        records = await self.store.list_participants(limit=limit or self.default_limit)

        entries = []
        for position, record in enumerate(records):
            if position and record.final_score == records[position - 1].final_score:
                rank = entries[-1].rank
            else:
                rank = position + 1
            entries.append(LeaderboardEntry(record=record, rank=rank))
        return entries

    async def get_rank(self, final_score: int) -> RankSnapshot:
        """Rank a score against everyone persisted (zeroed on failure)."""
        return await self.ranks.rank_stats(final_score)

    async def reset(self, password: str) -> int:
        """
        Delete every participant row.

        Raises:
            InvalidAdminPassword: If the password does not match
            StoreError: If the delete fails (rows may still be present)
        """
        if not secrets.compare_digest(password.encode(), self._admin_password.encode()):
            logger.warning("Leaderboard reset rejected: wrong admin password")
            raise InvalidAdminPassword("Invalid admin password")

        removed = await self.store.delete_all_participants()
        logger.info(f"Leaderboard reset: {removed} rows removed")
        return removed

