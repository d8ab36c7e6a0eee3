"""Per-worker game runtime: store, unlock sync, leaderboard and play sessions."""

import asyncio
import logging
import random
from typing import Optional

from words_of_healing.config import Settings, get_settings
from words_of_healing.core.ranking import RankResolver
from words_of_healing.core.store import GameStore, MemoryGameStore
from words_of_healing.core.timers import TaskSlots
from words_of_healing.core.unlock_sync import LevelUnlockSync
from words_of_healing.services.leaderboard_service import LeaderboardService
from words_of_healing.services.play_service import PlayService


logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> GameStore:
    """Create the configured store backend."""
    if settings.store_backend == "memory":
        return MemoryGameStore()

    from words_of_healing.db.database import async_session_maker
    from words_of_healing.db.sql_store import SqlGameStore

    return SqlGameStore(async_session_maker)


class GameRuntime:
    """Everything one worker process shares between requests."""

    def __init__(
        self,
        store: GameStore,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = settings or get_settings()
        self.settings = settings
        self.store = store
        self.unlock_sync = LevelUnlockSync(store, poll_interval=settings.unlock_poll_interval)
        self.ranks = RankResolver(store)
        self.leaderboard = LeaderboardService(
            store,
            self.ranks,
            admin_password=settings.admin_password,
            default_limit=settings.leaderboard_limit,
        )
        self.play = PlayService(
            store,
            self.unlock_sync,
            self.ranks,
            timing=settings.progression_timing,
            verify_max_attempts=settings.verify_max_attempts,
            rng=rng,
        )
        self._tasks = TaskSlots("runtime")

    async def start(self) -> None:
        await self.unlock_sync.start()
        self._tasks.start("session-sweep", self._sweep_idle_sessions())
        logger.info(f"Game runtime started ({type(self.store).__name__})")

    async def stop(self) -> None:
        await self._tasks.aclose()
        await self.play.close_all()
        await self.unlock_sync.stop()
        await self.store.close()
        logger.info("Game runtime stopped")

    async def _sweep_idle_sessions(self) -> None:
        while True:
            await asyncio.sleep(self.settings.session_sweep_interval_seconds)
            await self.play.close_idle(self.settings.session_idle_timeout_seconds)


# Singleton instance
_runtime: Optional[GameRuntime] = None


def get_runtime() -> GameRuntime:
    """Get singleton game runtime."""
    global _runtime
    if _runtime is None:
        settings = get_settings()
        _runtime = GameRuntime(build_store(settings), settings)
    return _runtime
