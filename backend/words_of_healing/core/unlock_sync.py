"""
Level unlock synchronization.

Keeps a local copy of the host's unlock record current through two
independent channels feeding the same cache:

- push: the store's subscription, for low latency
- poll: a fixed-interval read, in case the push channel silently dies

Applying a state equal to the cached one is a no-op, so both channels may
deliver the same update. Any client therefore converges within one poll
interval plus a round trip of a host write, whatever happens to push.
"""

import asyncio
import logging
import time
from typing import Optional

from .state import LEVEL_NUMBERS, UnlockState
from .store import GameStore, StoreError, Subscription
from .timers import TaskSlots


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5


class LevelUnlockSync:
    """Local, eventually consistent view of which levels are open."""

    def __init__(
        self,
        store: GameStore,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        initial: Optional[UnlockState] = None,
    ):
        self.store = store
        self.poll_interval = poll_interval
        self._state = initial or UnlockState.all_closed()
        self._listeners: list[asyncio.Queue] = []
        self._subscription: Optional[Subscription] = None
        self._tasks = TaskSlots("unlock-sync")
        self.last_synced_at: Optional[float] = None

    def current(self) -> UnlockState:
        return self._state

    def is_open(self, level: int) -> bool:
        return self._state.is_open(level)

    @property
    def running(self) -> bool:
        return self._tasks.running("poll")

    async def start(self) -> None:
        """Load the current record, subscribe to pushes and start polling."""
        if self.running:
            return

        await self.refresh()

        try:
            self._subscription = await self.store.subscribe_unlock_state(self.apply)
        except StoreError as e:
            logger.warning(f"Unlock push channel unavailable, polling only: {e}")
            self._subscription = None

        self._tasks.start("poll", self._poll_loop())
        logger.info(f"Unlock sync started (poll every {self.poll_interval}s)")

    async def stop(self) -> None:
        await self._tasks.aclose()

        if self._subscription is not None:
            try:
                await self._subscription.close()
            except StoreError as e:
                logger.warning(f"Error closing unlock subscription: {e}")
            self._subscription = None

        logger.info("Unlock sync stopped")

    async def refresh(self) -> Optional[UnlockState]:
        """Read the authoritative record now.

        Returns:
            The record read, or None if the store could not be reached (the
            cache is left as it was).
        """
        try:
            state = await self.store.read_unlock_state()
        except StoreError as e:
            logger.warning(f"Unlock state read failed, keeping cached state: {e}")
            return None

        self.apply(state)
        return state

    def apply(self, state: UnlockState) -> bool:
        """Install an authoritative record. Returns True if anything changed."""
        self.last_synced_at = time.monotonic()

        if state == self._state:
            return False

        previous = self._state
        self._state = state

        opened = sorted(state.opened - previous.opened)
        closed = sorted(previous.opened - state.opened)
        logger.info(f"Unlock state changed: opened={opened} closed={closed}")

        self._broadcast(state)
        return True

    # Change listeners
    def listen(self) -> asyncio.Queue:
        """Receive every future unlock state change on a queue."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=100)
        self._listeners.append(queue)
        return queue

    def unlisten(self, queue: asyncio.Queue) -> None:
        if queue in self._listeners:
            self._listeners.remove(queue)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # Host role
    async def set_open(self, level: int, is_open: bool) -> Optional[UnlockState]:
        """
        Open or close one level for everyone.

        Re-reads the record first so a toggle made through another worker
        is not undone, then writes the full updated record (last writer wins).

        Args:
            level: Level number 1-7.
            is_open: New flag value.

        Returns:
            The record written, or None if the write failed.

        Raises:
            ValueError: If the level number is unknown.
        """
        if level not in LEVEL_NUMBERS:
            raise ValueError(f"Unknown level: {level}")

        await self.refresh()
        return await self._write(self._state.with_level(level, is_open))

    async def reset(self) -> Optional[UnlockState]:
        """Close every level (event reset)."""
        return await self._write(UnlockState.all_closed())

    async def _write(self, state: UnlockState) -> Optional[UnlockState]:
        try:
            await self.store.write_unlock_state(state)
        except StoreError as e:
            logger.error(f"Unlock state write failed: {e}")
            return None

        self.apply(state)
        return state

    def _broadcast(self, state: UnlockState) -> None:
        for queue in self._listeners:
            try:
                queue.put_nowait(state)
            except asyncio.QueueFull:
                pass  # slow listener, it will catch up from current()

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            await self.refresh()
