"""
External data store contract.

The game core never talks to a database directly. It consumes this
interface, which is implemented by:

- ``MemoryGameStore``: single-process store (tests, local runs)
- ``words_of_healing.db.sql_store.SqlGameStore``: SQLAlchemy rows plus a
  Redis pub/sub push channel

Adapters raise ``StoreError`` for every backend failure; callers decide
whether to degrade, retry or surface it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .state import ParticipantRecord, UnlockState


logger = logging.getLogger(__name__)

UnlockListener = Callable[[UnlockState], None]


class StoreError(Exception):
    """Raised when the backing store cannot complete a read or write."""

    pass


class Subscription(ABC):
    """Handle for a push subscription. Closing it stops delivery."""

    @abstractmethod
    async def close(self) -> None:
        ...


class GameStore(ABC):
    """Read/write/subscribe operations the event needs from its backend."""

    @abstractmethod
    async def read_unlock_state(self) -> UnlockState:
        """Return the shared unlock record (all closed if never written)."""

    @abstractmethod
    async def write_unlock_state(self, state: UnlockState) -> None:
        """Replace the shared unlock record (singleton upsert)."""

    @abstractmethod
    async def subscribe_unlock_state(self, on_change: UnlockListener) -> Subscription:
        """Call ``on_change`` with every unlock record written from now on."""

    @abstractmethod
    async def upsert_participant(self, record: ParticipantRecord) -> None:
        """Insert or replace the row keyed by ``record.security_code``."""

    @abstractmethod
    async def list_participants(self, limit: Optional[int] = None) -> list[ParticipantRecord]:
        """All rows, highest final score first."""

    @abstractmethod
    async def delete_all_participants(self) -> int:
        """Administrative wipe. Returns the number of rows removed."""

    async def close(self) -> None:
        """Release backend resources."""
        return None


class _ListenerSubscription(Subscription):
    def __init__(self, store: "MemoryGameStore", listener: UnlockListener):
        self._store = store
        self._listener = listener

    async def close(self) -> None:
        self._store._remove_listener(self._listener)


class MemoryGameStore(GameStore):
    """In-process store. Writes fan out to listeners synchronously."""

    def __init__(self, unlock_state: Optional[UnlockState] = None):
        self._unlock_state = unlock_state or UnlockState.all_closed()
        # insertion order breaks score ties, like created_at in SQL
        self._participants: dict[str, ParticipantRecord] = {}
        self._listeners: list[UnlockListener] = []

    async def read_unlock_state(self) -> UnlockState:
        return self._unlock_state

    async def write_unlock_state(self, state: UnlockState) -> None:
        self._unlock_state = state
        self._notify(state)

    async def subscribe_unlock_state(self, on_change: UnlockListener) -> Subscription:
        self._listeners.append(on_change)
        return _ListenerSubscription(self, on_change)

    async def upsert_participant(self, record: ParticipantRecord) -> None:
        if not record.security_code:
            raise StoreError("Participant record has no security code")
        self._participants[record.security_code] = record

    async def list_participants(self, limit: Optional[int] = None) -> list[ParticipantRecord]:
        rows = sorted(self._participants.values(), key=lambda r: r.final_score, reverse=True)
        return rows[:limit] if limit is not None else rows

    async def delete_all_participants(self) -> int:
        removed = len(self._participants)
        self._participants.clear()
        return removed

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, state: UnlockState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Unlock state listener failed")

    def _remove_listener(self, listener: UnlockListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
