"""GameStore backed by SQLAlchemy rows with a Redis pub/sub push channel."""

import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from words_of_healing.core.state import ParticipantRecord, UnlockState
from words_of_healing.core.store import GameStore, StoreError, Subscription, UnlockListener
from words_of_healing.db.redis import get_redis
from words_of_healing.models import GAME_STATE_ID, GameState, Player


logger = logging.getLogger(__name__)

RedisGetter = Callable[[], Awaitable[redis.Redis]]


class RedisSubscription(Subscription):
    """Forwards unlock records published on a Redis channel to a listener."""

    def __init__(self, pubsub, on_change: UnlockListener):
        self._pubsub = pubsub
        self._on_change = on_change
        self._task: Optional[asyncio.Task] = asyncio.create_task(self._listen())

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _listen(self) -> None:
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    data = json.loads(message["data"])
                except (TypeError, ValueError) as e:
                    logger.warning(f"Ignoring malformed unlock message: {e}")
                    continue
                if not isinstance(data, dict):
                    logger.warning(f"Ignoring unlock message that is not an object: {data!r}")
                    continue
                self._on_change(UnlockState.from_dict(data))
        except (RedisError, OSError) as e:
            # the poll loop keeps clients converging without the push channel
            logger.warning(f"Unlock push channel lost: {type(e).__name__}: {e}")

    async def close(self) -> None:
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

        try:
            await self._pubsub.unsubscribe(SqlGameStore.UNLOCK_CHANNEL)
            await self._pubsub.aclose()
        except (RedisError, OSError) as e:
            raise StoreError(f"Failed to close unlock subscription: {e}") from e


class SqlGameStore(GameStore):
    """Participant rows and the unlock record in SQL; unlock pushes over Redis."""

    UNLOCK_CHANNEL = "game_state:levels_unlocked"

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        redis_getter: RedisGetter = get_redis,
    ):
        self.session_maker = session_maker
        self._redis_getter = redis_getter

    # Unlock record
    async def read_unlock_state(self) -> UnlockState:
        try:
            async with self.session_maker() as session:
                row = await session.get(GameState, GAME_STATE_ID)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read game state: {e}") from e

        if row is None:
            return UnlockState.all_closed()
        return UnlockState.from_dict(row.levels_unlocked)

    async def write_unlock_state(self, state: UnlockState) -> None:
        try:
            async with self.session_maker() as session:
                row = await session.get(GameState, GAME_STATE_ID)
                if row is None:
                    session.add(GameState(id=GAME_STATE_ID, levels_unlocked=state.to_dict()))
                else:
                    row.levels_unlocked = state.to_dict()
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write game state: {e}") from e

        await self._publish_unlock_state(state)

    async def subscribe_unlock_state(self, on_change: UnlockListener) -> Subscription:
        try:
            client = await self._redis_getter()
            pubsub = client.pubsub()
            await pubsub.subscribe(self.UNLOCK_CHANNEL)
        except (RedisError, OSError) as e:
            raise StoreError(f"Failed to subscribe to unlock channel: {e}") from e

        logger.info(f"Subscribed to {self.UNLOCK_CHANNEL}")
        return RedisSubscription(pubsub, on_change)

    async def _publish_unlock_state(self, state: UnlockState) -> None:
        # The row is already committed; a lost push is covered by polling.
        try:
            client = await self._redis_getter()
            await client.publish(self.UNLOCK_CHANNEL, json.dumps(state.to_dict()))
        except (RedisError, OSError) as e:
            logger.warning(f"Unlock push publish failed: {type(e).__name__}: {e}")

    # Participants
    async def upsert_participant(self, record: ParticipantRecord) -> None:
        if not record.security_code:
            raise StoreError("Participant record has no security code")

        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(Player).where(Player.security_code == record.security_code)
                )
                player = result.scalar_one_or_none()
                if player is None:
                    player = Player(security_code=record.security_code)
                    session.add(player)
                player.apply(record)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to upsert player {record.security_code}: {e}") from e

    async def list_participants(self, limit: Optional[int] = None) -> list[ParticipantRecord]:
        query = select(Player).order_by(Player.final_score.desc(), Player.created_at.asc())
        if limit is not None:
            query = query.limit(limit)

        try:
            async with self.session_maker() as session:
                result = await session.execute(query)
                players = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list players: {e}") from e

        return [player.to_record() for player in players]

    async def delete_all_participants(self) -> int:
        try:
            async with self.session_maker() as session:
                result = await session.execute(delete(Player))
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete players: {e}") from e

        removed = result.rowcount or 0
        logger.info(f"Deleted {removed} players")
        return removed
