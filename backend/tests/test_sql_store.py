"""Tests for the SQLAlchemy/Redis game store."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from words_of_healing.core.state import ParticipantRecord, UnlockState
from words_of_healing.core.store import StoreError
from words_of_healing.db.sql_store import SqlGameStore


def _record(code: str, final_score: int, name: str = "Anna") -> ParticipantRecord:
    return ParticipantRecord(
        name=name,
        region="North",
        security_code=code,
        final_score=final_score,
        easy_score=final_score,
    )


class FakePubSub:
    """Minimal redis.asyncio PubSub stand-in fed from a queue."""

    def __init__(self):
        self.messages: asyncio.Queue = asyncio.Queue()
        self.subscribe = AsyncMock()
        self.unsubscribe = AsyncMock()
        self.aclose = AsyncMock()

    async def listen(self):
        while True:
            yield await self.messages.get()


@pytest.fixture
def mock_redis():
    client = AsyncMock()
    client.publish = AsyncMock(return_value=1)
    client.pubsub = MagicMock(return_value=FakePubSub())
    return client


@pytest.fixture
def sql_store(session_maker, mock_redis) -> SqlGameStore:
    return SqlGameStore(session_maker, redis_getter=AsyncMock(return_value=mock_redis))


class TestUnlockRecord:
    @pytest.mark.asyncio
    async def test_missing_row_reads_all_closed(self, sql_store):
        assert await sql_store.read_unlock_state() == UnlockState.all_closed()

    @pytest.mark.asyncio
    async def test_write_then_read(self, sql_store, mock_redis):
        state = UnlockState(frozenset({1, 4}))
        await sql_store.write_unlock_state(state)
        assert await sql_store.read_unlock_state() == state

        # second write updates the same singleton row
        await sql_store.write_unlock_state(UnlockState(frozenset({2})))
        assert await sql_store.read_unlock_state() == UnlockState(frozenset({2}))

        channel, payload = mock_redis.publish.await_args.args
        assert channel == SqlGameStore.UNLOCK_CHANNEL
        assert json.loads(payload)["2"] is True

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_fail_write(self, sql_store, mock_redis):
        mock_redis.publish.side_effect = RedisConnectionError("redis down")
        state = UnlockState(frozenset({3}))

        await sql_store.write_unlock_state(state)
        assert await sql_store.read_unlock_state() == state

    @pytest.mark.asyncio
    async def test_subscription_delivers_messages(self, sql_store, mock_redis):
        received = []
        subscription = await sql_store.subscribe_unlock_state(received.append)
        pubsub = mock_redis.pubsub.return_value
        pubsub.subscribe.assert_awaited_once_with(SqlGameStore.UNLOCK_CHANNEL)

        await pubsub.messages.put({"type": "subscribe", "data": 1})
        await pubsub.messages.put({"type": "message", "data": "not json"})
        await pubsub.messages.put({"type": "message", "data": json.dumps({"5": True})})
        for _ in range(10):
            await asyncio.sleep(0)

        assert received == [UnlockState(frozenset({5}))]

        await subscription.close()
        assert not subscription.active
        pubsub.unsubscribe.assert_awaited_once()
        pubsub.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_subscription_survives_non_object_payload(self, sql_store, mock_redis):
        received = []
        subscription = await sql_store.subscribe_unlock_state(received.append)
        pubsub = mock_redis.pubsub.return_value

        await pubsub.messages.put({"type": "message", "data": json.dumps([1, 2])})
        await pubsub.messages.put({"type": "message", "data": json.dumps("open")})
        await pubsub.messages.put({"type": "message", "data": json.dumps({"6": True})})
        for _ in range(10):
            await asyncio.sleep(0)

        assert subscription.active
        assert received == [UnlockState(frozenset({6}))]

        await subscription.close()

    @pytest.mark.asyncio
    async def test_subscribe_failure_raises_store_error(self, session_maker):
        store = SqlGameStore(
            session_maker,
            redis_getter=AsyncMock(side_effect=RedisConnectionError("redis down")),
        )
        with pytest.raises(StoreError):
            await store.subscribe_unlock_state(lambda state: None)


class TestParticipants:
    @pytest.mark.asyncio
    async def test_upsert_inserts_then_updates(self, sql_store):
        await sql_store.upsert_participant(_record("123456", 40))
        await sql_store.upsert_participant(_record("123456", 95))

        rows = await sql_store.list_participants()
        assert len(rows) == 1
        assert rows[0].final_score == 95
        assert rows[0].easy_score == 95
        assert rows[0].region == "North"

    @pytest.mark.asyncio
    async def test_upsert_requires_code(self, sql_store):
        with pytest.raises(StoreError):
            await sql_store.upsert_participant(_record("", 10))

    @pytest.mark.asyncio
    async def test_list_ordered_by_score(self, sql_store):
        await sql_store.upsert_participant(_record("100001", 10, "low"))
        await sql_store.upsert_participant(_record("100002", 300, "high"))
        await sql_store.upsert_participant(_record("100003", 150, "mid"))

        rows = await sql_store.list_participants()
        assert [r.name for r in rows] == ["high", "mid", "low"]
        assert [r.name for r in await sql_store.list_participants(limit=1)] == ["high"]

    @pytest.mark.asyncio
    async def test_delete_all(self, sql_store):
        await sql_store.upsert_participant(_record("100001", 10))
        await sql_store.upsert_participant(_record("100002", 20))

        assert await sql_store.delete_all_participants() == 2
        assert await sql_store.list_participants() == []

    @pytest.mark.asyncio
    async def test_database_errors_become_store_errors(self, mock_redis):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("db gone"))
        session_maker = MagicMock()
        session_maker.return_value.__aenter__ = AsyncMock(return_value=session)
        session_maker.return_value.__aexit__ = AsyncMock(return_value=False)

        store = SqlGameStore(session_maker, redis_getter=AsyncMock(return_value=mock_redis))

        with pytest.raises(StoreError):
            await store.list_participants()
        with pytest.raises(StoreError):
            await store.delete_all_participants()
