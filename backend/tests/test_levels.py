"""Tests for level unlock endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from starlette.testclient import TestClient

from words_of_healing.core.state import UnlockState
from words_of_healing.core.store import MemoryGameStore, StoreError
from words_of_healing.main import app
from words_of_healing.services.runtime import GameRuntime, get_runtime


ALL_CLOSED = {str(n): False for n in range(1, 8)}


@pytest.mark.asyncio
async def test_get_levels_initially_closed(client: AsyncClient):
    response = await client.get("/v1/levels")
    assert response.status_code == 200
    assert response.json() == {"levels": ALL_CLOSED}


@pytest.mark.asyncio
async def test_open_and_close_level(client: AsyncClient, store):
    response = await client.put("/v1/levels/3", json={"open": True})
    assert response.status_code == 200
    assert response.json()["levels"]["3"] is True
    assert await store.read_unlock_state() == UnlockState(frozenset({3}))

    response = await client.put("/v1/levels/3", json={"open": False})
    assert response.json()["levels"] == ALL_CLOSED


@pytest.mark.asyncio
@pytest.mark.parametrize("level", [0, 8])
async def test_unknown_level_rejected(client: AsyncClient, level):
    response = await client.put(f"/v1/levels/{level}", json={"open": True})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_store_failure_returns_503(client: AsyncClient, store):
    store.write_unlock_state = AsyncMock(side_effect=StoreError("down"))

    response = await client.put("/v1/levels/1", json={"open": True})
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_get_levels_answers_from_cache_when_store_down(client: AsyncClient, store, runtime):
    await runtime.unlock_sync.set_open(2, True)
    store.read_unlock_state = AsyncMock(side_effect=StoreError("down"))

    response = await client.get("/v1/levels")
    assert response.status_code == 200
    assert response.json()["levels"]["2"] is True


@pytest.mark.asyncio
async def test_reset_closes_all(client: AsyncClient):
    await client.put("/v1/levels/1", json={"open": True})
    await client.put("/v1/levels/2", json={"open": True})

    response = await client.post("/v1/levels/reset")
    assert response.status_code == 200
    assert response.json()["levels"] == ALL_CLOSED


def test_levels_websocket(test_settings):
    """Current state on connect, then one message per change."""
    runtime = GameRuntime(MemoryGameStore(), test_settings)
    app.dependency_overrides[get_runtime] = lambda: runtime
    try:
        with TestClient(app) as test_client:
            with test_client.websocket_connect("/v1/levels/ws") as websocket:
                first = websocket.receive_json()
                assert first == {"type": "levels_update", "data": ALL_CLOSED}

                test_client.put("/v1/levels/4", json={"open": True})
                update = websocket.receive_json()
                assert update["type"] == "levels_update"
                assert update["data"]["4"] is True
    finally:
        app.dependency_overrides.clear()
