"""Level unlock routes for the host and WebSocket updates."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, WebSocket, WebSocketDisconnect, status

from words_of_healing.api.deps import Runtime
from words_of_healing.core.state import UnlockState
from words_of_healing.schemas.levels import LevelsResponse, LevelsUpdateMessage, LevelToggleRequest
from words_of_healing.services.runtime import GameRuntime, get_runtime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/levels", tags=["Levels"])


def _unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Game state store unavailable, try again",
    )


@router.get("", response_model=LevelsResponse)
async def get_levels(runtime: Runtime) -> LevelsResponse:
    """Get which levels are open.

    Reads the store when reachable, otherwise answers from the worker's cache.
    """
    await runtime.unlock_sync.refresh()
    return LevelsResponse(levels=runtime.unlock_sync.current().to_dict())


@router.put("/{level}", response_model=LevelsResponse)
async def set_level(
    request: LevelToggleRequest,
    runtime: Runtime,
    level: int = Path(..., ge=1, le=7, description="Level number"),
) -> LevelsResponse:
    """Open or close one level for every participant."""
    state = await runtime.unlock_sync.set_open(level, request.open)
    if state is None:
        raise _unavailable()

    logger.info(f"Host set level {level} {'open' if request.open else 'closed'}")
    return LevelsResponse(levels=state.to_dict())


@router.post("/reset", response_model=LevelsResponse)
async def reset_levels(runtime: Runtime) -> LevelsResponse:
    """Close every level (event reset)."""
    state = await runtime.unlock_sync.reset()
    if state is None:
        raise _unavailable()

    logger.info("Host closed all levels")
    return LevelsResponse(levels=state.to_dict())


def _update_message(state: UnlockState) -> dict:
    return LevelsUpdateMessage(data=state.to_dict()).model_dump()


@router.websocket("/ws")
async def levels_websocket(websocket: WebSocket, runtime: GameRuntime = Depends(get_runtime)):
    """WebSocket endpoint for real-time unlock updates.

    The current record is sent on connect, then one message per change:
    {
        "type": "levels_update",
        "data": {"1": true, "2": false, ..., "7": false}
    }
    """
    await websocket.accept()

    sync = runtime.unlock_sync
    queue = sync.listen()

    try:
        await websocket.send_json(_update_message(sync.current()))
        while True:
            state = await queue.get()
            await websocket.send_json(_update_message(state))
    except WebSocketDisconnect:
        pass
    finally:
        sync.unlisten(queue)
