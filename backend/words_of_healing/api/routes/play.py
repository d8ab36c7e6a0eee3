"""Play routes: one hosted progression per participant."""

import logging
import uuid

from fastapi import APIRouter, HTTPException, Request, status

from words_of_healing.api.deps import CurrentSession, Runtime, limiter, settings
from words_of_healing.core.progression import ProgressionError, SelectionError
from words_of_healing.schemas.play import (
    FinishResponse,
    PlayCreateRequest,
    PlayStateResponse,
    SelectRequest,
    SubmitRequest,
    VerifyRequest,
    VerifyResponse,
)
from words_of_healing.services.play_service import PlaySession, SessionNotFound, VerificationRequired

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/play", tags=["Play"])


def _state(session: PlaySession) -> PlayStateResponse:
    return PlayStateResponse(**session.to_dict())


@router.post(
    "",
    response_model=PlayStateResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(f"{settings.rate_limit_requests}/minute")
async def create_play_session(
    request: Request,
    player_data: PlayCreateRequest,
    runtime: Runtime,
) -> PlayStateResponse:
    """Register a participant.

    The session starts on level 1 and stays locked until the host opens it.
    """
    session = await runtime.play.create(player_data.name, player_data.region)
    return _state(session)


@router.get(
    "/{session_id}",
    response_model=PlayStateResponse,
)
async def get_play_session(session: CurrentSession) -> PlayStateResponse:
    """Get the session view: phase, level, countdown, puzzle and scores."""
    return _state(session)


@router.post(
    "/{session_id}/select",
    response_model=PlayStateResponse,
)
@limiter.limit(f"{settings.rate_limit_actions}/minute")
async def select_item(
    request: Request,
    select_data: SelectRequest,
    session: CurrentSession,
) -> PlayStateResponse:
    """Toggle an answer fragment or choose an option.

    Ignored while the level is locked, finished or already submitted.
    """
    try:
        session.controller.select(select_data.item)
    except SelectionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return _state(session)


@router.post(
    "/{session_id}/submit",
    response_model=PlayStateResponse,
)
@limiter.limit(f"{settings.rate_limit_actions}/minute")
async def submit_answer(
    request: Request,
    submit_data: SubmitRequest,
    session: CurrentSession,
) -> PlayStateResponse:
    """Submit the current level.

    A repeated submit for the same level returns the first result unchanged.
    """
    controller = session.controller
    try:
        result = controller.submit(submit_data.selection)
    except SelectionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"No active level to submit (phase {controller.phase.value})",
        )
    return _state(session)


@router.post(
    "/{session_id}/verify",
    response_model=VerifyResponse,
)
async def verify_code(
    session_id: uuid.UUID,
    verify_data: VerifyRequest,
    runtime: Runtime,
) -> VerifyResponse:
    """Confirm the participant's security code before the final results."""
    try:
        session = await runtime.play.verify(session_id, verify_data.code)
    except SessionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )
    except ProgressionError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return VerifyResponse(
        verified=session.verified,
        locked_out=session.locked_out,
        attempts_remaining=runtime.play.attempts_remaining(session),
    )


@router.post(
    "/{session_id}/finish",
    response_model=FinishResponse,
)
async def finish_game(
    session_id: uuid.UUID,
    runtime: Runtime,
) -> FinishResponse:
    """Terminal submission: persist the final aggregate and report the rank."""
    try:
        session = runtime.play.get(session_id)
        result = await runtime.play.finish(session_id)
    except SessionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )
    except ProgressionError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except VerificationRequired as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )

    return FinishResponse(
        total=result.total,
        breakdown=result.breakdown.to_dict(),
        rank=result.rank.to_dict(),
        persisted=result.persisted,
        security_code=session.participant.security_code or "",
    )


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def reset_play_session(
    session_id: uuid.UUID,
    runtime: Runtime,
) -> None:
    """Discard the session (new game). Persisted scores are kept."""
    try:
        await runtime.play.close(session_id)
    except SessionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )
