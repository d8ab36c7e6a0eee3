"""Leaderboard routes for the host's live view and administration."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Header, HTTPException, Query, status

from words_of_healing.api.deps import Runtime
from words_of_healing.core.store import StoreError
from words_of_healing.schemas.leaderboard import (
    LeaderboardEntryResponse,
    LeaderboardResetResponse,
    LeaderboardResponse,
    RankResponse,
)
from words_of_healing.services.leaderboard_service import InvalidAdminPassword

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


@router.get(
    "",
    response_model=LeaderboardResponse,
)
async def get_leaderboard(
    runtime: Runtime,
    limit: Optional[int] = Query(None, ge=1, le=500, description="Maximum entries to return"),
) -> LeaderboardResponse:
    """Get leaderboard entries.

    Returns participants sorted by final score (highest first, earliest
    registration breaking ties). The host screen polls this endpoint.
    """
    try:
        entries = await runtime.leaderboard.get_leaderboard(limit=limit)
    except StoreError as e:
        logger.error(f"Leaderboard read failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Leaderboard unavailable, try again",
        )

    entry_responses = [
        LeaderboardEntryResponse(
            rank=e.rank,
            name=e.record.name,
            region=e.record.region,
            final_score=e.record.final_score,
            intro_score=e.record.intro_score,
            mcq_score=e.record.mcq_score,
            image_score=e.record.image_score,
            easy_score=e.record.easy_score,
            medium2_score=e.record.medium2_score,
            medium_score=e.record.medium_score,
            image2_score=e.record.image2_score,
        )
        for e in entries
    ]

    return LeaderboardResponse(
        entries=entry_responses,
        total=len(entry_responses),
    )


@router.get(
    "/rank",
    response_model=RankResponse,
)
async def get_rank(
    runtime: Runtime,
    score: int = Query(..., ge=0, description="Final score to rank"),
) -> RankResponse:
    """Rank a score against every persisted participant.

    Answers rank 0 of 0 when the leaderboard is empty or unreachable.
    """
    snapshot = await runtime.leaderboard.get_rank(score)
    return RankResponse(**snapshot.to_dict())


@router.delete(
    "",
    response_model=LeaderboardResetResponse,
)
async def reset_leaderboard(
    runtime: Runtime,
    x_admin_password: Annotated[Optional[str], Header()] = None,
) -> LeaderboardResetResponse:
    """Delete every participant row (administrative)."""
    if not x_admin_password:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin password required",
        )

    try:
        removed = await runtime.leaderboard.reset(x_admin_password)
    except InvalidAdminPassword:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin password",
        )
    except StoreError as e:
        logger.error(f"Leaderboard reset failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to clear leaderboard, no rows assumed removed",
        )

    return LeaderboardResetResponse(deleted=removed)
