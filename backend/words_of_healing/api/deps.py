"""API dependencies for dependency injection."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from words_of_healing.config import get_settings
from words_of_healing.services.play_service import PlaySession, SessionNotFound
from words_of_healing.services.runtime import GameRuntime, get_runtime

settings = get_settings()

# Shared rate limiter; disabled through RATE_LIMIT_ENABLED=false
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def get_play_session(
    session_id: uuid.UUID,
    runtime: GameRuntime = Depends(get_runtime),
) -> PlaySession:
    """Look up a live play session by id."""
    try:
        return runtime.play.get(session_id)
    except SessionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )


# Type aliases for cleaner route signatures
Runtime = Annotated[GameRuntime, Depends(get_runtime)]
CurrentSession = Annotated[PlaySession, Depends(get_play_session)]
