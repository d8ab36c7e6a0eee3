"""Level unlock schemas for request/response validation."""

from pydantic import BaseModel


class LevelsResponse(BaseModel):
    """Schema for the shared unlock record."""

    levels: dict[str, bool]


class LevelToggleRequest(BaseModel):
    """Schema for opening or closing one level."""

    open: bool


class LevelsUpdateMessage(BaseModel):
    """Schema for WebSocket unlock update message."""

    type: str = "levels_update"
    data: dict[str, bool]
