"""Leaderboard schemas for request/response validation."""

from pydantic import BaseModel


class LeaderboardEntryResponse(BaseModel):
    """Schema for a leaderboard entry."""

    rank: int
    name: str
    region: str
    final_score: int
    intro_score: int = 0
    mcq_score: int = 0
    image_score: int = 0
    easy_score: int = 0
    medium2_score: int = 0
    medium_score: int = 0
    image2_score: int = 0


class LeaderboardResponse(BaseModel):
    """Schema for leaderboard response."""

    entries: list[LeaderboardEntryResponse]
    total: int


class RankResponse(BaseModel):
    """Schema for a rank snapshot."""

    rank: int
    total_players: int
    percentile: int


class LeaderboardResetResponse(BaseModel):
    """Schema for the administrative wipe."""

    deleted: int
    message: str = "Leaderboard cleared"
