"""Play session schemas for request/response validation."""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PlayCreateRequest(BaseModel):
    """Schema for registering a participant."""

    name: str = Field(..., max_length=100)
    region: str = Field("", max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("region")
    @classmethod
    def strip_region(cls, v: str) -> str:
        return v.strip()


class SelectRequest(BaseModel):
    """Schema for toggling one answer item."""

    item: str


class SubmitRequest(BaseModel):
    """Schema for a submission; without a selection the current one is used."""

    selection: Optional[list[str]] = None


class VerifyRequest(BaseModel):
    """Schema for the security-code gate."""

    code: str = Field(..., pattern=r"^\d{6}$")


class PuzzleItem(BaseModel):
    id: str
    text: str


class PuzzleView(BaseModel):
    """Puzzle as shown to the participant (no answer)."""

    kind: str
    prompt: str
    items: list[PuzzleItem]
    required_selection: int
    reference: str = ""
    image_url: Optional[str] = None


class LevelResult(BaseModel):
    """Feedback for a finished level."""

    level: int
    level_type: str
    score: int
    seconds_remaining: float
    correct: bool
    timed_out: bool
    correct_answer: list[str]
    reference: str = ""
    explanation: str = ""


class RankView(BaseModel):
    rank: int
    total_players: int
    percentile: int


class PlayStateResponse(BaseModel):
    """Schema for a participant session."""

    id: uuid.UUID
    name: str
    region: str
    phase: str
    level: int
    level_name: str
    level_subtitle: str
    level_type: str
    duration: int
    seconds_remaining: int
    puzzle: Optional[PuzzleView] = None
    selection: list[str]
    can_submit: bool
    last_result: Optional[LevelResult] = None
    breakdown: dict[str, int]
    rank: RankView
    previous_rank: Optional[int] = None
    security_code: Optional[str] = None
    verified: bool = False
    locked_out: bool = False


class FinishResponse(BaseModel):
    """Schema for the terminal submission."""

    total: int
    breakdown: dict[str, int]
    rank: RankView
    persisted: bool
    security_code: str


class VerifyResponse(BaseModel):
    """Schema for a security-code attempt."""

    verified: bool
    locked_out: bool
    attempts_remaining: int
