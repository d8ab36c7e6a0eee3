"""
Game state types for Words of Healing.

Holds the data model shared by the scoring, ranking, sync and progression
modules:
- Level types and level numbers
- Unlock state (host-controlled, one per event)
- Per-level score records and the derived breakdown
- Participant identity and persisted participant rows
- Rank snapshots
"""

import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


LEVEL_NUMBERS = (1, 2, 3, 4, 5, 6, 7)
FINAL_LEVEL = LEVEL_NUMBERS[-1]


def generate_security_code() -> str:
    """Six-digit code identifying a participant row on the leaderboard."""
    return str(secrets.randbelow(900000) + 100000)


class LevelType(str, Enum):
    """The seven puzzle categories, in play order."""
    INTRO = "intro"
    MCQ = "mcq"
    IMAGE = "image"
    EASY = "easy"
    MEDIUM2 = "medium2"
    MEDIUM = "medium"
    IMAGE2 = "image2"


class Phase(str, Enum):
    """Progression phase of a participant within the current level."""
    LOCKED = "locked"
    ACTIVE = "active"
    SUBMITTED = "submitted"
    WAITING_NEXT = "waiting_next"
    COMPLETE = "complete"


@dataclass(frozen=True)
class UnlockState:
    """Which levels the host has opened.

    Stored as the set of open level numbers; every level not in the set is
    closed.
    """
    opened: frozenset = frozenset()

    @classmethod
    def all_closed(cls) -> "UnlockState":
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping) -> "UnlockState":
        """Build from a ``{level: bool}`` mapping (int or str keys)."""
        opened = set()
        for key, value in (data or {}).items():
            try:
                level = int(key)
            except (TypeError, ValueError):
                continue
            if level in LEVEL_NUMBERS and bool(value):
                opened.add(level)
        return cls(frozenset(opened))

    def is_open(self, level: int) -> bool:
        return level in self.opened

    def with_level(self, level: int, is_open: bool) -> "UnlockState":
        """Return a copy with one level opened or closed."""
        if level not in LEVEL_NUMBERS:
            raise ValueError(f"Unknown level: {level}")
        if is_open:
            return UnlockState(self.opened | {level})
        return UnlockState(self.opened - {level})

    def to_dict(self) -> dict[str, bool]:
        """Wire/storage shape: ``{"1": bool, ..., "7": bool}``."""
        return {str(level): level in self.opened for level in LEVEL_NUMBERS}


@dataclass(frozen=True)
class LevelScoreRecord:
    """Outcome of one level for one participant. Created once, never changed."""
    level_type: LevelType
    score: int
    seconds_remaining: float
    correct: bool

    def to_dict(self) -> dict:
        return {
            "level_type": self.level_type.value,
            "score": self.score,
            "seconds_remaining": self.seconds_remaining,
            "correct": self.correct,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-level scores plus the total, projected from the record list."""
    intro: int = 0
    mcq: int = 0
    image: int = 0
    easy: int = 0
    medium2: int = 0
    medium: int = 0
    image2: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "intro": self.intro,
            "mcq": self.mcq,
            "image": self.image,
            "easy": self.easy,
            "medium2": self.medium2,
            "medium": self.medium,
            "image2": self.image2,
            "total": self.total,
        }


@dataclass
class Participant:
    """Identity of the person playing in this session."""
    name: str
    region: str = ""
    security_code: Optional[str] = None


@dataclass(frozen=True)
class ParticipantRecord:
    """One leaderboard row, keyed by security code."""
    name: str
    region: str
    security_code: str
    final_score: int = 0
    intro_score: int = 0
    mcq_score: int = 0
    image_score: int = 0
    easy_score: int = 0
    medium2_score: int = 0
    medium_score: int = 0
    image2_score: int = 0

    @classmethod
    def from_breakdown(
        cls, participant: Participant, breakdown: ScoreBreakdown
    ) -> "ParticipantRecord":
        return cls(
            name=participant.name,
            region=participant.region,
            security_code=participant.security_code or "",
            final_score=breakdown.total,
            intro_score=breakdown.intro,
            mcq_score=breakdown.mcq,
            image_score=breakdown.image,
            easy_score=breakdown.easy,
            medium2_score=breakdown.medium2,
            medium_score=breakdown.medium,
            image2_score=breakdown.image2,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "region": self.region,
            "security_code": self.security_code,
            "final_score": self.final_score,
            "intro_score": self.intro_score,
            "mcq_score": self.mcq_score,
            "image_score": self.image_score,
            "easy_score": self.easy_score,
            "medium2_score": self.medium2_score,
            "medium_score": self.medium_score,
            "image2_score": self.image2_score,
        }


@dataclass(frozen=True)
class RankSnapshot:
    """Point-in-time standing among all persisted participants."""
    rank: int = 0
    total_players: int = 0
    percentile: int = 0

    @classmethod
    def unknown(cls) -> "RankSnapshot":
        return cls(0, 0, 0)

    def to_dict(self) -> dict[str, int]:
        return {
            "rank": self.rank,
            "total_players": self.total_players,
            "percentile": self.percentile,
        }


@dataclass
class ParticipantState:
    """Everything one play-through owns locally.

    The record list is a write-ahead cache of the participant's leaderboard
    row; it is only ever appended to and is discarded on reset.
    """
    participant: Participant
    records: list[LevelScoreRecord] = field(default_factory=list)
    current_rank: Optional[int] = None
    previous_rank: Optional[int] = None

    def set_rank(self, rank: int) -> None:
        self.previous_rank = self.current_rank
        self.current_rank = rank
