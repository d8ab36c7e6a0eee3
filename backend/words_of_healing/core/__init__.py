# Core module
from .state import (
    FINAL_LEVEL,
    LEVEL_NUMBERS,
    LevelScoreRecord,
    LevelType,
    Participant,
    ParticipantRecord,
    ParticipantState,
    Phase,
    RankSnapshot,
    ScoreBreakdown,
    UnlockState,
    generate_security_code,
)
from .store import GameStore, MemoryGameStore, StoreError, Subscription
from .ranking import RankResolver, compute_rank
from .unlock_sync import LevelUnlockSync
from .puzzles import LEVELS, LevelSpec, OrderedPuzzle, SingleChoicePuzzle, build_puzzle, level_spec
from .progression import (
    FinalResult,
    ProgressionController,
    ProgressionError,
    ProgressionTiming,
    SelectionError,
    SubmissionResult,
)

__all__ = [
    "FINAL_LEVEL",
    "LEVEL_NUMBERS",
    "LevelScoreRecord",
    "LevelType",
    "Participant",
    "ParticipantRecord",
    "ParticipantState",
    "Phase",
    "RankSnapshot",
    "ScoreBreakdown",
    "UnlockState",
    "generate_security_code",
    "GameStore",
    "MemoryGameStore",
    "StoreError",
    "Subscription",
    "RankResolver",
    "compute_rank",
    "LevelUnlockSync",
    "LEVELS",
    "LevelSpec",
    "OrderedPuzzle",
    "SingleChoicePuzzle",
    "build_puzzle",
    "level_spec",
    "FinalResult",
    "ProgressionController",
    "ProgressionError",
    "ProgressionTiming",
    "SelectionError",
    "SubmissionResult",
]
