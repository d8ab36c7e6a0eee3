"""Level scoring: non-linear time reward scaled by difficulty."""

import math
from typing import Iterable, Sequence

from .state import LevelScoreRecord, LevelType, ScoreBreakdown


TIME_EXPONENT = 1.3

DIFFICULTY_MULTIPLIERS: dict[LevelType, float] = {
    LevelType.INTRO: 0.8,
    LevelType.MCQ: 0.9,
    LevelType.IMAGE: 1.0,
    LevelType.EASY: 1.0,
    LevelType.MEDIUM2: 1.3,
    LevelType.MEDIUM: 1.5,
    LevelType.IMAGE2: 2.0,
}


def score(seconds_remaining: float, level_type: LevelType, correct: bool) -> int:
    """
    Score a single level.

    Wrong or timed-out answers earn nothing. Otherwise the remaining time is
    raised to ``TIME_EXPONENT`` so that finishing early is worth
    disproportionately more than finishing late.

    Args:
        seconds_remaining: Countdown value at the moment of submission.
        level_type: Level category, selects the difficulty multiplier.
        correct: Whether the answer was right.

    Returns:
        Non-negative integer score.
    """
    if not correct or seconds_remaining <= 0:
        return 0

    multiplier = DIFFICULTY_MULTIPLIERS[LevelType(level_type)]
    return math.floor(math.pow(seconds_remaining, TIME_EXPONENT) * multiplier)


def total(records: Iterable[LevelScoreRecord]) -> int:
    """Sum of all recorded level scores."""
    return sum(record.score for record in records)


def breakdown(records: Sequence[LevelScoreRecord]) -> ScoreBreakdown:
    """Project the record list into one bucket per level type plus the total.

    A level type that has not been played yet reports 0.
    """
    buckets: dict[str, int] = {}
    for record in records:
        # first record of a type wins, matching play order
        buckets.setdefault(LevelType(record.level_type).value, record.score)

    return ScoreBreakdown(
        **{level_type.value: buckets.get(level_type.value, 0) for level_type in LevelType},
        total=total(records),
    )
