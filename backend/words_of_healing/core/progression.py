"""
Per-participant level progression.

One ``ProgressionController`` drives one play-through:

    LOCKED -> ACTIVE -> SUBMITTED -> WAITING_NEXT -> ACTIVE (next level)
                                  \\-> COMPLETE (after the final level)

- LOCKED: waits (tight polling of the local unlock cache) for the host to
  open the level
- ACTIVE: countdown running, exactly one submission accepted; reaching zero
  submits as incorrect with no time left
- SUBMITTED: feedback window, then moves on by itself
- WAITING_NEXT: re-reads the unlock record until the next level opens
- COMPLETE: terminal; ``finalize`` makes the deduplicated final write

Leaderboard writes and rank lookups run in background tasks and never hold
up a transition. Every timer and loop lives in a ``TaskSlots`` and is
cancelled on state exit or ``close``.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from . import scoring
from .puzzles import OrderedPuzzle, Puzzle, build_puzzle, level_spec
from .ranking import RankResolver
from .state import (
    FINAL_LEVEL,
    LEVEL_NUMBERS,
    LevelScoreRecord,
    ParticipantRecord,
    ParticipantState,
    Phase,
    RankSnapshot,
    ScoreBreakdown,
    generate_security_code,
)
from .store import GameStore, StoreError
from .timers import TaskSlots
from .unlock_sync import LevelUnlockSync


logger = logging.getLogger(__name__)


class ProgressionError(Exception):
    """Raised when an action is not valid in the current phase."""

    pass


class SelectionError(ValueError):
    """Raised for an unknown answer item or an incomplete selection."""

    pass


@dataclass(frozen=True)
class ProgressionTiming:
    """Clock settings. Defaults are the live-event values, in seconds."""
    tick_seconds: float = 1.0
    lock_check_interval: float = 0.1
    next_level_poll_interval: float = 0.5
    feedback_window: float = 2.5
    upsert_max_attempts: int = 3
    upsert_retry_backoff: float = 0.25


@dataclass(frozen=True)
class SubmissionResult:
    """Feedback for one finished level."""
    level: int
    record: LevelScoreRecord
    timed_out: bool
    correct_answer: list[str] = field(default_factory=list)
    reference: str = ""
    explanation: str = ""

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            **self.record.to_dict(),
            "timed_out": self.timed_out,
            "correct_answer": list(self.correct_answer),
            "reference": self.reference,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class FinalResult:
    """Outcome of the terminal submission."""
    total: int
    breakdown: ScoreBreakdown
    rank: RankSnapshot
    persisted: bool


class ProgressionController:
    """State machine for one participant's run through the seven levels."""

    def __init__(
        self,
        state: ParticipantState,
        store: GameStore,
        unlock_sync: LevelUnlockSync,
        ranks: Optional[RankResolver] = None,
        timing: Optional[ProgressionTiming] = None,
        start_level: int = LEVEL_NUMBERS[0],
        rng: Optional[random.Random] = None,
    ):
        level_spec(start_level)

        self.state = state
        self.store = store
        self.unlock_sync = unlock_sync
        self.ranks = ranks or RankResolver(store)
        self.timing = timing or ProgressionTiming()
        self.rng = rng or random.Random()

        self.phase = Phase.LOCKED
        self.level = start_level
        self.puzzle: Optional[Puzzle] = None
        self.selection: list[str] = []
        self.seconds_remaining = level_spec(start_level).duration
        self.last_result: Optional[SubmissionResult] = None
        self.rank = RankSnapshot.unknown()

        self._started = False
        self._closed = False
        self._submitted = False
        self._final: Optional[FinalResult] = None
        self._last_persisted: Optional[ParticipantRecord] = None
        self._write_lock = asyncio.Lock()
        self._phase_changed = asyncio.Event()
        self._tasks = TaskSlots(f"progression:{state.participant.name}")

    # Lifecycle
    async def start(self) -> None:
        """Enter LOCKED for the starting level (ACTIVE at once if already open)."""
        if self._started:
            return
        self._started = True
        self._enter_locked(self.level)

    async def close(self) -> None:
        """Stop every timer, loop and pending write owned by this controller."""
        self._closed = True
        await self._tasks.aclose()

    @property
    def closed(self) -> bool:
        return self._closed

    async def wait_for(self, phase: Phase, level: Optional[int] = None) -> None:
        """Block until the controller reaches ``phase`` (on ``level`` if given)."""
        while not (self.phase == phase and (level is None or self.level == level)):
            event = self._phase_changed
            await event.wait()

    # Participant actions
    @property
    def can_submit(self) -> bool:
        return (
            self.phase == Phase.ACTIVE
            and not self._submitted
            and self.puzzle is not None
            and self.puzzle.can_submit(self.selection)
        )

    def select(self, item: str) -> bool:
        """
        Toggle an answer item.

        Ordered puzzles append the fragment to the sequence (or remove it if
        already chosen); single-choice puzzles replace the chosen option.

        Returns:
            False when input is disabled (not ACTIVE, or already submitted).

        Raises:
            SelectionError: If the item is not part of the current puzzle.
        """
        if self.phase != Phase.ACTIVE or self._submitted or self.puzzle is None:
            return False
        if item not in self.puzzle.item_ids:
            raise SelectionError(f"Unknown answer item: {item}")

        if isinstance(self.puzzle, OrderedPuzzle):
            if item in self.selection:
                self.selection.remove(item)
            else:
                self.selection.append(item)
        else:
            self.selection = [item]
        return True

    def submit(self, selection: Optional[Sequence[str]] = None) -> Optional[SubmissionResult]:
        """
        Submit the current (or the given) selection for scoring.

        A second submission for the same level is a no-op and returns the
        first result.

        Raises:
            SelectionError: If the selection is unknown or incomplete.
        """
        if self._submitted or self.phase != Phase.ACTIVE or self.puzzle is None:
            return self.last_result

        if selection is not None:
            unknown = [item for item in selection if item not in self.puzzle.item_ids]
            if unknown:
                raise SelectionError(f"Unknown answer items: {unknown}")
            self.selection = list(selection)

        if not self.puzzle.can_submit(self.selection):
            raise SelectionError("Selection is incomplete")

        correct = self.puzzle.is_correct(self.selection)
        return self._finish_level(correct, self.seconds_remaining, timed_out=False)

    async def finalize(self) -> FinalResult:
        """
        Terminal submission once every level is done.

        Skips the write when the last in-level upsert already stored the same
        aggregate; a successful result is cached so repeat calls never write
        again.

        Raises:
            ProgressionError: If the run is not COMPLETE.
        """
        if self.phase != Phase.COMPLETE:
            raise ProgressionError(f"Cannot finalize in phase {self.phase.value}")
        if self._final is not None:
            return self._final

        persisted = await self._persist()
        breakdown = self.breakdown
        self.rank = await self.ranks.rank_stats(breakdown.total)
        if self.rank.rank:
            self.state.set_rank(self.rank.rank)

        result = FinalResult(
            total=breakdown.total,
            breakdown=breakdown,
            rank=self.rank,
            persisted=persisted,
        )
        if persisted:
            self._final = result
        logger.info(
            f"Final result for {self.state.participant.name}: total={breakdown.total} "
            f"rank={self.rank.rank}/{self.rank.total_players} persisted={persisted}"
        )
        return result

    # Views
    @property
    def breakdown(self) -> ScoreBreakdown:
        return scoring.breakdown(self.state.records)

    @property
    def elapsed_seconds(self) -> int:
        return level_spec(self.level).duration - self.seconds_remaining

    @property
    def task_names(self) -> list[str]:
        return self._tasks.names

    def to_dict(self) -> dict:
        info = level_spec(self.level)
        puzzle = None
        if self.puzzle is not None and self.phase in (Phase.ACTIVE, Phase.SUBMITTED):
            puzzle = {
                **self.puzzle.to_dict(),
                "reference": self.puzzle.display_reference(self.elapsed_seconds),
            }
        return {
            "phase": self.phase.value,
            "level": self.level,
            "level_name": info.name,
            "level_subtitle": info.subtitle,
            "level_type": info.level_type.value,
            "duration": info.duration,
            "seconds_remaining": self.seconds_remaining,
            "puzzle": puzzle,
            "selection": list(self.selection),
            "can_submit": self.can_submit,
            "last_result": self.last_result.to_dict() if self.last_result else None,
            "breakdown": self.breakdown.to_dict(),
            "rank": self.rank.to_dict(),
            "previous_rank": self.state.previous_rank,
        }

    # Transitions
    def _set_phase(self, phase: Phase) -> None:
        self.phase = phase
        logger.info(f"[{self.state.participant.name}] level {self.level} -> {phase.value}")
        event, self._phase_changed = self._phase_changed, asyncio.Event()
        event.set()

    def _enter_locked(self, level: int) -> None:
        self.level = level
        self._set_phase(Phase.LOCKED)
        if self.unlock_sync.is_open(level):
            self._activate(level)
        else:
            self._tasks.start("gate", self._watch_lock(level))

    def _activate(self, level: int) -> None:
        if self._closed:
            return
        self._tasks.cancel("gate")
        self._tasks.cancel("feedback")

        info = level_spec(level)
        self.level = level
        self.puzzle = build_puzzle(level, self.rng)
        self.selection = []
        self.seconds_remaining = info.duration
        self.last_result = None
        self._submitted = False

        self._set_phase(Phase.ACTIVE)
        self._tasks.start("countdown", self._countdown(level))

    def _finish_level(self, correct: bool, seconds_remaining: float, timed_out: bool) -> SubmissionResult:
        self._submitted = True
        self._tasks.cancel("countdown")

        info = level_spec(self.level)
        points = scoring.score(seconds_remaining, info.level_type, correct)
        record = LevelScoreRecord(
            level_type=info.level_type,
            score=points,
            seconds_remaining=max(0, seconds_remaining),
            correct=correct,
        )
        self.state.records.append(record)

        if not self.state.participant.security_code:
            self.state.participant.security_code = generate_security_code()

        result = SubmissionResult(
            level=self.level,
            record=record,
            timed_out=timed_out,
            correct_answer=self._correct_answer(),
            reference=self.puzzle.reference if self.puzzle else "",
            explanation=getattr(self.puzzle, "explanation", ""),
        )
        self.last_result = result

        self._set_phase(Phase.SUBMITTED)
        self._tasks.start("publish", self._publish())
        self._tasks.start("feedback", self._after_feedback(self.level))
        return result

    def _enter_waiting(self, next_level: int) -> None:
        self._set_phase(Phase.WAITING_NEXT)
        self._tasks.start("gate", self._wait_for_next(next_level))

    def _correct_answer(self) -> list[str]:
        if self.puzzle is None:
            return []
        if isinstance(self.puzzle, OrderedPuzzle):
            return [f.text for f in self.puzzle.answer]
        return [self.puzzle.answer]

    # Background tasks
    async def _watch_lock(self, level: int) -> None:
        while not self.unlock_sync.is_open(level):
            await asyncio.sleep(self.timing.lock_check_interval)
        self._activate(level)

    async def _countdown(self, level: int) -> None:
        while self.seconds_remaining > 0:
            await asyncio.sleep(self.timing.tick_seconds)
            if self.phase != Phase.ACTIVE or self.level != level or self._submitted:
                return
            self.seconds_remaining -= 1

        if not self._submitted:
            logger.info(f"[{self.state.participant.name}] level {level} timed out")
            self._finish_level(False, 0, timed_out=True)

    async def _after_feedback(self, level: int) -> None:
        await asyncio.sleep(self.timing.feedback_window)
        if level >= FINAL_LEVEL:
            self._set_phase(Phase.COMPLETE)
        else:
            self._enter_waiting(level + 1)

    async def _wait_for_next(self, next_level: int) -> None:
        while True:
            await self.unlock_sync.refresh()
            if self.unlock_sync.is_open(next_level):
                break
            await asyncio.sleep(self.timing.next_level_poll_interval)
        self._activate(next_level)

    async def _publish(self) -> None:
        await self._persist()
        self.rank = await self.ranks.rank_stats(self.breakdown.total)
        if self.rank.rank:
            self.state.set_rank(self.rank.rank)

    async def _persist(self) -> bool:
        """Upsert the current aggregate with bounded retry. Never raises StoreError."""
        async with self._write_lock:
            record = ParticipantRecord.from_breakdown(self.state.participant, self.breakdown)
            if not record.security_code:
                return False
            if record == self._last_persisted:
                return True

            attempts = max(1, self.timing.upsert_max_attempts)
            for attempt in range(1, attempts + 1):
                try:
                    await self.store.upsert_participant(record)
                except StoreError as e:
                    logger.warning(
                        f"Score upsert for {record.security_code} failed "
                        f"(attempt {attempt}/{attempts}): {e}"
                    )
                    if attempt < attempts:
                        await asyncio.sleep(self.timing.upsert_retry_backoff * attempt)
                    continue

                self._last_persisted = record
                return True

            logger.error(
                f"Giving up on score upsert for {record.security_code}; "
                f"leaderboard stale until next write (total={record.final_score})"
            )
            return False
