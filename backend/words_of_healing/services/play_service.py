"""Participant play sessions hosted by this worker."""

import logging
import random
import secrets
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from words_of_healing.core.progression import (
    FinalResult,
    ProgressionController,
    ProgressionError,
    ProgressionTiming,
)
from words_of_healing.core.ranking import RankResolver
from words_of_healing.core.state import Participant, ParticipantState, Phase
from words_of_healing.core.store import GameStore
from words_of_healing.core.unlock_sync import LevelUnlockSync


logger = logging.getLogger(__name__)


class SessionNotFound(KeyError):
    """Raised for an unknown or already closed session id."""

    pass


class VerificationRequired(Exception):
    """Raised when final results are requested before the code gate is passed."""

    pass


@dataclass
class PlaySession:
    """One participant's controller plus the security-code gate."""

    id: uuid.UUID
    controller: ProgressionController
    verify_attempts: int = 0
    verified: bool = False
    locked_out: bool = False
    final: Optional[FinalResult] = field(default=None, repr=False)
    last_active: float = field(default_factory=time.monotonic, repr=False)

    def touch(self) -> None:
        self.last_active = time.monotonic()

    def idle_for(self, now: Optional[float] = None) -> float:
        return (time.monotonic() if now is None else now) - self.last_active

    @property
    def participant(self) -> Participant:
        return self.controller.state.participant

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.participant.name,
            "region": self.participant.region,
            **self.controller.to_dict(),
            "security_code": self.participant.security_code,
            "verified": self.verified,
            "locked_out": self.locked_out,
        }


class PlayService:
    """Registry of live sessions, each driving its own ProgressionController."""

    def __init__(
        self,
        store: GameStore,
        unlock_sync: LevelUnlockSync,
        ranks: RankResolver,
        timing: Optional[ProgressionTiming] = None,
        verify_max_attempts: int = 2,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.unlock_sync = unlock_sync
        self.ranks = ranks
        self.timing = timing or ProgressionTiming()
        self.verify_max_attempts = verify_max_attempts
        self.rng = rng
        self._sessions: dict[uuid.UUID, PlaySession] = {}

    async def create(self, name: str, region: str = "") -> PlaySession:
        """Register a participant and start at level 1 (LOCKED until opened)."""
        state = ParticipantState(participant=Participant(name=name, region=region))
        controller = ProgressionController(
            state,
            self.store,
            self.unlock_sync,
            ranks=self.ranks,
            timing=self.timing,
            rng=self.rng,
        )
        session = PlaySession(id=uuid.uuid4(), controller=controller)
        self._sessions[session.id] = session

        await controller.start()
        logger.info(f"Session {session.id} started for {name} ({region or 'no region'})")
        return session

    def get(self, session_id: uuid.UUID) -> PlaySession:
        """Look up a session and mark it as still in use."""
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(str(session_id)) from None
        session.touch()
        return session

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    async def verify(self, session_id: uuid.UUID, code: str) -> PlaySession:
        """
        Check the participant's security code before revealing final results.

        Wrong codes count against ``verify_max_attempts``; once exhausted the
        session is locked out for good.

        Raises:
            SessionNotFound: Unknown session
            ProgressionError: The run is not COMPLETE, or the session is locked out
        """
        session = self.get(session_id)
        if session.controller.phase != Phase.COMPLETE:
            raise ProgressionError("Verification is only available after the final level")
        if session.locked_out:
            raise ProgressionError("Session is locked out")
        if session.verified:
            return session

        expected = session.participant.security_code or ""
        if expected and secrets.compare_digest(code, expected):
            session.verified = True
            logger.info(f"Session {session_id} verified")
            return session

        session.verify_attempts += 1
        if session.verify_attempts >= self.verify_max_attempts:
            session.locked_out = True
            logger.warning(f"Session {session_id} locked out after {session.verify_attempts} attempts")
        return session

    def attempts_remaining(self, session: PlaySession) -> int:
        return max(0, self.verify_max_attempts - session.verify_attempts)

    async def finish(self, session_id: uuid.UUID) -> FinalResult:
        """
        Terminal submission for a verified, completed session.

        Raises:
            SessionNotFound: Unknown session
            ProgressionError: The run is not COMPLETE
            VerificationRequired: The security code has not been confirmed
        """
        session = self.get(session_id)
        if session.controller.phase != Phase.COMPLETE:
            raise ProgressionError(f"Cannot finish in phase {session.controller.phase.value}")
        if not session.verified:
            raise VerificationRequired("Security code verification required")

        session.final = await session.controller.finalize()
        return session.final

    async def close(self, session_id: uuid.UUID) -> None:
        """Discard a session (new game). All of its timers stop."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFound(str(session_id))
        await session.controller.close()
        logger.info(f"Session {session_id} closed")

    async def close_all(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.controller.close()
        if sessions:
            logger.info(f"Closed {len(sessions)} play sessions")

    async def close_idle(self, max_idle: float, now: Optional[float] = None) -> int:
        """
        Close sessions nobody has looked at for ``max_idle`` seconds.

        Their countdown and next-level polling stop with them.

        Returns:
            Number of sessions closed
        """
        now = time.monotonic() if now is None else now
        idle = [sid for sid, session in self._sessions.items() if session.idle_for(now) >= max_idle]
        for session_id in idle:
            session = self._sessions.pop(session_id)
            await session.controller.close()
        if idle:
            logger.info(f"Closed {len(idle)} idle play sessions (idle > {max_idle}s)")
        return len(idle)
