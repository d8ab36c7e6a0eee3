"""Player model: one leaderboard row per participant."""

import uuid
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from words_of_healing.core.state import ParticipantRecord
from words_of_healing.db.database import Base


class Player(Base):
    """Participant aggregate, keyed for upsert by its security code."""

    __tablename__ = "players"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    region: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="",
    )
    security_code: Mapped[str] = mapped_column(
        String(12),
        unique=True,
        nullable=False,
        index=True,
    )
    intro_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    mcq_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    image_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    easy_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    medium2_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    medium_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    image2_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    final_score: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    SCORE_FIELDS = (
        "name",
        "region",
        "final_score",
        "intro_score",
        "mcq_score",
        "image_score",
        "easy_score",
        "medium2_score",
        "medium_score",
        "image2_score",
    )

    def apply(self, record: ParticipantRecord) -> None:
        """Copy identity and scores from a participant record."""
        for name in self.SCORE_FIELDS:
            setattr(self, name, getattr(record, name))

    def to_record(self) -> ParticipantRecord:
        return ParticipantRecord(
            security_code=self.security_code,
            **{name: getattr(self, name) for name in self.SCORE_FIELDS},
        )

    def __repr__(self) -> str:
        return f"<Player {self.name} ({self.security_code}) {self.final_score}>"
