"""Game state model: the host-controlled unlock record."""

from datetime import datetime

from sqlalchemy import JSON, Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from words_of_healing.db.database import Base


GAME_STATE_ID = 1


class GameState(Base):
    """Singleton row (id = 1) holding which levels are open."""

    __tablename__ = "game_state"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        default=GAME_STATE_ID,
    )
    levels_unlocked: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<GameState {self.levels_unlocked}>"
