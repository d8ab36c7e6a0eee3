"""Initial schema with players and game_state tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCORE_COLUMNS = (
    "intro_score",
    "mcq_score",
    "image_score",
    "easy_score",
    "medium2_score",
    "medium_score",
    "image2_score",
    "final_score",
)


def upgrade() -> None:
    # Create players table
    op.create_table(
        "players",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("region", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("security_code", sa.String(length=12), nullable=False),
        *[
            sa.Column(name, sa.Integer(), nullable=False, server_default="0")
            for name in SCORE_COLUMNS
        ],
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_players_security_code"), "players", ["security_code"], unique=True)
    op.create_index(op.f("ix_players_final_score"), "players", ["final_score"], unique=False)

    # Create game_state table (single row, id = 1)
    op.create_table(
        "game_state",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("levels_unlocked", sa.JSON(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.execute(
        sa.text(
            "INSERT INTO game_state (id, levels_unlocked) VALUES (1, :levels)"
        ).bindparams(
            levels='{"1": false, "2": false, "3": false, "4": false, "5": false, "6": false, "7": false}'
        )
    )


def downgrade() -> None:
    op.drop_table("game_state")
    op.drop_index(op.f("ix_players_final_score"), table_name="players")
    op.drop_index(op.f("ix_players_security_code"), table_name="players")
    op.drop_table("players")
