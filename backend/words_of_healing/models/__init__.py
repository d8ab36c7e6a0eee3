"""Database models package."""

from words_of_healing.models.player import Player
from words_of_healing.models.game_state import GameState, GAME_STATE_ID

__all__ = ["Player", "GameState", "GAME_STATE_ID"]
