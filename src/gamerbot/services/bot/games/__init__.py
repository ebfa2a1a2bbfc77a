"""
Interactive Games Framework

Provides the base game class, the static game catalog and the built-in games.
"""

from .base_game import BaseGame, GameContext, GameState
from .catalog import GameCatalog, create_default_catalog
from .guessing import GUESSING_GAME_ID, GuessingGame

__all__ = [
    'BaseGame', 'GameContext', 'GameState',
    'GameCatalog', 'create_default_catalog',
    'GUESSING_GAME_ID', 'GuessingGame'
]
