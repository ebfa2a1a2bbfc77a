"""
Static game catalog

Maps game identifiers to factories that build a fresh, idle game instance.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .base_game import BaseGame
from .guessing import DEFAULT_TRIES, GUESSING_GAME_ID, GuessingGame


GameFactory = Callable[[], BaseGame]


class GameCatalog:
    """Fixed registry of playable games"""

    def __init__(self, factories: Dict[str, GameFactory]):
        self.logger = logging.getLogger(__name__)
        self.factories: Dict[str, GameFactory] = dict(factories)

    def get_available_games(self) -> List[str]:
        """Get list of available game ids in registration order"""
        return list(self.factories.keys())

    def has_game(self, game_id: str) -> bool:
        return game_id in self.factories

    def create_game(self, game_id: str) -> Optional[BaseGame]:
        """Build a new instance of ``game_id``, None if the id is unknown"""
        factory = self.factories.get(game_id)
        if factory is None:
            self.logger.debug(f"Unknown game requested: {game_id!r}")
            return None
        return factory()

    def get_game_list(self) -> str:
        """Get the catalog listing sent for the games command"""
        return f"Available games: {', '.join(self.get_available_games())}."


def create_default_catalog(games_config: Optional[Dict[str, Any]] = None) -> GameCatalog:
    """
    Build the catalog of built-in games

    Args:
        games_config: The ``games`` configuration section, if any

    Returns:
        GameCatalog with every built-in game
    """
    games_config = games_config or {}
    guess_config = games_config.get(GUESSING_GAME_ID, {})
    max_tries = guess_config.get('max_tries', DEFAULT_TRIES)

    return GameCatalog({
        GUESSING_GAME_ID: lambda: GuessingGame(max_tries=max_tries),
    })
