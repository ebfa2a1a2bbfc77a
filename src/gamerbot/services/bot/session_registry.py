"""
Session Registry

Owns the game instance of every player. A player has at most one entry; an
entry whose game is no longer active is treated the same as no entry.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from .games.base_game import BaseGame


@dataclass
class _PlayerLock:
    """Lock plus the number of tasks holding or waiting for it"""
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SessionRegistry:
    """
    Maps a player's nickname to their game instance

    Nicknames are compared exactly, without case folding. All access for one
    player is expected to happen while holding ``lock(player)``.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.sessions: Dict[str, BaseGame] = {}
        self._locks: Dict[str, _PlayerLock] = {}

    def has_active(self, player: str) -> bool:
        """Check if player has an active game"""
        game = self.sessions.get(player)
        return game is not None and game.is_active()

    def get(self, player: str) -> Optional[BaseGame]:
        """Get the player's game, active or not"""
        return self.sessions.get(player)

    def set(self, player: str, game: BaseGame) -> None:
        """
        Register ``game`` for ``player``

        Replaces any existing entry, so callers check ``has_active`` first.
        """
        previous = self.sessions.get(player)
        if previous is not None and previous.is_active():
            self.logger.warning(f"Replacing active {previous.identity()} session for {player}")
        self.sessions[player] = game

    def remove(self, player: str) -> Optional[BaseGame]:
        """Drop the player's entry and return it"""
        return self.sessions.pop(player, None)

    @asynccontextmanager
    async def lock(self, player: str) -> AsyncIterator[None]:
        """
        Hold the lock serializing all handling for ``player``

        The lock only lives while someone holds or waits for it.
        """
        entry = self._locks.get(player)
        if entry is None:
            entry = self._locks[player] = _PlayerLock()

        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[player]

    def active_users(self) -> List[str]:
        return [player for player in self.sessions if self.has_active(player)]

    def stats(self) -> Dict[str, Any]:
        """Get session statistics"""
        stats = {
            'active_sessions': 0,
            'games_by_type': {},
            'locked_players': len(self._locks)
        }

        for game in self.sessions.values():
            if not game.is_active():
                continue
            stats['active_sessions'] += 1
            game_id = game.identity()
            stats['games_by_type'][game_id] = stats['games_by_type'].get(game_id, 0) + 1

        return stats
