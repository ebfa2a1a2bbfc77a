"""
Base Game Framework

Provides the base class every interactive game implements. A game instance is
a small state machine owned by the session registry: it is created by the
catalog, started once, fed one turn per message while active, and stopped
either by the player or by its own terminal outcome.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List

from gamerbot.models.message import ChatTransport


DEFAULT_COMMAND_PREFIX = '.'


class GameState(Enum):
    """Game session states"""
    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class GameContext:
    """Who a game is talking to and how to reach them"""
    sender: str
    transport: ChatTransport
    command_prefix: str = DEFAULT_COMMAND_PREFIX

    async def reply(self, text: str) -> None:
        """Send a private message to the player"""
        await self.transport.send_direct(self.sender, text)


class BaseGame(ABC):
    """
    Abstract base class for all interactive games

    Subclasses set ``game_id`` and implement ``play``. ``start`` and ``stop``
    handle the shared active flag; subclasses extend them to set up and
    release their own state.
    """

    game_id: str = ""

    def __init__(self):
        self.state = GameState.IDLE
        self.logger = logging.getLogger(f"{__name__}.{self.game_id}")

    def identity(self) -> str:
        """Short name used in the catalog listing and status replies"""
        return self.game_id

    def is_active(self) -> bool:
        return self.state == GameState.ACTIVE

    async def start(self, context: GameContext) -> None:
        """
        Start the game for the player in ``context``

        The caller guarantees the player has no other live session.
        """
        self.state = GameState.ACTIVE

    async def stop(self, context: GameContext) -> None:
        """Stop the game; calling it on an inactive game does nothing"""
        self.state = GameState.IDLE

    @abstractmethod
    async def play(self, context: GameContext, args: List[str]) -> None:
        """
        Consume one turn of player input

        Args:
            context: Player and transport for replies
            args: Space-split tokens of the player's message; the first one
                may carry the command prefix
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} state={self.state.value}>"
