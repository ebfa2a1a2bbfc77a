"""
Command Dispatcher

Routes inbound chat messages to the built-in bot commands or to the sender's
active game. Every invariant is re-read from the session registry on each
message; the dispatcher itself keeps no session state.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from gamerbot.core.logging import get_structured_logger
from gamerbot.models.message import ChatTransport, InboundMessage

from .command_parser import CommandParser, ParsedCommand
from .games.base_game import GameContext
from .games.catalog import GameCatalog, create_default_catalog
from .session_registry import SessionRegistry


CommandCallback = Callable[[InboundMessage, ParsedCommand], Awaitable[None]]


class CommandDispatcher:
    """
    Entry point for every chat message the bot receives

    Replies go out through the transport; nothing is returned to the caller
    and no exception escapes ``handle_inbound_message``.
    """

    def __init__(self, transport: ChatTransport, registry: Optional[SessionRegistry] = None,
                 catalog: Optional[GameCatalog] = None, parser: Optional[CommandParser] = None):
        self.logger = logging.getLogger(__name__)
        self.structured_logger = get_structured_logger('dispatcher')
        self.transport = transport
        self.registry = registry or SessionRegistry()
        self.catalog = catalog or create_default_catalog()
        self.parser = parser or CommandParser()

        prefix = self.parser.prefix
        self.greeting_command = prefix + 'hello'
        self.commands: Dict[str, CommandCallback] = {
            prefix + 'help': self._handle_help,
            prefix + 'yea': self._handle_yes,
            prefix + 'yes': self._handle_yes,
            prefix + 'play': self._handle_play,
            prefix + 'stop': self._handle_stop,
            prefix + 'games': self._handle_games,
            prefix + 'playing': self._handle_playing,
        }

        self.stats = {
            'total_processed': 0,
            'handled': 0,
            'ignored': 0,
            'forwarded': 0,
            'errors': 0
        }

    async def handle_inbound_message(self, message: InboundMessage) -> None:
        """
        Dispatch one inbound message

        Failures inside command handling or a game are logged and swallowed so
        one player's broken session cannot stop processing for others.
        """
        self.stats['total_processed'] += 1
        try:
            await self._process_message(message)
        except Exception:
            self.stats['errors'] += 1
            self.structured_logger.exception(
                "dispatch_failed",
                sender=message.sender,
                target=message.target,
                text=message.text,
                raw=message.metadata.get('raw'),
                received_at=message.timestamp.isoformat()
            )

    async def _process_message(self, message: InboundMessage) -> None:
        if message.text is None:
            await self.transport.send_direct(message.sender, "Try '.help' instead.", notice=True)
            self.stats['handled'] += 1
            return

        parsed = self.parser.parse(message, self.transport.nickname)
        if parsed is None:
            self.stats['ignored'] += 1
            return

        self.logger.debug(f"{parsed.command} {parsed.args!r}")

        async with self.registry.lock(message.sender):
            await self._route(message, parsed)

    async def _route(self, message: InboundMessage, parsed: ParsedCommand) -> None:
        """Run the built-in command or forward the turn to the active game"""
        if parsed.command.startswith(self.greeting_command):
            await self.transport.send_to_target(
                parsed.reply_to, f"Hi {message.sender}! Want to play a game?"
            )
            self.stats['handled'] += 1
            return

        handler = self.commands.get(parsed.command)
        if handler is not None:
            await handler(message, parsed)
            self.stats['handled'] += 1
            return

        if self.registry.has_active(message.sender):
            await self._forward_turn(message, parsed.tokens)
            self.stats['forwarded'] += 1
        else:
            await self.transport.send_to_target(parsed.reply_to, "Try '.help' instead.", notice=True)
            self.stats['handled'] += 1

    async def _forward_turn(self, message: InboundMessage, tokens: List[str]) -> None:
        """Hand one turn to the sender's game and release it once it ends"""
        game = self.registry.get(message.sender)
        await game.play(self._context(message), tokens)

        if not game.is_active():
            self.registry.remove(message.sender)
            self.logger.info(f"User {message.sender} finished game {game.identity()}")

    async def _handle_help(self, message: InboundMessage, parsed: ParsedCommand) -> None:
        await self.transport.send_to_target(
            parsed.reply_to, "If you want to play a game, say '.play <game>'."
        )

    async def _handle_yes(self, message: InboundMessage, parsed: ParsedCommand) -> None:
        await self.transport.send_to_target(
            parsed.reply_to, "What game do you want to play? '.play <game>'."
        )

    async def _handle_games(self, message: InboundMessage, parsed: ParsedCommand) -> None:
        await self.transport.send_to_target(parsed.reply_to, self.catalog.get_game_list())

    async def _handle_playing(self, message: InboundMessage, parsed: ParsedCommand) -> None:
        if self.registry.has_active(message.sender):
            game = self.registry.get(message.sender)
            await self.transport.send_to_target(parsed.reply_to, f"You're playing {game.identity()}.")
        else:
            await self.transport.send_to_target(
                parsed.reply_to,
                "You're not playing a game. Start one by saying '.play <game>'."
            )

    async def _handle_play(self, message: InboundMessage, parsed: ParsedCommand) -> None:
        """Start-Game: exactly one known game name and no live session"""
        sender = message.sender

        if self.registry.has_active(sender):
            await self._notice(sender, "You're already playing a game. Please stop your current game first.")
            return

        if len(parsed.args) != 1:
            await self._notice(sender, "I need to know what game you want to play.")
            await self._notice(sender, "Use the 'games' command to see what I have.")
            return

        game_id = parsed.args[0]
        game = self.catalog.create_game(game_id)
        if game is None:
            await self._notice(sender, "Use the 'games' command to see what I have.")
            return

        self.registry.set(sender, game)
        await game.start(self._context(message))
        self.logger.info(f"User {sender} started game {game_id}")

    async def _handle_stop(self, message: InboundMessage, parsed: ParsedCommand) -> None:
        """Stop-Game: needs an explicit y/yes confirmation"""
        sender = message.sender

        if not self.registry.has_active(sender):
            await self._notice(sender, "You're not playing a game right now.")
            return

        if not parsed.args:
            await self._notice(sender, "Are you sure you want to stop the game? Say '.stop y'.")
            return

        # Any other answer is dropped without a reply
        response = parsed.args[0].lower()
        if response in ('y', 'yes'):
            game = self.registry.get(sender)
            await game.stop(self._context(message))
            self.registry.remove(sender)
            await self._notice(sender, "I was just beginning to have fun...")
            self.logger.info(f"User {sender} stopped game {game.identity()}")

    async def _notice(self, user: str, text: str) -> None:
        await self.transport.send_direct(user, text, notice=True)

    def _context(self, message: InboundMessage) -> GameContext:
        return GameContext(
            sender=message.sender,
            transport=self.transport,
            command_prefix=self.parser.prefix
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get dispatch and session statistics"""
        stats = dict(self.stats)
        stats['sessions'] = self.registry.stats()
        return stats
