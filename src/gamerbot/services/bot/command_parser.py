"""
Command Parser

Turns the text of an inbound chat message into a canonical command and its
arguments. Channel messages must carry the command prefix to be considered at
all; direct messages may omit it.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from gamerbot.models.message import InboundMessage


COMMAND_PREFIX = '.'


@dataclass
class ParsedCommand:
    """Result of command parsing"""
    original_text: str
    command: str
    args: List[str] = field(default_factory=list)
    reply_to: str = ""

    @property
    def tokens(self) -> List[str]:
        """Command followed by its arguments, as forwarded to a game turn"""
        return [self.command] + self.args


class CommandParser:
    """
    Parser for dot-prefixed chat commands

    Tokens are split on single spaces, so consecutive spaces produce empty
    arguments. There is no quoting or escaping.
    """

    def __init__(self, prefix: str = COMMAND_PREFIX):
        self.prefix = prefix

    def split(self, text: str) -> List[str]:
        return text.split(' ')

    def canonicalize(self, token: str) -> str:
        """Lower-case a command token and make sure it carries the prefix"""
        command = token.lower()
        if not command:
            return self.prefix + 'help'
        if not command.startswith(self.prefix):
            command = self.prefix + command
        return command

    def reply_target(self, message: InboundMessage, nickname: str) -> str:
        """Where replies go: the sender for direct messages, else the channel"""
        if message.target == nickname:
            return message.sender
        return message.target

    def parse(self, message: InboundMessage, nickname: str) -> Optional[ParsedCommand]:
        """
        Parse an inbound message

        Args:
            message: Message delivered by the transport
            nickname: The bot's current nickname

        Returns:
            ParsedCommand, or None when the message should be ignored
        """
        tokens = self.split(message.text)

        if message.is_channel_message() and not tokens[0].startswith(self.prefix):
            return None

        return ParsedCommand(
            original_text=message.text,
            command=self.canonicalize(tokens[0]),
            args=tokens[1:],
            reply_to=self.reply_target(message, nickname)
        )
