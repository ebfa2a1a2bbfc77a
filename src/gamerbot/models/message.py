"""
Message data models for GamerBot

Defines the IRC line structure, the inbound chat message handed to the
dispatcher and the transport interface the dispatcher replies through.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


CHANNEL_PREFIX = '#'


@dataclass
class IRCLine:
    """A single raw IRC protocol line split into its parts"""
    raw: str
    command: str
    args: List[str] = field(default_factory=list)
    prefix: str = ""
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def nick(self) -> str:
        """Nickname part of the prefix (nick!user@host)"""
        return self.prefix.split('!', 1)[0]

    @property
    def text(self) -> str:
        """Last (trailing) argument or an empty string"""
        return self.args[-1] if self.args else ""

    @classmethod
    def parse(cls, raw: str) -> 'IRCLine':
        """
        Parse a raw protocol line

        Args:
            raw: Line as received, with or without the trailing CRLF

        Returns:
            IRCLine with the command upper-cased
        """
        line = raw.rstrip('\r\n')
        rest = line
        tags: Dict[str, str] = {}
        prefix = ""

        if rest.startswith('@'):
            tag_str, _, rest = rest[1:].partition(' ')
            for item in tag_str.split(';'):
                key, _, value = item.partition('=')
                tags[key] = value

        if rest.startswith(':'):
            prefix, _, rest = rest[1:].partition(' ')

        trailing = None
        if ' :' in rest:
            rest, trailing = rest.split(' :', 1)
        elif rest.startswith(':'):
            rest, trailing = "", rest[1:]

        parts = [p for p in rest.split(' ') if p]
        command = parts[0].upper() if parts else ""
        args = parts[1:]
        if trailing is not None:
            args.append(trailing)

        return cls(raw=line, command=command, args=args, prefix=prefix, tags=tags)


@dataclass
class InboundMessage:
    """Chat message addressed to a channel or directly to the bot"""
    target: str
    sender: str
    text: Optional[str]
    timestamp: datetime = field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_channel_message(self) -> bool:
        """Check if the message was sent to a channel"""
        return self.target.startswith(CHANNEL_PREFIX)

    @classmethod
    def from_irc_line(cls, line: IRCLine) -> Optional['InboundMessage']:
        """Build a message from a PRIVMSG line, None for any other command"""
        if line.command != 'PRIVMSG' or not line.args:
            return None

        text = line.args[1] if len(line.args) > 1 else None
        return cls(
            target=line.args[0],
            sender=line.nick,
            text=text,
            metadata={'raw': line.raw}
        )


class ChatTransport(ABC):
    """Outbound side of the chat connection as seen by the dispatcher"""

    nickname: str

    @abstractmethod
    async def send_direct(self, user: str, text: str, notice: bool = False) -> None:
        """Send text to a single user"""
        pass

    @abstractmethod
    async def send_to_target(self, target: str, text: str, notice: bool = False) -> None:
        """Send text to a channel or user"""
        pass
