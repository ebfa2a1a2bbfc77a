"""
IRC Client

Minimal asyncio IRC connection used as the bot's chat transport. Handles
registration (with optional SASL PLAIN), channel joins, keepalive and
PRIVMSG delivery; everything the bot says goes out through ``send_direct``
and ``send_to_target``.
"""

import asyncio
import base64
import logging
import ssl
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from gamerbot.models.message import CHANNEL_PREFIX, ChatTransport, InboundMessage, IRCLine


MessageHandler = Callable[[InboundMessage], Awaitable[None]]

NICK_COLLISION_SUFFIX = '^'


class IRCConnectionError(Exception):
    """Connection or registration failure"""
    pass


@dataclass
class IRCConfig:
    """IRC connection configuration"""
    server: str = "127.0.0.1"
    port: int = 6667
    nick: str = "gamerbot"
    channels: List[str] = field(default_factory=lambda: ["#games"])
    use_tls: bool = False
    insecure_tls: bool = False
    use_sasl: bool = False
    sasl_login: str = ""
    sasl_password: str = ""
    connect_timeout: float = 30
    quit_delay: float = 1
    disconnect_timeout: float = 5
    log_raw: bool = False

    def __post_init__(self):
        # SASL is only sent over TLS
        if self.use_sasl:
            self.use_tls = True
            if not self.sasl_login:
                self.sasl_login = self.nick

    @classmethod
    def from_config(cls, config: Any) -> 'IRCConfig':
        """Build from a ConfigurationManager"""
        irc = config.get_section('irc')
        return cls(
            server=irc.get('server', "127.0.0.1"),
            port=irc.get('port', 6667),
            nick=irc.get('nick', "gamerbot"),
            channels=config.get_channels(),
            use_tls=irc.get('use_tls', False),
            insecure_tls=irc.get('insecure_tls', False),
            use_sasl=irc.get('use_sasl', False),
            sasl_login=irc.get('sasl_login', ""),
            sasl_password=irc.get('sasl_password', ""),
            connect_timeout=irc.get('connect_timeout', 30),
            quit_delay=irc.get('quit_delay', 1),
            disconnect_timeout=irc.get('disconnect_timeout', 5),
            log_raw=config.get('app.debug_irc', False)
        )


class IRCClient(ChatTransport):
    """Asyncio IRC client"""

    def __init__(self, config: IRCConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.nickname = config.nick
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.connected = False
        self.registered = asyncio.Event()
        self.disconnected = asyncio.Event()
        self.disconnected.set()
        self.joined_channels: List[str] = []
        self.message_handlers: List[MessageHandler] = []

    def add_message_handler(self, handler: MessageHandler):
        """Add a coroutine called for every PRIVMSG"""
        self.message_handlers.append(handler)

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.config.use_tls:
            return None

        context = ssl.create_default_context()
        if self.config.insecure_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    async def connect(self) -> None:
        """
        Open the connection and send the registration sequence

        Raises:
            IRCConnectionError: If the server cannot be reached
        """
        address = f"{self.config.server}:{self.config.port}"
        self.logger.info(f"Connecting to IRC server {address}")

        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self.config.server, self.config.port, ssl=self._ssl_context()
                ),
                timeout=self.config.connect_timeout
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise IRCConnectionError(f"Connection to {address} failed: {e}") from e

        self.connected = True
        self.disconnected.clear()

        if self.config.use_sasl:
            await self.send_raw("CAP REQ :sasl")
        await self.send_raw(f"NICK {self.nickname}")
        await self.send_raw(f"USER {self.config.nick} 0 * :{self.config.nick}")

    async def run(self) -> None:
        """Read and handle lines until the server closes the connection"""
        try:
            while self.connected:
                data = await self.reader.readline()
                if not data:
                    break

                line = data.decode('utf-8', errors='replace')
                if self.config.log_raw:
                    self.logger.debug(f"<< {line.rstrip()}")
                await self.handle_line(IRCLine.parse(line))
        finally:
            self.connected = False
            self.disconnected.set()
            self.logger.info("Client disconnected from server")

    async def handle_line(self, line: IRCLine) -> None:
        """React to a single protocol line"""
        command = line.command

        if command == 'PING':
            await self.send_raw(f"PONG :{line.text}")
        elif command == 'PRIVMSG':
            message = InboundMessage.from_irc_line(line)
            if message is not None:
                for handler in self.message_handlers:
                    await handler(message)
        elif command == '001':
            await self._on_welcome(line)
        elif command == '433':
            # Nickname in use
            self.nickname = self.nickname + NICK_COLLISION_SUFFIX
            self.logger.warning(f"Nickname taken, trying {self.nickname}")
            await self.send_raw(f"NICK {self.nickname}")
        elif command == 'NICK' and line.nick == self.nickname:
            self.nickname = line.text
        elif command == 'ERROR':
            if not line.text.startswith("Closing Link"):
                self.logger.error(line.raw)
        elif command == 'CAP':
            await self._on_cap(line)
        elif command == 'AUTHENTICATE' and line.text == '+':
            await self._send_sasl_credentials()
        elif command == '903':
            self.logger.info("SASL authentication successful")
            await self.send_raw("CAP END")
        elif command in ('902', '904', '905', '906'):
            self.logger.error(f"SASL authentication failed: {line.text}")
            await self.send_raw("CAP END")

    async def _on_welcome(self, line: IRCLine) -> None:
        if line.args:
            self.nickname = line.args[0]
        self.registered.set()
        self.logger.info("Connected to IRC server, joining channels")

        for channel in self.config.channels:
            if channel.startswith(CHANNEL_PREFIX):
                await self.join(channel)

    async def _on_cap(self, line: IRCLine) -> None:
        subcommand = line.args[1].upper() if len(line.args) > 1 else ""
        capabilities = line.text.split()

        if subcommand == 'ACK' and 'sasl' in capabilities:
            await self.send_raw("AUTHENTICATE PLAIN")
        elif subcommand == 'NAK':
            self.logger.error("Server does not support SASL")
            await self.send_raw("CAP END")

    async def _send_sasl_credentials(self) -> None:
        login = self.config.sasl_login
        payload = f"{login}\0{login}\0{self.config.sasl_password}".encode('utf-8')
        await self.send_raw(f"AUTHENTICATE {base64.b64encode(payload).decode('ascii')}")

    async def send_raw(self, line: str) -> None:
        """Write one protocol line"""
        if not self.connected or not self.writer:
            self.logger.warning(f"Dropping line while disconnected: {line}")
            return

        if self.config.log_raw:
            self.logger.debug(f">> {line}")
        self.writer.write(f"{line}\r\n".encode('utf-8'))
        await self.writer.drain()

    async def send_direct(self, user: str, text: str, notice: bool = False) -> None:
        await self.send_to_target(user, text, notice=notice)

    async def send_to_target(self, target: str, text: str, notice: bool = False) -> None:
        command = 'NOTICE' if notice else 'PRIVMSG'
        for part in text.splitlines():
            if part:
                await self.send_raw(f"{command} {target} :{part}")

    async def join(self, channel: str) -> None:
        self.logger.info(f"Joining {channel}")
        await self.send_raw(f"JOIN {channel}")
        self.joined_channels.append(channel)

    async def part(self, channel: str, reason: str = "") -> None:
        self.logger.info(f"Leaving {channel}")
        await self.send_raw(f"PART {channel} :{reason}")
        if channel in self.joined_channels:
            self.joined_channels.remove(channel)

    async def quit(self, reason: str = "") -> None:
        await self.send_raw(f"QUIT :{reason}")

    async def close(self) -> None:
        """Close the socket without saying goodbye"""
        self.connected = False
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (OSError, ssl.SSLError) as e:
                self.logger.debug(f"Error closing connection: {e}")
            self.writer = None

    async def shutdown(self) -> bool:
        """
        Leave channels, quit and wait for the server to hang up

        Returns:
            True if the server closed the connection within the timeout
        """
        if self.connected:
            for channel in list(self.joined_channels):
                await self.part(channel, "Bye, bye")
            await self.quit("Bye everyone!")
            # Give messages time to send
            await asyncio.sleep(self.config.quit_delay)

        try:
            await asyncio.wait_for(self.disconnected.wait(), timeout=self.config.disconnect_timeout)
            self.logger.info("Disconnected")
            return True
        except asyncio.TimeoutError:
            self.logger.warning("Server took too long disconnecting")
            return False
        finally:
            await self.close()
