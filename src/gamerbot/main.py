"""
GamerBot Main Application Entry Point

Parses command-line flags, loads configuration, connects to the IRC server and
feeds every channel or private message to the command dispatcher until the
connection drops or a shutdown signal arrives.
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from gamerbot import __version__
from gamerbot.core.config import ConfigurationError, ConfigurationManager, split_channels
from gamerbot.core.irc_client import IRCClient, IRCConfig, IRCConnectionError
from gamerbot.core.logging import get_logger, initialize_logging
from gamerbot.services.bot.command_parser import CommandParser
from gamerbot.services.bot.dispatcher import CommandDispatcher
from gamerbot.services.bot.games.catalog import create_default_catalog
from gamerbot.services.bot.session_registry import SessionRegistry


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gamerbot", description="IRC game bot")
    parser.add_argument("-s", dest="server", help="IRC server (default 127.0.0.1)")
    parser.add_argument("-n", dest="nick", help="IRC nick (default gamerbot)")
    parser.add_argument("-p", dest="port", type=int, help="IRC port (default 6667)")
    parser.add_argument("--tls", action="store_true", default=None, help="Use TLS")
    parser.add_argument("--insecure", action="store_true", default=None,
                        help="Ignore TLS cert errors")
    parser.add_argument("-c", dest="channels",
                        help="Comma separated list of channels to join (default #games)")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug output")
    parser.add_argument("--debug2", action="store_true", default=None,
                        help="Enable extra debug output")
    parser.add_argument("--sasl", action="store_true", default=None,
                        help="Use SASL authentication, forces TLS")
    parser.add_argument("--sasluser", help="SASL username if different from nick")
    parser.add_argument("--saslpass", help="SASL password")
    parser.add_argument("--config", dest="config_dir", default="config",
                        help="Directory holding default.yaml/config.yaml")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def apply_arguments(config: ConfigurationManager, args: argparse.Namespace) -> None:
    """Override configuration values with the flags that were given"""
    overrides = {
        'irc.server': args.server,
        'irc.nick': args.nick,
        'irc.port': args.port,
        'irc.use_tls': args.tls,
        'irc.insecure_tls': args.insecure,
        'irc.use_sasl': args.sasl,
        'irc.sasl_login': args.sasluser,
        'irc.sasl_password': args.saslpass,
        'app.debug': args.debug,
    }
    if args.channels is not None:
        overrides['irc.channels'] = split_channels(args.channels)

    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)

    if args.debug2:
        config.set('app.debug', True)
        config.set('app.debug_irc', True)

    if config.get('app.debug'):
        config.set('logging.level', 'DEBUG')


class GamerBotApplication:
    """Main GamerBot application class"""

    def __init__(self, config_manager: ConfigurationManager):
        self.config_manager = config_manager
        self.logger = get_logger('main')
        self.client: Optional[IRCClient] = None
        self.dispatcher: Optional[CommandDispatcher] = None
        self.shutdown_event = asyncio.Event()

    def initialize(self) -> None:
        """Wire the transport, registry, catalog and dispatcher together"""
        self.client = IRCClient(IRCConfig.from_config(self.config_manager))
        self.dispatcher = CommandDispatcher(
            transport=self.client,
            registry=SessionRegistry(),
            catalog=create_default_catalog(self.config_manager.get_section('games')),
            parser=CommandParser(self.config_manager.get('bot.command_prefix', '.'))
        )
        self.client.add_message_handler(self.dispatcher.handle_inbound_message)

    async def start(self) -> int:
        """
        Run until disconnected or signalled

        Returns:
            Process exit code
        """
        if self.client is None:
            self.initialize()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler, sig)

        self.logger.info(f"GamerBot {__version__} starting up...")
        try:
            await self.client.connect()
        except IRCConnectionError as e:
            self.logger.error(f"Connection error: {e}")
            return 1

        reader_task = asyncio.create_task(self.client.run())
        shutdown_task = asyncio.create_task(self.shutdown_event.wait())
        done, _ = await asyncio.wait(
            {reader_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )

        if shutdown_task in done:
            self.logger.info("Disconnecting from server")
            await self.client.shutdown()
        else:
            shutdown_task.cancel()
            await self.client.close()

        await self._finish_reader(reader_task)
        self.logger.info(f"Final stats: {self.dispatcher.get_stats()}")
        return 0

    async def _finish_reader(self, reader_task: asyncio.Task) -> None:
        if not reader_task.done():
            reader_task.cancel()
        try:
            await reader_task
        except asyncio.CancelledError:
            pass
        except (OSError, ConnectionError) as e:
            self.logger.error(f"Connection lost: {e}")

    def _signal_handler(self, signum):
        """Handle shutdown signals"""
        self.logger.info(f"Received signal {signum}")
        self.shutdown_event.set()


def load_configuration(args: argparse.Namespace) -> ConfigurationManager:
    config_manager = ConfigurationManager(args.config_dir)
    config_manager.load_config(validate=False)
    apply_arguments(config_manager, args)
    config_manager.validate()
    return config_manager


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_arg_parser().parse_args(argv)

    try:
        config_manager = load_configuration(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    initialize_logging(config_manager.config)
    app = GamerBotApplication(config_manager)
    return await app.start()


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nApplication interrupted")
        sys.exit(0)


if __name__ == "__main__":
    run()
