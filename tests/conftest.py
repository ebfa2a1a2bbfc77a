"""
Global pytest configuration and fixtures for GamerBot testing.
"""
import tempfile
from pathlib import Path

import pytest

from gamerbot.services.bot.command_parser import CommandParser
from gamerbot.services.bot.dispatcher import CommandDispatcher
from gamerbot.services.bot.games.catalog import GameCatalog
from gamerbot.services.bot.games.guessing import GUESSING_GAME_ID, GuessingGame
from gamerbot.services.bot.session_registry import SessionRegistry
from tests.mocks.irc_mocks import FixedRandom, MockChatTransport


SECRET_NUMBER = 50


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def transport():
    """Recording transport with the default bot nick."""
    return MockChatTransport(nickname="gamerbot")


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def fixed_catalog():
    """Catalog whose guessing games always pick SECRET_NUMBER."""
    return GameCatalog({
        GUESSING_GAME_ID: lambda: GuessingGame(rng=FixedRandom(SECRET_NUMBER)),
    })


@pytest.fixture
def dispatcher(transport, registry, fixed_catalog):
    """Dispatcher wired to the recording transport and fixed catalog."""
    return CommandDispatcher(
        transport=transport,
        registry=registry,
        catalog=fixed_catalog,
        parser=CommandParser()
    )


@pytest.fixture
def test_config():
    """Provide test configuration."""
    return {
        "irc": {
            "server": "irc.example.org",
            "port": 6697,
            "nick": "testbot",
            "channels": ["#games", "#lobby"],
            "use_tls": True
        },
        "games": {
            "guess": {"max_tries": 4}
        },
        "logging": {
            "level": "DEBUG",
            "console": False
        }
    }
