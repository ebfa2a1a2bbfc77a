"""
Tests for the command parser

Covers token splitting, channel addressing rules, canonicalization and reply
target resolution.
"""

import pytest

from gamerbot.models.message import InboundMessage
from gamerbot.services.bot.command_parser import CommandParser
from tests.mocks.irc_mocks import channel_message, direct_message


BOT_NICK = "gamerbot"


class TestCommandParser:
    """Test command parsing"""

    @pytest.fixture
    def parser(self):
        return CommandParser()

    def test_split_preserves_empty_tokens(self, parser):
        assert parser.split("play  guess") == ["play", "", "guess"]
        assert parser.split("") == [""]

    def test_channel_message_without_prefix_is_ignored(self, parser):
        assert parser.parse(channel_message("hello"), BOT_NICK) is None
        assert parser.parse(channel_message("play guess"), BOT_NICK) is None

    def test_channel_message_with_prefix(self, parser):
        parsed = parser.parse(channel_message(".play guess"), BOT_NICK)

        assert parsed.command == ".play"
        assert parsed.args == ["guess"]
        assert parsed.reply_to == "#games"

    def test_empty_channel_message_is_ignored(self, parser):
        assert parser.parse(channel_message(""), BOT_NICK) is None

    def test_direct_message_without_prefix(self, parser):
        parsed = parser.parse(direct_message("games"), BOT_NICK)

        assert parsed.command == ".games"
        assert parsed.args == []
        assert parsed.reply_to == "alice"

    def test_command_is_lower_cased(self, parser):
        parsed = parser.parse(direct_message("PLAY Guess"), BOT_NICK)

        assert parsed.command == ".play"
        assert parsed.args == ["Guess"]

    def test_empty_direct_message_means_help(self, parser):
        parsed = parser.parse(direct_message(""), BOT_NICK)

        assert parsed.command == ".help"
        assert parsed.args == []

    def test_leading_space_means_help_with_arguments(self, parser):
        parsed = parser.parse(direct_message(" play"), BOT_NICK)

        assert parsed.command == ".help"
        assert parsed.args == ["play"]

    def test_extra_arguments_are_kept_in_order(self, parser):
        parsed = parser.parse(direct_message("play guess extra"), BOT_NICK)

        assert parsed.args == ["guess", "extra"]
        assert parsed.tokens == [".play", "guess", "extra"]

    def test_numeric_token_gets_prefix(self, parser):
        parsed = parser.parse(direct_message("42"), BOT_NICK)

        assert parsed.command == ".42"

    def test_reply_target_for_other_targets(self, parser):
        message = InboundMessage(target="someoneelse", sender="alice", text="help")

        assert parser.reply_target(message, BOT_NICK) == "someoneelse"

    def test_reply_target_uses_current_nick(self, parser):
        message = direct_message("help", bot_nick="gamerbot^")

        assert parser.parse(message, "gamerbot^").reply_to == "alice"
        assert parser.parse(message, "gamerbot").reply_to == "gamerbot^"

    def test_custom_prefix(self):
        parser = CommandParser(prefix="!")

        assert parser.parse(channel_message(".play guess"), BOT_NICK) is None
        assert parser.parse(channel_message("!play guess"), BOT_NICK).command == "!play"
        assert parser.canonicalize("") == "!help"
