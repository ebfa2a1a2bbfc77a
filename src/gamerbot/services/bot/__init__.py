"""
Bot Service Package

Command parsing, dispatch and per-player game sessions.
"""

from .command_parser import CommandParser, ParsedCommand
from .dispatcher import CommandDispatcher
from .session_registry import SessionRegistry

__all__ = [
    'CommandParser',
    'ParsedCommand',
    'CommandDispatcher',
    'SessionRegistry'
]
