"""
Data models for GamerBot
"""

from .message import CHANNEL_PREFIX, ChatTransport, InboundMessage, IRCLine

__all__ = ['CHANNEL_PREFIX', 'ChatTransport', 'InboundMessage', 'IRCLine']
