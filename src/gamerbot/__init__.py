"""
GamerBot

IRC bot that hosts small turn-based games, one session per player.
"""

__version__ = "1.0.0"
