"""
Number Guessing Game Implementation

The bot picks a number between 1 and 100 and the player has a fixed number of
tries to find it, with a higher/lower hint after each guess.
"""

import random
import re
from typing import List, Optional

from .base_game import BaseGame, GameContext, GameState


GUESSING_GAME_ID = "guess"
DEFAULT_TRIES = 6
MIN_NUMBER = 1
MAX_NUMBER = 100

GUESS_PATTERN = re.compile(r'[+-]?[0-9]+')


class GuessingGame(BaseGame):
    """Guess-the-number game"""

    game_id = GUESSING_GAME_ID

    def __init__(self, max_tries: int = DEFAULT_TRIES, rng: Optional[random.Random] = None):
        super().__init__()
        self.max_tries = max_tries
        self.rng = rng or random.Random()
        self.number = 0
        self.tries_left = 0

    async def start(self, context: GameContext) -> None:
        """Pick the secret number and tell the player the rules"""
        await super().start(context)
        self.number = self.rng.randint(MIN_NUMBER, MAX_NUMBER)
        self.tries_left = self.max_tries
        self.logger.debug(f"New guessing game for {context.sender}")
        await context.reply(
            f"Guess a number between {MIN_NUMBER}-{MAX_NUMBER}, you have {self.max_tries} tries"
        )

    async def stop(self, context: GameContext) -> None:
        if self.state == GameState.IDLE:
            return
        await super().stop(context)

    async def play(self, context: GameContext, args: List[str]) -> None:
        """Process a single guess"""
        if len(args) != 1:
            await context.reply("Just give me your guess please.")
            return

        guess = self._parse_guess(args[0], context.command_prefix)
        if guess is None:
            await context.reply("That's not a number between 1 and 100 now is it...")
            return

        self.tries_left -= 1
        if self.tries_left == 0:
            # Signed on purpose: negative when the guess was below the number
            await context.reply(
                f"You ran out of tries. The number was {self.number}. "
                f"You were {guess - self.number} off."
            )
            await self.stop(context)
            return

        if guess == self.number:
            await self.stop(context)
            await context.reply(
                f"You got it! The number was {self.number}! "
                f"You guessed the number in {self.max_tries - self.tries_left} tries."
            )
        elif guess > self.number:
            await context.reply(f"{guess} is too high, you have {self.tries_left} tries left")
        else:
            await context.reply(f"{guess} is too low, you have {self.tries_left} tries left")

    def _parse_guess(self, token: str, prefix: str) -> Optional[int]:
        """Turn a token like '42' or '.42' into an in-range int, or None"""
        if prefix and token.startswith(prefix):
            token = token[len(prefix):]

        if not GUESS_PATTERN.fullmatch(token):
            return None

        guess = int(token)

        if guess < MIN_NUMBER or guess > MAX_NUMBER:
            return None
        return guess
