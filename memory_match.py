"""
Memory Match: find the eight symbol pairs on a 4x4 table.
"""

import logging
import random
from dataclasses import dataclass

from game_utils import Stopwatch, shuffled

logger = logging.getLogger(__name__)

SYMBOLS = ("apple", "banana", "grape", "strawberry", "cherry", "kiwi", "pineapple", "peach")
ROWS = 4
COLS = 4
MATCH_POINTS = 100
MISMATCH_PENALTY = 10
MISMATCH_DELAY_MS = 1000


@dataclass
class CardState:
    symbol: str
    flipped: bool = False
    matched: bool = False


class MemoryMatch:
    """
    States: waiting, playing, complete. While `locked` a mismatched pair is
    showing and further flips are refused until `resolve_mismatch()`.
    """

    def __init__(self, rng=None, clock=None):
        self.rng = rng or random.Random()
        self.stopwatch = Stopwatch(clock) if clock else Stopwatch()
        self.state = "waiting"
        self.new_game()

    def new_game(self):
        self.cards = [CardState(s) for s in shuffled(SYMBOLS * 2, self.rng)]
        self.flipped = []
        self.score = 0
        self.moves = 0
        self.matched_pairs = 0
        self.locked = False
        self.stopwatch.reset()

    def start(self):
        self.new_game()
        self.state = "playing"
        self.stopwatch.start()

    @property
    def total_pairs(self):
        return len(self.cards) // 2

    def flip(self, index):
        """
        Turn card `index` face up.

        Returns:
            str or None: "flipped", "match", "mismatch", or None when refused.
        """
        if self.state != "playing" or self.locked:
            return None
        card = self.cards[index]
        if card.flipped or card.matched or len(self.flipped) >= 2:
            return None

        card.flipped = True
        self.flipped.append(index)
        if len(self.flipped) < 2:
            return "flipped"

        self.moves += 1
        first, second = (self.cards[i] for i in self.flipped)
        if first.symbol == second.symbol:
            first.matched = second.matched = True
            self.score += MATCH_POINTS
            self.matched_pairs += 1
            self.flipped = []
            if self.matched_pairs == self.total_pairs:
                self.state = "complete"
                self.stopwatch.stop()
                logger.info("memory match complete in %d moves", self.moves)
            return "match"

        self.score = max(0, self.score - MISMATCH_PENALTY)
        self.locked = True
        return "mismatch"

    def resolve_mismatch(self):
        """Flip the mismatched pair back down and unlock the table."""
        if not self.locked:
            return False
        for i in self.flipped:
            self.cards[i].flipped = False
        self.flipped = []
        self.locked = False
        return True
