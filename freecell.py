"""
FreeCell solitaire.

Piles are addressed by `Slot(kind, index)` where kind is one of
TABLEAU, FREECELL or FOUNDATION. Tableau columns are lists with the top
card last.
"""

import logging
import random
from collections import namedtuple

from cards import SUITS, can_build_foundation, can_stack, shuffled_deck, snapshot

logger = logging.getLogger(__name__)

TABLEAU = "tableau"
FREECELL = "freecell"
FOUNDATION = "foundation"

NUM_COLUMNS = 8
NUM_FREECELLS = 4
DEAL_SIZES = (7, 7, 7, 7, 6, 6, 6, 6)
FOUNDATION_POINTS = 100
HISTORY_LIMIT = 50
AUTO_STEP_MS = 100

Slot = namedtuple("Slot", "kind index")
Move = namedtuple("Move", "source target")
State = namedtuple("State", "tableau freecells foundations score moves")


def is_ordered_run(cards):
    """True when each card sits on one of opposite colour and one higher."""
    return all(can_stack(lower, upper) for upper, lower in zip(cards, cards[1:]))


class FreeCell:
    def __init__(self, rng=None):
        self.rng = rng or random.Random()
        self.new_game()

    def new_game(self):
        deck = shuffled_deck(self.rng, face_up=True)
        self.tableau = []
        pos = 0
        for size in DEAL_SIZES:
            self.tableau.append(deck[pos:pos + size])
            pos += size
        self.freecells = [[] for _ in range(NUM_FREECELLS)]
        self.foundations = [[] for _ in SUITS]
        self.score = 0
        self.moves = 0
        self.history = []
        self.auto_completing = False

    def pile(self, slot):
        if slot.kind == TABLEAU:
            return self.tableau[slot.index]
        if slot.kind == FREECELL:
            return self.freecells[slot.index]
        if slot.kind == FOUNDATION:
            return self.foundations[slot.index]
        raise ValueError("unknown pile kind: %r" % (slot.kind,))

    @property
    def foundation_count(self):
        return sum(len(p) for p in self.foundations)

    def is_won(self):
        return self.foundation_count == 52

    def can_move_sequence(self, col, start):
        cards = self.tableau[col]
        return 0 <= start < len(cards) and is_ordered_run(cards[start:])

    def can_move(self, source, target, start=None):
        """
        Check a move of the cards from `start` (tableau only; default top
        card) of `source` onto `target`.
        """
        if source == target or source.kind == FOUNDATION:
            return False
        src = self.pile(source)
        if not src:
            return False
        if start is None:
            start = len(src) - 1
        if source.kind == TABLEAU and not self.can_move_sequence(source.index, start):
            return False
        if source.kind == FREECELL:
            start = 0
        count = len(src) - start
        head = src[start]

        if target.kind == TABLEAU:
            dest = self.tableau[target.index]
            return not dest or can_stack(head, dest[-1])
        if count != 1:
            return False
        if target.kind == FREECELL:
            return not self.freecells[target.index]
        if target.kind == FOUNDATION:
            return SUITS[target.index] == head.suit and can_build_foundation(
                head, self.foundations[target.index]
            )
        return False

    def move(self, source, target, start=None):
        """
        Move cards from `source` to `target`.

        Returns:
            bool: False when the move is not legal.
        """
        if not self.can_move(source, target, start):
            return False
        self._save_state()
        src = self.pile(source)
        if start is None or source.kind == FREECELL:
            start = len(src) - 1
        cards = src[start:]
        del src[start:]
        self.pile(target).extend(cards)
        if target.kind == FOUNDATION:
            self.score += FOUNDATION_POINTS
        self.moves += 1
        self._after_move()
        return True

    def move_to_foundation(self, source):
        """Send the top card of `source` to its suit's foundation."""
        src = self.pile(source)
        if not src:
            return False
        return self.move(source, Slot(FOUNDATION, SUITS.index(src[-1].suit)))

    def _after_move(self):
        if self.is_won():
            self.auto_completing = False
            logger.info("freecell won: score %d, %d moves", self.score, self.moves)
        elif not self.auto_completing and self.can_auto_complete():
            self.auto_completing = True

    def _save_state(self):
        self.history.append(
            State(
                snapshot(self.tableau),
                snapshot(self.freecells),
                snapshot(self.foundations),
                self.score,
                self.moves,
            )
        )
        if len(self.history) > HISTORY_LIMIT:
            self.history.pop(0)

    def can_undo(self):
        return bool(self.history)

    def undo(self):
        if not self.history:
            return False
        state = self.history.pop()
        self.tableau = state.tableau
        self.freecells = state.freecells
        self.foundations = state.foundations
        self.score = state.score
        self.moves = state.moves
        self.auto_completing = False
        return True

    def can_auto_complete(self):
        if any(self.freecells):
            return False
        return all(is_ordered_run(col) for col in self.tableau)

    def auto_complete_step(self):
        """
        Move one tableau card to its foundation.

        Returns:
            Move or None: the move made, or None when nothing could move.
        """
        for col, cards in enumerate(self.tableau):
            if not cards:
                continue
            card = cards[-1]
            found = SUITS.index(card.suit)
            if can_build_foundation(card, self.foundations[found]):
                # auto moves are not undoable
                self.foundations[found].append(cards.pop())
                self.score += FOUNDATION_POINTS
                self.moves += 1
                if self.is_won():
                    logger.info("freecell won: score %d, %d moves", self.score, self.moves)
                return Move(Slot(TABLEAU, col), Slot(FOUNDATION, found))
        self.auto_completing = False
        return None

    def hint(self):
        """Return a suggested `Move`, or None when no move is found."""
        columns = range(NUM_COLUMNS)
        for i in columns:
            if self.tableau[i]:
                found = SUITS.index(self.tableau[i][-1].suit)
                if can_build_foundation(self.tableau[i][-1], self.foundations[found]):
                    return Move(Slot(TABLEAU, i), Slot(FOUNDATION, found))
        for i, cell in enumerate(self.freecells):
            if cell:
                found = SUITS.index(cell[-1].suit)
                if can_build_foundation(cell[-1], self.foundations[found]):
                    return Move(Slot(FREECELL, i), Slot(FOUNDATION, found))
        for i in columns:
            if not self.tableau[i]:
                continue
            for j in columns:
                if i != j and self.tableau[j] and can_stack(self.tableau[i][-1], self.tableau[j][-1]):
                    return Move(Slot(TABLEAU, i), Slot(TABLEAU, j))
        for i, cell in enumerate(self.freecells):
            if not cell:
                continue
            for j in columns:
                if self.tableau[j] and can_stack(cell[-1], self.tableau[j][-1]):
                    return Move(Slot(FREECELL, i), Slot(TABLEAU, j))
        for i in columns:
            if not self.tableau[i]:
                for j in columns:
                    if len(self.tableau[j]) > 1:
                        return Move(Slot(TABLEAU, j), Slot(TABLEAU, i))
        for i, cell in enumerate(self.freecells):
            if not cell:
                for j in columns:
                    if self.tableau[j]:
                        return Move(Slot(TABLEAU, j), Slot(FREECELL, i))
        return None
