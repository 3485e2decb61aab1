"""
Klondike solitaire, one-card draw.
"""

import logging
import random
from collections import namedtuple

from cards import KING, SUITS, can_build_foundation, can_stack, shuffled_deck, snapshot

logger = logging.getLogger(__name__)

NUM_COLUMNS = 7

WASTE = "waste"
TABLEAU = "tableau"
FOUNDATION = "foundation"
STOCK = "stock"

# hint kinds
TO_FOUNDATION = "foundation"
TO_TABLEAU = "tableau"
DRAW = "draw"
RECYCLE = "recycle"

Hint = namedtuple("Hint", "kind source col card target")
State = namedtuple("State", "stock waste foundations tableau moves")


def can_place_on_tableau(card, column):
    """Kings go on empty columns; otherwise opposite colour and one lower."""
    if not column:
        return card.value == KING
    return can_stack(card, column[-1])


class Solitaire:
    """
    Piles are plain lists with the top card last. `stock` is dealt from its
    end, so the last card is the next one drawn.
    """

    def __init__(self, rng=None):
        self.rng = rng or random.Random()
        self.new_game()

    def new_game(self):
        deck = shuffled_deck(self.rng)
        self.tableau = []
        pos = 0
        for col in range(NUM_COLUMNS):
            column = deck[pos:pos + col + 1]
            column[-1].face_up = True
            self.tableau.append(column)
            pos += col + 1
        self.stock = list(reversed(deck[pos:]))
        self.waste = []
        self.foundations = {suit: [] for suit in SUITS}
        self.moves = 0
        self.history = []
        self._push_history()

    @property
    def foundation_count(self):
        return sum(len(pile) for pile in self.foundations.values())

    def is_won(self):
        return self.foundation_count == 52

    def _push_history(self):
        self.history.append(
            State(
                snapshot([self.stock])[0],
                snapshot([self.waste])[0],
                {suit: snapshot([pile])[0] for suit, pile in self.foundations.items()},
                snapshot(self.tableau),
                self.moves,
            )
        )

    def _moved(self):
        self.moves += 1
        self._push_history()
        if self.is_won():
            logger.info("solitaire won in %d moves", self.moves)

    def can_undo(self):
        return len(self.history) > 1

    def undo(self):
        """Restore the state before the last move. The deal cannot be undone."""
        if len(self.history) <= 1:
            return False
        self.history.pop()
        prev = self.history[-1]
        self.stock = snapshot([prev.stock])[0]
        self.waste = snapshot([prev.waste])[0]
        self.foundations = {suit: snapshot([pile])[0] for suit, pile in prev.foundations.items()}
        self.tableau = snapshot(prev.tableau)
        self.moves = prev.moves
        return True

    def click_stock(self):
        """
        Draw one card to the waste, or recycle the waste when the stock is
        empty.

        Returns:
            str or None: DRAW, RECYCLE, or None when both piles are empty.
        """
        if self.stock:
            card = self.stock.pop()
            card.face_up = True
            self.waste.append(card)
            self._moved()
            return DRAW
        if not self.waste:
            return None
        for card in self.waste:
            card.face_up = False
        self.stock = self.waste
        self.waste = []
        self._moved()
        return RECYCLE

    def _expose(self, col):
        column = self.tableau[col]
        if column and not column[-1].face_up:
            column[-1].face_up = True

    def can_place_on_foundation(self, card, suit):
        return card.suit == suit and can_build_foundation(card, self.foundations[suit])

    def waste_to_tableau(self, col):
        if not self.waste or not can_place_on_tableau(self.waste[-1], self.tableau[col]):
            return False
        self.tableau[col].append(self.waste.pop())
        self._moved()
        return True

    def waste_to_foundation(self):
        if not self.waste:
            return False
        card = self.waste[-1]
        if not self.can_place_on_foundation(card, card.suit):
            return False
        self.foundations[card.suit].append(self.waste.pop())
        self._moved()
        return True

    def tableau_to_tableau(self, src, start, dest):
        """Move the face-up run starting at index `start` of column `src`."""
        column = self.tableau[src]
        if src == dest or not 0 <= start < len(column) or not column[start].face_up:
            return False
        if not can_place_on_tableau(column[start], self.tableau[dest]):
            return False
        run = column[start:]
        del column[start:]
        self.tableau[dest].extend(run)
        self._expose(src)
        self._moved()
        return True

    def tableau_to_foundation(self, col):
        column = self.tableau[col]
        if not column or not column[-1].face_up:
            return False
        card = column[-1]
        if not self.can_place_on_foundation(card, card.suit):
            return False
        self.foundations[card.suit].append(column.pop())
        self._expose(col)
        self._moved()
        return True

    def auto_foundation(self, source, col=None):
        """Double-click handler: send the top card of `source` home if legal."""
        if source == WASTE:
            return self.waste_to_foundation()
        if source == TABLEAU:
            return self.tableau_to_foundation(col)
        return False

    def hint(self):
        """Return the first legal `Hint` in priority order, or None."""
        top = self.waste[-1] if self.waste else None
        if top and self.can_place_on_foundation(top, top.suit):
            return Hint(TO_FOUNDATION, WASTE, None, top, top.suit)
        for col, column in enumerate(self.tableau):
            if column and column[-1].face_up:
                card = column[-1]
                if self.can_place_on_foundation(card, card.suit):
                    return Hint(TO_FOUNDATION, TABLEAU, col, card, card.suit)
        if top:
            for dest, column in enumerate(self.tableau):
                if can_place_on_tableau(top, column):
                    return Hint(TO_TABLEAU, WASTE, None, top, dest)
        for src, column in enumerate(self.tableau):
            for card in column:
                if not card.face_up:
                    continue
                for dest in range(NUM_COLUMNS):
                    if dest != src and can_place_on_tableau(card, self.tableau[dest]):
                        return Hint(TO_TABLEAU, TABLEAU, src, card, dest)
        if self.stock:
            return Hint(DRAW, STOCK, None, None, None)
        if self.waste:
            return Hint(RECYCLE, STOCK, None, None, None)
        return None
