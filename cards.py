"""
Playing cards shared by the solitaire games.
"""

from game_utils import shuffled

SUITS = ("hearts", "diamonds", "clubs", "spades")
SYMBOL = {"hearts": "♥", "diamonds": "♦", "clubs": "♣", "spades": "♠"}
COLOR = {"hearts": "red", "diamonds": "red", "clubs": "black", "spades": "black"}
RANKS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")

ACE = 1
KING = 13


class Card:
    __slots__ = ("suit", "value", "face_up")

    def __init__(self, suit, value, face_up=False):
        if suit not in COLOR:
            raise ValueError("unknown suit: %r" % (suit,))
        if not ACE <= value <= KING:
            raise ValueError("card value out of range: %r" % (value,))
        self.suit = suit
        self.value = value
        self.face_up = face_up

    @property
    def color(self):
        return COLOR[self.suit]

    @property
    def rank(self):
        return RANKS[self.value - 1]

    @property
    def symbol(self):
        return SYMBOL[self.suit]

    @property
    def card_id(self):
        return "%s-%s" % (self.suit, self.rank)

    def copy(self):
        return Card(self.suit, self.value, self.face_up)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return NotImplemented
        return (self.suit, self.value, self.face_up) == (other.suit, other.value, other.face_up)

    def __hash__(self):
        return hash((self.suit, self.value))

    def __repr__(self):
        return "Card(%s%s%s)" % (self.rank, self.symbol, "" if self.face_up else ", down")


def new_deck(face_up=False):
    """Return the 52 cards in suit order, aces first."""
    return [Card(suit, value, face_up) for suit in SUITS for value in range(ACE, KING + 1)]


def shuffled_deck(rng=None, face_up=False):
    return shuffled(new_deck(face_up), rng)


def can_stack(card, onto):
    """True when `card` may sit on `onto` in a tableau: opposite colour, one lower."""
    return card.color != onto.color and card.value == onto.value - 1


def can_build_foundation(card, pile):
    """True when `card` is the next card for the foundation `pile` of its suit."""
    if not pile:
        return card.value == ACE
    top = pile[-1]
    return top.suit == card.suit and card.value == top.value + 1


def snapshot(piles):
    """Deep copy a list of card lists."""
    return [[card.copy() for card in pile] for pile in piles]
