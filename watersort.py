"""
Water Sort: pour coloured liquid between tubes until each holds one colour.
"""

import logging
import random
from collections import namedtuple

from game_utils import shuffled

logger = logging.getLogger(__name__)

NUM_FILLED_TUBES = 3
NUM_EMPTY_TUBES = 2
TUBE_CAPACITY = 4
COLORS = ("red", "blue", "green", "yellow", "purple", "orange", "pink", "cyan")
TUBE_POINTS = 50

Pour = namedtuple("Pour", "source dest colors score")


class Tube:
    """Bounded stack of colour units, bottom first."""

    def __init__(self, colors=(), capacity=TUBE_CAPACITY):
        if len(colors) > capacity:
            raise ValueError("tube overfilled")
        self.capacity = capacity
        self.items = list(colors)

    def push(self, color):
        if self.is_full():
            raise IndexError("push onto a full tube")
        self.items.append(color)

    def pop(self):
        return self.items.pop()

    def peek(self):
        return self.items[-1] if self.items else None

    def is_empty(self):
        return not self.items

    def is_full(self):
        return len(self.items) >= self.capacity

    def is_complete(self):
        return self.is_full() and len(set(self.items)) == 1

    def __len__(self):
        return len(self.items)

    def __repr__(self):
        return "Tube(%r)" % (self.items,)


def can_pour(source, dest):
    if source.is_empty() or dest.is_full():
        return False
    return dest.is_empty() or source.peek() == dest.peek()


class WaterSort:
    def __init__(self, rng=None):
        self.rng = rng or random.Random()
        self.new_game()

    def new_game(self):
        units = [
            color
            for color in COLORS[:NUM_FILLED_TUBES]
            for _ in range(TUBE_CAPACITY)
        ]
        units = shuffled(units, self.rng)
        self.tubes = [
            Tube(units[i * TUBE_CAPACITY:(i + 1) * TUBE_CAPACITY])
            for i in range(NUM_FILLED_TUBES)
        ]
        self.tubes.extend(Tube() for _ in range(NUM_EMPTY_TUBES))
        self.score = 0
        self.moves = 0
        self.sorted_tubes = self._count_complete()
        self.history = []
        self.selected = None
        self.complete = False

    def load(self, contents):
        """Replace the tubes with `contents`, a list of bottom-first colour lists."""
        self.tubes = [Tube(colors) for colors in contents]
        self.score = 0
        self.moves = 0
        self.sorted_tubes = self._count_complete()
        self.history = []
        self.selected = None
        self.complete = False

    def _count_complete(self):
        return sum(1 for tube in self.tubes if tube.is_complete())

    def pour(self, source, dest):
        """
        Pour the matching top run of tube `source` into tube `dest`.

        Returns:
            int: units poured; 0 when the pour is not allowed.
        """
        if self.complete or source == dest:
            return 0
        src, dst = self.tubes[source], self.tubes[dest]
        if not can_pour(src, dst):
            return 0

        color = src.peek()
        poured = []
        while not src.is_empty() and not dst.is_full() and src.peek() == color:
            dst.push(src.pop())
            poured.append(color)
        self.history.append(Pour(source, dest, poured, self.score))
        self.moves += 1

        count = self._count_complete()
        if count > self.sorted_tubes:
            self.score += (count - self.sorted_tubes) * TUBE_POINTS
        self.sorted_tubes = count
        self._check_complete()
        return len(poured)

    def click(self, index):
        """
        Select a tube, deselect it, or pour the selected tube into `index`.

        Returns:
            str or None: "selected", "deselected", "poured", "invalid".
        """
        if self.complete:
            return None
        if self.selected is None:
            if self.tubes[index].is_empty():
                return None
            self.selected = index
            return "selected"
        if self.selected == index:
            self.selected = None
            return "deselected"
        source, self.selected = self.selected, None
        return "poured" if self.pour(source, index) else "invalid"

    def can_undo(self):
        return bool(self.history)

    def undo(self):
        """Reverse the last pour. Does not count as a move."""
        if not self.history:
            return False
        last = self.history.pop()
        src, dst = self.tubes[last.source], self.tubes[last.dest]
        for color in reversed(last.colors):
            dst.pop()
            src.push(color)
        self.score = last.score
        self.selected = None
        self.sorted_tubes = self._count_complete()
        self.complete = False
        return True

    def _check_complete(self):
        filled = [tube for tube in self.tubes if not tube.is_empty()]
        if len(filled) == NUM_FILLED_TUBES and all(t.is_complete() for t in filled):
            self.complete = True
            logger.info("water sort complete in %d moves", self.moves)
