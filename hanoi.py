"""
Tower of Hanoi with manual play and a recursive auto-solver.
"""

import logging

from game_utils import Stopwatch

logger = logging.getLogger(__name__)

PEGS = ("A", "B", "C")
SOURCE_PEG = "A"
TARGET_PEG = "C"
DISK_COUNT = 5
SOLVE_STEP_MS = 800
WARNING_MS = 2000


def min_moves(n):
    return 2 ** n - 1


def solve_moves(n, source=SOURCE_PEG, target=TARGET_PEG, auxiliary="B"):
    """
    Yield (from_peg, to_peg) moves that carry `n` disks from `source` to
    `target`: move n-1 disks out of the way, move the largest, then move the
    n-1 disks back on top of it.
    """
    if n == 0:
        return
    yield from solve_moves(n - 1, source, auxiliary, target)
    yield source, target
    yield from solve_moves(n - 1, auxiliary, target, source)


class Hanoi:
    """
    Three pegs holding disks bottom-to-top. Disk values are sizes 1..n.
    """

    def __init__(self, disks=DISK_COUNT, clock=None):
        self.disks = disks
        self.stopwatch = Stopwatch(clock) if clock else Stopwatch()
        self.reset()

    def reset(self):
        self.pegs = {peg: [] for peg in PEGS}
        self.pegs[SOURCE_PEG] = list(range(self.disks, 0, -1))
        self.moves = 0
        self.selected = None
        self.solving = False
        self.stopwatch.reset()
        self._solver = None

    @property
    def min_moves(self):
        return min_moves(self.disks)

    def top(self, peg):
        stack = self.pegs[peg]
        return stack[-1] if stack else None

    def can_accept(self, peg, disk):
        top = self.top(peg)
        return top is None or disk < top

    def can_move(self, source, dest):
        disk = self.top(source)
        return source != dest and disk is not None and self.can_accept(dest, disk)

    def move_disk(self, source, dest):
        """Move the top disk; raises ValueError on an illegal move."""
        if not self.can_move(source, dest):
            raise ValueError("illegal move %s -> %s" % (source, dest))
        self.pegs[dest].append(self.pegs[source].pop())
        self.moves += 1
        if self.is_solved():
            self.stopwatch.stop()

    def click(self, peg):
        """
        Handle a click on `peg` for manual play.

        Returns:
            str or None: "selected", "deselected", "moved", "invalid", or
            None when the click was ignored.
        """
        if self.solving:
            return None
        if self.moves == 0:
            self.stopwatch.start()
        if self.selected is None:
            if not self.pegs[peg]:
                return None
            self.selected = peg
            return "selected"
        if self.selected == peg:
            self.selected = None
            return "deselected"
        source, self.selected = self.selected, None
        if not self.can_move(source, peg):
            return "invalid"
        self.move_disk(source, peg)
        return "moved"

    def is_solved(self):
        return len(self.pegs[TARGET_PEG]) == self.disks

    def toggle_auto_solve(self):
        """Start auto-solving from a fresh board, or stop a running solve."""
        if self.solving:
            self.solving = False
            self._solver = None
            return False
        self.reset()
        self.solving = True
        self.stopwatch.start()
        self._solver = solve_moves(self.disks, SOURCE_PEG, TARGET_PEG, "B")
        return True

    def advance_solve(self):
        """Apply the next solver move; returns it, or None when finished."""
        if not self.solving:
            return None
        move = next(self._solver, None)
        if move is None:
            self.solving = False
            self._solver = None
            logger.info("hanoi auto-solved in %d moves", self.moves)
            return None
        self.move_disk(*move)
        return move
