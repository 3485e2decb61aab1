"""
Minesweeper on a fixed 9x9 board with 10 mines.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass

from game_utils import Stopwatch

logger = logging.getLogger(__name__)

ROWS = 9
COLS = 9
MINES = 10

NEIGHBOURS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


@dataclass
class Cell:
    mine: bool = False
    count: int = 0


def neighbours(row, col, rows=ROWS, cols=COLS):
    """Yield in-bounds 8-neighbour coordinates of (row, col)."""
    for dr, dc in NEIGHBOURS:
        r, c = row + dr, col + dc
        if 0 <= r < rows and 0 <= c < cols:
            yield r, c


def create_board(rows=ROWS, cols=COLS, mine_count=MINES, rng=None):
    """
    Build a board with `mine_count` mines at distinct random cells and the
    adjacent-mine count filled in for every safe cell.
    """
    if not 0 <= mine_count <= rows * cols:
        raise ValueError("cannot place %d mines on %dx%d" % (mine_count, rows, cols))
    rng = rng or random
    board = [[Cell() for _ in range(cols)] for _ in range(rows)]
    placed = 0
    while placed < mine_count:
        r = rng.randrange(rows)
        c = rng.randrange(cols)
        if not board[r][c].mine:
            board[r][c].mine = True
            placed += 1
    for r in range(rows):
        for c in range(cols):
            if not board[r][c].mine:
                board[r][c].count = sum(
                    1 for nr, nc in neighbours(r, c, rows, cols) if board[nr][nc].mine
                )
    return board


class Minesweeper:
    """One Minesweeper round."""

    def __init__(self, rows=ROWS, cols=COLS, mines=MINES, rng=None, clock=None):
        self.rows = rows
        self.cols = cols
        self.mines = mines
        self.rng = rng or random.Random()
        self.stopwatch = Stopwatch(clock) if clock else Stopwatch()
        self.new_game()

    def new_game(self):
        self.board = create_board(self.rows, self.cols, self.mines, self.rng)
        self.revealed = set()
        self.flagged = set()
        self.lost = False
        self.won = False
        self.first_click = True
        self.moves = 0
        self.exploded = None
        self.stopwatch.reset()

    @property
    def over(self):
        return self.lost or self.won

    @property
    def total_safe(self):
        return self.rows * self.cols - self.mines

    @property
    def revealed_safe(self):
        return sum(1 for r, c in self.revealed if not self.board[r][c].mine)

    @property
    def mines_remaining(self):
        return self.mines - len(self.flagged)

    def reveal(self, row, col):
        """
        Reveal (row, col).

        Returns:
            list: cells newly revealed, empty when the click was ignored.
        """
        if self.over:
            return []
        if (row, col) in self.revealed or (row, col) in self.flagged:
            return []

        self.moves += 1
        if self.first_click:
            self.first_click = False
            self.stopwatch.start()

        if self.board[row][col].mine:
            self.lost = True
            self.exploded = (row, col)
            self.stopwatch.stop()
            return self.reveal_all_mines()

        opened = self._flood(row, col)
        self._check_win()
        return opened

    def _flood(self, row, col):
        """BFS from (row, col) across zero-count cells; never enters mines."""
        opened = []
        queue = deque([(row, col)])
        seen = {(row, col)}
        while queue:
            r, c = queue.popleft()
            if (r, c) not in self.revealed:
                self.revealed.add((r, c))
                opened.append((r, c))
            self.flagged.discard((r, c))
            if self.board[r][c].count != 0:
                continue
            for nr, nc in neighbours(r, c, self.rows, self.cols):
                if (nr, nc) not in seen and not self.board[nr][nc].mine:
                    seen.add((nr, nc))
                    queue.append((nr, nc))
        return opened

    def reveal_all_mines(self):
        opened = []
        for r in range(self.rows):
            for c in range(self.cols):
                if self.board[r][c].mine and (r, c) not in self.revealed:
                    self.revealed.add((r, c))
                    opened.append((r, c))
        return opened

    def toggle_flag(self, row, col):
        """
        Flag or unflag a hidden cell.

        Returns:
            bool: True when the flag state changed.
        """
        if self.over or (row, col) in self.revealed:
            return False
        if (row, col) in self.flagged:
            self.flagged.remove((row, col))
        else:
            self.flagged.add((row, col))
        return True

    def _check_win(self):
        if self.revealed_safe == self.total_safe:
            self.won = True
            self.stopwatch.stop()
            logger.info("minesweeper won in %d moves", self.moves)
