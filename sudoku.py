"""
Sudoku puzzle generator, step-trace solver and play session.

The generator fills an empty grid with randomized backtracking and then
blanks a fixed number of cells. The solver replays a deterministic
backtracking search and emits a step trace (try / place / backtrack) so a
front end can animate it one step per tick.
"""

import logging
import random
from collections import namedtuple

from game_utils import Stopwatch, shuffled

logger = logging.getLogger(__name__)

SIZE = 9
BOX = 3
DIGITS = tuple(range(1, SIZE + 1))

# cells removed from the full solution
DIFFICULTY = {
    "easy": 35,
    "medium": 45,
    "hard": 55,
}
DEFAULT_DIFFICULTY = "medium"

START_SCORE = 1000
CHECK_COST = 10
HINT_COST = 10
TIME_BONUS = 500
SOLVE_STEP_MS = 50

STEP_TRY = "try"
STEP_PLACE = "place"
STEP_BACKTRACK = "backtrack"

SolveStep = namedtuple("SolveStep", "kind row col num")
Hint = namedtuple("Hint", "row col value")


class SudokuBoard:
    """
    9x9 grid of digits (0 = empty) plus the puzzle's given cells.

    Givens are recorded by `save_as_original()` and cannot be edited by the
    player.
    """

    def __init__(self, grid=None):
        self.grid = [[0] * SIZE for _ in range(SIZE)]
        self.original = [[0] * SIZE for _ in range(SIZE)]
        if grid is not None:
            self.load_grid(grid)

    def is_valid(self, row, col, num):
        """
        Return True when `num` does not already appear in the row, column or
        3x3 box of (row, col). The cell itself is ignored.
        """
        for c in range(SIZE):
            if c != col and self.grid[row][c] == num:
                return False
        for r in range(SIZE):
            if r != row and self.grid[r][col] == num:
                return False
        box_row = (row // BOX) * BOX
        box_col = (col // BOX) * BOX
        for r in range(box_row, box_row + BOX):
            for c in range(box_col, box_col + BOX):
                if (r != row or c != col) and self.grid[r][c] == num:
                    return False
        return True

    def find_empty(self):
        """Return (row, col) of the first empty cell in row-major order, or None."""
        for row in range(SIZE):
            for col in range(SIZE):
                if self.grid[row][col] == 0:
                    return row, col
        return None

    def set_value(self, row, col, value):
        if not 0 <= value <= SIZE:
            raise ValueError("cell value must be 0-9, got %r" % (value,))
        self.grid[row][col] = value

    def get_value(self, row, col):
        return self.grid[row][col]

    def clear(self):
        for row in self.grid:
            row[:] = [0] * SIZE

    def copy_grid(self):
        return [row[:] for row in self.grid]

    def load_grid(self, grid):
        if len(grid) != SIZE or any(len(row) != SIZE for row in grid):
            raise ValueError("grid must be 9x9")
        self.grid = [list(row) for row in grid]

    def save_as_original(self):
        self.original = self.copy_grid()

    def is_original(self, row, col):
        return self.original[row][col] != 0

    def reset_to_original(self):
        self.grid = [row[:] for row in self.original]

    def is_full(self):
        return all(v != 0 for row in self.grid for v in row)

    def is_complete(self):
        """Return True when the grid is full and every digit is valid."""
        if not self.is_full():
            return False
        return not self.conflicts()

    def conflicts(self):
        """Return the list of (row, col) cells whose digit clashes with another."""
        found = []
        for row in range(SIZE):
            for col in range(SIZE):
                num = self.grid[row][col]
                if num and not self.is_valid(row, col, num):
                    found.append((row, col))
        return found

    def hint(self, solution):
        """Return a Hint for the first empty cell, read from `solution`, or None."""
        empty = self.find_empty()
        if empty is None:
            return None
        row, col = empty
        return Hint(row, col, solution[row][col])

    def count_empty(self):
        return sum(1 for row in self.grid for v in row if v == 0)

    def __str__(self):
        lines = []
        for r, row in enumerate(self.grid):
            if r and r % BOX == 0:
                lines.append("------+-------+------")
            chunks = []
            for c, value in enumerate(row):
                if c and c % BOX == 0:
                    chunks.append("|")
                chunks.append(str(value) if value else ".")
            lines.append(" ".join(chunks))
        return "\n".join(lines)


def fill_board(board, rng=None):
    """
    Fill every empty cell of `board` with randomized backtracking.

    Digits 1-9 are tried in shuffled order for the first empty cell; the
    search recurses to the next empty cell and undoes the placement on a
    dead end.

    Returns:
        bool: True when the board was completely filled.
    """
    empty = board.find_empty()
    if empty is None:
        return True
    row, col = empty
    for num in shuffled(DIGITS, rng):
        if board.is_valid(row, col, num):
            board.set_value(row, col, num)
            if fill_board(board, rng):
                return True
            board.set_value(row, col, 0)
    return False


def remove_cells(board, count, rng=None):
    """Blank `count` distinct cells chosen in shuffled order."""
    if not 0 <= count <= SIZE * SIZE:
        raise ValueError("cannot remove %d cells" % count)
    positions = [(r, c) for r in range(SIZE) for c in range(SIZE)]
    for row, col in shuffled(positions, rng)[:count]:
        board.set_value(row, col, 0)


def generate_puzzle(difficulty=DEFAULT_DIFFICULTY, rng=None):
    """
    Generate a new puzzle.

    Args:
        difficulty (str): Key of DIFFICULTY.
        rng (random.Random): Optional random source.

    Returns:
        tuple: (SudokuBoard with givens saved, solution grid as list of lists)
    """
    try:
        count = DIFFICULTY[difficulty]
    except KeyError:
        raise ValueError("unknown difficulty %r" % (difficulty,)) from None
    rng = rng or random.Random()

    board = SudokuBoard()
    fill_board(board, rng)
    solution = board.copy_grid()
    remove_cells(board, count, rng)
    board.save_as_original()
    logger.debug("generated %s puzzle with %d blanks", difficulty, count)
    return board, solution


def iter_solve_steps(grid):
    """
    Solve a copy of `grid` with backtracking, yielding every search step.

    Digits are tried in ascending order. Each candidate yields a `try` step;
    a valid candidate yields a `place` step and recursion; a dead end
    yields a `backtrack` step with num 0.

    The generator's return value (StopIteration.value) is True when the
    grid was solved.
    """
    board = SudokuBoard(grid)
    return (yield from _solve_from(board))


def _solve_from(board):
    empty = board.find_empty()
    if empty is None:
        return True
    row, col = empty
    for num in DIGITS:
        yield SolveStep(STEP_TRY, row, col, num)
        if board.is_valid(row, col, num):
            board.set_value(row, col, num)
            yield SolveStep(STEP_PLACE, row, col, num)
            if (yield from _solve_from(board)):
                return True
            board.set_value(row, col, 0)
            yield SolveStep(STEP_BACKTRACK, row, col, 0)
    return False


def solve_steps(grid):
    """
    Collect the full step trace for `grid`.

    Returns:
        tuple: (solved: bool, steps: list of SolveStep)
    """
    steps = []
    gen = iter_solve_steps(grid)
    while True:
        try:
            steps.append(next(gen))
        except StopIteration as stop:
            return bool(stop.value), steps


def apply_step(board, step):
    """Apply one SolveStep to `board` the way the animation shows it."""
    if step.kind == STEP_BACKTRACK:
        board.set_value(step.row, step.col, 0)
    else:
        board.set_value(step.row, step.col, step.num)


class Sudoku:
    """
    One Sudoku round: puzzle, solution, selection, scoring and auto-solve.

    States: waiting, playing, solving, complete.
    """

    def __init__(self, difficulty=DEFAULT_DIFFICULTY, rng=None, clock=None):
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self.stopwatch = Stopwatch(clock) if clock else Stopwatch()
        self.board = SudokuBoard()
        self.solution = None
        self.selected = None
        self.score = START_SCORE
        self.checks_used = 0
        self.hints_used = 0
        self.state = "waiting"
        self.auto_solved = False
        self.last_step = None
        self._steps = None

    def new_game(self):
        self.stop_solve()
        self.board, self.solution = generate_puzzle(self.difficulty, self.rng)
        self.selected = None
        self.score = START_SCORE
        self.checks_used = 0
        self.hints_used = 0
        self.auto_solved = False
        self.last_step = None
        self.state = "playing"
        self.stopwatch.reset()
        self.stopwatch.start()

    @property
    def solving(self):
        return self.state == "solving"

    def select(self, row, col):
        """Toggle selection of (row, col). Returns the new selection."""
        if self.state != "playing":
            return self.selected
        if self.selected == (row, col):
            self.selected = None
        else:
            self.selected = (row, col)
        return self.selected

    def move_selection(self, drow, dcol):
        """Move the selected cell by one step, staying inside the grid."""
        if self.state != "playing" or self.selected is None:
            return
        row, col = self.selected
        row = min(SIZE - 1, max(0, row + drow))
        col = min(SIZE - 1, max(0, col + dcol))
        self.selected = (row, col)

    def enter(self, num):
        """
        Enter `num` (1-9) into the selected cell, or clear it with 0.

        Returns:
            bool: True when the board changed.
        """
        if self.state != "playing" or self.selected is None:
            return False
        row, col = self.selected
        if self.board.is_original(row, col):
            return False
        if not 0 <= num <= SIZE:
            return False
        self.board.set_value(row, col, num)
        if num:
            self._check_win()
        return True

    def check(self):
        """Charge for a conflict check and return the conflicting cells."""
        if self.state != "playing":
            return []
        self.checks_used += 1
        self.score = max(0, self.score - CHECK_COST)
        return self.board.conflicts()

    def use_hint(self):
        """Fill the first empty cell from the solution. Returns the Hint or None."""
        if self.state != "playing":
            return None
        hint = self.board.hint(self.solution)
        if hint is None:
            return None
        self.hints_used += 1
        self.score = max(0, self.score - HINT_COST)
        self.board.set_value(hint.row, hint.col, hint.value)
        self.selected = (hint.row, hint.col)
        self._check_win()
        return hint

    def reset(self):
        """Restore the puzzle's givens, discarding player entries."""
        if self.state == "solving":
            return
        self.board.reset_to_original()
        self.selected = None

    def _check_win(self):
        if self.board.is_complete():
            self.stopwatch.stop()
            self.score += max(0, TIME_BONUS - self.stopwatch.seconds)
            self.state = "complete"
            logger.info("sudoku solved, score %d", self.score)

    def auto_solve(self):
        """Reset to the givens and start replaying the solver trace."""
        if self.state != "playing":
            return False
        self.board.reset_to_original()
        self.selected = None
        self._steps = iter_solve_steps(self.board.copy_grid())
        self.state = "solving"
        return True

    def advance_solve(self):
        """
        Apply the next solver step.

        Returns:
            SolveStep or None: the applied step, or None once the trace ends
            (the round is then complete with score 0).
        """
        if self.state != "solving":
            return None
        try:
            step = next(self._steps)
        except StopIteration:
            self._finish_solve()
            return None
        apply_step(self.board, step)
        self.last_step = step
        return step

    def stop_solve(self):
        """Cancel a running auto-solve; the board keeps its current digits."""
        if self.state == "solving":
            self._steps = None
            self.last_step = None
            self.state = "playing"

    def _finish_solve(self):
        self._steps = None
        self.last_step = None
        self.stopwatch.stop()
        self.score = 0
        self.auto_solved = True
        self.state = "complete"
