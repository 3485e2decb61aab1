"""
Two-player Tic-Tac-Toe with running tallies.
"""

PLAYER_O = "O"
PLAYER_X = "X"

WINNING_LINES = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


def find_winning_line(board):
    """Return the first completed line of `board`, or None."""
    for line in WINNING_LINES:
        a, b, c = (board[i] for i in line)
        if a and a == b == c:
            return line
    return None


class TicTacToe:
    def __init__(self):
        self.tallies = {PLAYER_O: 0, PLAYER_X: 0, "draw": 0}
        self.restart()

    def restart(self):
        self.board = [""] * 9
        self.current = PLAYER_O
        self.over = False
        self.winner = None
        self.winning_line = None

    def place(self, index):
        """
        Mark `index` (0-8) for the current player.

        Returns:
            bool: False when the round is over or the cell is taken.
        """
        if not 0 <= index < 9:
            raise IndexError("cell index out of range: %r" % (index,))
        if self.over or self.board[index]:
            return False

        self.board[index] = self.current
        line = find_winning_line(self.board)
        if line:
            self.winner = self.current
            self.winning_line = line
            self.tallies[self.current] += 1
            self.over = True
        elif all(self.board):
            self.tallies["draw"] += 1
            self.over = True
        else:
            self.current = PLAYER_X if self.current == PLAYER_O else PLAYER_O
        return True
