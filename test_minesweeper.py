import random

import pytest

import minesweeper
from minesweeper import Cell, Minesweeper


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def board_with_mines(rows, cols, mines):
    board = [[Cell() for _ in range(cols)] for _ in range(rows)]
    for r, c in mines:
        board[r][c].mine = True
    for r in range(rows):
        for c in range(cols):
            if not board[r][c].mine:
                board[r][c].count = sum(
                    1 for nr, nc in minesweeper.neighbours(r, c, rows, cols) if board[nr][nc].mine
                )
    return board


def make_game(mines, rows=9, cols=9, clock=None):
    game = Minesweeper(rows, cols, len(mines), rng=random.Random(0), clock=clock or FakeClock())
    game.board = board_with_mines(rows, cols, mines)
    return game


def test_create_board_places_exact_mine_count():
    board = minesweeper.create_board(rng=random.Random(42))
    assert sum(cell.mine for row in board for cell in row) == minesweeper.MINES
    for r in range(minesweeper.ROWS):
        for c in range(minesweeper.COLS):
            if not board[r][c].mine:
                expected = sum(
                    1 for nr, nc in minesweeper.neighbours(r, c) if board[nr][nc].mine
                )
                assert board[r][c].count == expected


def test_create_board_rejects_too_many_mines():
    with pytest.raises(ValueError):
        minesweeper.create_board(2, 2, 5)


def test_neighbours_clip_at_edges():
    assert sorted(minesweeper.neighbours(0, 0)) == [(0, 1), (1, 0), (1, 1)]
    assert len(list(minesweeper.neighbours(4, 4))) == 8


def test_reveal_number_opens_one_cell():
    game = make_game([(0, 0)])
    assert game.reveal(0, 1) == [(0, 1)]
    assert game.moves == 1
    assert not game.over


def test_flood_fill_opens_region_and_stops_at_numbers():
    game = make_game([(0, 0)])
    opened = game.reveal(8, 8)
    # everything but the mine is safe and connected
    assert len(opened) == 80
    assert (0, 0) not in game.revealed
    assert game.won
    assert game.over


def test_flood_fill_walls_off_at_numbered_cells():
    # a column of mines splits the board in two
    mines = [(r, 4) for r in range(9)]
    game = make_game(mines)
    game.reveal(0, 0)
    assert all(c < 4 for _, c in game.revealed)
    assert (4, 3) in game.revealed
    assert not game.won


def test_flood_clears_flags_it_passes():
    game = make_game([(0, 0)])
    game.toggle_flag(5, 5)
    game.reveal(8, 8)
    assert (5, 5) not in game.flagged


def test_revealing_a_mine_loses_and_shows_all_mines():
    game = make_game([(0, 0), (8, 8)])
    opened = game.reveal(0, 0)
    assert game.lost
    assert game.exploded == (0, 0)
    assert set(opened) == {(0, 0), (8, 8)}
    assert game.reveal(4, 4) == []


def test_flagged_cells_cannot_be_revealed():
    game = make_game([(0, 0)])
    assert game.toggle_flag(0, 0)
    assert game.reveal(0, 0) == []
    assert not game.lost
    assert game.mines_remaining == 0
    assert game.toggle_flag(0, 0)
    assert game.mines_remaining == 1


def test_revealed_cells_cannot_be_flagged():
    game = make_game([(0, 0)])
    game.reveal(0, 1)
    assert not game.toggle_flag(0, 1)
    assert game.reveal(0, 1) == []
    assert game.moves == 1


def test_stopwatch_starts_on_first_click_and_stops_on_win():
    clock = FakeClock()
    game = make_game([(0, 0)], clock=clock)
    clock.now = 50
    assert game.stopwatch.seconds == 0
    game.reveal(0, 1)
    clock.now = 62
    assert game.stopwatch.seconds == 12
    game.reveal(8, 8)
    assert game.won
    clock.now = 100
    assert game.stopwatch.seconds == 12


def test_new_game_resets():
    game = make_game([(0, 0)])
    game.reveal(0, 0)
    game.new_game()
    assert not game.over
    assert game.revealed == set()
    assert game.moves == 0
