import pytest

import hanoi
from hanoi import Hanoi


def test_initial_stack():
    game = Hanoi()
    assert game.pegs["A"] == [5, 4, 3, 2, 1]
    assert game.pegs["B"] == []
    assert game.pegs["C"] == []
    assert game.min_moves == 31


@pytest.mark.parametrize("n", [1, 2, 3, 5, 7])
def test_solver_is_optimal_and_legal(n):
    game = Hanoi(n)
    moves = list(hanoi.solve_moves(n))
    assert len(moves) == hanoi.min_moves(n)
    for source, dest in moves:
        game.move_disk(source, dest)
    assert game.is_solved()
    assert game.pegs["C"] == list(range(n, 0, -1))


def test_larger_on_smaller_is_illegal():
    game = Hanoi(3)
    game.move_disk("A", "B")
    assert not game.can_move("A", "B")
    with pytest.raises(ValueError):
        game.move_disk("A", "B")
    assert game.moves == 1


def test_click_select_move_and_invalid():
    game = Hanoi(3)
    assert game.click("B") is None  # empty peg
    assert game.click("A") == "selected"
    assert game.click("A") == "deselected"
    game.click("A")
    assert game.click("C") == "moved"
    assert game.pegs["C"] == [1]
    game.click("A")
    assert game.click("C") == "invalid"
    assert game.selected is None
    assert game.moves == 1


def test_auto_solve_steps_to_completion():
    game = Hanoi(3)
    game.click("A")
    game.click("B")
    assert game.toggle_auto_solve()
    assert game.moves == 0  # restarted from a fresh board
    assert game.click("A") is None
    applied = 0
    while game.advance_solve() is not None:
        applied += 1
    assert applied == 7
    assert game.is_solved()
    assert not game.solving


def test_auto_solve_can_be_stopped():
    game = Hanoi(4)
    game.toggle_auto_solve()
    game.advance_solve()
    assert not game.toggle_auto_solve()
    assert game.advance_solve() is None
    assert game.moves == 1


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_timer_runs_from_first_click_until_solved():
    clock = FakeClock()
    game = Hanoi(2, clock=clock)
    clock.now = 5
    assert not game.stopwatch.running
    game.click("A")
    assert game.stopwatch.running
    game.click("B")
    game.move_disk("A", "C")
    clock.now = 20
    game.move_disk("B", "C")
    assert game.is_solved()
    clock.now = 100
    assert game.stopwatch.seconds == 15
    assert str(game.stopwatch) == "00:15"


def test_auto_solve_restarts_the_timer():
    clock = FakeClock()
    game = Hanoi(1, clock=clock)
    game.click("A")
    clock.now = 30
    game.toggle_auto_solve()
    clock.now = 32
    game.advance_solve()
    assert game.is_solved()
    clock.now = 90
    assert game.stopwatch.seconds == 2
