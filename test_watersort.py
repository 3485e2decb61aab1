import random

import pytest

import watersort
from watersort import Tube, WaterSort, can_pour


def make(contents):
    game = WaterSort(random.Random(0))
    game.load(contents)
    return game


def test_new_game_layout():
    game = WaterSort(random.Random(3))
    assert len(game.tubes) == watersort.NUM_FILLED_TUBES + watersort.NUM_EMPTY_TUBES
    units = [c for tube in game.tubes for c in tube.items]
    for color in watersort.COLORS[: watersort.NUM_FILLED_TUBES]:
        assert units.count(color) == watersort.TUBE_CAPACITY
    assert all(tube.is_empty() for tube in game.tubes[watersort.NUM_FILLED_TUBES:])


def test_tube_bounds():
    tube = Tube(["red"] * 4)
    assert tube.is_full()
    assert tube.is_complete()
    with pytest.raises(IndexError):
        tube.push("red")
    with pytest.raises(ValueError):
        Tube(["red"] * 5)


def test_can_pour_rules():
    assert can_pour(Tube(["red"]), Tube())
    assert can_pour(Tube(["red"]), Tube(["blue", "red"]))
    assert not can_pour(Tube(["red"]), Tube(["red", "blue"]))
    assert not can_pour(Tube(), Tube())
    assert not can_pour(Tube(["red"]), Tube(["red"] * 4))


def test_pour_moves_the_whole_top_run():
    game = make([["blue", "red", "red"], [], ["blue"]])
    assert game.pour(0, 1) == 2
    assert game.tubes[0].items == ["blue"]
    assert game.tubes[1].items == ["red", "red"]
    assert game.moves == 1


def test_pour_stops_when_destination_fills():
    game = make([["red", "red", "red"], ["blue", "red"]])
    assert game.pour(0, 1) == 2
    assert game.tubes[0].items == ["red"]


def test_invalid_pour_changes_nothing():
    game = make([["red"], ["blue"]])
    assert game.pour(0, 1) == 0
    assert game.pour(0, 0) == 0
    assert game.moves == 0
    assert not game.can_undo()


def test_completing_tubes_scores_and_wins():
    game = make([
        ["red", "red", "red", "blue"],
        ["blue", "blue", "blue", "red"],
        ["green"] * 4,
        [],
        [],
    ])
    assert game.sorted_tubes == 1
    game.pour(0, 3)
    game.pour(1, 4)
    game.pour(3, 1)
    assert game.score == watersort.TUBE_POINTS
    assert not game.complete
    game.pour(4, 0)
    assert game.score == 2 * watersort.TUBE_POINTS
    assert game.complete
    assert game.pour(0, 3) == 0


def test_undo_restores_tubes_and_score():
    game = make([["red", "red", "red"], ["red"], [], [], []])
    game.pour(1, 0)
    assert game.score == watersort.TUBE_POINTS
    moves = game.moves
    assert game.undo()
    assert game.tubes[0].items == ["red"] * 3
    assert game.tubes[1].items == ["red"]
    assert game.score == 0
    assert game.moves == moves
    assert not game.undo()


def test_click_flow():
    game = make([["red"], [], ["blue"]])
    assert game.click(1) is None
    assert game.click(0) == "selected"
    assert game.click(0) == "deselected"
    game.click(0)
    assert game.click(2) == "invalid"
    assert game.selected is None
    game.click(0)
    assert game.click(1) == "poured"
