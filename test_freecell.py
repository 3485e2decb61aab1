import random

import freecell
from cards import SUITS, Card
from freecell import FOUNDATION, FREECELL, TABLEAU, FreeCell, Move, Slot


def up(suit, value):
    return Card(suit, value, face_up=True)


def empty_game():
    game = FreeCell(random.Random(4))
    game.tableau = [[] for _ in range(freecell.NUM_COLUMNS)]
    game.freecells = [[] for _ in range(freecell.NUM_FREECELLS)]
    game.foundations = [[] for _ in SUITS]
    return game


def col(i):
    return Slot(TABLEAU, i)


def cell(i):
    return Slot(FREECELL, i)


def home(suit):
    return Slot(FOUNDATION, SUITS.index(suit))


def test_deal():
    game = FreeCell(random.Random(11))
    assert [len(c) for c in game.tableau] == list(freecell.DEAL_SIZES)
    dealt = [card for c in game.tableau for card in c]
    assert len({(c.suit, c.value) for c in dealt}) == 52
    assert all(card.face_up for card in dealt)
    assert game.score == 0 and game.moves == 0


def test_freecell_holds_one_card():
    game = empty_game()
    game.tableau[0] = [up("hearts", 5), up("clubs", 9)]
    assert game.move(col(0), cell(0))
    assert game.freecells[0] == [up("clubs", 9)]
    assert not game.move(col(0), cell(0))
    assert game.moves == 1


def test_sequence_cannot_go_to_freecell():
    game = empty_game()
    game.tableau[0] = [up("spades", 9), up("hearts", 8)]
    assert not game.can_move(col(0), cell(0), start=0)


def test_any_card_may_fill_an_empty_column():
    game = empty_game()
    game.tableau[0] = [up("hearts", 5), up("diamonds", 7)]
    assert game.move(col(0), col(3))
    assert game.tableau[3] == [up("diamonds", 7)]


def test_tableau_needs_alternating_colour_descending():
    game = empty_game()
    game.tableau[0] = [up("hearts", 6)]
    game.tableau[1] = [up("diamonds", 7)]
    game.tableau[2] = [up("spades", 7)]
    assert not game.can_move(col(0), col(1))
    assert game.move(col(0), col(2))


def test_ordered_sequence_moves_together():
    game = empty_game()
    game.tableau[0] = [up("spades", 9), up("hearts", 8), up("clubs", 7)]
    game.tableau[1] = [up("diamonds", 10)]
    assert game.can_move_sequence(0, 0)
    assert game.move(col(0), col(1), start=0)
    assert [c.value for c in game.tableau[1]] == [10, 9, 8, 7]
    assert game.tableau[0] == []


def test_unordered_sequence_is_refused():
    game = empty_game()
    game.tableau[0] = [up("spades", 9), up("clubs", 8)]
    game.tableau[1] = [up("diamonds", 10)]
    assert not game.can_move_sequence(0, 0)
    assert not game.move(col(0), col(1), start=0)


def test_foundation_scores():
    game = empty_game()
    game.tableau[0] = [up("clubs", 2), up("clubs", 1)]
    assert not game.can_move(col(0), home("hearts"))
    assert game.move_to_foundation(col(0))
    assert game.score == freecell.FOUNDATION_POINTS
    assert game.move(col(0), home("clubs"))
    assert game.foundation_count == 2
    assert not game.move(Slot(FOUNDATION, 2), col(0))


def test_undo_restores_previous_state():
    game = empty_game()
    game.tableau[0] = [up("hearts", 1)]
    game.move_to_foundation(col(0))
    assert game.can_undo()
    assert game.undo()
    assert game.tableau[0] == [up("hearts", 1)]
    assert game.foundation_count == 0
    assert game.score == 0
    assert game.moves == 0
    assert not game.undo()


def test_history_is_capped():
    game = empty_game()
    game.freecells[0] = [up("hearts", 9)]
    for i in range(60):
        src, dst = (0, 1) if i % 2 == 0 else (1, 0)
        assert game.move(cell(src), cell(dst))
    assert len(game.history) == freecell.HISTORY_LIMIT


def test_auto_complete_finishes_the_game():
    game = empty_game()
    for i, suit in enumerate(SUITS):
        game.foundations[i] = [up(suit, v) for v in range(1, 13)]
    game.tableau[0] = [up("hearts", 13)]
    game.tableau[1] = [up("diamonds", 13)]
    game.tableau[2] = [up("clubs", 13)]
    game.freecells[0] = [up("spades", 13)]

    assert game.move_to_foundation(cell(0))
    assert game.auto_completing
    steps = []
    while True:
        step = game.auto_complete_step()
        if step is None:
            break
        steps.append(step)
    assert len(steps) == 3
    assert game.is_won()
    assert not game.auto_completing
    assert game.score == 4 * freecell.FOUNDATION_POINTS


def test_hint_prefers_foundation_moves():
    game = empty_game()
    game.tableau[0] = [up("spades", 7)]
    game.tableau[1] = [up("hearts", 6)]
    game.tableau[2] = [up("diamonds", 1)]
    assert game.hint() == Move(col(2), home("diamonds"))
    game.tableau[2] = [up("clubs", 3)]
    assert game.hint() == Move(col(1), col(0))


def test_hint_none_when_stuck():
    game = empty_game()
    assert game.hint() is None
