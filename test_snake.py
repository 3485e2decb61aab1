import random

import snake
from snake import DOWN, LEFT, RIGHT, UP, Snake


def playing(size=snake.GRID_SIZE, high_score=0):
    game = Snake(size, high_score, rng=random.Random(5))
    game.start()
    return game


def test_initial_layout():
    game = Snake(rng=random.Random(1))
    assert game.state == "waiting"
    assert list(game.body) == [(9, 10), (8, 10), (7, 10)]
    assert game.direction == RIGHT
    assert game.speed == snake.INITIAL_SPEED
    assert game.food is not None
    assert game.food not in game.body


def test_step_moves_head_and_drops_tail():
    game = playing()
    game.food = (0, 0)
    assert game.step() == "moved"
    assert list(game.body) == [(10, 10), (9, 10), (8, 10)]


def test_step_ignored_unless_playing():
    game = Snake(rng=random.Random(1))
    assert game.step() is None
    game.start()
    game.toggle_pause()
    assert game.state == "paused"
    assert game.step() is None
    game.toggle_pause()
    assert game.state == "playing"


def test_reversal_is_refused():
    game = playing()
    assert not game.steer(LEFT)
    assert not game.steer(RIGHT)
    assert game.steer(UP)
    game.food = (0, 0)
    game.step()
    assert game.head == (9, 9)
    assert not game.steer(DOWN)


def test_eating_grows_and_scores():
    game = playing()
    game.food = (10, 10)
    assert game.step() == "ate"
    assert len(game) == 4
    assert game.score == snake.FOOD_POINTS
    assert game.food not in game.body


def test_speed_increases_every_fifty_points():
    game = playing()
    game.score = snake.SPEEDUP_EVERY - snake.FOOD_POINTS
    game.food = (10, 10)
    game.step()
    assert game.speed == snake.INITIAL_SPEED - snake.SPEED_STEP


def test_speed_has_a_floor():
    game = playing()
    game.speed = snake.MIN_SPEED
    game.score = snake.SPEEDUP_EVERY - snake.FOOD_POINTS
    game.food = (10, 10)
    game.step()
    assert game.speed == snake.MIN_SPEED


def test_wall_collision_ends_game():
    game = playing()
    game.food = (0, 0)
    game.body.clear()
    game.body.extend([(19, 5), (18, 5), (17, 5)])
    assert game.step() == "gameover"
    assert game.state == "gameover"


def test_self_collision_ends_game():
    game = playing()
    game.food = (0, 0)
    game.body.clear()
    # head at (5, 5) heading right into its own body
    game.body.extend([(5, 5), (5, 6), (6, 6), (6, 5), (6, 4)])
    assert game.step() == "gameover"


def test_high_score_only_replaced_when_beaten():
    game = playing(high_score=30)
    game.score = 20
    game.game_over()
    assert game.high_score == 30
    assert not game.new_high_score

    game = playing(high_score=30)
    game.score = 40
    game.game_over()
    assert game.high_score == 40
    assert game.new_high_score


def test_place_food_on_full_grid():
    game = playing(size=2)
    game.body.clear()
    game.body.extend([(0, 0), (1, 0), (1, 1), (0, 1)])
    assert not game.place_food()
    assert game.food is None
