"""
Headless tests for the pygame front end. The display is never started, so
every draw call is a no-op and input comes from a fake joystick.
"""

import asyncio

import pytest

import minigame_app
from minigame_app import Click, Key


class FakeNunchuck:
    def __init__(self):
        self.c = False
        self.z = False

    def buttons(self):
        if self.c and self.z:
            raise minigame_app.RestartProgram()
        return self.c, self.z


class FakeJoystick:
    def __init__(self, events=()):
        self.nunchuck = FakeNunchuck()
        self.queue = list(events)
        self.direction = None

    def events(self):
        out, self.queue = self.queue, []
        return out

    def read_direction(self, possible_directions, debounce=True):
        return self.direction if self.direction in possible_directions else None

    def is_pressed(self):
        return False

    def flush(self):
        self.queue = []


@pytest.fixture(autouse=True)
def scores_in_tmp(tmp_path, monkeypatch):
    # HighScores writes next to the working directory
    monkeypatch.chdir(tmp_path)
    minigame_app.game_over = False
    minigame_app.global_score = 0


class CountingScreen(minigame_app.Screen):
    NAME = "COUNT"

    def reset(self):
        super().reset()
        self.frames_left = 3
        self.keys = []

    def on_key(self, name):
        self.keys.append(name)

    def tick(self, now, joystick):
        self.frames_left -= 1
        self.score += 10
        return self.frames_left > 0


def fast(screen):
    screen.frame_ms = 0
    return screen


def test_round_end_sets_game_over_and_score():
    fast(CountingScreen()).main_loop(FakeJoystick())
    assert minigame_app.game_over
    assert minigame_app.global_score == 30


def test_c_button_leaves_without_game_over():
    joystick = FakeJoystick()
    joystick.nunchuck.c = True
    fast(CountingScreen()).main_loop(joystick)
    assert not minigame_app.game_over


def test_restart_combo_unwinds_the_loop():
    joystick = FakeJoystick()
    joystick.nunchuck.c = joystick.nunchuck.z = True
    fast(CountingScreen()).main_loop(joystick)
    assert not minigame_app.game_over


def test_async_loop_matches_sync_loop():
    asyncio.run(fast(CountingScreen()).main_loop_async(FakeJoystick()))
    assert minigame_app.game_over
    assert minigame_app.global_score == 30


def test_buttons_route_to_keys():
    class WithButtons(CountingScreen):
        BUTTONS = (("NEW", "n"), ("UNDO", "u"))

    screen = WithButtons()
    screen.reset()
    undo = screen.buttons[1]
    screen.update(FakeJoystick([Click(undo.x + 2, undo.y + 2, 1, False), Key("q")]))
    assert screen.keys == ["u", "q"]


def test_double_click_detection():
    joystick = minigame_app.Joystick()
    assert not joystick._click(10, 10, 1, 1000).double
    assert joystick._click(11, 10, 1, 1200).double
    assert not joystick._click(11, 10, 1, 1300).double
    assert not joystick._click(11, 10, 1, 2000).double
    assert not joystick._click(11, 10, 3, 2100).double


@pytest.mark.parametrize("name", sorted(minigame_app.GAMES))
def test_every_screen_draws_headless(name):
    screen = minigame_app.GAMES[name]()
    screen.reset()
    screen.update(FakeJoystick())
    screen.flash("hello")
    screen.draw()
    assert isinstance(screen.status(), str)


def test_tictactoe_screen_clicks_and_keys():
    screen = minigame_app.TicTacToeGame()
    screen.reset()
    screen.update(FakeJoystick([Click(screen.X0 + 5, screen.Y0 + 5, 1, False), Key("5")]))
    assert screen.game.board[0] == "O"
    assert screen.game.board[4] == "X"
    restart = screen.buttons[0]
    screen.update(FakeJoystick([Click(restart.x + 1, restart.y + 1, 1, False)]))
    assert screen.game.board == [""] * 9


def test_sudoku_screen_keys():
    screen = minigame_app.SudokuGame("easy")
    screen.reset()
    game = screen.game
    screen.on_key("down")
    assert game.selected == (0, 0)
    screen.on_key("right")
    assert game.selected == (0, 1)
    screen.on_key("c")
    assert game.checks_used == 1
    assert screen.score == game.score
    screen.on_key("l")
    assert game.difficulty == "medium"
    screen.on_key("s")
    assert game.solving
    screen.on_key("s")
    assert not game.solving


def test_sudoku_screen_click_selects_cell():
    screen = minigame_app.SudokuGame("easy")
    screen.reset()
    x = screen.X0 + 2 * screen.CELL + 3
    y = screen.Y0 + 7 * screen.CELL + 3
    screen.on_click(Click(x, y, 1, False))
    assert screen.game.selected == (7, 2)


def test_route_screen_picks_route_and_reports_errors():
    screen = minigame_app.RouteFinderGame()
    screen.reset()
    screen.on_key("a")
    screen.on_key("a")
    assert screen.route is None
    assert "differ" in screen.message

    screen.on_key("e")
    assert screen.route.path == ["A", "B", "D", "E"]
    screen.tick(screen.last_ms + 100000, FakeJoystick())
    assert screen.traveled == pytest.approx(screen.length)


def test_route_screen_click_on_node():
    screen = minigame_app.RouteFinderGame()
    screen.reset()
    x, y = screen.to_screen(minigame_app.routefinder.NODES["C"])
    screen.on_click(Click(int(x), int(y), 1, False))
    assert screen.start == "C"


def test_minesweeper_screen_flags_with_right_click():
    screen = minigame_app.MinesweeperGame()
    screen.reset()
    screen.on_click(Click(screen.X0 + 1, screen.Y0 + 1, 3, False))
    assert (0, 0) in screen.game.flagged
    screen.on_key("f")
    assert (0, 0) not in screen.game.flagged


def test_snake_screen_game_over_ends_round():
    screen = minigame_app.SnakeGame()
    screen.reset()
    assert screen.HIGH_SCORE_KEY == "snakeHighScore"
    screen.on_key("return")
    game = screen.game
    assert game.state == "playing"
    game.body.clear()
    game.body.extend([(19, 3), (18, 3), (17, 3)])
    screen.step_ticker.start(0)
    assert screen.tick(10 ** 9, FakeJoystick()) is False
    assert game.state == "gameover"


def test_snake_screen_steers_from_joystick():
    screen = minigame_app.SnakeGame()
    screen.reset()
    screen.on_key("return")
    joystick = FakeJoystick()
    joystick.direction = minigame_app.JOYSTICK_UP
    screen.tick(screen.step_ticker.last, joystick)
    assert screen.game.next_direction == minigame_app.snake.UP


def test_hanoi_screen_keys_move_disks():
    screen = minigame_app.HanoiGame()
    screen.reset()
    screen.on_key("1")
    screen.on_key("3")
    assert screen.game.pegs["C"] == [1]
    screen.on_key("1")
    screen.on_key("3")
    assert screen.message.startswith("A larger disk")


def test_water_screen_keys():
    screen = minigame_app.WaterSortGame()
    screen.reset()
    screen.game.load([["red"], [], ["blue"]])
    screen.on_key("1")
    screen.on_key("2")
    assert screen.game.tubes[1].items == ["red"]
    screen.on_key("u")
    assert screen.game.tubes[0].items == ["red"]


def test_memory_screen_resolves_mismatch_after_delay():
    screen = minigame_app.MemoryMatchGame()
    screen.reset()
    game = screen.game
    first = 0
    second = next(i for i, c in enumerate(game.cards) if c.symbol != game.cards[0].symbol)
    game.flip(first)
    game.flip(second)
    screen.mismatch_at = 0
    screen.tick(minigame_app.memory_match.MISMATCH_DELAY_MS - 1, FakeJoystick())
    assert game.locked
    screen.tick(minigame_app.memory_match.MISMATCH_DELAY_MS, FakeJoystick())
    assert not game.locked


def test_solitaire_screen_stock_click_draws():
    screen = minigame_app.SolitaireGame()
    screen.reset()
    stock = len(screen.game.stock)
    screen.on_click(Click(screen.col_x(0) + 3, screen.TOP_Y + 3, 1, False))
    assert len(screen.game.waste) == 1
    assert len(screen.game.stock) == stock - 1
    screen.on_key("u")
    assert screen.game.waste == []


def test_freecell_screen_locates_piles():
    screen = minigame_app.FreeCellGame()
    screen.reset()
    slot, idx = screen.locate(screen.slot_x(minigame_app.freecell.Slot("freecell", 2)) + 2, screen.TOP_Y + 2)
    assert slot == minigame_app.freecell.Slot("freecell", 2)
    assert idx is None
    column = screen.game.tableau[0]
    top_y = screen.TAB_Y + (len(column) - 1) * screen.offset(len(column))
    slot, idx = screen.locate(screen.slot_x(minigame_app.freecell.Slot("tableau", 0)) + 2, top_y + 30)
    assert slot == minigame_app.freecell.Slot("tableau", 0)
    assert idx == len(column) - 1


def test_game_over_menu_accepts_clicks():
    menu = minigame_app.GameOverMenu(FakeJoystick([Click(240, 200, 1, False)]), 10, 20)
    assert menu._step(0) == "MENU"
    menu = minigame_app.GameOverMenu(FakeJoystick([Click(240, 160, 1, False)]), 10, 20)
    assert menu._step(0) == "RETRY"


def test_game_select_click_and_high_score():
    select = minigame_app.GameSelect()
    select.joystick = FakeJoystick([Click(100, select.LIST_Y + 4, 1, False)])
    assert select._step(0) == "FREECELL"

    minigame_app.global_score = 70
    menu = select._game_over_menu("SNAKE")
    assert menu.best == 70
    assert minigame_app.HighScores().best("snakeHighScore") == 70


class VirtualClock:
    def __init__(self):
        self.now = 0

    def ticks_ms(self):
        return self.now

    def sleep_ms(self, ms):
        self.now += ms


class TimedNunchuck(FakeNunchuck):
    """Holds C down once the clock reaches `until`, ending the loop."""

    def __init__(self, clock, until):
        super().__init__()
        self.clock = clock
        self.until = until

    def buttons(self):
        return self.clock.now >= self.until, False


@pytest.fixture
def clock(monkeypatch):
    clock = VirtualClock()
    monkeypatch.setattr(minigame_app, "ticks_ms", clock.ticks_ms)
    monkeypatch.setattr(minigame_app, "sleep_ms", clock.sleep_ms)
    return clock


def run_for(screen, clock, ms, events=()):
    joystick = FakeJoystick(events)
    joystick.nunchuck = TimedNunchuck(clock, ms)
    screen.main_loop(joystick)


def test_sudoku_solver_animation_keeps_its_step_rate(clock, monkeypatch):
    steps = []
    advance = minigame_app.sudoku.Sudoku.advance_solve

    def counting(self):
        steps.append(clock.now)
        return advance(self)

    monkeypatch.setattr(minigame_app.sudoku.Sudoku, "advance_solve", counting)
    run_for(minigame_app.SudokuGame("easy"), clock, 1000, [Key("s")])
    # frames land every 34 ms; the solver starts on the first one
    assert len(steps) == 19
    assert steps[-1] <= 1000


def test_snake_moves_at_its_tick_interval(clock):
    screen = minigame_app.SnakeGame()
    run_for(screen, clock, 1500, [Key("return")])
    game = screen.game
    assert game.state == "playing"
    assert game.speed == minigame_app.snake.INITIAL_SPEED
    # started at 34 ms heading right from x=9: one cell per 150 ms
    assert game.head[0] - 9 == 9


def test_snake_resumes_on_schedule_after_pause(clock):
    screen = minigame_app.SnakeGame()
    screen.reset()
    screen.on_key("return")
    screen.on_key("p")
    clock.now = 5000
    screen.on_key("p")
    assert screen.step_ticker.last == 5000
    assert screen.tick(5100, FakeJoystick())
    assert screen.game.head == (9, 10)
    screen.tick(5150, FakeJoystick())
    assert screen.game.head == (10, 10)


def test_hanoi_screen_shows_timer():
    screen = minigame_app.HanoiGame()
    screen.reset()
    assert screen.status().endswith("00:00")
    screen.on_key("1")
    assert screen.game.stopwatch.running
