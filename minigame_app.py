"""
This file contains the pygame front end for the minigame arcade: display
handling, keyboard and mouse input, the HUD, high-score storage, one screen
per game, the game-select menu and the entry points. It runs on desktop
CPython and in the browser through pygbag.

Game rules live in their own modules; nothing here decides whether a move
is legal.
"""

import argparse
import asyncio
import json
import logging
import math
import time
from collections import namedtuple

import env
import freecell
import hanoi
import memory_match
import minesweeper
import routefinder
import snake
import solitaire
import sudoku
import tictactoe
import watersort
from cards import COLOR, SUITS
from game_utils import BaseGame, Stopwatch, Ticker

logger = logging.getLogger(__name__)

# ---------- Runtime detection ----------
IS_PYGBAG = env.is_browser

# ---------- Const / Timing ----------
WIDTH = 480
HEIGHT = 360

HUD_HEIGHT = 20
PLAY_HEIGHT = HEIGHT - HUD_HEIGHT  # 340

SCALE = 2

FONT_SMALL = 18
FONT_MEDIUM = 24
FONT_LARGE = 36

# Shared between the screens and the menu loop; see BaseGame._frame.
game_over = False
global_score = 0


def sleep_ms(ms):
    """
    Sleep for the specified number of milliseconds.

    In the browser the frame loops yield through asyncio instead, so this
    returns at once rather than blocking the page.
    """
    if IS_PYGBAG:
        return
    time.sleep(ms / 1000)


def ticks_ms():
    """Return a monotonic millisecond counter."""
    return int(time.monotonic() * 1000)


def ticks_diff(a, b):
    return a - b


# ---------- Colors ----------
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RED = (220, 40, 40)
GREEN = (40, 200, 80)
BLUE = (50, 110, 230)
YELLOW = (250, 210, 40)
ORANGE = (250, 140, 30)
GREY = (140, 140, 140)
DARK_GREY = (60, 60, 60)
FELT = (20, 100, 50)
BOARD_BG = (25, 30, 45)
HUD_BG = (15, 15, 15)
CARD_BACK = (40, 70, 170)
SUIT_RED = (200, 20, 30)

# ---------- Display ----------


class _PyGameDisplay:
    def __init__(self, w, h, scale=SCALE):
        """
        Initialize the PyGame-based display.

        Args:
            w (int): Logical width in pixels.
            h (int): Logical height in pixels.
            scale (int): Window scaling factor.
        """
        self.w = int(w)
        self.h = int(h)
        self.scale = int(scale)
        self._pg = None
        self._screen = None
        self._surface = None
        self._fonts = {}
        self._inited = False

    def start(self):
        """
        Initialize the PyGame display and internal surfaces.

        This method is idempotent and will do nothing if initialization
        has already been performed.
        """
        if self._inited:
            return
        try:
            import pygame
        except ImportError as e:
            raise RuntimeError(
                "PyGame not installed. Install with: pip install pygame"
            ) from e
        self._pg = pygame
        pygame.init()
        # Audio init may wait for a user gesture in the browser.
        if IS_PYGBAG and hasattr(pygame, "mixer"):
            pygame.mixer.quit()
        pygame.display.set_caption("Minigame Arcade")
        self._screen = pygame.display.set_mode(
            (self.w * self.scale, self.h * self.scale)
        )
        self._surface = pygame.Surface((self.w, self.h))
        self.clear()
        self.show()
        self._inited = True
        logger.debug("display started at %dx%d scale %d", self.w, self.h, self.scale)

    def close(self):
        if self._pg and self._inited:
            self._pg.quit()
        self._screen = None
        self._surface = None
        self._fonts = {}
        self._inited = False

    @property
    def ready(self):
        return self._surface is not None

    def set_pixel(self, x, y, r, g, b):
        if not self._surface:
            return
        if 0 <= x < self.w and 0 <= y < self.h:
            self._surface.set_at(
                (int(x), int(y)), (int(r) & 255, int(g) & 255, int(b) & 255)
            )

    def clear(self, color=BLACK):
        if self._surface:
            self._surface.fill(color)

    def fill_rect(self, x, y, w, h, color):
        if self._surface:
            self._surface.fill(color, (int(x), int(y), int(w), int(h)))

    def rect(self, x, y, w, h, color, width=1):
        if self._surface:
            self._pg.draw.rect(self._surface, color, (int(x), int(y), int(w), int(h)), width)

    def line(self, x0, y0, x1, y1, color, width=1):
        if self._surface:
            self._pg.draw.line(
                self._surface, color, (int(x0), int(y0)), (int(x1), int(y1)), width
            )

    def circle(self, x, y, radius, color, width=0):
        if self._surface:
            self._pg.draw.circle(self._surface, color, (int(x), int(y)), int(radius), width)

    def polygon(self, points, color):
        if self._surface:
            self._pg.draw.polygon(self._surface, color, [(int(x), int(y)) for x, y in points])

    def _font(self, size):
        font = self._fonts.get(size)
        if font is None:
            font = self._pg.font.Font(None, size)
            self._fonts[size] = font
        return font

    def text_width(self, text, size=FONT_MEDIUM):
        if not self._surface:
            return len(str(text)) * size // 2
        return self._font(size).size(str(text))[0]

    def text(self, x, y, text, color, size=FONT_MEDIUM, center=False):
        """Draw `text` with its top-left (or centre) at (x, y)."""
        if not self._surface:
            return
        img = self._font(size).render(str(text), True, color)
        if center:
            x -= img.get_width() // 2
            y -= img.get_height() // 2
        self._surface.blit(img, (int(x), int(y)))

    def show(self):
        """
        Present the internal surface to the PyGame window (scaled).

        Also pumps the event queue to keep the window responsive.
        """
        if not self._pg or not self._screen or not self._surface:
            return
        self._pg.event.pump()
        scaled = self._pg.transform.scale(
            self._surface, (self.w * self.scale, self.h * self.scale)
        )
        self._screen.blit(scaled, (0, 0))
        self._pg.display.flip()


display = _PyGameDisplay(WIDTH, HEIGHT, scale=SCALE)


def draw_rectangle(x1, y1, x2, y2, r, g, b):
    display.fill_rect(x1, y1, x2 - x1 + 1, y2 - y1 + 1, (r, g, b))


def draw_text(x, y, text, r, g, b):
    display.text(x, y, text, (r, g, b), FONT_LARGE)


def draw_text_small(x, y, text, r, g, b):
    display.text(x, y, text, (r, g, b), FONT_SMALL)


# ---------- HUD ----------
_hud_last_ms = 0
_hud_time_str = "00:00"


def display_score_and_time(score, status="", force=False):
    """
    Render the HUD band: score on the left, the screen's status text in the
    middle and the wall clock on the right.
    """
    global _hud_last_ms, _hud_time_str, global_score
    global_score = int(score or 0)

    now = ticks_ms()
    if force or ticks_diff(now, _hud_last_ms) >= 1000:
        lt = time.localtime()
        _hud_time_str = "{:02}:{:02}".format(lt.tm_hour, lt.tm_min)
        _hud_last_ms = now

    draw_rectangle(0, PLAY_HEIGHT, WIDTH - 1, HEIGHT - 1, *HUD_BG)
    draw_text_small(4, PLAY_HEIGHT + 4, str(global_score), *WHITE)
    if status:
        display.text(WIDTH // 2, PLAY_HEIGHT + HUD_HEIGHT // 2, status, GREY, FONT_SMALL, center=True)
    time_x = WIDTH - display.text_width(_hud_time_str, FONT_SMALL) - 4
    draw_text_small(time_x, PLAY_HEIGHT + 4, _hud_time_str, *WHITE)


class RestartProgram(Exception):
    """
    Special exception used to unwind any screen back to the menu.
    Raised by input handlers on special button combinations.
    """

    pass


# ---------- Input ----------
JOYSTICK_UP = "UP"
JOYSTICK_DOWN = "DOWN"
JOYSTICK_LEFT = "LEFT"
JOYSTICK_RIGHT = "RIGHT"

DOUBLE_CLICK_MS = 400
DOUBLE_CLICK_SLOP = 4

Click = namedtuple("Click", "x y button double")
Key = namedtuple("Key", "name")


class Nunchuck:
    def __init__(self):
        """Keyboard-held state presented as C/Z buttons and an analog stick."""
        self._z = False
        self._c = False
        self._x = 128
        self._y = 128

    def _poll(self):
        import pygame

        pygame.event.pump()
        keys = pygame.key.get_pressed()
        left = keys[pygame.K_LEFT]
        right = keys[pygame.K_RIGHT]
        up = keys[pygame.K_UP]
        down = keys[pygame.K_DOWN]

        # Z button: z/space/enter
        self._z = bool(
            keys[pygame.K_z] or keys[pygame.K_SPACE] or keys[pygame.K_RETURN]
        )
        # C button: x/escape
        self._c = bool(keys[pygame.K_x] or keys[pygame.K_ESCAPE])

        x = 128
        y = 128
        if left and not right:
            x = 0
        elif right and not left:
            x = 255
        if up and not down:
            y = 255
        elif down and not up:
            y = 0
        self._x = x
        self._y = y

    def buttons(self):
        """
        Return (c_button, z_button) from keyboard input.
        Raises `RestartProgram` when both are held.
        """
        self._poll()
        if self._c and self._z:
            raise RestartProgram()
        return self._c, self._z

    def joystick(self):
        self._poll()
        return (self._x, self._y)


class Joystick:
    def __init__(self):
        """Held-key polling through `Nunchuck` plus queued clicks and key presses."""
        self.nunchuck = Nunchuck()
        self._last_click = None

    def read_direction(self, possible_directions, debounce=True):
        """Convert the held arrow keys to a direction string."""
        x, y = self.nunchuck.joystick()

        if x < 100 and JOYSTICK_LEFT in possible_directions:
            return JOYSTICK_LEFT
        if x > 150 and JOYSTICK_RIGHT in possible_directions:
            return JOYSTICK_RIGHT
        if y < 100 and JOYSTICK_DOWN in possible_directions:
            return JOYSTICK_DOWN
        if y > 150 and JOYSTICK_UP in possible_directions:
            return JOYSTICK_UP
        return None

    def is_pressed(self):
        """Return whether the primary action is held."""
        _, z = self.nunchuck.buttons()
        return z

    def events(self):
        """
        Drain the pygame queue into `Click` and `Key` events with
        coordinates in logical pixels. Closing the window raises SystemExit.
        """
        import pygame

        out = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                raise SystemExit(0)
            if event.type == pygame.KEYDOWN:
                out.append(Key(pygame.key.name(event.key).strip("[]")))
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3):
                x = event.pos[0] // display.scale
                y = event.pos[1] // display.scale
                out.append(self._click(x, y, event.button, ticks_ms()))
        return out

    def _click(self, x, y, button, now):
        double = False
        if button == 1:
            last = self._last_click
            if (
                last
                and ticks_diff(now, last[0]) <= DOUBLE_CLICK_MS
                and abs(x - last[1]) <= DOUBLE_CLICK_SLOP
                and abs(y - last[2]) <= DOUBLE_CLICK_SLOP
            ):
                double = True
                self._last_click = None
            else:
                self._last_click = (now, x, y)
        return Click(x, y, button, double)

    def flush(self):
        """Drop queued events, e.g. the key press that opened a screen."""
        if display.ready:
            import pygame

            pygame.event.clear()
        self._last_click = None


# ---------- Highscores ----------


def _local_storage():
    env.require_browser()
    # pygbag exposes the page's window object through the platform module
    import platform

    return platform.window.localStorage


class HighScores:
    """
    Persistent high scores: a JSON file on the desktop, the page's
    localStorage in the browser (one integer per key).
    """

    FILE = "highscores.json"
    KEYS = (snake.HIGH_SCORE_KEY,)

    def __init__(self, path=None):
        self.path = path or self.FILE
        self.scores = {}
        self.load()

    def load(self):
        """Load stored scores. Unreadable storage counts as no scores."""
        if IS_PYGBAG:
            self.scores = self._load_local_storage()
            return
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            self.scores = {}
            return
        except (OSError, ValueError):
            logger.exception("could not read high scores from %s", self.path)
            self.scores = {}
            return
        self.scores = data if isinstance(data, dict) else {}

    def _load_local_storage(self):
        storage = _local_storage()
        scores = {}
        for key in self.KEYS:
            value = storage.getItem(key)
            if not value:
                continue
            try:
                scores[key] = int(value)
            except (TypeError, ValueError):
                logger.warning("ignoring bad stored score %r for %s", value, key)
        return scores

    def save(self):
        if IS_PYGBAG:
            storage = _local_storage()
            for key, value in self.scores.items():
                storage.setItem(key, str(value))
            return
        try:
            with open(self.path, "w") as f:
                json.dump(self.scores, f)
        except OSError:
            logger.exception("could not write high scores to %s", self.path)

    def best(self, key):
        try:
            return int(self.scores.get(key, 0) or 0)
        except (TypeError, ValueError):
            return 0

    def update(self, key, score):
        """Store `score` for `key` if it beats the best. Returns True on change."""
        score = int(score or 0)
        if score > self.best(key):
            self.scores[key] = score
            self.save()
            logger.info("new high score for %s: %d", key, score)
            return True
        return False


# ---------- Screen helpers ----------
Button = namedtuple("Button", "label key x y w h")


def button_row(specs, y=PLAY_HEIGHT - 26, h=22, margin=6):
    """Lay `(label, key)` pairs out as equal-width buttons across the screen."""
    n = len(specs)
    w = (WIDTH - margin * (n + 1)) // n
    return [
        Button(label, key, margin + i * (w + margin), y, w, h)
        for i, (label, key) in enumerate(specs)
    ]


def hit(x, y, rx, ry, rw, rh):
    return rx <= x < rx + rw and ry <= y < ry + rh


def draw_button(button):
    display.fill_rect(button.x, button.y, button.w, button.h, DARK_GREY)
    display.rect(button.x, button.y, button.w, button.h, GREY)
    display.text(
        button.x + button.w // 2, button.y + button.h // 2, button.label, WHITE, FONT_SMALL, center=True
    )


def draw_suit(cx, cy, size, suit):
    """Draw a suit pip of roughly `size` pixels centred on (cx, cy)."""
    color = SUIT_RED if COLOR[suit] == "red" else BLACK
    r = max(2, size // 4)
    if suit == "diamonds":
        display.polygon([(cx, cy - 2 * r), (cx + r + r // 2, cy), (cx, cy + 2 * r), (cx - r - r // 2, cy)], color)
    elif suit == "hearts":
        display.circle(cx - r, cy - r // 2, r, color)
        display.circle(cx + r, cy - r // 2, r, color)
        display.polygon([(cx - 2 * r, cy), (cx + 2 * r, cy), (cx, cy + 2 * r)], color)
    elif suit == "spades":
        display.polygon([(cx - 2 * r, cy + r // 2), (cx + 2 * r, cy + r // 2), (cx, cy - 2 * r)], color)
        display.circle(cx - r, cy + r // 2, r, color)
        display.circle(cx + r, cy + r // 2, r, color)
        display.fill_rect(cx - 1, cy + r, 3, r + 2, color)
    else:
        display.circle(cx, cy - r, r, color)
        display.circle(cx - r, cy + r // 2, r, color)
        display.circle(cx + r, cy + r // 2, r, color)
        display.fill_rect(cx - 1, cy + r, 3, r + 2, color)


def draw_card(x, y, w, h, card, outline=None):
    """Draw a card, a face-down back, or an empty slot when `card` is None."""
    if card is None:
        display.rect(x, y, w, h, GREY)
    elif not card.face_up:
        display.fill_rect(x, y, w, h, CARD_BACK)
        display.rect(x + 3, y + 3, w - 6, h - 6, WHITE)
    else:
        display.fill_rect(x, y, w, h, WHITE)
        display.rect(x, y, w, h, DARK_GREY)
        color = SUIT_RED if card.color == "red" else BLACK
        display.text(x + 3, y + 3, card.rank, color, FONT_SMALL)
        draw_suit(x + w - 10, y + 10, 12, card.suit)
        draw_suit(x + w // 2, y + h // 2 + 6, 22, card.suit)
    if outline:
        display.rect(x - 1, y - 1, w + 2, h + 2, outline, 2)


class Screen(BaseGame):
    """
    BaseGame with the event dispatch, clickable buttons and transient
    message banner shared by every game screen.
    """

    BACKGROUND = BOARD_BG
    BUTTONS = ()

    def __init__(self):
        super().__init__()
        self.buttons = button_row(self.BUTTONS) if self.BUTTONS else []
        self.message = ""
        self.message_color = WHITE
        self.message_until = 0

    def flash(self, text, color=WHITE, ms=1500):
        """Show `text` in a banner for `ms` milliseconds."""
        self.message = text
        self.message_color = color
        self.message_until = ticks_ms() + ms

    def update(self, joystick):
        for event in joystick.events():
            if isinstance(event, Key):
                self.on_key(event.name)
                continue
            for b in self.buttons:
                if event.button == 1 and hit(event.x, event.y, b.x, b.y, b.w, b.h):
                    self.on_key(b.key)
                    break
            else:
                self.on_click(event)
        return self.tick(ticks_ms(), joystick)

    def on_key(self, name):
        pass

    def on_click(self, click):
        pass

    def tick(self, now, joystick):
        """Advance timers. Return False to end the round."""
        return True

    def render(self):
        pass

    def draw(self):
        display.clear(self.BACKGROUND)
        self.render()
        for b in self.buttons:
            draw_button(b)
        if self.message and ticks_diff(self.message_until, ticks_ms()) > 0:
            w = display.text_width(self.message, FONT_MEDIUM) + 24
            y = PLAY_HEIGHT // 2 - 18
            display.fill_rect((WIDTH - w) // 2, y, w, 36, BLACK)
            display.rect((WIDTH - w) // 2, y, w, 36, self.message_color)
            display.text(WIDTH // 2, y + 18, self.message, self.message_color, FONT_MEDIUM, center=True)


def draw_panel(x, y, lines):
    """Draw a column of (text, color) lines."""
    for i, (text, color) in enumerate(lines):
        display.text(x, y + i * 22, text, color, FONT_SMALL)


# ---------- Sudoku ----------


class SudokuGame(Screen):
    NAME = "SUDOKU"
    BUTTONS = (
        ("NEW", "n"),
        ("CHECK", "c"),
        ("HINT", "h"),
        ("RESET", "r"),
        ("SOLVE", "s"),
        ("LEVEL", "l"),
    )
    CELL = 32
    X0 = 12
    Y0 = 10
    LEVELS = tuple(sudoku.DIFFICULTY)

    STEP_COLORS = {
        sudoku.STEP_TRY: (90, 80, 20),
        sudoku.STEP_PLACE: (20, 90, 40),
        sudoku.STEP_BACKTRACK: (100, 30, 30),
    }

    def __init__(self, difficulty=sudoku.DEFAULT_DIFFICULTY):
        super().__init__()
        self.game = sudoku.Sudoku(difficulty)
        self.conflicts = []
        self.solve_ticker = Ticker(sudoku.SOLVE_STEP_MS)
        self.announced = False

    def reset(self):
        super().reset()
        self.game.new_game()
        self.conflicts = []
        self.announced = False
        self.score = self.game.score

    def status(self):
        return "%s  %s" % (self.game.difficulty.upper(), self.game.stopwatch)

    def on_key(self, name):
        g = self.game
        if name == "n":
            g.new_game()
            self.conflicts = []
            self.announced = False
        elif name == "l":
            i = self.LEVELS.index(g.difficulty)
            g.difficulty = self.LEVELS[(i + 1) % len(self.LEVELS)]
            g.new_game()
            self.conflicts = []
            self.announced = False
            self.flash("Level: " + g.difficulty)
        elif name == "s":
            if g.solving:
                g.stop_solve()
                self.flash("Solver stopped")
            elif g.auto_solve():
                self.conflicts = []
                self.solve_ticker.start(ticks_ms())
        elif name == "c":
            if g.state == "playing":
                self.conflicts = g.check()
                if self.conflicts:
                    self.flash("%d conflicting cells" % len(self.conflicts), RED)
                else:
                    self.flash("No conflicts", GREEN)
        elif name == "h":
            if g.state == "playing" and g.use_hint() is None:
                self.flash("No empty cells")
        elif name == "r":
            g.reset()
            self.conflicts = []
        elif name in ("up", "down", "left", "right"):
            if g.selected is None:
                g.select(0, 0)
            else:
                drow, dcol = {"up": (-1, 0), "down": (1, 0), "left": (0, -1), "right": (0, 1)}[name]
                g.move_selection(drow, dcol)
        elif name.isdigit() and len(name) == 1:
            if g.enter(int(name)):
                self.conflicts = []
        elif name in ("backspace", "delete"):
            g.enter(0)
        self.score = g.score

    def on_click(self, click):
        col = (click.x - self.X0) // self.CELL
        row = (click.y - self.Y0) // self.CELL
        if 0 <= row < sudoku.SIZE and 0 <= col < sudoku.SIZE:
            self.game.select(row, col)

    def tick(self, now, joystick):
        g = self.game
        if g.solving and self.solve_ticker.due(now):
            g.advance_solve()
        if g.state == "complete" and not self.announced:
            self.announced = True
            if g.auto_solved:
                self.flash("Solved by the computer", YELLOW, 3000)
            else:
                self.flash("Puzzle solved! Score %d" % g.score, GREEN, 3000)
        self.score = g.score
        return True

    def render(self):
        g = self.game
        c = self.CELL
        step = g.last_step
        for row in range(sudoku.SIZE):
            for col in range(sudoku.SIZE):
                x = self.X0 + col * c
                y = self.Y0 + row * c
                bg = (40, 45, 65)
                if g.selected == (row, col):
                    bg = (60, 90, 150)
                elif (row, col) in self.conflicts:
                    bg = (120, 30, 30)
                elif step and (step.row, step.col) == (row, col):
                    bg = self.STEP_COLORS[step.kind]
                display.fill_rect(x, y, c, c, bg)
                display.rect(x, y, c, c, DARK_GREY)
                v = g.board.get_value(row, col)
                if v:
                    color = WHITE if g.board.is_original(row, col) else (120, 180, 255)
                    display.text(x + c // 2, y + c // 2, v, color, FONT_MEDIUM, center=True)
        for i in range(0, sudoku.SIZE + 1, sudoku.BOX):
            display.line(self.X0 + i * c, self.Y0, self.X0 + i * c, self.Y0 + 9 * c, GREY, 2)
            display.line(self.X0, self.Y0 + i * c, self.X0 + 9 * c, self.Y0 + i * c, GREY, 2)

        lines = [
            ("Level: " + g.difficulty, WHITE),
            ("Empty: %d" % g.board.count_empty(), WHITE),
            ("Checks: %d" % g.checks_used, WHITE),
            ("Hints: %d" % g.hints_used, WHITE),
        ]
        if g.solving:
            lines.append(("Solving...", YELLOW))
        elif g.state == "complete":
            lines.append(("Complete", GREEN))
        draw_panel(318, 14, lines)


# ---------- Route finder ----------


class RouteFinderGame(Screen):
    NAME = "ROUTE"
    BUTTONS = (("CLEAR", "n"),)
    MAP_SCALE = 0.7
    MAP_X = 20
    MAP_Y = 0
    NODE_R = 14

    def reset(self):
        super().reset()
        self.start = None
        self.end = None
        self.route = None
        self.traveled = 0.0
        self.length = 0.0
        self.last_ms = ticks_ms()

    def status(self):
        if self.route:
            return "%s  distance %d" % ("-".join(self.route.path), self.route.distance)
        if self.start:
            return "from %s: pick a destination" % self.start
        return "pick a start house"

    def to_screen(self, point):
        x, y = point
        return (self.MAP_X + x * self.MAP_SCALE, self.MAP_Y + y * self.MAP_SCALE)

    def node_at(self, x, y):
        for name, point in routefinder.NODES.items():
            sx, sy = self.to_screen(point)
            if math.hypot(sx - x, sy - y) <= self.NODE_R:
                return name
        return None

    def on_click(self, click):
        name = self.node_at(click.x, click.y)
        if name:
            self.choose(name)

    def on_key(self, name):
        if name == "n":
            self.reset()
        elif name.upper() in routefinder.NODES:
            self.choose(name.upper())

    def choose(self, node):
        if self.start is None or self.route is not None:
            self.start = node
            self.end = None
            self.route = None
            self.traveled = 0.0
            return
        try:
            route = routefinder.find_route(self.start, node)
        except routefinder.RouteError as e:
            self.flash(str(e), RED)
            return
        self.end = node
        self.route = route
        self.traveled = 0.0
        self.length = routefinder.route_length(route.path)
        logger.debug("route %s distance %s", route.path, route.distance)

    def tick(self, now, joystick):
        dt = ticks_diff(now, self.last_ms)
        self.last_ms = now
        if self.route:
            self.traveled = min(self.length, self.traveled + routefinder.CAR_SPEED * dt / 1000)
        return True

    def render(self):
        on_route = routefinder.route_edges(self.route.path) if self.route else set()
        for a, b in routefinder.road_edges():
            ax, ay = self.to_screen(routefinder.NODES[a])
            bx, by = self.to_screen(routefinder.NODES[b])
            lit = (a, b) in on_route
            display.line(ax, ay, bx, by, YELLOW if lit else GREY, 4 if lit else 2)
            display.text(
                (ax + bx) / 2, (ay + by) / 2 - 8, routefinder.GRAPH[a][b], WHITE, FONT_SMALL, center=True
            )
        for name, point in routefinder.NODES.items():
            x, y = self.to_screen(point)
            color = BLUE
            if name == self.start:
                color = GREEN
            elif name == self.end:
                color = RED
            display.circle(x, y, self.NODE_R, color)
            display.text(x, y, name, WHITE, FONT_MEDIUM, center=True)
        if self.route:
            x, y = self.to_screen(routefinder.point_along(self.route.path, self.traveled))
            display.fill_rect(x - 6, y - 4, 12, 8, ORANGE)


# ---------- Minesweeper ----------


class MinesweeperGame(Screen):
    NAME = "MINES"
    BUTTONS = (("NEW", "n"), ("FLAG", "f"))
    CELL = 32
    X0 = 12
    Y0 = 10
    COUNT_COLORS = {
        1: (90, 150, 255),
        2: (60, 190, 90),
        3: (230, 70, 70),
        4: (150, 90, 220),
        5: (200, 120, 40),
        6: (40, 190, 190),
        7: WHITE,
        8: GREY,
    }

    def reset(self):
        super().reset()
        self.game = minesweeper.Minesweeper()
        self.cursor = (minesweeper.ROWS // 2, minesweeper.COLS // 2)
        self.announced = False

    def status(self):
        g = self.game
        return "mines %d  moves %d  %s" % (g.mines_remaining, g.moves, g.stopwatch)

    def on_key(self, name):
        row, col = self.cursor
        if name == "n":
            self.reset()
        elif name == "f":
            self.game.toggle_flag(row, col)
        elif name in ("return", "space"):
            self.game.reveal(row, col)
        elif name in ("up", "down", "left", "right"):
            drow, dcol = {"up": (-1, 0), "down": (1, 0), "left": (0, -1), "right": (0, 1)}[name]
            self.cursor = (
                min(self.game.rows - 1, max(0, row + drow)),
                min(self.game.cols - 1, max(0, col + dcol)),
            )

    def on_click(self, click):
        col = (click.x - self.X0) // self.CELL
        row = (click.y - self.Y0) // self.CELL
        if not (0 <= row < self.game.rows and 0 <= col < self.game.cols):
            return
        self.cursor = (row, col)
        if click.button == 3:
            self.game.toggle_flag(row, col)
        else:
            self.game.reveal(row, col)

    def tick(self, now, joystick):
        g = self.game
        self.score = g.revealed_safe
        if g.over and not self.announced:
            self.announced = True
            if g.won:
                self.flash("Cleared in %s!" % g.stopwatch, GREEN, 3000)
            else:
                self.flash("Boom! Press N for a new board", RED, 3000)
        return True

    def render(self):
        g = self.game
        c = self.CELL
        for row in range(g.rows):
            for col in range(g.cols):
                x = self.X0 + col * c
                y = self.Y0 + row * c
                cell = g.board[row][col]
                if (row, col) in g.revealed:
                    bg = (150, 40, 40) if (row, col) == g.exploded else (70, 75, 90)
                    display.fill_rect(x, y, c, c, bg)
                    if cell.mine:
                        display.circle(x + c // 2, y + c // 2, c // 4, BLACK)
                    elif cell.count:
                        display.text(x + c // 2, y + c // 2, cell.count, self.COUNT_COLORS[cell.count], FONT_MEDIUM, center=True)
                else:
                    display.fill_rect(x, y, c, c, (110, 120, 145))
                    if (row, col) in g.flagged:
                        display.polygon([(x + 10, y + 6), (x + 24, y + 12), (x + 10, y + 18)], RED)
                        display.line(x + 10, y + 6, x + 10, y + 26, BLACK, 2)
                display.rect(x, y, c, c, DARK_GREY)
        r, cc = self.cursor
        display.rect(self.X0 + cc * c, self.Y0 + r * c, c, c, YELLOW, 2)
        draw_panel(318, 14, [
            ("Mines left: %d" % g.mines_remaining, WHITE),
            ("Moves: %d" % g.moves, WHITE),
            ("Cleared: %d/%d" % (g.revealed_safe, g.total_safe), WHITE),
            ("Right click: flag", GREY),
        ])


# ---------- Snake ----------


class SnakeGame(Screen):
    NAME = "SNAKE"
    HIGH_SCORE_KEY = snake.HIGH_SCORE_KEY
    CELL = 15
    X0 = 10
    Y0 = 10
    DIRECTIONS = {
        JOYSTICK_UP: snake.UP,
        JOYSTICK_DOWN: snake.DOWN,
        JOYSTICK_LEFT: snake.LEFT,
        JOYSTICK_RIGHT: snake.RIGHT,
    }

    def reset(self):
        super().reset()
        self.game = snake.Snake(high_score=HighScores().best(self.HIGH_SCORE_KEY))
        self.step_ticker = Ticker(snake.INITIAL_SPEED)
        self.step_ticker.start(ticks_ms())

    def status(self):
        return "best %d  length %d" % (self.game.high_score, len(self.game))

    def on_key(self, name):
        g = self.game
        if name in ("return", "space", "z") and g.state == "waiting":
            g.start()
            self.step_ticker.start(ticks_ms())
        elif name == "p":
            if g.toggle_pause() == "playing":
                self.step_ticker.start(ticks_ms())

    def on_click(self, click):
        if self.game.state == "waiting":
            self.on_key("return")

    def tick(self, now, joystick):
        g = self.game
        if g.state == "playing":
            d = joystick.read_direction(list(self.DIRECTIONS))
            if d:
                g.steer(self.DIRECTIONS[d])
            self.step_ticker.interval = g.speed
            if self.step_ticker.due(now):
                g.step()
        self.score = g.score
        return g.state != "gameover"

    def render(self):
        g = self.game
        c = self.CELL
        size = g.size * c
        display.fill_rect(self.X0, self.Y0, size, size, BLACK)
        display.rect(self.X0 - 2, self.Y0 - 2, size + 4, size + 4, GREY, 2)
        if g.food:
            fx, fy = g.food
            display.circle(self.X0 + fx * c + c // 2, self.Y0 + fy * c + c // 2, c // 2 - 1, RED)
        for i, (x, y) in enumerate(g.body):
            color = (120, 255, 120) if i == 0 else GREEN
            display.fill_rect(self.X0 + x * c + 1, self.Y0 + y * c + 1, c - 2, c - 2, color)
        lines = [
            ("Score: %d" % g.score, WHITE),
            ("Best: %d" % g.high_score, WHITE),
            ("Speed: %d ms" % g.speed, WHITE),
        ]
        if g.state == "waiting":
            lines.append(("ENTER to start", YELLOW))
        elif g.state == "paused":
            lines.append(("Paused (P)", YELLOW))
        draw_panel(322, 14, lines)


# ---------- Tic-Tac-Toe ----------


class TicTacToeGame(Screen):
    NAME = "TICTAC"
    BUTTONS = (("RESTART", "n"),)
    CELL = 90
    X0 = (WIDTH - 3 * 90) // 2
    Y0 = 16

    def reset(self):
        super().reset()
        self.game = tictactoe.TicTacToe()

    def status(self):
        t = self.game.tallies
        return "O %d  X %d  draws %d" % (t[tictactoe.PLAYER_O], t[tictactoe.PLAYER_X], t["draw"])

    def place(self, index):
        g = self.game
        if not g.place(index):
            return
        if g.winner:
            self.flash("%s wins!" % g.winner, GREEN, 2500)
        elif g.over:
            self.flash("Draw", YELLOW, 2500)

    def on_key(self, name):
        if name == "n":
            self.game.restart()
        elif name.isdigit() and name != "0":
            self.place(int(name) - 1)

    def on_click(self, click):
        col = (click.x - self.X0) // self.CELL
        row = (click.y - self.Y0) // self.CELL
        if 0 <= row < 3 and 0 <= col < 3:
            self.place(row * 3 + col)

    def render(self):
        g = self.game
        c = self.CELL
        for i, mark in enumerate(g.board):
            x = self.X0 + (i % 3) * c
            y = self.Y0 + (i // 3) * c
            lit = g.winning_line and i in g.winning_line
            display.fill_rect(x, y, c, c, (60, 80, 60) if lit else (40, 45, 65))
            display.rect(x, y, c, c, GREY, 2)
            cx, cy = x + c // 2, y + c // 2
            if mark == tictactoe.PLAYER_O:
                display.circle(cx, cy, 30, BLUE, 6)
            elif mark == tictactoe.PLAYER_X:
                display.line(cx - 26, cy - 26, cx + 26, cy + 26, RED, 7)
                display.line(cx - 26, cy + 26, cx + 26, cy - 26, RED, 7)
        if not g.over:
            display.text(WIDTH // 2, self.Y0 + 3 * c + 12, "%s to move" % g.current, WHITE, FONT_SMALL, center=True)


# ---------- Tower of Hanoi ----------


class HanoiGame(Screen):
    NAME = "HANOI"
    BUTTONS = (("RESET", "n"), ("SOLVE", "s"))
    PEG_X = {"A": 80, "B": 240, "C": 400}
    BASE_Y = 280
    DISK_H = 20
    KEYS = {"1": "A", "2": "B", "3": "C", "a": "A", "b": "B", "c": "C"}
    DISK_COLORS = [RED, ORANGE, YELLOW, GREEN, BLUE, (150, 90, 220), (40, 190, 190)]

    def reset(self):
        super().reset()
        self.game = hanoi.Hanoi()
        self.solve_ticker = Ticker(hanoi.SOLVE_STEP_MS)
        self.announced = False

    def status(self):
        g = self.game
        return "moves %d  minimum %d  %s" % (g.moves, g.min_moves, g.stopwatch)

    def click_peg(self, peg):
        if self.game.click(peg) == "invalid":
            self.flash("A larger disk cannot go on a smaller one", RED, hanoi.WARNING_MS)

    def on_key(self, name):
        g = self.game
        if name == "n":
            self.reset()
        elif name == "s":
            if g.toggle_auto_solve():
                self.announced = False
                self.solve_ticker.start(ticks_ms())
        elif name in self.KEYS:
            self.click_peg(self.KEYS[name])

    def on_click(self, click):
        for peg, px in self.PEG_X.items():
            if abs(click.x - px) < 80 and click.y < self.BASE_Y + 20:
                self.click_peg(peg)
                return

    def tick(self, now, joystick):
        g = self.game
        if g.solving and self.solve_ticker.due(now):
            g.advance_solve()
        if g.is_solved() and not self.announced:
            self.announced = True
            self.flash("Solved in %d moves, %s" % (g.moves, g.stopwatch), GREEN, 3000)
        return True

    def render(self):
        g = self.game
        display.fill_rect(20, self.BASE_Y, WIDTH - 40, 10, (120, 90, 60))
        for peg, px in self.PEG_X.items():
            color = YELLOW if g.selected == peg else (150, 120, 80)
            display.fill_rect(px - 4, self.BASE_Y - 160, 8, 160, color)
            display.text(px, self.BASE_Y + 22, peg, WHITE, FONT_MEDIUM, center=True)
            for level, disk in enumerate(g.pegs[peg]):
                w = 30 + disk * 22
                y = self.BASE_Y - (level + 1) * self.DISK_H
                color = self.DISK_COLORS[(disk - 1) % len(self.DISK_COLORS)]
                display.fill_rect(px - w // 2, y + 1, w, self.DISK_H - 2, color)
        if g.solving:
            display.text(WIDTH // 2, 20, "Auto-solving... (S to stop)", YELLOW, FONT_SMALL, center=True)


# ---------- Water Sort ----------


class WaterSortGame(Screen):
    NAME = "WATER"
    BUTTONS = (("NEW", "n"), ("UNDO", "u"))
    UNIT_H = 36
    TUBE_W = 44
    TOP_Y = 80
    LIQUID = {
        "red": (230, 60, 60),
        "blue": (60, 110, 240),
        "green": (60, 200, 90),
        "yellow": (240, 210, 50),
        "purple": (160, 80, 220),
        "orange": (250, 150, 40),
        "pink": (250, 120, 190),
        "cyan": (60, 210, 220),
    }

    def reset(self):
        super().reset()
        self.game = watersort.WaterSort()
        self.announced = False

    def status(self):
        return "moves %d  sorted %d" % (self.game.moves, self.game.sorted_tubes)

    def tube_x(self, i):
        n = len(self.game.tubes)
        return (i + 1) * WIDTH // (n + 1) - self.TUBE_W // 2

    def on_key(self, name):
        if name == "n":
            self.reset()
        elif name == "u":
            self.game.undo()
            self.announced = False
        elif name.isdigit() and 1 <= int(name) <= len(self.game.tubes):
            self.game.click(int(name) - 1)

    def on_click(self, click):
        height = self.game.tubes[0].capacity * self.UNIT_H + 12
        for i in range(len(self.game.tubes)):
            if hit(click.x, click.y, self.tube_x(i) - 8, self.TOP_Y - 20, self.TUBE_W + 16, height + 40):
                if self.game.click(i) == "invalid":
                    self.flash("Can't pour there", RED, 800)
                return

    def tick(self, now, joystick):
        self.score = self.game.score
        if self.game.complete and not self.announced:
            self.announced = True
            self.flash("All colours sorted!", GREEN, 3000)
        return True

    def render(self):
        g = self.game
        for i, tube in enumerate(g.tubes):
            x = self.tube_x(i)
            y = self.TOP_Y - (14 if g.selected == i else 0)
            height = tube.capacity * self.UNIT_H
            for level, color in enumerate(tube.items):
                uy = y + height - (level + 1) * self.UNIT_H
                display.fill_rect(x + 3, uy, self.TUBE_W - 6, self.UNIT_H, self.LIQUID.get(color, GREY))
            outline = YELLOW if g.selected == i else (GREEN if tube.is_complete() else WHITE)
            display.rect(x, y - 6, self.TUBE_W, height + 9, outline, 2)
            display.text(x + self.TUBE_W // 2, self.TOP_Y + height + 20, i + 1, GREY, FONT_SMALL, center=True)


# ---------- Memory Match ----------


class MemoryMatchGame(Screen):
    NAME = "MEMORY"
    BUTTONS = (("NEW", "n"),)
    CARD = 64
    GAP = 8
    X0 = (WIDTH - 4 * 72 + 8) // 2
    Y0 = 16
    FACES = {
        "apple": ("AP", (220, 50, 50)),
        "banana": ("BA", (240, 210, 60)),
        "grape": ("GR", (140, 70, 200)),
        "strawberry": ("ST", (240, 80, 110)),
        "cherry": ("CH", (180, 20, 50)),
        "kiwi": ("KI", (120, 180, 60)),
        "pineapple": ("PI", (230, 170, 40)),
        "peach": ("PE", (250, 160, 120)),
    }

    def reset(self):
        super().reset()
        self.game = memory_match.MemoryMatch()
        self.game.start()
        self.mismatch_at = 0
        self.announced = False

    def status(self):
        g = self.game
        return "moves %d  pairs %d/%d  %s" % (g.moves, g.matched_pairs, g.total_pairs, g.stopwatch)

    def on_key(self, name):
        if name == "n":
            self.reset()

    def on_click(self, click):
        step = self.CARD + self.GAP
        col = (click.x - self.X0) // step
        row = (click.y - self.Y0) // step
        if 0 <= row < memory_match.ROWS and 0 <= col < memory_match.COLS:
            if self.game.flip(row * memory_match.COLS + col) == "mismatch":
                self.mismatch_at = ticks_ms()

    def tick(self, now, joystick):
        g = self.game
        if g.locked and ticks_diff(now, self.mismatch_at) >= memory_match.MISMATCH_DELAY_MS:
            g.resolve_mismatch()
        if g.state == "complete" and not self.announced:
            self.announced = True
            self.flash("All pairs found in %d moves, %s" % (g.moves, g.stopwatch), GREEN, 3000)
        self.score = g.score
        return True

    def render(self):
        step = self.CARD + self.GAP
        for i, card in enumerate(self.game.cards):
            x = self.X0 + (i % memory_match.COLS) * step
            y = self.Y0 + (i // memory_match.COLS) * step
            if card.flipped or card.matched:
                label, color = self.FACES.get(card.symbol, (card.symbol[:2].upper(), WHITE))
                display.fill_rect(x, y, self.CARD, self.CARD, (235, 235, 235))
                display.circle(x + self.CARD // 2, y + self.CARD // 2, 22, color)
                display.text(x + self.CARD // 2, y + self.CARD // 2, label, WHITE, FONT_MEDIUM, center=True)
                if card.matched:
                    display.rect(x, y, self.CARD, self.CARD, GREEN, 3)
            else:
                display.fill_rect(x, y, self.CARD, self.CARD, CARD_BACK)
                display.rect(x + 4, y + 4, self.CARD - 8, self.CARD - 8, WHITE)


# ---------- FreeCell ----------


class FreeCellGame(Screen):
    NAME = "FREECELL"
    BACKGROUND = FELT
    BUTTONS = (("NEW", "n"), ("UNDO", "u"), ("HINT", "h"))
    CARD_W = 52
    CARD_H = 68
    TOP_Y = 6
    TAB_Y = 84
    TAB_BOTTOM = PLAY_HEIGHT - 32
    HINT_MS = 2000

    def reset(self):
        super().reset()
        self.game = freecell.FreeCell()
        self.selected = None
        self.hint = None
        self.hint_until = 0
        self.auto_ticker = Ticker(freecell.AUTO_STEP_MS)
        self.stopwatch = Stopwatch()
        self.stopwatch.start()
        self.announced = False

    def status(self):
        return "moves %d  home %d  %s" % (self.game.moves, self.game.foundation_count, self.stopwatch)

    def slot_x(self, slot):
        if slot.kind == freecell.TABLEAU:
            return 6 + slot.index * 59
        if slot.kind == freecell.FREECELL:
            return 6 + slot.index * 58
        return 248 + slot.index * 58

    def offset(self, n):
        if n <= 1:
            return 18
        return min(18, (self.TAB_BOTTOM - self.TAB_Y - self.CARD_H) // (n - 1))

    def locate(self, x, y):
        """Return (Slot, card index or None) under (x, y), or None."""
        if self.TOP_Y <= y < self.TOP_Y + self.CARD_H:
            for kind, count in ((freecell.FREECELL, freecell.NUM_FREECELLS), (freecell.FOUNDATION, len(SUITS))):
                for i in range(count):
                    slot = freecell.Slot(kind, i)
                    if hit(x, y, self.slot_x(slot), self.TOP_Y, self.CARD_W, self.CARD_H):
                        return slot, None
            return None
        for i, column in enumerate(self.game.tableau):
            slot = freecell.Slot(freecell.TABLEAU, i)
            sx = self.slot_x(slot)
            if not sx <= x < sx + self.CARD_W:
                continue
            off = self.offset(len(column))
            for idx in range(len(column) - 1, -1, -1):
                cy = self.TAB_Y + idx * off
                if cy <= y < cy + self.CARD_H:
                    return slot, idx
            return slot, None
        return None

    def on_key(self, name):
        if name == "n":
            self.reset()
        elif name == "u":
            self.game.undo()
            self.selected = None
        elif name == "h":
            self.hint = self.game.hint()
            self.hint_until = ticks_ms() + self.HINT_MS
            if self.hint is None:
                self.flash("No moves found")

    def on_click(self, click):
        found = self.locate(click.x, click.y)
        if found is None:
            self.selected = None
            return
        slot, idx = found
        pile = self.game.pile(slot)
        if click.double or click.button == 3:
            self.selected = None
            if pile and (slot.kind != freecell.TABLEAU or idx == len(pile) - 1):
                self.game.move_to_foundation(slot)
            return
        if self.selected is None:
            if not pile or slot.kind == freecell.FOUNDATION:
                return
            if slot.kind == freecell.TABLEAU:
                if idx is None or not self.game.can_move_sequence(slot.index, idx):
                    return
            self.selected = (slot, idx)
            return
        source, start = self.selected
        self.selected = None
        if source == slot:
            return
        if not self.game.move(source, slot, start):
            self.flash("Invalid move", RED, 800)

    def tick(self, now, joystick):
        g = self.game
        if g.auto_completing and self.auto_ticker.due(now):
            g.auto_complete_step()
        if g.is_won() and not self.announced:
            self.announced = True
            self.stopwatch.stop()
            self.flash("Victory! %d moves in %s" % (g.moves, self.stopwatch), GREEN, 4000)
        self.score = g.score
        return True

    def render(self):
        g = self.game
        hint = self.hint if ticks_diff(self.hint_until, ticks_ms()) > 0 else None
        hinted = (hint.source, hint.target) if hint else ()
        for i, cell in enumerate(g.freecells):
            slot = freecell.Slot(freecell.FREECELL, i)
            outline = YELLOW if slot in hinted else None
            if self.selected and self.selected[0] == slot:
                outline = ORANGE
            draw_card(self.slot_x(slot), self.TOP_Y, self.CARD_W, self.CARD_H, cell[-1] if cell else None, outline)
        for i, pile in enumerate(g.foundations):
            slot = freecell.Slot(freecell.FOUNDATION, i)
            x = self.slot_x(slot)
            if pile:
                draw_card(x, self.TOP_Y, self.CARD_W, self.CARD_H, pile[-1], YELLOW if slot in hinted else None)
            else:
                draw_card(x, self.TOP_Y, self.CARD_W, self.CARD_H, None, YELLOW if slot in hinted else None)
                draw_suit(x + self.CARD_W // 2, self.TOP_Y + self.CARD_H // 2, 20, SUITS[i])
        for i, column in enumerate(g.tableau):
            slot = freecell.Slot(freecell.TABLEAU, i)
            x = self.slot_x(slot)
            if not column:
                draw_card(x, self.TAB_Y, self.CARD_W, self.CARD_H, None, YELLOW if slot in hinted else None)
                continue
            off = self.offset(len(column))
            for idx, card in enumerate(column):
                outline = None
                if self.selected and self.selected[0] == slot and idx >= self.selected[1]:
                    outline = ORANGE
                elif slot in hinted and idx == len(column) - 1:
                    outline = YELLOW
                draw_card(x, self.TAB_Y + idx * off, self.CARD_W, self.CARD_H, card, outline)


# ---------- Klondike ----------


class SolitaireGame(Screen):
    NAME = "SOLITAIRE"
    BACKGROUND = FELT
    BUTTONS = (("NEW", "n"), ("UNDO", "u"), ("HINT", "h"))
    CARD_W = 56
    CARD_H = 74
    TOP_Y = 6
    TAB_Y = 88
    TAB_BOTTOM = PLAY_HEIGHT - 32
    DOWN_STEP = 6
    HINT_MS = 2000

    def reset(self):
        super().reset()
        self.game = solitaire.Solitaire()
        self.selected = None
        self.hint = None
        self.hint_until = 0
        self.stopwatch = Stopwatch()
        self.stopwatch.start()
        self.announced = False

    def status(self):
        return "moves %d  home %d  %s" % (self.game.moves, self.game.foundation_count, self.stopwatch)

    @staticmethod
    def col_x(i):
        return 8 + i * 67

    def foundation_x(self, suit):
        return self.col_x(3 + SUITS.index(suit))

    def card_ys(self, column):
        down = sum(1 for c in column if not c.face_up)
        gaps = max(1, len(column) - down - 1)
        room = self.TAB_BOTTOM - self.TAB_Y - self.CARD_H - down * self.DOWN_STEP
        up_step = max(6, min(18, room // gaps))
        ys = []
        y = self.TAB_Y
        for card in column:
            ys.append(y)
            y += up_step if card.face_up else self.DOWN_STEP
        return ys

    def locate(self, x, y):
        """Return a region tuple for (x, y) or None."""
        if self.TOP_Y <= y < self.TOP_Y + self.CARD_H:
            if hit(x, y, self.col_x(0), self.TOP_Y, self.CARD_W, self.CARD_H):
                return (solitaire.STOCK,)
            if hit(x, y, self.col_x(1), self.TOP_Y, self.CARD_W, self.CARD_H):
                return (solitaire.WASTE,)
            for suit in SUITS:
                if hit(x, y, self.foundation_x(suit), self.TOP_Y, self.CARD_W, self.CARD_H):
                    return (solitaire.FOUNDATION, suit)
            return None
        for col, column in enumerate(self.game.tableau):
            cx = self.col_x(col)
            if not cx <= x < cx + self.CARD_W:
                continue
            ys = self.card_ys(column)
            for idx in range(len(column) - 1, -1, -1):
                if ys[idx] <= y < ys[idx] + self.CARD_H:
                    return (solitaire.TABLEAU, col, idx)
            return (solitaire.TABLEAU, col, None)
        return None

    def on_key(self, name):
        g = self.game
        if name == "n":
            self.reset()
        elif name == "u":
            g.undo()
            self.selected = None
        elif name == "h":
            self.show_hint()
        elif name == "space":
            g.click_stock()

    def show_hint(self):
        hint = self.game.hint()
        self.hint = hint
        self.hint_until = ticks_ms() + self.HINT_MS
        if hint is None:
            self.flash("No legal moves available")
        elif hint.kind == solitaire.TO_FOUNDATION:
            self.flash("Move %s of %s home" % (hint.card.rank, hint.card.suit), YELLOW)
        elif hint.kind == solitaire.TO_TABLEAU:
            self.flash("Move %s of %s to column %d" % (hint.card.rank, hint.card.suit, hint.target + 1), YELLOW)
        elif hint.kind == solitaire.DRAW:
            self.flash("Draw from the stock", YELLOW)
        else:
            self.flash("Recycle the waste", YELLOW)

    def on_click(self, click):
        g = self.game
        region = self.locate(click.x, click.y)
        if region is None:
            self.selected = None
            return
        kind = region[0]
        if kind == solitaire.STOCK:
            self.selected = None
            g.click_stock()
            return
        if click.double or click.button == 3:
            self.selected = None
            if kind == solitaire.WASTE:
                g.auto_foundation(solitaire.WASTE)
            elif kind == solitaire.TABLEAU and region[2] is not None and region[2] == len(g.tableau[region[1]]) - 1:
                g.auto_foundation(solitaire.TABLEAU, region[1])
            return
        if self.selected is None:
            if kind == solitaire.WASTE and g.waste:
                self.selected = (solitaire.WASTE,)
            elif kind == solitaire.TABLEAU and region[2] is not None:
                if g.tableau[region[1]][region[2]].face_up:
                    self.selected = region
            return
        source, self.selected = self.selected, None
        if source == region or (source[0] == kind == solitaire.TABLEAU and source[1] == region[1]):
            return
        if not self.apply(source, region):
            self.flash("Invalid move", RED, 800)

    def apply(self, source, dest):
        g = self.game
        if source[0] == solitaire.WASTE:
            if dest[0] == solitaire.TABLEAU:
                return g.waste_to_tableau(dest[1])
            if dest[0] == solitaire.FOUNDATION:
                return g.waste[-1].suit == dest[1] and g.waste_to_foundation()
            return False
        _, col, start = source
        if dest[0] == solitaire.TABLEAU:
            return g.tableau_to_tableau(col, start, dest[1])
        if dest[0] == solitaire.FOUNDATION:
            column = g.tableau[col]
            return start == len(column) - 1 and column[-1].suit == dest[1] and g.tableau_to_foundation(col)
        return False

    def tick(self, now, joystick):
        g = self.game
        if g.is_won() and not self.announced:
            self.announced = True
            self.stopwatch.stop()
            self.flash("You won! %d moves in %s" % (g.moves, self.stopwatch), GREEN, 4000)
        self.score = g.foundation_count
        return True

    def render(self):
        g = self.game
        hint = self.hint if ticks_diff(self.hint_until, ticks_ms()) > 0 else None
        stock_outline = YELLOW if hint and hint.source == solitaire.STOCK else None
        if g.stock:
            draw_card(self.col_x(0), self.TOP_Y, self.CARD_W, self.CARD_H, g.stock[-1], stock_outline)
        else:
            draw_card(self.col_x(0), self.TOP_Y, self.CARD_W, self.CARD_H, None, stock_outline)
            display.circle(self.col_x(0) + self.CARD_W // 2, self.TOP_Y + self.CARD_H // 2, 14, GREY, 2)
        waste_outline = None
        if self.selected == (solitaire.WASTE,):
            waste_outline = ORANGE
        elif hint and hint.source == solitaire.WASTE:
            waste_outline = YELLOW
        draw_card(self.col_x(1), self.TOP_Y, self.CARD_W, self.CARD_H, g.waste[-1] if g.waste else None, waste_outline)
        for suit in SUITS:
            pile = g.foundations[suit]
            x = self.foundation_x(suit)
            outline = YELLOW if hint and hint.kind == solitaire.TO_FOUNDATION and hint.target == suit else None
            draw_card(x, self.TOP_Y, self.CARD_W, self.CARD_H, pile[-1] if pile else None, outline)
            if not pile:
                draw_suit(x + self.CARD_W // 2, self.TOP_Y + self.CARD_H // 2, 20, suit)
        for col, column in enumerate(g.tableau):
            x = self.col_x(col)
            target = hint and hint.kind == solitaire.TO_TABLEAU and hint.target == col
            if not column:
                draw_card(x, self.TAB_Y, self.CARD_W, self.CARD_H, None, YELLOW if target else None)
                continue
            for idx, (card, y) in enumerate(zip(column, self.card_ys(column))):
                outline = None
                sel = self.selected
                if sel and sel[0] == solitaire.TABLEAU and sel[1] == col and idx >= sel[2]:
                    outline = ORANGE
                elif target and idx == len(column) - 1:
                    outline = YELLOW
                elif hint and hint.source == solitaire.TABLEAU and hint.col == col and card is hint.card:
                    outline = YELLOW
                draw_card(x, y, self.CARD_W, self.CARD_H, card, outline)


# ---------- Menus ----------

GAMES = {
    "FREECELL": FreeCellGame,  # FreeCell solitaire
    "HANOI": HanoiGame,  # Tower of Hanoi with auto-solver
    "MEMORY": MemoryMatchGame,  # pair-matching cards
    "MINES": MinesweeperGame,  # Minesweeper
    "ROUTE": RouteFinderGame,  # shortest path demo
    "SNAKE": SnakeGame,  # classic snake, keeps a high score
    "SOLITAIRE": SolitaireGame,  # Klondike, draw one
    "SUDOKU": SudokuGame,  # generator, hints, animated solver
    "TICTAC": TicTacToeGame,  # two-player noughts and crosses
    "WATER": WaterSortGame,  # pour colours into sorted tubes
}


class GameOverMenu:
    """Menu shown when a round ends; choose retry or return to menu."""

    MOVE_DELAY = 160

    def __init__(self, joystick, score, best, title="GAME OVER"):
        self.joystick = joystick
        self.score = score
        self.best = best
        self.title = title
        self.opts = ["RETRY", "MENU"]
        self.idx = 0
        self._prev = -1
        self._last_move = 0

    def _render(self):
        display.clear()
        display.text(WIDTH // 2, 60, self.title, RED, FONT_LARGE, center=True)
        display.text(WIDTH // 2, 100, "Score %d   Best %d" % (self.score, self.best), GREY, FONT_MEDIUM, center=True)
        for i, o in enumerate(self.opts):
            col = WHITE if i == self.idx else GREY
            display.text(WIDTH // 2, 160 + i * 40, o, col, FONT_LARGE, center=True)
        display_score_and_time(self.score, force=True)
        display.show()

    def _option_at(self, x, y):
        for i in range(len(self.opts)):
            if abs(y - (160 + i * 40)) < 18:
                return i
        return None

    def _step(self, now):
        """Handle one poll of input. Returns the chosen option or None."""
        if self.idx != self._prev:
            self._prev = self.idx
            self._render()

        for event in self.joystick.events():
            if isinstance(event, Click):
                i = self._option_at(event.x, event.y)
                if i is not None:
                    return self.opts[i]

        if ticks_diff(now, self._last_move) > self.MOVE_DELAY:
            d = self.joystick.read_direction([JOYSTICK_UP, JOYSTICK_DOWN])
            if d == JOYSTICK_UP and self.idx > 0:
                self.idx -= 1
                self._last_move = now
            elif d == JOYSTICK_DOWN and self.idx < len(self.opts) - 1:
                self.idx += 1
                self._last_move = now

        if self.joystick.is_pressed():
            return self.opts[self.idx]
        return None

    def run(self):
        """Show menu and return the selected option."""
        while True:
            choice = self._step(ticks_ms())
            if choice:
                while self.joystick.is_pressed():
                    sleep_ms(10)
                return choice
            display.show()
            sleep_ms(30)

    async def run_async(self):
        while True:
            choice = self._step(ticks_ms())
            if choice:
                while self.joystick.is_pressed():
                    await asyncio.sleep(0.01)
                return choice
            display.show()
            await asyncio.sleep(0.03)


class GameSelect:
    """Main game selector menu."""

    VIEW = 8
    ROW_H = 32
    LIST_Y = 56
    MOVE_DELAY = 140

    def __init__(self):
        self.joystick = Joystick()
        self.highscores = HighScores()
        self.game_classes = dict(GAMES)
        self.sorted_games = sorted(self.game_classes)
        self.selected = 0
        self.top = 0
        self._prev = -1
        self._last_move = 0

    def _render(self):
        display.clear(BOARD_BG)
        display.text(WIDTH // 2, 24, "MINIGAME ARCADE", YELLOW, FONT_LARGE, center=True)
        games = self.sorted_games
        for i in range(self.VIEW):
            gi = self.top + i
            if gi >= len(games):
                break
            name = games[gi]
            y = self.LIST_Y + i * self.ROW_H
            col = WHITE if gi == self.selected else GREY
            if gi == self.selected:
                display.fill_rect(40, y - 2, WIDTH - 80, self.ROW_H - 4, DARK_GREY)
            display.text(56, y, name, col, FONT_MEDIUM)
            key = getattr(self.game_classes[name], "HIGH_SCORE_KEY", None)
            if key:
                hs = "best %d" % self.highscores.best(key)
                display.text(WIDTH - 56 - display.text_width(hs, FONT_SMALL), y + 4, hs, (200, 200, 60), FONT_SMALL)
        display_score_and_time(0, "ENTER to play, ESC to leave a game", force=True)
        display.show()

    def _row_at(self, x, y):
        i = (y - self.LIST_Y + 2) // self.ROW_H
        gi = self.top + i
        if 0 <= i < self.VIEW and gi < len(self.sorted_games):
            return gi
        return None

    def _step(self, now):
        """Handle one poll of menu input. Returns the chosen game name or None."""
        games = self.sorted_games
        if self.selected != self._prev:
            self._prev = self.selected
            self._render()

        for event in self.joystick.events():
            if isinstance(event, Click) and event.button == 1:
                gi = self._row_at(event.x, event.y)
                if gi is not None:
                    self.selected = gi
                    return games[gi]

        if ticks_diff(now, self._last_move) > self.MOVE_DELAY:
            d = self.joystick.read_direction([JOYSTICK_UP, JOYSTICK_DOWN])
            if d == JOYSTICK_UP and self.selected > 0:
                self.selected -= 1
                if self.selected < self.top:
                    self.top -= 1
                self._last_move = now
            elif d == JOYSTICK_DOWN and self.selected < len(games) - 1:
                self.selected += 1
                if self.selected > self.top + self.VIEW - 1:
                    self.top += 1
                self._last_move = now

        if self.joystick.is_pressed():
            return games[self.selected]
        return None

    def run_game_selector(self):
        """Show the game list and return the chosen game's name."""
        self._prev = -1
        while True:
            name = self._step(ticks_ms())
            if name:
                while self.joystick.is_pressed():
                    sleep_ms(10)
                return name
            display.show()
            sleep_ms(30)

    async def run_game_selector_async(self):
        """Async version of `run_game_selector` for pygbag/browser."""
        self._prev = -1
        while True:
            name = self._step(ticks_ms())
            if name:
                while self.joystick.is_pressed():
                    await asyncio.sleep(0.01)
                return name
            await asyncio.sleep(0.03)

    def _game_over_menu(self, game_name):
        """Record the round's score and build the menu shown after it."""
        key = getattr(self.game_classes[game_name], "HIGH_SCORE_KEY", None)
        best = 0
        if key:
            self.highscores.update(key, global_score)
            best = self.highscores.best(key)
        return GameOverMenu(self.joystick, global_score, best)

    def run(self, first=None):
        """Main loop: select games, run them and handle the game-over flow."""
        global game_over, global_score

        while True:
            game_name = first or self.run_game_selector()
            first = None

            # retry loop
            while True:
                game_over = False
                global_score = 0

                game = self.game_classes[game_name]()
                self.joystick.flush()
                game.main_loop(self.joystick)

                if not game_over:
                    break
                logger.info("%s over with score %d", game_name, global_score)
                if self._game_over_menu(game_name).run() != "RETRY":
                    break
            self._prev = -1

    async def run_async(self, first=None):
        """Browser version of `run`; every loop yields to the event loop."""
        global game_over, global_score

        while True:
            game_name = first or await self.run_game_selector_async()
            first = None

            while True:
                game_over = False
                global_score = 0

                game = self.game_classes[game_name]()
                self.joystick.flush()
                # let the browser render before entering game
                await asyncio.sleep(0)
                await game.main_loop_async(self.joystick)

                if not game_over:
                    break
                logger.info("%s over with score %d", game_name, global_score)
                if await self._game_over_menu(game_name).run_async() != "RETRY":
                    break
            self._prev = -1


# ---------- Main ----------


def _show_error():
    display.clear()
    draw_text(10, 40, "ERR", *RED)
    display.show()


def configure_logging(level="WARNING"):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(start_game=None):
    """
    Application entry point.

    Starts the display, shows the initial HUD, then enters the
    game-selection loop. `RestartProgram` resets to the top-level menu;
    unexpected exceptions are logged, shown as an error marker, and the
    menu starts again.
    """
    logger.debug("before display.start")
    display.start()
    logger.info("arcade starting on %s", env.get_platform_name())
    display.clear()
    display_score_and_time(0, force=True)
    display.show()

    while True:
        try:
            GameSelect().run(start_game)
        except RestartProgram:
            display.clear()
            display_score_and_time(0, force=True)
        except Exception:
            # Failsafe: show simple error marker and reset to menu
            logger.exception("unexpected error, returning to menu")
            _show_error()
            sleep_ms(800)
            display.clear()
        start_game = None


async def async_main(start_game=None):
    """Async entrypoint for pygbag/web: start the display and run the menu."""
    logger.debug("before display.start")
    display.start()
    logger.info("arcade starting on %s", env.get_platform_name())
    display.clear()
    display_score_and_time(0, force=True)
    display.show()
    # yield once so the browser can render the first frame
    await asyncio.sleep(0)

    while True:
        try:
            await GameSelect().run_async(start_game)
        except RestartProgram:
            display.clear()
            display_score_and_time(0, force=True)
        except Exception:
            logger.exception("unexpected error, returning to menu")
            _show_error()
            await asyncio.sleep(0.8)
            display.clear()
        start_game = None
        await asyncio.sleep(0)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="minigame-arcade",
        description="A collection of single-player minigames in a pygame window.",
    )
    parser.add_argument(
        "--game",
        type=str.upper,
        choices=sorted(GAMES),
        help="start this game instead of the menu",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=SCALE,
        help="window scale factor (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity (default: %(default)s)",
    )
    return parser


def cli(argv=None):
    """Console-script entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    display.scale = max(1, args.scale)
    try:
        if IS_PYGBAG:
            asyncio.run(async_main(args.game))
        else:
            main(args.game)
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        display.close()
