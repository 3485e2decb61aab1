"""
Shared game utilities for the minigame arcade.

This module provides reusable components used across multiple games. None
of them carry game rules; each game module keeps its own state and rules.

Components:
- shuffled: Fisher-Yates shuffle returning a new list
- Stopwatch: elapsed play time with MM:SS formatting
- Ticker: fixed-rate millisecond schedule for frame-driven timers
- BaseGame: Base class providing the common frame loop structure
"""

import asyncio
import logging
import random
import time

logger = logging.getLogger(__name__)


def shuffled(items, rng=None):
    """
    Return a Fisher-Yates shuffled copy of `items`.

    Args:
        items (iterable): Values to shuffle; the input is not modified.
        rng (random.Random): Optional random source, for deterministic deals.

    Returns:
        list: A new list holding the same values in random order.
    """
    rng = rng or random
    arr = list(items)
    for i in range(len(arr) - 1, 0, -1):
        j = rng.randint(0, i)
        arr[i], arr[j] = arr[j], arr[i]
    return arr


def format_time(total_seconds):
    """Format a second count as MM:SS."""
    total_seconds = int(total_seconds)
    return "{:02}:{:02}".format(total_seconds // 60, total_seconds % 60)


class Stopwatch:
    """
    Elapsed play time for a single round.

    The clock is injectable so game models stay deterministic under test;
    it must return seconds as a float.
    """

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self._started_at = None
        self._elapsed = 0.0

    @property
    def running(self):
        return self._started_at is not None

    def start(self):
        """Start (or resume) the stopwatch. Calling it while running is a no-op."""
        if self._started_at is None:
            self._started_at = self.clock()

    def stop(self):
        """Stop the stopwatch, keeping the accumulated time."""
        if self._started_at is not None:
            self._elapsed += self.clock() - self._started_at
            self._started_at = None

    def reset(self):
        self._started_at = None
        self._elapsed = 0.0

    @property
    def seconds(self):
        """Whole seconds elapsed."""
        total = self._elapsed
        if self._started_at is not None:
            total += self.clock() - self._started_at
        return int(total)

    def __str__(self):
        return format_time(self.seconds)


class Ticker:
    """
    Fixed-rate schedule for timers checked once per frame.

    Each due step moves the deadline forward by one interval rather than to
    `now`, so a 50 ms timer polled from a 33 ms frame loop still averages
    50 ms. A ticker that has fallen more than an interval behind (a pause, or
    one never started) fires once and restarts from `now`.
    """

    def __init__(self, interval):
        self.interval = interval
        self.last = 0

    def start(self, now):
        self.last = now

    def due(self, now):
        """Return True when a step is due, advancing the schedule by one step."""
        if now - self.last < self.interval:
            return False
        self.last += self.interval
        if now - self.last >= self.interval:
            self.last = now
        return True


class BaseGame:
    """
    Base class for game screens providing common structure and utilities.

    This class implements the common pattern used by every screen:
    - Initialization with score
    - Main frame loop with input handling
    - Async version for browser compatibility
    - Common exit handling (C button / Escape to quit)

    Subclasses should override:
    - reset(): Initialize/reset game state
    - update(joystick): Update game logic for one frame
    - draw(): Render the current game state
    """

    NAME = ""

    def __init__(self):
        """Initialize base game state."""
        self.score = 0
        self.frame = 0
        self.last_frame_time = 0
        self.frame_ms = 33  # ~30 FPS default

    def reset(self):
        """
        Reset game state to initial values.

        Override this in subclasses to initialize game-specific state.
        Always call super().reset() to reset base state.
        """
        self.score = 0
        self.frame = 0

    def update(self, joystick):
        """
        Update game logic for one frame.

        Override this in subclasses to implement game-specific logic.
        Return False to end the game loop with a final score.

        Args:
            joystick: Input handler object

        Returns:
            bool: True to continue, False to end the round
        """
        return True

    def draw(self):
        """
        Render the current game state.

        Override this in subclasses to draw game-specific graphics.
        """
        pass

    def status(self):
        """Short text for the HUD centre, e.g. moves or elapsed time."""
        return ""

    def _begin(self):
        # Import minigame_app at runtime to avoid circular imports
        import minigame_app

        minigame_app.game_over = False
        minigame_app.global_score = 0

        self.reset()
        minigame_app.display.clear()
        minigame_app.display_score_and_time(0, force=True)
        self.last_frame_time = minigame_app.ticks_ms()
        logger.info("starting %s", self.NAME or type(self).__name__)
        return minigame_app

    def _frame(self, app, joystick):
        """
        Run one frame. Returns False when the loop should stop.
        """
        c_button, _ = joystick.nunchuck.buttons()
        if c_button:
            return False

        self.frame += 1
        if not self.update(joystick):
            app.global_score = self.score
            app.game_over = True
            return False

        self.draw()
        app.display_score_and_time(self.score, self.status())
        app.global_score = self.score
        app.display.show()
        return True

    def main_loop(self, joystick):
        """
        Standard synchronous game loop.

        This implements the common pattern:
        1. Reset game state
        2. Loop:
           a. Check for exit (C button)
           b. Update game logic
           c. Draw frame
           d. Control frame rate
        """
        app = self._begin()

        while not app.game_over:
            try:
                now = app.ticks_ms()
                if app.ticks_diff(now, self.last_frame_time) < self.frame_ms:
                    app.sleep_ms(2)
                    continue
                self.last_frame_time = now
                if not self._frame(app, joystick):
                    return
            except app.RestartProgram:
                return

    async def main_loop_async(self, joystick):
        """
        Async version of main loop for browser compatibility.

        This mirrors main_loop() but yields to the event loop between
        frames to keep the browser responsive.
        """
        app = self._begin()

        while not app.game_over:
            try:
                now = app.ticks_ms()
                if app.ticks_diff(now, self.last_frame_time) < self.frame_ms:
                    await asyncio.sleep(0.002)
                    continue
                self.last_frame_time = now
                if not self._frame(app, joystick):
                    return

                # Yield to event loop
                await asyncio.sleep(0)
            except app.RestartProgram:
                return
