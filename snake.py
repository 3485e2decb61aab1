"""
Snake on a walled 20x20 grid.
"""

import logging
import random
from collections import deque

logger = logging.getLogger(__name__)

GRID_SIZE = 20
INITIAL_SPEED = 150  # ms per tick
MIN_SPEED = 60
SPEED_STEP = 10
SPEEDUP_EVERY = 50  # points
FOOD_POINTS = 10

HIGH_SCORE_KEY = "snakeHighScore"

UP = (0, -1)
DOWN = (0, 1)
LEFT = (-1, 0)
RIGHT = (1, 0)


class Snake:
    """
    Snake model. The body is a deque of (x, y) segments with the head first.

    States: waiting, playing, paused, gameover.
    """

    def __init__(self, size=GRID_SIZE, high_score=0, rng=None):
        self.size = size
        self.high_score = int(high_score or 0)
        self.rng = rng or random.Random()
        self.state = "waiting"
        self.reset()

    def reset(self):
        mid = self.size // 2
        self.body = deque([(mid - 1, mid), (mid - 2, mid), (mid - 3, mid)])
        self.direction = RIGHT
        self.next_direction = RIGHT
        self.score = 0
        self.speed = INITIAL_SPEED
        self.food = None
        self.new_high_score = False
        self.place_food()

    @property
    def head(self):
        return self.body[0]

    def __len__(self):
        return len(self.body)

    def start(self):
        self.reset()
        self.state = "playing"

    def toggle_pause(self):
        if self.state == "playing":
            self.state = "paused"
        elif self.state == "paused":
            self.state = "playing"
        return self.state

    def steer(self, direction):
        """
        Queue a turn. Only turns perpendicular to the current heading are
        accepted, so the snake can never reverse into itself.
        """
        if self.state != "playing":
            return False
        dx, dy = direction
        if (dx and self.direction[0]) or (dy and self.direction[1]):
            return False
        self.next_direction = direction
        return True

    def collides(self, x, y):
        return (x, y) in self.body

    def place_food(self):
        """Put food on a random free cell. Returns False when the grid is full."""
        free = [
            (x, y)
            for y in range(self.size)
            for x in range(self.size)
            if (x, y) not in self.body
        ]
        if not free:
            self.food = None
            return False
        self.food = self.rng.choice(free)
        return True

    def step(self):
        """
        Advance one tick.

        Returns:
            str or None: "ate", "moved", "gameover", or None when not playing.
        """
        if self.state != "playing":
            return None
        self.direction = self.next_direction
        hx, hy = self.head
        nx, ny = hx + self.direction[0], hy + self.direction[1]

        if not (0 <= nx < self.size and 0 <= ny < self.size):
            self.game_over()
            return "gameover"
        if self.collides(nx, ny):
            self.game_over()
            return "gameover"

        self.body.appendleft((nx, ny))
        if (nx, ny) == self.food:
            self.score += FOOD_POINTS
            if self.score % SPEEDUP_EVERY == 0 and self.speed > MIN_SPEED:
                self.speed -= SPEED_STEP
            if not self.place_food():
                self.game_over()
                return "gameover"
            return "ate"
        self.body.pop()
        return "moved"

    def game_over(self):
        self.state = "gameover"
        if self.score > self.high_score:
            self.high_score = self.score
            self.new_high_score = True
        logger.info("snake over: score %d, length %d", self.score, len(self.body))
