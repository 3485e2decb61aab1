import random

from game_utils import Stopwatch, Ticker, format_time, shuffled


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_shuffled_returns_new_permutation():
    items = list(range(20))
    out = shuffled(items, random.Random(3))
    assert sorted(out) == items
    assert items == list(range(20))
    assert out is not items


def test_shuffled_is_deterministic_with_seed():
    assert shuffled("abcdef", random.Random(12)) == shuffled("abcdef", random.Random(12))


def test_shuffled_short_inputs():
    assert shuffled([]) == []
    assert shuffled([7]) == [7]


def test_format_time():
    assert format_time(0) == "00:00"
    assert format_time(75) == "01:15"
    assert format_time(59.9) == "00:59"


def test_stopwatch_accumulates_across_pauses():
    clock = FakeClock()
    watch = Stopwatch(clock)
    assert not watch.running
    watch.start()
    clock.now = 10
    watch.stop()
    clock.now = 50
    assert watch.seconds == 10
    watch.start()
    watch.start()  # no-op while running
    clock.now = 55.5
    assert watch.seconds == 15
    assert str(watch) == "00:15"
    watch.reset()
    assert watch.seconds == 0
    assert not watch.running


def test_ticker_keeps_its_rate_between_frames():
    ticker = Ticker(50)
    ticker.start(0)
    # 33 ms frames: resetting to the frame time would give a step every 66 ms
    steps = sum(ticker.due(now) for now in range(33, 1001, 33))
    assert steps == 19
    assert ticker.last == 950


def test_ticker_restarts_after_falling_behind():
    ticker = Ticker(100)
    ticker.start(0)
    assert not ticker.due(99)
    assert ticker.due(1000)
    assert ticker.last == 1000
    assert not ticker.due(1099)
    assert ticker.due(1100)
    assert ticker.last == 1100
