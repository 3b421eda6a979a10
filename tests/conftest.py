"""Shared pytest fixtures for the handwrite_digits test suite.

Fixtures:
    normalizer: StrokeNormalizer with default settings
    store: In-memory key-value store
    bank: Built-in TemplateBank backed by ``store``
    loop: ManualLoop standing in for the asyncio loop so timers can be stepped
"""

import math
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from handwrite_digits.recognition.normalizer import StrokeNormalizer
from handwrite_digits.recognition.template_bank import TemplateBank, builtin_digit_strokes
from handwrite_digits.storage.template_store import MemoryTemplateStore
from handwrite_digits.utils.stroke_utils import Point


# ---------------------------------------------------------------------------
# Stroke helpers
# ---------------------------------------------------------------------------

def line_points(x1, y1, x2, y2, steps=20):
    """Evenly spaced points on a segment, ends included."""
    return [Point(x1 + (x2 - x1) * i / steps, y1 + (y2 - y1) * i / steps)
            for i in range(steps + 1)]


def zigzag_points():
    """A shape unlike any built-in digit."""
    corners = [(0, 0), (30, 60), (60, 0), (90, 60), (120, 0)]
    points = []
    for (x1, y1), (x2, y2) in zip(corners, corners[1:]):
        points.extend(line_points(x1, y1, x2, y2, steps=10))
    return points


def builtin_stroke(label, variant=0):
    """Raw stroke used to build a built-in template."""
    strokes = [points for name, points in builtin_digit_strokes() if name == label]
    return list(strokes[variant])


def transform(points, dx=0.0, dy=0.0, scale=1.0, angle=0.0):
    """Rotate about the origin, scale, then translate."""
    cos = math.cos(angle)
    sin = math.sin(angle)
    return [Point((p.x * cos - p.y * sin) * scale + dx,
                  (p.x * sin + p.y * cos) * scale + dy) for p in points]


def draw(scheduler, points):
    """Feed a stroke through the scheduler's pointer handlers."""
    first, rest = points[0], points[1:]
    scheduler.on_start(first.x, first.y)
    for p in rest:
        scheduler.on_move(p.x, p.y)
    scheduler.on_end()


# ---------------------------------------------------------------------------
# Manual event loop
# ---------------------------------------------------------------------------

class ManualHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualLoop:
    """Implements the call_later/call_soon subset the scheduler uses."""

    def __init__(self):
        self.time = 0.0
        self.timers = []
        self.ready = []

    def call_later(self, delay, callback, *args):
        handle = ManualHandle(self.time + delay, callback, args)
        self.timers.append(handle)
        return handle

    def call_soon(self, callback, *args):
        handle = ManualHandle(self.time, callback, args)
        self.ready.append(handle)
        return handle

    def run_ready(self):
        while self.ready:
            handle = self.ready.pop(0)
            if not handle.cancelled:
                handle.callback(*handle.args)

    def advance(self, seconds, run_ready=True):
        target = self.time + seconds
        while True:
            due = [h for h in self.timers if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.timers.remove(handle)
            self.time = handle.when
            handle.callback(*handle.args)
            if run_ready:
                self.run_ready()
        self.time = target
        if run_ready:
            self.run_ready()

    @property
    def active_timers(self):
        return [h for h in self.timers if not h.cancelled]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def normalizer():
    return StrokeNormalizer()


@pytest.fixture
def store():
    return MemoryTemplateStore()


@pytest.fixture
def bank(store):
    bank = TemplateBank.builtin(store=store)
    yield bank
    bank.close()


@pytest.fixture
def loop():
    return ManualLoop()
