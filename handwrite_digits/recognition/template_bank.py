"""
Digit template bank.

Holds the built-in digit templates, synthesized once from idealized line
and arc strokes, plus the user templates collected during calibration.
User templates are written back to the key-value store on a background
worker after every change; the in-memory collection is always updated
first, so recognition never waits on storage.
"""

import logging
import math
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config.settings import HandwriteConfig
from ..exceptions import TemplateReadError, TemplateWriteError
from ..storage.template_store import decode_templates, encode_templates
from ..utils.stroke_utils import Point
from .normalizer import StrokeNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DigitTemplate:
    """A normalized reference path labeled with a digit."""
    label: str
    points: Tuple[Point, ...]

    def __post_init__(self):
        if self.label not in HandwriteConfig.DIGITS:
            raise ValueError(f"Template label must be a digit, got {self.label!r}")
        object.__setattr__(self, 'points', tuple(self.points))


def _line(x1: float, y1: float, x2: float, y2: float, steps: int = 20) -> List[Point]:
    """Generate points along a straight segment."""
    return [Point(x1 + (x2 - x1) * i / steps, y1 + (y2 - y1) * i / steps)
            for i in range(steps + 1)]


def _circle(cx: float, cy: float, radius: float, steps: int = 40) -> List[Point]:
    """Generate points for a full circle starting at angle zero."""
    points = []
    for i in range(steps + 1):
        angle = 2 * math.pi * i / steps
        points.append(Point(cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return points


def builtin_digit_strokes() -> List[Tuple[str, List[Point]]]:
    """Idealized raw strokes, one per shape variant, in a 100x100 box."""
    return [
        ('0', _circle(50, 50, 40)),
        ('1', _line(50, 10, 50, 90)),
        ('1', [Point(30, 20), Point(50, 10), Point(50, 90)]),
        ('2', _line(10, 20, 90, 20) + _line(90, 20, 50, 50)
              + _line(50, 50, 10, 90) + _line(10, 90, 90, 90)),
        ('3', _line(20, 20, 80, 20) + _line(80, 20, 50, 50)
              + _line(50, 50, 80, 80) + _line(80, 80, 20, 80)),
        ('4', _line(70, 10, 70, 90) + _line(20, 50, 80, 50) + _line(20, 10, 70, 90)),
        ('4', _line(70, 10, 70, 90) + _line(20, 50, 80, 50)),
        ('5', _line(80, 20, 20, 20) + _line(20, 20, 20, 50) + _line(20, 50, 80, 50)
              + _line(80, 50, 80, 90) + _line(80, 90, 20, 90)),
        ('6', _circle(55, 55, 35) + _line(55, 55, 20, 80)),
        ('7', _line(10, 20, 90, 20) + _line(90, 20, 40, 90)),
        ('7', _line(10, 20, 90, 20) + _line(90, 20, 60, 60) + _line(60, 60, 50, 90)),
        ('8', _circle(50, 35, 18) + _circle(50, 70, 22)),
        ('9', _circle(50, 40, 25) + _line(60, 55, 70, 90)),
        ('9', _circle(50, 40, 25) + _line(50, 55, 50, 90)),
    ]


class TemplateBank:
    """Built-in templates plus persisted user templates."""

    def __init__(self, builtin_templates: Sequence[DigitTemplate], store=None,
                 storage_key: str = HandwriteConfig.USER_TEMPLATES_KEY,
                 num_points: int = HandwriteConfig.NUM_POINTS):
        self._builtin: Tuple[DigitTemplate, ...] = tuple(builtin_templates)
        self._user: List[DigitTemplate] = []
        self.store = store
        self.storage_key = storage_key
        self.num_points = num_points
        self.revision = 0
        self._pending: List[Future] = []
        self._executor = None
        if store is not None:
            # one worker keeps writes in submission order
            self._executor = ThreadPoolExecutor(max_workers=1,
                                                thread_name_prefix='template-store')

    @classmethod
    def builtin(cls, store=None, normalizer: Optional[StrokeNormalizer] = None,
                storage_key: str = HandwriteConfig.USER_TEMPLATES_KEY) -> 'TemplateBank':
        """Create a bank holding the built-in digit templates."""
        normalizer = normalizer or StrokeNormalizer()
        templates = [DigitTemplate(label, normalizer.normalize(points))
                     for label, points in builtin_digit_strokes()]
        return cls(templates, store=store, storage_key=storage_key,
                   num_points=normalizer.num_points)

    @property
    def builtin_templates(self) -> Tuple[DigitTemplate, ...]:
        return self._builtin

    @property
    def user_templates(self) -> Tuple[DigitTemplate, ...]:
        return tuple(self._user)

    def all(self) -> List[DigitTemplate]:
        """Built-in templates first, then user templates in append order."""
        return list(self._builtin) + self._user

    def __len__(self):
        return len(self._builtin) + len(self._user)

    def load(self) -> List[DigitTemplate]:
        """
        Replace the user set with the persisted collection.

        Returns:
            The loaded user templates, empty when nothing usable is stored
        """
        if self.store is None:
            return []

        self._user = []
        self.revision += 1
        try:
            payload = self.store.get(self.storage_key)
        except Exception as e:
            logger.warning(f"Could not read user templates: {e}")
            return []

        if payload is None:
            return []

        try:
            templates = decode_templates(payload, self.num_points)
        except TemplateReadError as e:
            logger.warning(f"Ignoring stored user templates: {e}")
            return []

        self._user = list(templates)
        logger.info(f"Loaded {len(templates)} user templates")
        return list(templates)

    def append(self, template: DigitTemplate) -> int:
        """Add a user template, returns count of templates with this label."""
        if len(template.points) != self.num_points:
            raise ValueError(
                f"Template must have {self.num_points} points, got {len(template.points)}"
            )
        self._user.append(template)
        self.revision += 1
        self._submit(self._write, encode_templates(self._user))
        return sum(1 for t in self.all() if t.label == template.label)

    def clear(self) -> int:
        """Delete all user templates, returns the number of remaining templates."""
        self._user = []
        self.revision += 1
        self._submit(self._delete)
        return len(self._builtin)

    def _submit(self, fn, *args):
        if self._executor is None:
            return
        self._pending = [f for f in self._pending if not f.done()]
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._log_write_failure)
        self._pending.append(future)

    def _write(self, payload: bytes):
        try:
            self.store.set(self.storage_key, payload)
        except Exception as e:
            raise TemplateWriteError(f"Could not save user templates: {e}") from e

    def _delete(self):
        try:
            self.store.delete(self.storage_key)
        except Exception as e:
            raise TemplateWriteError(f"Could not delete user templates: {e}") from e

    @staticmethod
    def _log_write_failure(future: Future):
        error = future.exception()
        if error is not None:
            logger.error(str(error))

    def flush(self, timeout: Optional[float] = None):
        """Wait for pending store writes to finish."""
        pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)
        self._pending = [f for f in self._pending if not f.done()]

    def close(self):
        """Finish pending writes and stop the store worker."""
        if self._executor is not None:
            self.flush()
            self._executor.shutdown(wait=True)
            self._executor = None
