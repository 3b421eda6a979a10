"""
Guided calibration of user templates.

CalibrationSession walks the user through the ten digits, collecting a
fixed number of samples for each. Every accepted sample becomes a user
template in the bank straight away, so recognition improves while the
walk-through is still in progress.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..config.settings import HandwriteConfig
from ..exceptions import DegenerateStrokeError
from ..utils.stroke_utils import DataValidator, Point
from .normalizer import StrokeNormalizer
from .template_bank import DigitTemplate

logger = logging.getLogger(__name__)


class CalibrationPhase(enum.Enum):
    IDLE = 'idle'
    AWAITING_SAMPLE = 'awaiting_sample'
    COMPLETE = 'complete'


@dataclass(frozen=True)
class CalibrationProgress:
    """Snapshot of the session handed to progress listeners."""
    phase: CalibrationPhase
    digit_index: int
    sample_index: int
    samples_per_digit: int
    digits: tuple = tuple(HandwriteConfig.DIGITS)

    @property
    def digit(self) -> Optional[str]:
        """Digit the user should draw next, None outside AWAITING_SAMPLE."""
        if self.phase is not CalibrationPhase.AWAITING_SAMPLE:
            return None
        return self.digits[self.digit_index]

    @property
    def is_complete(self) -> bool:
        return self.phase is CalibrationPhase.COMPLETE


class CalibrationSession:
    """State machine collecting samples_per_digit samples for every digit."""

    def __init__(self, bank, normalizer: Optional[StrokeNormalizer] = None,
                 samples_per_digit: int = HandwriteConfig.SAMPLES_PER_DIGIT,
                 on_progress: Optional[Callable[[CalibrationProgress], None]] = None,
                 on_complete: Optional[Callable[[], None]] = None):
        self.bank = bank
        self.normalizer = normalizer or StrokeNormalizer()
        self.samples_per_digit = samples_per_digit
        self.digits: List[str] = list(HandwriteConfig.DIGITS)
        self.on_progress = on_progress
        self.on_complete = on_complete

        self.phase = CalibrationPhase.IDLE
        self.digit_index = 0
        self.sample_index = 0

    @property
    def progress(self) -> CalibrationProgress:
        return CalibrationProgress(self.phase, self.digit_index, self.sample_index,
                                   self.samples_per_digit, tuple(self.digits))

    @property
    def is_active(self) -> bool:
        return self.phase is not CalibrationPhase.IDLE

    def start(self):
        """Enter calibration mode at the first digit."""
        if self.phase is not CalibrationPhase.IDLE:
            return
        self._move_to(CalibrationPhase.AWAITING_SAMPLE, 0, 0)

    def exit(self):
        """Leave calibration mode, keeping collected templates."""
        if self.phase is CalibrationPhase.IDLE:
            return
        self._move_to(CalibrationPhase.IDLE, 0, 0)

    def reset(self, keep_active: bool = True):
        """
        Drop all user templates and restart from the first digit.

        Args:
            keep_active: Stay in calibration mode; False returns to IDLE
        """
        self.bank.clear()
        phase = CalibrationPhase.AWAITING_SAMPLE if keep_active else CalibrationPhase.IDLE
        self._move_to(phase, 0, 0)

    def commit(self, stroke: Sequence[Point]) -> Optional[DigitTemplate]:
        """
        Turn a stroke into a template for the digit being collected.

        Returns:
            The new template, or None if the stroke was ignored
        """
        if self.phase is not CalibrationPhase.AWAITING_SAMPLE:
            return None

        stroke = tuple(stroke)
        try:
            DataValidator.validate_stroke(stroke)
        except DegenerateStrokeError as e:
            logger.debug(f"Ignoring calibration sample: {e}")
            return None

        label = self.digits[self.digit_index]
        template = DigitTemplate(label, self.normalizer.normalize(stroke))
        self.bank.append(template)

        sample_index = self.sample_index + 1
        digit_index = self.digit_index
        if sample_index >= self.samples_per_digit:
            sample_index = 0
            digit_index += 1

        if digit_index >= len(self.digits):
            self._move_to(CalibrationPhase.COMPLETE, digit_index, 0)
            if self.on_complete:
                self.on_complete()
        else:
            self._move_to(CalibrationPhase.AWAITING_SAMPLE, digit_index, sample_index)

        return template

    def _move_to(self, phase: CalibrationPhase, digit_index: int, sample_index: int):
        self.phase = phase
        self.digit_index = digit_index
        self.sample_index = sample_index
        logger.debug(f"Calibration {phase.value}: digit {digit_index}, sample {sample_index}")
        if self.on_progress:
            self.on_progress(self.progress)
