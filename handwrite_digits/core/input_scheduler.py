"""
Input scheduler that turns pointer events into committed strokes.

Points are buffered until the input has been idle for the inactivity
timeout. The buffered stroke is then handed to the calibration session
(in calibration mode) or to the classifier, and the buffer is cleared.
Lifting the pointer does not commit on its own, so a pause after lifting
is treated the same as a pause during contact.

All handlers run on one asyncio event loop; the timer is a loop handle
that is cancelled and replaced on every event.
"""

import asyncio
import logging
from typing import Callable, Optional

from ..config.settings import HandwriteConfig
from ..recognition.calibration import CalibrationPhase, CalibrationSession
from ..recognition.digit_classifier import DigitClassifier
from ..utils.logger import RecognitionLogger
from ..utils.stroke_utils import DataValidator, Point, Stroke

logger = logging.getLogger(__name__)


class AnswerBuffer:
    """Answer text owned by the caller; the scheduler only appends to it."""

    def __init__(self, text: str = ''):
        self.text = text

    def append(self, char: str) -> str:
        self.text += char
        return self.text

    def __len__(self):
        return len(self.text)

    def __str__(self):
        return self.text


class InputScheduler:
    """Buffers stroke points and commits them after a period of inactivity."""

    def __init__(self, classifier: DigitClassifier, bank, answer: AnswerBuffer,
                 calibration: Optional[CalibrationSession] = None,
                 on_submit: Optional[Callable[[], None]] = None,
                 on_first_input: Optional[Callable[[], None]] = None,
                 inactivity_timeout: float = HandwriteConfig.INACTIVITY_TIMEOUT / 1000.0,
                 loop: Optional[asyncio.AbstractEventLoop] = None,
                 recognition_logger: Optional[RecognitionLogger] = None):
        self.classifier = classifier
        self.bank = bank
        self.answer = answer
        self.calibration = calibration
        self.on_submit = on_submit
        self.on_first_input = on_first_input
        self.inactivity_timeout = inactivity_timeout
        self.recognition_logger = recognition_logger or RecognitionLogger()

        self._loop = loop
        self._timer = None
        self._stroke = Stroke()
        self._has_started = False
        self._calibration_mode = False

    @property
    def stroke(self) -> Stroke:
        return self._stroke

    @property
    def pending(self) -> bool:
        """True while an inactivity commit is scheduled."""
        return self._timer is not None

    @property
    def calibration_mode(self) -> bool:
        return self._calibration_mode

    def start(self, load_templates: bool = True):
        """Reload persisted user templates and initialize the classifier."""
        if load_templates:
            self.bank.load()
        self.classifier.initialize()

    def close(self):
        """Cancel any pending commit and tear the classifier down."""
        self._cancel_timer()
        self._stroke.clear()
        self.classifier.close()
        self.recognition_logger.close()

    def set_calibration_mode(self, enabled: bool):
        """Route committed strokes to the calibration session instead of the classifier."""
        if enabled and self.calibration is None:
            raise ValueError("Calibration mode needs a CalibrationSession")
        self._calibration_mode = enabled
        if self.calibration is not None:
            if enabled:
                self.calibration.start()
            else:
                self.calibration.exit()

    def reset_first_input(self):
        """Fire on_first_input again on the next contact."""
        self._has_started = False

    def on_start(self, x: float, y: float):
        """Handle pointer down."""
        if not self._has_started:
            self._has_started = True
            logger.debug("Start detecting input")
            if self.on_first_input:
                self.on_first_input()
        self._stroke.append(Point(float(x), float(y)))
        self._schedule()

    def on_move(self, x: float, y: float):
        """Handle pointer motion."""
        self._stroke.append(Point(float(x), float(y)))
        self._schedule()

    def on_end(self):
        """Handle pointer up."""
        self._schedule()

    def on_cancel(self):
        """Handle a cancelled contact."""
        self._schedule()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self):
        self._cancel_timer()
        self._timer = self._get_loop().call_later(self.inactivity_timeout,
                                                  self._on_inactivity)

    def _on_inactivity(self):
        self._timer = None
        stroke = self._stroke.snapshot()
        try:
            if self._calibration_mode and self.calibration is not None:
                self._commit_calibration(stroke)
            else:
                self._commit_recognition(stroke)
        finally:
            self._stroke.clear()

    def _commit_recognition(self, stroke):
        if DataValidator.is_degenerate_stroke(stroke):
            self.recognition_logger.log_degenerate(len(stroke), 'recognition')
            return

        previous_length = len(self.answer)
        result = self.classifier.classify(stroke, self.bank)
        self.recognition_logger.log_recognition(result, len(stroke))
        if result.accepted and result.label:
            self.answer.append(result.label)

        if len(self.answer) > previous_length and self.on_submit:
            self._get_loop().call_soon(self.on_submit)

    def _commit_calibration(self, stroke):
        session = self.calibration
        if DataValidator.is_degenerate_stroke(stroke):
            self.recognition_logger.log_degenerate(len(stroke), 'calibration')
            return

        progress = session.progress
        template = session.commit(stroke)
        if template is None:
            return

        self.recognition_logger.log_calibration_sample(
            template.label, progress.sample_index + 1, session.samples_per_digit
        )
        if session.phase is CalibrationPhase.COMPLETE:
            self.recognition_logger.log_calibration_complete(len(self.bank.user_templates))
            # back to recognition once every digit is collected
            self._calibration_mode = False
