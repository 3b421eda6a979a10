"""
Logging utilities for recognition and calibration events.
"""

import datetime
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class RecognitionLogger:
    """Handles logging of recognized digits and calibration progress."""

    def __init__(self, debug_file: Optional[str] = None):
        self.debug_file = None
        if debug_file:
            try:
                self.debug_file = open(debug_file, 'w', encoding='utf-8')
                self.debug_file.write(f"Debug logging started at {datetime.datetime.now()}\n")
                self.debug_file.flush()
            except OSError as e:
                logger.warning(f"Could not open debug file: {e}")

    def _timestamp(self) -> str:
        return datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]

    def _write_debug(self, message: str):
        if self.debug_file:
            try:
                self.debug_file.write(f"[{self._timestamp()}] {message}\n")
                self.debug_file.flush()
            except OSError as e:
                logger.warning(f"Could not write debug file: {e}")

    def log_recognition(self, result, point_count: int):
        """Log a classification result for a committed stroke."""
        if result.accepted:
            message = (f"RECOGNIZED '{result.label}' score={result.score:.3f} "
                       f"({point_count} points)")
            logger.info(message)
        else:
            label = result.label or '-'
            message = (f"REJECTED best='{label}' score={result.score:.3f} "
                       f"({point_count} points)")
            logger.debug(message)
        self._write_debug(message)

    def log_degenerate(self, point_count: int, mode: str):
        """Log a stroke discarded before normalization."""
        message = f"DISCARDED degenerate stroke in {mode} mode ({point_count} points)"
        logger.debug(message)
        self._write_debug(message)

    def log_calibration_sample(self, label: str, sample_number: int, samples_per_digit: int):
        """Log an accepted calibration sample."""
        message = f"CALIBRATION sample {sample_number}/{samples_per_digit} for '{label}'"
        logger.info(message)
        self._write_debug(message)

    def log_calibration_complete(self, template_count: int):
        """Log the end of the calibration walk-through."""
        message = f"CALIBRATION complete, {template_count} user templates"
        logger.info(message)
        self._write_debug(message)

    def close(self):
        """Close the debug file."""
        if self.debug_file:
            self.debug_file.close()
            self.debug_file = None
