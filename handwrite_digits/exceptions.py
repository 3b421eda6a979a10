"""
Exception types raised inside the recognizer.

None of these are fatal to a session: classifiers and the calibration
workflow turn them into "no recognition happened", and the template bank
turns storage failures into "no personalization available".
"""


class HandwriteError(Exception):
    """Base class for recognizer errors."""


class DegenerateStrokeError(HandwriteError, ValueError):
    """Stroke has too few points or too small a bounding box to normalize."""

    def __init__(self, point_count: int, width: float, height: float):
        self.point_count = point_count
        self.width = width
        self.height = height
        super().__init__(
            f"Degenerate stroke: {point_count} points, {width:.1f}x{height:.1f} box"
        )


class TemplateReadError(HandwriteError):
    """Stored user templates could not be decoded."""


class TemplateWriteError(HandwriteError):
    """Stored user templates could not be written or deleted."""
