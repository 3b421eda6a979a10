"""
Handwritten Digit Recognizer Package
Online single-digit recognition from pen or finger strokes, with per-user calibration.
"""

from .core.input_scheduler import AnswerBuffer, InputScheduler
from .recognition.template_bank import TemplateBank
from .recognition.digit_classifier import TemplateDigitClassifier, create_classifier
from .recognition.calibration import CalibrationSession
from .storage.template_store import FileTemplateStore, MemoryTemplateStore

__version__ = "1.0.0"
__all__ = [
    "AnswerBuffer",
    "InputScheduler",
    "TemplateBank",
    "TemplateDigitClassifier",
    "create_classifier",
    "CalibrationSession",
    "FileTemplateStore",
    "MemoryTemplateStore",
]
