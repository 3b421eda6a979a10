"""
Digit recognition and calibration.

This module provides stroke normalization, the digit template bank, the
template and ML classification backends, and the calibration workflow.
"""

from .normalizer import StrokeNormalizer
from .template_bank import DigitTemplate, TemplateBank
from .digit_classifier import (
    ClassificationResult,
    DigitClassifier,
    TemplateDigitClassifier,
    create_classifier
)
from .calibration import CalibrationPhase, CalibrationProgress, CalibrationSession

__all__ = [
    'StrokeNormalizer',
    'DigitTemplate',
    'TemplateBank',
    'ClassificationResult',
    'DigitClassifier',
    'TemplateDigitClassifier',
    'create_classifier',
    'CalibrationPhase',
    'CalibrationProgress',
    'CalibrationSession'
]
