"""
Utilities package for stroke processing and recognition.

This package provides shared geometry, conversion and validation helpers
used by the normalizer, template bank, classifiers and input scheduler.
"""

from .stroke_utils import (
    Point,
    BoundingBox,
    Stroke,
    GeometryUtils,
    PathUtils,
    DataValidator
)

__all__ = [
    'Point',
    'BoundingBox',
    'Stroke',
    'GeometryUtils',
    'PathUtils',
    'DataValidator'
]
