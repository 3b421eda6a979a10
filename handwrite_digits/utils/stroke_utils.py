"""
Shared utilities for stroke processing and recognition.

This module provides the geometry used by the normalizer, the template
bank and the classifiers, together with conversion and validation helpers
for point data coming from the input source or from storage.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config.settings import HandwriteConfig
from ..exceptions import DegenerateStrokeError


@dataclass(frozen=True)
class Point:
    """Represents an immutable 2D point."""
    x: float
    y: float

    def __repr__(self):
        return f"Point({self.x:.1f}, {self.y:.1f})"

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box of a path."""
    min_x: float
    min_y: float
    width: float
    height: float


class Stroke:
    """Points captured during one continuous contact, in temporal order."""

    def __init__(self, points: Iterable[Point] = ()):
        self._points: List[Point] = list(points)

    def append(self, point: Point):
        self._points.append(point)

    def clear(self):
        self._points = []

    def snapshot(self) -> Tuple[Point, ...]:
        """Read-only copy handed to classifiers and calibration."""
        return tuple(self._points)

    def __len__(self):
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def __getitem__(self, index):
        return self._points[index]

    def __repr__(self):
        return f"Stroke({len(self._points)} points)"


class GeometryUtils:
    """Utility class for geometric calculations."""

    @staticmethod
    def calculate_centroid(points: Sequence[Point]) -> Point:
        """Calculate the centroid of a list of points."""
        if not points:
            return Point(0.0, 0.0)
        sum_x = sum(p.x for p in points)
        sum_y = sum(p.y for p in points)
        return Point(sum_x / len(points), sum_y / len(points))

    @staticmethod
    def rotate_points(points: Sequence[Point], angle: float,
                      centroid: Optional[Point] = None) -> List[Point]:
        """Rotate points around a centroid."""
        if centroid is None:
            centroid = GeometryUtils.calculate_centroid(points)

        cos = math.cos(angle)
        sin = math.sin(angle)
        rotated = []
        for point in points:
            dx = point.x - centroid.x
            dy = point.y - centroid.y
            rotated.append(Point(dx * cos - dy * sin + centroid.x,
                                 dx * sin + dy * cos + centroid.y))
        return rotated

    @staticmethod
    def calculate_distance(p1: Point, p2: Point) -> float:
        """Calculate Euclidean distance between two points."""
        return math.hypot(p1.x - p2.x, p1.y - p2.y)

    @staticmethod
    def calculate_path_length(points: Sequence[Point]) -> float:
        """Calculate total path length."""
        length = 0.0
        for i in range(1, len(points)):
            length += GeometryUtils.calculate_distance(points[i-1], points[i])
        return length

    @staticmethod
    def calculate_bounding_box(points: Sequence[Point]) -> BoundingBox:
        """Get the bounding box of a path."""
        if not points:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)

        min_x = min(p.x for p in points)
        max_x = max(p.x for p in points)
        min_y = min(p.y for p in points)
        max_y = max(p.y for p in points)
        return BoundingBox(min_x, min_y, max_x - min_x, max_y - min_y)

    @staticmethod
    def path_distance(path1: Sequence[Point], path2: Sequence[Point]) -> float:
        """Mean index-wise distance between two equal-length paths."""
        if len(path1) != len(path2) or not path1:
            return float('inf')

        distance = 0.0
        for p1, p2 in zip(path1, path2):
            distance += GeometryUtils.calculate_distance(p1, p2)
        return distance / len(path1)


class PathUtils:
    """Utility class for converting path data."""

    @staticmethod
    def convert_dict_to_points(path: Iterable[Dict[str, Any]]) -> List[Point]:
        """Convert path from dict format to Point objects."""
        return [Point(float(p['x']), float(p['y'])) for p in path]

    @staticmethod
    def convert_points_to_dict(points: Iterable[Point]) -> List[Dict[str, float]]:
        """Convert Point objects to dict format."""
        return [{'x': p.x, 'y': p.y} for p in points]


class DataValidator:
    """Utility class for validating stroke data."""

    @staticmethod
    def is_degenerate_stroke(points: Sequence[Point],
                             min_points: int = HandwriteConfig.MIN_STROKE_POINTS,
                             min_extent: float = HandwriteConfig.MIN_STROKE_EXTENT) -> bool:
        """True if the stroke is too short or too small to recognize."""
        if len(points) < min_points:
            return True
        box = GeometryUtils.calculate_bounding_box(points)
        return box.width < min_extent and box.height < min_extent

    @staticmethod
    def validate_stroke(points: Sequence[Point],
                        min_points: int = HandwriteConfig.MIN_STROKE_POINTS,
                        min_extent: float = HandwriteConfig.MIN_STROKE_EXTENT):
        """Raise DegenerateStrokeError if the stroke cannot be normalized."""
        if DataValidator.is_degenerate_stroke(points, min_points, min_extent):
            box = GeometryUtils.calculate_bounding_box(points)
            raise DegenerateStrokeError(len(points), box.width, box.height)

    @staticmethod
    def parse_point(point_data: Any) -> Point:
        """Parse a stored {'x', 'y'} record, raising ValueError when malformed."""
        if not isinstance(point_data, dict):
            raise ValueError("point is not a dictionary")
        if 'x' not in point_data or 'y' not in point_data:
            raise ValueError("point is missing 'x' or 'y'")
        x = point_data['x']
        y = point_data['y']
        # bool is an int subclass, JSON true/false is not a coordinate
        if isinstance(x, bool) or isinstance(y, bool):
            raise ValueError("point coordinates must be numeric")
        try:
            x = float(x)
            y = float(y)
        except (ValueError, TypeError):
            raise ValueError("point coordinates must be numeric")
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError("point coordinates must be finite")
        return Point(x, y)
