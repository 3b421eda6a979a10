"""
Stroke normalization for template matching.

Implements the preprocessing half of the $1 Unistroke Recognizer: smooth,
resample to a fixed number of equally spaced points, rotate by the
indicative angle and scale uniformly into a reference square centred on
the origin. Two normalized paths can then be compared point by point.

Reference: https://depts.washington.edu/acelab/proj/dollar/index.html
"""

import math
from typing import List, Sequence, Tuple

from ..config.settings import HandwriteConfig
from ..utils.stroke_utils import Point, GeometryUtils


class StrokeNormalizer:
    """Turns raw strokes into comparable fixed-length paths."""

    def __init__(self, num_points: int = HandwriteConfig.NUM_POINTS,
                 target_size: float = HandwriteConfig.TARGET_SIZE,
                 smoothing_window: int = HandwriteConfig.SMOOTHING_WINDOW):
        if num_points < 2:
            raise ValueError("num_points must be at least 2")
        self.num_points = num_points
        self.target_size = target_size
        self.smoothing_window = smoothing_window

    def normalize(self, points: Sequence[Point]) -> Tuple[Point, ...]:
        """
        Normalize a stroke.

        Callers are expected to reject degenerate strokes first
        (see DataValidator.validate_stroke).

        Args:
            points: Raw stroke points in input order

        Returns:
            Exactly num_points points, centroid at the origin
        """
        path = self.smooth(points)
        path = self.resample(path)
        path = self.rotate_to_zero(path)
        path = self.scale_and_center(path)
        return tuple(path)

    def smooth(self, points: Sequence[Point]) -> List[Point]:
        """Moving average over a symmetric window, clamped at the ends."""
        points = list(points)
        if len(points) <= self.smoothing_window:
            return points

        half = self.smoothing_window // 2
        last = len(points) - 1
        smoothed = []
        for i in range(len(points)):
            sum_x = 0.0
            sum_y = 0.0
            count = 0
            for j in range(i - half, i + half + 1):
                k = max(0, min(last, j))
                sum_x += points[k].x
                sum_y += points[k].y
                count += 1
            smoothed.append(Point(sum_x / count, sum_y / count))
        return smoothed

    def resample(self, points: Sequence[Point]) -> List[Point]:
        """Resample points to have equal spacing along the path."""
        num_points = self.num_points
        if not points:
            return [Point(0.0, 0.0)] * num_points

        points = list(points)
        total_length = GeometryUtils.calculate_path_length(points)
        if total_length == 0:
            return [points[0]] * num_points

        interval = total_length / (num_points - 1)
        D = 0.0
        resampled = [points[0]]
        i = 1
        while i < len(points):
            prev_point = points[i-1]
            curr_point = points[i]
            d = GeometryUtils.calculate_distance(prev_point, curr_point)
            if d > 0 and D + d >= interval:
                ratio = (interval - D) / d
                q = Point(prev_point.x + ratio * (curr_point.x - prev_point.x),
                          prev_point.y + ratio * (curr_point.y - prev_point.y))
                resampled.append(q)
                points.insert(i, q)  # q starts the next segment
                D = 0.0
            else:
                D += d
            i += 1

        # floating-point slack can leave the walk short of the last point
        while len(resampled) < num_points:
            resampled.append(points[-1])
        return resampled[:num_points]

    def indicative_angle(self, points: Sequence[Point]) -> float:
        """Angle from the first point to the centroid."""
        centroid = GeometryUtils.calculate_centroid(points)
        return math.atan2(centroid.y - points[0].y, centroid.x - points[0].x)

    def rotate_to_zero(self, points: Sequence[Point]) -> List[Point]:
        """Rotate points so the indicative angle is zero."""
        if len(points) < 2:
            return list(points)
        return GeometryUtils.rotate_points(points, -self.indicative_angle(points))

    def scale_and_center(self, points: Sequence[Point]) -> List[Point]:
        """Scale uniformly to target_size and move the centroid to the origin."""
        box = GeometryUtils.calculate_bounding_box(points)
        longest = max(box.width, box.height)
        factor = self.target_size / longest if longest > 0 else 1.0

        scaled = [Point((p.x - box.min_x) * factor, (p.y - box.min_y) * factor)
                  for p in points]
        centroid = GeometryUtils.calculate_centroid(scaled)
        return [Point(p.x - centroid.x, p.y - centroid.y) for p in scaled]

    @property
    def diagonal(self) -> float:
        """Diagonal of the reference square."""
        return math.hypot(self.target_size, self.target_size)
