"""
Digit classification over a template bank.

DigitClassifier is the interface the input scheduler talks to. The default
TemplateDigitClassifier is a 1-nearest-neighbour matcher: it normalizes the
stroke and compares it index by index with every template in the bank.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..config.settings import HandwriteConfig, RecognitionConfig
from ..exceptions import DegenerateStrokeError
from ..utils.stroke_utils import DataValidator, GeometryUtils, Point
from .normalizer import StrokeNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    """Best matching label with its score and acceptance."""
    label: str
    score: float
    accepted: bool = False

    @classmethod
    def rejected(cls) -> 'ClassificationResult':
        return cls('', float('-inf'), False)


class DigitClassifier:
    """Base class for recognition backends."""

    def initialize(self):
        """Prepare the backend before the first classification."""

    def classify(self, stroke: Sequence[Point], bank) -> ClassificationResult:
        raise NotImplementedError

    def close(self):
        """Release backend resources."""


class TemplateDigitClassifier(DigitClassifier):
    """Nearest-template classifier with a score threshold."""

    def __init__(self, normalizer: Optional[StrokeNormalizer] = None,
                 accept_threshold: float = HandwriteConfig.ACCEPT_THRESHOLD,
                 distance_tolerance: float = HandwriteConfig.DISTANCE_TOLERANCE):
        self.normalizer = normalizer or StrokeNormalizer()
        self.accept_threshold = accept_threshold
        self.distance_tolerance = distance_tolerance

    def classify(self, stroke: Sequence[Point], bank) -> ClassificationResult:
        """
        Classify a stroke against every template in the bank.

        Args:
            stroke: Raw stroke points
            bank: TemplateBank to match against

        Returns:
            ClassificationResult; degenerate strokes give a rejected result
        """
        stroke = tuple(stroke)
        try:
            DataValidator.validate_stroke(stroke)
        except DegenerateStrokeError as e:
            logger.debug(str(e))
            return ClassificationResult.rejected()

        normalized = self.normalizer.normalize(stroke)

        best_score = float('-inf')
        best_label = ''
        for template in bank.all():
            score = self.score(normalized, template.points)
            if score > best_score:
                best_score = score
                best_label = template.label

        if not best_label:
            return ClassificationResult.rejected()

        return ClassificationResult(best_label, best_score,
                                    best_score > self.accept_threshold)

    def score(self, normalized: Sequence[Point], template_points: Sequence[Point]) -> float:
        """Convert path distance to a similarity score (1.0 is identical)."""
        distance = GeometryUtils.path_distance(normalized, template_points)
        return 1.0 - distance / (self.distance_tolerance * self.normalizer.diagonal)


def create_classifier(config: Optional[RecognitionConfig] = None,
                      normalizer: Optional[StrokeNormalizer] = None) -> DigitClassifier:
    """Build the recognition backend named by the configuration."""
    config = config or RecognitionConfig()
    if config.classifier_backend == 'ml':
        from .ml_classifier import MLDigitClassifier
        return MLDigitClassifier(normalizer=normalizer,
                                 model_path=config.model_path,
                                 min_confidence=config.ml_min_confidence)
    return TemplateDigitClassifier(normalizer=normalizer,
                                   accept_threshold=config.accept_threshold)
