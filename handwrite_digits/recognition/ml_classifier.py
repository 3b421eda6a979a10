"""
Machine Learning backend for digit classification.

Uses scikit-learn to train a random forest on the normalized paths of the
template bank. Every template is augmented with jittered copies so the
forest sees some variation around each shape. The model is retrained
whenever the bank contents change, e.g. after calibration.
"""

import hashlib
import logging
import os
from typing import Optional, Sequence

import joblib
import numpy as np
from sklearn.ensemble import RandomForestClassifier
from sklearn.preprocessing import StandardScaler

from ..config.settings import HandwriteConfig
from ..exceptions import DegenerateStrokeError
from ..utils.stroke_utils import DataValidator, Point
from .digit_classifier import ClassificationResult, DigitClassifier
from .normalizer import StrokeNormalizer

logger = logging.getLogger(__name__)


class MLDigitClassifier(DigitClassifier):
    """
    ML-based digit classifier.

    Features are the 2 * num_points coordinates of the normalized path,
    standardized before fitting.
    """

    def __init__(self, normalizer: Optional[StrokeNormalizer] = None,
                 model_path: Optional[str] = None,
                 min_confidence: float = HandwriteConfig.ML_MIN_CONFIDENCE,
                 augment_copies: int = HandwriteConfig.ML_AUGMENT_COPIES,
                 jitter: float = HandwriteConfig.ML_JITTER,
                 random_state: int = 42):
        self.normalizer = normalizer or StrokeNormalizer()
        self.model_path = model_path
        self.min_confidence = min_confidence
        self.augment_copies = augment_copies
        self.jitter = jitter
        self.random_state = random_state
        self.classifier = None
        self.scaler = None
        self.fingerprint = None
        self.is_ready = False

    def initialize(self):
        """Load a saved model if one exists; training waits for the first bank."""
        if self.model_path and os.path.exists(self.model_path):
            try:
                model_data = joblib.load(self.model_path)
                self.classifier = model_data['classifier']
                self.scaler = model_data['scaler']
                self.fingerprint = model_data['fingerprint']
                logger.info(f"Loaded digit model from {self.model_path}")
            except Exception as e:
                logger.warning(f"Could not load digit model, will retrain: {e}")
                self.classifier = None
                self.scaler = None
                self.fingerprint = None
        self.is_ready = True

    def close(self):
        self.classifier = None
        self.scaler = None
        self.fingerprint = None
        self.is_ready = False

    def _extract_features(self, points: Sequence[Point]) -> np.ndarray:
        """Flatten a normalized path into a feature vector."""
        return np.array([[p.x, p.y] for p in points], dtype=float).ravel()

    def _bank_fingerprint(self, bank) -> str:
        digest = hashlib.sha1()
        for template in bank.all():
            digest.update(template.label.encode('utf-8'))
            digest.update(self._extract_features(template.points).tobytes())
        return digest.hexdigest()

    def _generate_training_data(self, bank):
        """Templates plus gaussian-jittered copies."""
        rng = np.random.RandomState(self.random_state)
        sigma = self.jitter * self.normalizer.target_size

        X = []
        y = []
        for template in bank.all():
            features = self._extract_features(template.points)
            X.append(features)
            y.append(template.label)
            for _ in range(self.augment_copies):
                X.append(features + rng.normal(0.0, sigma, size=features.shape))
                y.append(template.label)

        return np.vstack(X), np.array(y)

    def train(self, bank):
        """Fit the forest on the current bank contents."""
        logger.info(f"Training digit model on {len(bank)} templates")
        X, y = self._generate_training_data(bank)

        self.scaler = StandardScaler()
        X_scaled = self.scaler.fit_transform(X)

        self.classifier = RandomForestClassifier(n_estimators=100,
                                                 random_state=self.random_state)
        self.classifier.fit(X_scaled, y)
        self.fingerprint = self._bank_fingerprint(bank)
        self._save_model()

    def _save_model(self):
        if not self.model_path:
            return
        model_data = {
            'classifier': self.classifier,
            'scaler': self.scaler,
            'fingerprint': self.fingerprint
        }
        try:
            joblib.dump(model_data, self.model_path)
        except OSError as e:
            logger.error(f"Could not save digit model: {e}")

    def classify(self, stroke: Sequence[Point], bank) -> ClassificationResult:
        """Classify a stroke, retraining first if the bank has changed."""
        if not self.is_ready:
            logger.warning("Digit model not initialized")
            return ClassificationResult.rejected()

        stroke = tuple(stroke)
        try:
            DataValidator.validate_stroke(stroke)
        except DegenerateStrokeError as e:
            logger.debug(str(e))
            return ClassificationResult.rejected()

        if len(bank) == 0:
            return ClassificationResult.rejected()

        if self.classifier is None or self.fingerprint != self._bank_fingerprint(bank):
            self.train(bank)

        features = self._extract_features(self.normalizer.normalize(stroke))
        features_scaled = self.scaler.transform([features])
        probabilities = self.classifier.predict_proba(features_scaled)[0]

        best = int(np.argmax(probabilities))
        confidence = float(probabilities[best])
        label = str(self.classifier.classes_[best])
        return ClassificationResult(label, confidence, confidence >= self.min_confidence)
