"""
Configuration settings for the handwritten digit recognizer.
"""

from typing import Optional


class HandwriteConfig:
    """Configuration constants for stroke normalization and recognition."""

    # Normalization
    NUM_POINTS = 64
    TARGET_SIZE = 200.0
    SMOOTHING_WINDOW = 3

    # Degenerate stroke limits (canvas units)
    MIN_STROKE_POINTS = 8
    MIN_STROKE_EXTENT = 6.0

    # Template matching
    DISTANCE_TOLERANCE = 0.35
    ACCEPT_THRESHOLD = 0.15

    # ML backend
    ML_MIN_CONFIDENCE = 0.3
    ML_AUGMENT_COPIES = 20
    ML_JITTER = 0.03  # fraction of TARGET_SIZE

    # Timing configurations (in milliseconds)
    INACTIVITY_TIMEOUT = 500
    RELAXED_INACTIVITY_TIMEOUT = 1200

    # Calibration
    SAMPLES_PER_DIGIT = 2
    DIGITS = ['0', '1', '2', '3', '4', '5', '6', '7', '8', '9']

    # Persistence
    USER_TEMPLATES_KEY = 'handwrite_user_templates_v1'

    CLASSIFIER_BACKENDS = ('template', 'ml')


class RecognitionConfig:
    """Runtime configuration for recognition sensitivity and backend choice."""

    def __init__(self, classifier_backend: str = 'template',
                 accept_threshold: float = HandwriteConfig.ACCEPT_THRESHOLD,
                 inactivity_timeout_ms: int = HandwriteConfig.INACTIVITY_TIMEOUT,
                 samples_per_digit: int = HandwriteConfig.SAMPLES_PER_DIGIT,
                 model_path: Optional[str] = None,
                 ml_min_confidence: float = HandwriteConfig.ML_MIN_CONFIDENCE,
                 storage_key: str = HandwriteConfig.USER_TEMPLATES_KEY):
        self.classifier_backend = classifier_backend
        self.accept_threshold = accept_threshold
        self.inactivity_timeout_ms = inactivity_timeout_ms
        self.samples_per_digit = samples_per_digit
        self.model_path = model_path
        self.ml_min_confidence = ml_min_confidence
        self.storage_key = storage_key

    @property
    def classifier_backend(self) -> str:
        return self._classifier_backend

    @classifier_backend.setter
    def classifier_backend(self, backend: str):
        if backend not in HandwriteConfig.CLASSIFIER_BACKENDS:
            raise ValueError(
                f"Unknown classifier backend '{backend}', expected one of "
                f"{HandwriteConfig.CLASSIFIER_BACKENDS}"
            )
        self._classifier_backend = backend

    @property
    def samples_per_digit(self) -> int:
        return self._samples_per_digit

    @samples_per_digit.setter
    def samples_per_digit(self, count: int):
        if count < 1:
            raise ValueError("samples_per_digit must be at least 1")
        self._samples_per_digit = int(count)

    @property
    def inactivity_timeout(self) -> float:
        """Inactivity timeout in seconds."""
        return self.inactivity_timeout_ms / 1000.0

    def set_threshold(self, threshold: float):
        """Set the acceptance threshold (0.0-1.0)."""
        self.accept_threshold = max(0.0, min(1.0, threshold))

    def get_threshold(self) -> float:
        """Get the current acceptance threshold."""
        return self.accept_threshold

    def set_ml_confidence(self, confidence: float):
        """Set the minimum ML class probability (0.0-1.0)."""
        self.ml_min_confidence = max(0.0, min(1.0, confidence))
