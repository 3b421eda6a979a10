"""Unit tests for recognition/ml_classifier.py."""

import pytest

from handwrite_digits.recognition.ml_classifier import MLDigitClassifier
from handwrite_digits.recognition.template_bank import DigitTemplate, builtin_digit_strokes

from conftest import line_points, transform, zigzag_points


@pytest.fixture
def ml_classifier(normalizer):
    classifier = MLDigitClassifier(normalizer=normalizer)
    classifier.initialize()
    yield classifier
    classifier.close()


def test_not_initialized_rejects(normalizer, bank):
    classifier = MLDigitClassifier(normalizer=normalizer)
    result = classifier.classify(line_points(50, 10, 50, 90), bank)
    assert not result.accepted
    assert result.label == ''


def test_classifies_builtin_shapes(ml_classifier, bank):
    for label, stroke in builtin_digit_strokes():
        if len(stroke) < 8:
            continue
        result = ml_classifier.classify(transform(stroke, dx=25, dy=-10, scale=1.2), bank)
        assert result.label == label
        assert result.accepted
        assert 0.0 <= result.score <= 1.0


def test_degenerate_stroke_is_rejected(ml_classifier, bank):
    result = ml_classifier.classify(line_points(0, 0, 3, 3, steps=20), bank)
    assert result.score == float('-inf')
    assert not result.accepted


def test_trains_once_per_bank_state(ml_classifier, bank, monkeypatch):
    ml_classifier.classify(line_points(50, 10, 50, 90), bank)
    fingerprint = ml_classifier.fingerprint

    def fail(_bank):
        raise AssertionError("model retrained without a bank change")

    monkeypatch.setattr(ml_classifier, 'train', fail)
    ml_classifier.classify(line_points(50, 10, 50, 90), bank)
    assert ml_classifier.fingerprint == fingerprint


def test_retrains_after_user_template(ml_classifier, bank, normalizer):
    ml_classifier.classify(line_points(50, 10, 50, 90), bank)
    before = ml_classifier.fingerprint

    bank.append(DigitTemplate('5', normalizer.normalize(zigzag_points())))
    result = ml_classifier.classify(zigzag_points(), bank)

    assert ml_classifier.fingerprint != before
    assert result.label == '5'


def test_model_is_saved_and_reloaded(tmp_path, normalizer, bank, monkeypatch):
    model_path = str(tmp_path / 'digits.pkl')
    first = MLDigitClassifier(normalizer=normalizer, model_path=model_path)
    first.initialize()
    first.classify(line_points(50, 10, 50, 90), bank)

    second = MLDigitClassifier(normalizer=normalizer, model_path=model_path)
    second.initialize()
    assert second.fingerprint == first.fingerprint

    def fail(_bank):
        raise AssertionError("saved model should be reused")

    monkeypatch.setattr(second, 'train', fail)
    assert second.classify(line_points(50, 10, 50, 90), bank).label == '1'


def test_corrupt_model_file_is_retrained(tmp_path, normalizer, bank):
    model_path = tmp_path / 'digits.pkl'
    model_path.write_bytes(b'not a model')
    classifier = MLDigitClassifier(normalizer=normalizer, model_path=str(model_path))
    classifier.initialize()
    assert classifier.classifier is None
    assert classifier.classify(line_points(50, 10, 50, 90), bank).label == '1'
