"""Unit tests for recognition/digit_classifier.py."""

import math

import pytest

from handwrite_digits.config.settings import RecognitionConfig
from handwrite_digits.recognition.digit_classifier import (
    ClassificationResult,
    TemplateDigitClassifier,
    create_classifier,
)
from handwrite_digits.recognition.ml_classifier import MLDigitClassifier
from handwrite_digits.recognition.template_bank import (
    DigitTemplate,
    TemplateBank,
    builtin_digit_strokes,
)
from handwrite_digits.utils.stroke_utils import Point

from conftest import builtin_stroke, line_points, transform, zigzag_points


@pytest.fixture
def classifier(normalizer):
    return TemplateDigitClassifier(normalizer=normalizer)


def test_vertical_line_is_one(classifier, bank):
    result = classifier.classify(line_points(50, 10, 50, 90), bank)
    assert result.label == '1'
    assert result.score > 0.15
    assert result.accepted


@pytest.mark.parametrize('label, stroke', builtin_digit_strokes())
def test_builtin_strokes_match_their_own_label(classifier, bank, label, stroke):
    if len(stroke) < 8:
        pytest.skip("too few points to pass the stroke check")
    result = classifier.classify(stroke, bank)
    assert result.label == label
    assert result.score == pytest.approx(1.0)


@pytest.mark.parametrize('label', ['2', '3', '7'])
@pytest.mark.parametrize('dx, dy, scale, angle', [
    (300.0, 120.0, 1.0, 0.0),
    (0.0, 0.0, 2.5, 0.0),
    (0.0, 0.0, 0.6, 0.0),
    (10.0, -20.0, 1.3, math.radians(35)),
])
def test_invariant_to_translation_scale_and_rotation(classifier, bank, label, dx, dy, scale, angle):
    stroke = builtin_stroke(label)
    baseline = classifier.classify(stroke, bank)
    moved = classifier.classify(transform(stroke, dx, dy, scale, angle), bank)
    assert moved.label == label
    assert moved.score >= 0.9 * baseline.score


@pytest.mark.parametrize('stroke', [
    [],
    line_points(0, 0, 100, 0, steps=5),
    line_points(10, 10, 14, 14, steps=30),
])
def test_degenerate_stroke_is_rejected(classifier, bank, stroke):
    result = classifier.classify(stroke, bank)
    assert result == ClassificationResult.rejected()
    assert result.label == ''
    assert result.score == float('-inf')
    assert not result.accepted


def test_low_score_is_not_accepted(normalizer, bank):
    strict = TemplateDigitClassifier(normalizer=normalizer, accept_threshold=1.01)
    result = strict.classify(line_points(50, 10, 50, 90), bank)
    assert result.label == '1'
    assert not result.accepted


def test_ties_go_to_first_template(classifier, normalizer):
    points = normalizer.normalize(zigzag_points())
    bank = TemplateBank([DigitTemplate('3', points), DigitTemplate('8', points)])
    assert classifier.classify(zigzag_points(), bank).label == '3'


def test_user_template_is_used(classifier, bank, normalizer):
    bank.append(DigitTemplate('5', normalizer.normalize(zigzag_points())))
    result = classifier.classify(transform(zigzag_points(), dx=40, scale=1.5), bank)
    assert result.label == '5'
    assert result.accepted


def test_empty_bank_rejects(classifier):
    assert not classifier.classify(line_points(50, 10, 50, 90), TemplateBank([])).accepted


def test_score_of_identical_paths_is_one(classifier, normalizer):
    path = normalizer.normalize(zigzag_points())
    assert classifier.score(path, path) == 1.0


def test_score_scale(classifier):
    a = [Point(0, 0)] * 4
    b = [Point(0, 70 * math.sqrt(2))] * 4
    # one tolerance width away scores zero
    assert classifier.score(a, b) == pytest.approx(0.0)


class TestCreateClassifier:

    def test_default_is_template_backend(self):
        assert isinstance(create_classifier(), TemplateDigitClassifier)

    def test_threshold_comes_from_config(self):
        config = RecognitionConfig()
        config.set_threshold(0.4)
        assert create_classifier(config).accept_threshold == 0.4

    def test_ml_backend(self, tmp_path):
        config = RecognitionConfig(classifier_backend='ml', model_path=str(tmp_path / 'model.pkl'))
        classifier = create_classifier(config)
        assert isinstance(classifier, MLDigitClassifier)
        assert classifier.model_path == config.model_path
