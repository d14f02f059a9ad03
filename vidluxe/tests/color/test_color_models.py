"""
Test suite for metric classification against target bands.
"""

from dataclasses import replace

import pytest

from vidluxe.color.color_analyzer import default_analysis, explain
from vidluxe.color.models import ColorMetric, MetricStatus, classify
from vidluxe.config import ColorConfig, TargetBand

BRIGHTNESS = ColorConfig().brightness


@pytest.mark.parametrize(
    "value, status, adjustment",
    [
        (50, MetricStatus.NORMAL, 0),
        (40, MetricStatus.NORMAL, 0),
        (70, MetricStatus.NORMAL, 0),
        (38, MetricStatus.LOW, 9),
        (20, MetricStatus.LOW, 15),    # capped
        (80, MetricStatus.HIGH, -12),
        (98, MetricStatus.HIGH, -15),  # capped
    ],
)
def test_classify_brightness(value, status, adjustment):
    metric = classify(value, BRIGHTNESS)

    assert metric.status == status
    assert metric.adjustment == adjustment


def test_adjustment_sign_matches_status():
    for value in range(0, 101):
        metric = classify(value, BRIGHTNESS)
        if metric.status == MetricStatus.LOW:
            assert metric.adjustment > 0
        elif metric.status == MetricStatus.HIGH:
            assert metric.adjustment < 0
        else:
            assert metric.adjustment == 0


def test_tiny_deviation_still_gets_a_correction():
    band = TargetBand(min=40, max=60, optimal=60, max_adjustment=20)
    metric = classify(60.4, band)

    assert metric.status == MetricStatus.HIGH
    assert metric.adjustment == -1


def test_value_is_rounded_to_one_decimal():
    assert classify(50.1964, BRIGHTNESS).value == 50.2


def test_explain_lists_issues_and_suggestions():
    analysis = default_analysis()
    assert "look good" in explain(analysis)

    dark = ColorMetric(value=20, status=MetricStatus.LOW, adjustment=15)
    noisy = ColorMetric(value=45, status=MetricStatus.HIGH, adjustment=-17)
    text = explain(replace(analysis, brightness=dark, noise=noisy))

    assert "underexposed" in text
    assert "noise" in text
    assert "denoising" in text


def test_to_dict_uses_plain_status_strings():
    data = default_analysis().to_dict()

    assert set(data) == {"brightness", "contrast", "saturation", "color_temp", "sharpness", "noise"}
    assert data["brightness"] == {"value": 50.0, "status": "normal", "adjustment": 0.0}
