"""
Color analysis data models and target-band classification.
"""

from dataclasses import dataclass, asdict, fields
from enum import Enum
from typing import Any, Dict, Iterator, Tuple

from vidluxe.config.settings import TargetBand
from vidluxe.utils.helper import round_half_up


class MetricStatus(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


@dataclass(frozen=True)
class ColorMetric:
    """One measured metric. `adjustment` is zero exactly when status is normal."""
    value: float
    status: MetricStatus
    adjustment: float


@dataclass(frozen=True)
class ColorAnalysis:
    brightness: ColorMetric
    contrast: ColorMetric
    saturation: ColorMetric
    color_temp: ColorMetric
    sharpness: ColorMetric
    noise: ColorMetric

    def items(self) -> Iterator[Tuple[str, ColorMetric]]:
        """(name, metric) pairs in grading order."""
        for f in fields(self):
            yield f.name, getattr(self, f.name)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for metric in data.values():
            metric["status"] = metric["status"].value
        return data


METRIC_NAMES = tuple(f.name for f in fields(ColorAnalysis))


def classify(value: float, band: TargetBand) -> ColorMetric:
    """
    Place a value against its target band.

    Out-of-band values get half the distance to the band's optimum as
    adjustment, capped at the band's max_adjustment and never smaller than
    one unit, so a non-normal status always carries a nonzero correction.
    """
    value = round_half_up(value, 1)
    if value < band.min:
        adjustment = min(band.max_adjustment, round_half_up((band.optimal - value) / 2))
        return ColorMetric(value=value, status=MetricStatus.LOW, adjustment=max(1.0, adjustment))
    if value > band.max:
        adjustment = max(-band.max_adjustment, round_half_up((band.optimal - value) / 2))
        return ColorMetric(value=value, status=MetricStatus.HIGH, adjustment=min(-1.0, adjustment))
    return ColorMetric(value=value, status=MetricStatus.NORMAL, adjustment=0.0)
