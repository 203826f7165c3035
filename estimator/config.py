from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from estimator.supported_codes import SupportedCodeConfig, default_supported_config


class FeedUnit(Enum):
    """Unit of the raw number following an F word."""

    MM_PER_MIN = "mm/min"
    # Peopoly Moai firmware reads F as micrometres per minute.
    UM_PER_MIN = "um/min"

    @property
    def to_mm_per_min(self) -> float:
        if self is FeedUnit.UM_PER_MIN:
            return 0.001
        return 1.0


@dataclass(frozen=True)
class EstimatorConfig:
    codes: SupportedCodeConfig = field(default_factory=default_supported_config)
    feed_unit: FeedUnit = FeedUnit.MM_PER_MIN

    # Slicers that do not compute a time still write this value into ;TIME:.
    placeholder_slicer_time: int = 6666


def default_config() -> EstimatorConfig:
    return EstimatorConfig()
