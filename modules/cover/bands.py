"""Discrete cover bands used when presenting scan results."""
from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple

from modules.cover.system import METERS_PER_CELL_HEIGHT, CoverModel, HeightCoverModel
from modules.los.results import ScanResult

Thresholds = Tuple[float, float, float, float]

CLEAR_COVER_EPSILON = 0.01


class CoverBand(str, Enum):
    NO_LOS = "no_los"
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EXTREME = "extreme"


_ORDERED_BANDS = (CoverBand.NONE, CoverBand.LOW, CoverBand.MODERATE, CoverBand.HIGH)


def validate_thresholds(values: Sequence[float]) -> Thresholds:
    """Return ``values`` as four ascending floats or raise ``ValueError``."""

    if len(values) != 4:
        raise ValueError("exactly four cover thresholds are required")
    thresholds = tuple(float(value) for value in values)
    if any(a > b for a, b in zip(thresholds, thresholds[1:])):
        raise ValueError(f"cover thresholds must be ascending: {thresholds}")
    return thresholds  # type: ignore[return-value]


def band_for_value(value: float, thresholds: Thresholds) -> CoverBand:
    for band, limit in zip(_ORDERED_BANDS, thresholds):
        if value <= limit:
            return band
    return CoverBand.EXTREME


def classify(result: ScanResult, thresholds: Thresholds, model: CoverModel) -> CoverBand:
    """Map a scan result onto a display band.

    Height-based cover is compared in metres so the thresholds read the same
    way players think about wall heights.
    """

    if not result.visible:
        return CoverBand.NO_LOS
    value = result.cover_value
    if isinstance(model, HeightCoverModel):
        value *= METERS_PER_CELL_HEIGHT
    return band_for_value(value, thresholds)


def cell_tooltip(result: ScanResult, model: CoverModel) -> str:
    if not result.visible:
        return "No line of sight"
    if result.cover_value <= CLEAR_COVER_EPSILON:
        return "Clear - no cover"
    return model.cover_label(result.cover_value)


__all__ = [
    "CoverBand",
    "Thresholds",
    "band_for_value",
    "cell_tooltip",
    "classify",
    "validate_thresholds",
]
