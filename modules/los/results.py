"""Scan parameters and per-cell results."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

import numpy as np

from modules.maps.geometry import Cell


class LOSMode(str, Enum):
    OFF = "off"
    STATIC = "static"
    LEANING = "leaning"

    def next(self) -> "LOSMode":
        """Mode that follows this one when cycling a display toggle."""

        order = (LOSMode.OFF, LOSMode.STATIC, LOSMode.LEANING)
        return order[(order.index(self) + 1) % len(order)]


class OverlayDirection(str, Enum):
    """Whose cover a scan reports.

    ``OFFENSIVE``: cover the target cell's occupant has against the observer.
    ``DEFENSIVE``: cover the observer has against a threat on the target cell.
    """

    OFFENSIVE = "offensive"
    DEFENSIVE = "defensive"

    def flipped(self) -> "OverlayDirection":
        if self is OverlayDirection.OFFENSIVE:
            return OverlayDirection.DEFENSIVE
        return OverlayDirection.OFFENSIVE


@dataclass(frozen=True)
class ScanResult:
    """Outcome for one scanned cell. Cover is zero when the cell is not visible."""

    visible: bool
    cover_value: float = 0.0
    normalized_cover: float = 0.0


NOT_VISIBLE = ScanResult(False)

ScanResults = Mapping[Cell, ScanResult]


def cover_field_array(results: ScanResults, width: int, height: int) -> np.ndarray:
    """Rasterise ``results`` into a ``[z, x]`` float array.

    Cells that are absent or not visible hold ``NaN`` so renderers can tell
    "no sight" apart from "visible with zero cover".
    """

    field = np.full((height, width), np.nan, dtype=float)
    for (x, z), result in results.items():
        if result.visible and 0 <= x < width and 0 <= z < height:
            field[z, x] = result.cover_value
    return field


__all__ = [
    "LOSMode",
    "NOT_VISIBLE",
    "OverlayDirection",
    "ScanResult",
    "ScanResults",
    "cover_field_array",
]
