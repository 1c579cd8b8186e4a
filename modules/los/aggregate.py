"""Worst-case merge of several observers' scan results."""
from __future__ import annotations

from typing import Dict, Iterable

from modules.los.results import ScanResult, ScanResults
from modules.maps.geometry import Cell


def merge_worst_case(result_maps: Iterable[ScanResults]) -> Dict[Cell, ScanResult]:
    """Keep, for every cell seen by at least one observer, its lowest cover.

    Cells no observer can see are left out. The merge is a plain minimum, so
    the order in which observers are folded in never changes the outcome.
    """

    combined: Dict[Cell, ScanResult] = {}
    for results in result_maps:
        for cell, result in results.items():
            if not result.visible:
                continue
            existing = combined.get(cell)
            if existing is None or result.cover_value < existing.cover_value:
                combined[cell] = result
    return combined


__all__ = ["merge_worst_case"]
