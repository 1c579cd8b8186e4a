"""Builders for small battlefields used across the test-suite."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from modules.maps.components import BattleGrid
from modules.maps.terrain_types import OBJECT_CATALOG, OccludingObject

# Legend for ``grid_from_rows``; '?' marks an unexplored cell.
DEFAULT_LEGEND: Dict[str, OccludingObject] = {
    "#": OBJECT_CATALOG["wall"],
    "s": OBJECT_CATALOG["sandbags"],
    "b": OBJECT_CATALOG["barricade"],
    "t": OBJECT_CATALOG["table"],
    "T": OBJECT_CATALOG["tree"],
    "D": OBJECT_CATALOG["door"],
    "d": OBJECT_CATALOG["door"].with_door_state(True),
}


def grid_from_rows(
    rows: Sequence[str],
    legend: Optional[Dict[str, OccludingObject]] = None,
) -> BattleGrid:
    """Build a grid from text rows, the first row being the northernmost.

    ``.`` is empty ground. Row ``i`` maps to ``z = len(rows) - 1 - i`` so the
    picture reads like a map with north at the top.
    """

    legend = legend or DEFAULT_LEGEND
    height = len(rows)
    width = len(rows[0])
    grid = BattleGrid(width, height)
    for row_index, row in enumerate(rows):
        if len(row) != width:
            raise ValueError("all rows must have the same width")
        z = height - 1 - row_index
        for x, char in enumerate(row):
            if char == ".":
                continue
            if char == "?":
                grid.set_unexplored((x, z))
                continue
            grid.place((x, z), legend[char])
    return grid


def partial_object(fill_percent: float, name: str = "crate") -> OccludingObject:
    """A partial-fill building of the given height."""

    base = OBJECT_CATALOG["sandbags"]
    return OccludingObject(
        name=name,
        category=base.category,
        fill=base.fill,
        fill_percent=fill_percent,
    )
