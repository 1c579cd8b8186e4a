"""Corner-lean (peek) position enumeration.

An observer hugging a wall can lean out to shoot around it. Which cells it
may lean into depends on which of its eight neighbours block sight and on the
rough compass quadrant of the target:

* stepping out sideways is offered when the neighbour in the target's
  general direction is blocked but the diagonal past it is open, and the
  cell being stepped into is itself open;
* leaning over cover is offered for each open cardinal neighbour facing the
  target that holds cover, provided the observer's own cell is open.
"""
from __future__ import annotations

from typing import Callable, List

from modules.maps.geometry import (
    EAST,
    NORTH,
    NORTH_EAST,
    NORTH_WEST,
    SOUTH,
    SOUTH_EAST,
    SOUTH_WEST,
    WEST,
    Cell,
    bearing,
    neighbours,
)

CellPredicate = Callable[[Cell], bool]


def lean_sources(
    observer: Cell,
    target: Cell,
    can_see_over: CellPredicate,
    has_cover: CellPredicate,
) -> List[Cell]:
    """Return the cells next to ``observer`` it could lean into towards ``target``."""

    angle = bearing(observer, target)
    facing_north = angle > 270.0 or angle < 90.0
    facing_south = 90.0 < angle < 270.0
    facing_west = angle > 180.0
    facing_east = angle < 180.0

    around = neighbours(observer)
    blocked = [not can_see_over(cell) for cell in around]
    sources: List[Cell] = []

    def add(cell: Cell) -> None:
        if cell not in sources:
            sources.append(cell)

    if not blocked[EAST] and (
        (blocked[NORTH] and not blocked[NORTH_EAST] and facing_north)
        or (blocked[SOUTH] and not blocked[SOUTH_EAST] and facing_south)
    ):
        add(around[EAST])
    if not blocked[WEST] and (
        (blocked[NORTH] and not blocked[NORTH_WEST] and facing_north)
        or (blocked[SOUTH] and not blocked[SOUTH_WEST] and facing_south)
    ):
        add(around[WEST])
    if not blocked[SOUTH] and (
        (blocked[WEST] and not blocked[SOUTH_WEST] and facing_west)
        or (blocked[EAST] and not blocked[SOUTH_EAST] and facing_east)
    ):
        add(around[SOUTH])
    if not blocked[NORTH] and (
        (blocked[WEST] and not blocked[NORTH_WEST] and facing_west)
        or (blocked[EAST] and not blocked[NORTH_EAST] and facing_east)
    ):
        add(around[NORTH])

    if can_see_over(observer):
        facing = {
            NORTH: facing_north,
            EAST: facing_east,
            SOUTH: facing_south,
            WEST: facing_west,
        }
        for direction in (NORTH, EAST, SOUTH, WEST):
            cell = around[direction]
            if not blocked[direction] and facing[direction] and has_cover(cell):
                add(cell)

    return sources


__all__ = ["lean_sources"]
