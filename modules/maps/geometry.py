"""Cell arithmetic shared by the sight and cover computations.

Cells are ``(x, z)`` integer pairs. ``+z`` points north and ``+x`` east, so a
flat bearing of ``0`` degrees is due north and ``90`` is due east.
"""
from __future__ import annotations

import math
from typing import Final, Iterator, Tuple

Cell = Tuple[int, int]

# Neighbour offsets in compass order: N, E, S, W, SE, NE, NW, SW.
ADJACENT_OFFSETS: Final[Tuple[Cell, ...]] = (
    (0, 1),
    (1, 0),
    (0, -1),
    (-1, 0),
    (1, -1),
    (1, 1),
    (-1, 1),
    (-1, -1),
)
NORTH, EAST, SOUTH, WEST, SOUTH_EAST, NORTH_EAST, NORTH_WEST, SOUTH_WEST = range(8)


def normalise_cell(value: object) -> Cell:
    """Coerce tuples or objects exposing ``x``/``z`` into a ``Cell``."""

    if isinstance(value, tuple) and len(value) == 2:
        return int(value[0]), int(value[1])
    if hasattr(value, "x") and hasattr(value, "z"):
        return int(getattr(value, "x")), int(getattr(value, "z"))
    raise TypeError(f"Unsupported cell type: {value!r}")


def offset(cell: Cell, delta: Cell) -> Cell:
    return cell[0] + delta[0], cell[1] + delta[1]


def neighbours(cell: Cell) -> Tuple[Cell, ...]:
    """Return the eight surrounding cells in compass order."""

    return tuple(offset(cell, delta) for delta in ADJACENT_OFFSETS)


def angle_flat(dx: float, dz: float) -> float:
    """Compass bearing of ``(dx, dz)`` in degrees within ``[0, 360)``."""

    if dx == 0 and dz == 0:
        return 0.0
    angle = math.degrees(math.atan2(dx, dz))
    return angle % 360.0


def bearing(source: Cell, target: Cell) -> float:
    return angle_flat(target[0] - source[0], target[1] - source[1])


def angle_difference(a: float, b: float) -> float:
    """Smallest absolute difference between two bearings, in ``[0, 180]``."""

    return 180.0 - abs(abs(a - b) - 180.0)


def distance(a: Cell, b: Cell) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def distance_squared(a: Cell, b: Cell) -> int:
    dx = a[0] - b[0]
    dz = a[1] - b[1]
    return dx * dx + dz * dz


def is_cardinally_adjacent(a: Cell, b: Cell) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def is_adjacent_8way_or_inside(a: Cell, b: Cell) -> bool:
    return abs(a[0] - b[0]) <= 1 and abs(a[1] - b[1]) <= 1


def walk_line(start: Cell, end: Cell) -> Iterator[Cell]:
    """Yield the cells from ``start`` to ``end`` inclusive.

    The walk is 4-connected: every step moves along exactly one axis. When the
    line passes exactly through a cell corner the tie is broken by the
    lexicographic orientation of the endpoints rather than by the direction of
    travel, so ``walk_line(a, b)`` and ``walk_line(b, a)`` visit the same cells.
    """

    x0, z0 = start
    x1, z1 = end
    side_on_equal = x0 < x1 if x0 != x1 else z0 < z1
    dx = abs(x1 - x0)
    dz = abs(z1 - z0)
    steps = dx + dz
    sx = 1 if x1 > x0 else -1
    sz = 1 if z1 > z0 else -1
    err = dx - dz
    dx *= 2
    dz *= 2

    x, z = x0, z0
    yield x, z
    for _ in range(steps):
        if err > 0 or (err == 0 and side_on_equal):
            x += sx
            err -= dz
        else:
            z += sz
            err += dx
        yield x, z


__all__ = [
    "ADJACENT_OFFSETS",
    "Cell",
    "EAST",
    "NORTH",
    "NORTH_EAST",
    "NORTH_WEST",
    "SOUTH",
    "SOUTH_EAST",
    "SOUTH_WEST",
    "WEST",
    "angle_difference",
    "angle_flat",
    "bearing",
    "distance",
    "distance_squared",
    "is_adjacent_8way_or_inside",
    "is_cardinally_adjacent",
    "neighbours",
    "normalise_cell",
    "offset",
    "walk_line",
]
