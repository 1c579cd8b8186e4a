"""Cover physics strategies.

Two interchangeable models convert the objects around a defender into an
effective cover value against a given shooter:

* :class:`SimpleCoverModel` uses percentage cover. Only the eight cells
  adjacent to the defender matter; each one is discounted by how far its
  bearing deviates from the shooter's bearing and by how close the shooter
  stands to it.
* :class:`HeightCoverModel` uses physical heights. The walk from defender to
  shooter is scanned and the tallest partial-fill object on it wins, with no
  angular or distance falloff.

A run picks exactly one model (see :mod:`modules.cover.factory`) and every
query of that run goes through it.
"""
from __future__ import annotations

from itertools import islice
from typing import TYPE_CHECKING, ClassVar, Final, Optional, Tuple

from modules.maps.components import GridQuery
from modules.maps.geometry import (
    Cell,
    angle_difference,
    bearing,
    distance,
    is_adjacent_8way_or_inside,
    is_cardinally_adjacent,
    neighbours,
    walk_line,
)
from modules.maps.terrain_types import FillCategory, OccludingObject

if TYPE_CHECKING:  # pragma: no cover - typing only
    from modules.overlay.state import HypotheticalOverlay

# (exclusive upper bound in degrees, multiplier). Anything wider gives no cover.
_ANGLE_BANDS: Final[Tuple[Tuple[float, float], ...]] = (
    (15.0, 1.0),
    (27.0, 0.8),
    (40.0, 0.6),
    (52.0, 0.4),
    (65.0, 0.2),
)
# (exclusive upper bound in cells, multiplier). Farther shooters get full value.
_DISTANCE_BANDS: Final[Tuple[Tuple[float, float], ...]] = (
    (1.9, 0.3333),
    (2.9, 0.66666),
)
DIAGONAL_ANGLE_FACTOR: Final[float] = 1.75

SIMPLE_WALL_COVER: Final[float] = 0.75
HEIGHT_WALL_COVER: Final[float] = 2.0
SANDBAG_COVER: Final[float] = 0.55
METERS_PER_CELL_HEIGHT: Final[float] = 1.75


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class CoverModel:
    """Common behaviour of the cover strategies."""

    kind: ClassVar[str] = "base"
    wall_value: ClassVar[float] = SIMPLE_WALL_COVER
    hypothetical_cover_value: ClassVar[float] = SANDBAG_COVER
    max_cover: ClassVar[float] = 1.0
    peeks_when_direct_clear: ClassVar[bool] = False
    """Whether leaning scans also try peek positions when direct sight is clear."""

    # ------------------------------------------------------------------
    # Object level
    # ------------------------------------------------------------------
    def raw_cover_of(self, thing: Optional[OccludingObject]) -> float:
        """Return the unadjusted cover magnitude supplied by ``thing``."""

        if thing is None:
            return 0.0
        if thing.is_open_door or thing.is_plant:
            return 0.0
        if thing.fill is FillCategory.FULL:
            return self.wall_value
        return thing.fill_percent

    def blocks_sight(self, thing: Optional[OccludingObject]) -> bool:
        if thing is None:
            return False
        return thing.fill is FillCategory.FULL and not thing.is_open_door

    def normalize(self, raw: float) -> float:
        return _clamp01(raw / self.max_cover)

    def cover_label(self, raw: float) -> str:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Cell level
    # ------------------------------------------------------------------
    def real_cover_at(self, cell: Cell, grid: GridQuery) -> float:
        """Highest raw cover among the real objects on ``cell``."""

        if not grid.in_bounds(cell):
            return 0.0
        return max((self.raw_cover_of(thing) for thing in grid.objects_at(cell)), default=0.0)

    def cover_at(
        self,
        cell: Cell,
        grid: GridQuery,
        overlay: Optional["HypotheticalOverlay"] = None,
    ) -> float:
        """Cover on ``cell`` with hypothetical terrain taking precedence."""

        if overlay is not None:
            return overlay.effective_cover_at(cell, grid, self)
        return self.real_cover_at(cell, grid)

    def effective_cover_between(
        self,
        shooter: Cell,
        defender: Cell,
        grid: GridQuery,
        overlay: Optional["HypotheticalOverlay"] = None,
    ) -> float:
        """Cover the occupant of ``defender`` enjoys against ``shooter``."""

        raise NotImplementedError


class SimpleCoverModel(CoverModel):
    """Percentage cover from the cells adjacent to the defender."""

    kind = "simple"
    wall_value = SIMPLE_WALL_COVER
    hypothetical_cover_value = SANDBAG_COVER
    max_cover = 1.0
    peeks_when_direct_clear = False

    def cover_label(self, raw: float) -> str:
        return f"{raw:.0%} cover"

    def effective_cover_between(
        self,
        shooter: Cell,
        defender: Cell,
        grid: GridQuery,
        overlay: Optional["HypotheticalOverlay"] = None,
    ) -> float:
        best = 0.0
        shooter_angle = bearing(defender, shooter)

        for adjacent in neighbours(defender):
            if not grid.in_bounds(adjacent) or adjacent == shooter:
                continue
            raw = self.cover_at(adjacent, grid, overlay)
            if raw <= 0.0:
                continue

            angle_diff = angle_difference(bearing(defender, adjacent), shooter_angle)
            if not is_cardinally_adjacent(defender, adjacent):
                angle_diff *= DIAGONAL_ANGLE_FACTOR
            angle_mult = self._angle_multiplier(angle_diff)
            if angle_mult is None:
                continue

            value = raw * angle_mult * self._distance_multiplier(distance(shooter, adjacent))
            if value > best:
                best = value
        return best

    @staticmethod
    def _angle_multiplier(angle_diff: float) -> Optional[float]:
        for limit, multiplier in _ANGLE_BANDS:
            if angle_diff < limit:
                return multiplier
        return None

    @staticmethod
    def _distance_multiplier(dist: float) -> float:
        for limit, multiplier in _DISTANCE_BANDS:
            if dist < limit:
                return multiplier
        return 1.0


class HeightCoverModel(CoverModel):
    """Physical cover: the tallest partial-fill object between the two cells.

    Heights are expressed in cell-height units; walls stand ``2.0`` tall.
    Cells touching the shooter are ignored so the shooter's own barricade
    never counts against the target. ``exclude_defender_ring`` applies the
    same exclusion around the defender.
    """

    kind = "height"
    wall_value = HEIGHT_WALL_COVER
    hypothetical_cover_value = SANDBAG_COVER
    max_cover = HEIGHT_WALL_COVER
    peeks_when_direct_clear = True

    def __init__(self, *, exclude_defender_ring: bool = False) -> None:
        self.exclude_defender_ring = exclude_defender_ring

    def cover_label(self, raw: float) -> str:
        meters = raw * METERS_PER_CELL_HEIGHT
        return f"{meters:.2f}m cover height"

    def effective_cover_between(
        self,
        shooter: Cell,
        defender: Cell,
        grid: GridQuery,
        overlay: Optional["HypotheticalOverlay"] = None,
    ) -> float:
        highest = 0.0
        for cell in islice(walk_line(defender, shooter), 1, None):
            if cell == shooter:
                break
            if not grid.in_bounds(cell):
                continue
            if is_adjacent_8way_or_inside(cell, shooter):
                continue
            if self.exclude_defender_ring and is_adjacent_8way_or_inside(cell, defender):
                continue
            height = self.cover_height_at(cell, grid, overlay)
            if height > highest:
                highest = height
        return highest

    def cover_height_at(
        self,
        cell: Cell,
        grid: GridQuery,
        overlay: Optional["HypotheticalOverlay"] = None,
    ) -> float:
        """Height of the tallest partial cover on ``cell``."""

        if overlay is not None:
            # A hypothetical wall normally stops sight before we get here, but
            # it still reports full height if asked.
            designated = overlay.designated_value(cell, self)
            if designated is not None:
                return designated

        best = 0.0
        for thing in grid.objects_at(cell):
            if thing.is_plant or thing.is_open_door:
                continue
            if thing.fill is not FillCategory.PARTIAL:
                continue
            if thing.fill_percent > best:
                best = thing.fill_percent
        return best


__all__ = [
    "CoverModel",
    "DIAGONAL_ANGLE_FACTOR",
    "HEIGHT_WALL_COVER",
    "HeightCoverModel",
    "METERS_PER_CELL_HEIGHT",
    "SANDBAG_COVER",
    "SIMPLE_WALL_COVER",
    "SimpleCoverModel",
]
