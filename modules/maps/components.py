"""Grid query protocol and an in-memory battlefield grid implementing it."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from modules.maps.geometry import Cell
from modules.maps.terrain_types import FillCategory, ObjectCategory, OccludingObject


@runtime_checkable
class GridQuery(Protocol):
    """Read-only view of the host battlefield consumed by the sight engine."""

    width: int
    height: int

    def in_bounds(self, cell: Cell) -> bool:
        """Return ``True`` when ``cell`` lies on the map."""

    def is_unexplored(self, cell: Cell) -> bool:
        """Return ``True`` when the cell is still hidden by fog of war."""

    def occluding_object_at(self, cell: Cell) -> Optional[OccludingObject]:
        """Return the structure standing on ``cell`` if there is one."""

    def objects_at(self, cell: Cell) -> Sequence[OccludingObject]:
        """Return every object physically present on ``cell``."""

    def can_see_over_fast(self, cell: Cell) -> bool:
        """Return ``True`` when nothing on the real map blocks sight at ``cell``."""


def _blocks_sight(obj: OccludingObject) -> bool:
    # Only buildings stop sight; a full-fill item or plant is still a target cell.
    return (
        obj.category is ObjectCategory.BUILDING
        and obj.fill is FillCategory.FULL
        and not obj.is_open_door
    )


@dataclass(slots=True)
class BattleGrid:
    """Rectangular battlefield holding occluding objects and fog state.

    Sight blocking and fog are mirrored into numpy masks indexed ``[z, x]`` so
    that hosts can hand them to renderers without copying cell by cell.
    """

    width: int
    height: int
    objects: Dict[Cell, List[OccludingObject]] = field(default_factory=dict)
    blocks_sight_mask: np.ndarray | None = None
    unexplored_mask: np.ndarray | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")

        self.blocks_sight_mask = self._ensure_mask(self.blocks_sight_mask)
        self.unexplored_mask = self._ensure_mask(self.unexplored_mask)
        placed = self.objects
        self.objects = {}
        for cell, things in placed.items():
            for thing in things:
                self.place(cell, thing)

    def _ensure_mask(self, mask: np.ndarray | None) -> np.ndarray:
        if mask is None:
            return np.zeros((self.height, self.width), dtype=bool)
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (self.height, self.width):
            raise ValueError("mask dimensions do not match width and height")
        return mask.copy()

    # ------------------------------------------------------------------
    # GridQuery implementation
    # ------------------------------------------------------------------
    def in_bounds(self, cell: Cell) -> bool:
        x, z = cell
        return 0 <= x < self.width and 0 <= z < self.height

    def is_unexplored(self, cell: Cell) -> bool:
        if not self.in_bounds(cell):
            return True
        x, z = cell
        return bool(self.unexplored_mask[z, x])

    def occluding_object_at(self, cell: Cell) -> Optional[OccludingObject]:
        buildings = [
            thing
            for thing in self.objects.get(cell, ())
            if thing.category is ObjectCategory.BUILDING
        ]
        if not buildings:
            return None
        return max(buildings, key=lambda thing: (_blocks_sight(thing), thing.fill, thing.fill_percent))

    def objects_at(self, cell: Cell) -> Sequence[OccludingObject]:
        return tuple(self.objects.get(cell, ()))

    def can_see_over_fast(self, cell: Cell) -> bool:
        if not self.in_bounds(cell):
            return False
        x, z = cell
        return not bool(self.blocks_sight_mask[z, x])

    # ------------------------------------------------------------------
    # Mutation helpers (host side)
    # ------------------------------------------------------------------
    def place(self, cell: Cell, thing: OccludingObject) -> bool:
        """Put ``thing`` on ``cell``. Returns ``False`` when out of bounds."""

        if not self.in_bounds(cell):
            return False
        self.objects.setdefault(cell, []).append(thing)
        self._refresh_cell(cell)
        return True

    def place_many(self, cells: Iterable[Cell], thing: OccludingObject) -> int:
        return sum(1 for cell in cells if self.place(cell, thing))

    def remove(self, cell: Cell, thing: Optional[OccludingObject] = None) -> bool:
        """Remove ``thing`` (or everything when omitted) from ``cell``."""

        things = self.objects.get(cell)
        if not things:
            return False
        if thing is None:
            del self.objects[cell]
        else:
            try:
                things.remove(thing)
            except ValueError:
                return False
            if not things:
                del self.objects[cell]
        self._refresh_cell(cell)
        return True

    def set_door_state(self, cell: Cell, is_open: bool) -> bool:
        """Open or close every door on ``cell``; returns whether one was found."""

        things = self.objects.get(cell, [])
        found = False
        for index, thing in enumerate(things):
            if thing.is_door:
                things[index] = thing.with_door_state(is_open)
                found = True
        if found:
            self._refresh_cell(cell)
        return found

    def set_unexplored(self, cell: Cell, unexplored: bool = True) -> None:
        if not self.in_bounds(cell):
            return
        x, z = cell
        self.unexplored_mask[z, x] = unexplored

    def reveal(self, cell: Cell) -> None:
        self.set_unexplored(cell, False)

    def reveal_all(self) -> None:
        self.unexplored_mask[:, :] = False

    def fog_all(self) -> None:
        self.unexplored_mask[:, :] = True

    def _refresh_cell(self, cell: Cell) -> None:
        x, z = cell
        self.blocks_sight_mask[z, x] = any(
            _blocks_sight(thing) for thing in self.objects.get(cell, ())
        )


__all__ = ["BattleGrid", "GridQuery"]
