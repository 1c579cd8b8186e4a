"""Hypothetical terrain used to plan walls, cover and openings.

The overlay never touches the real grid. Each designated cell overrides the
real terrain for both sight blocking and cover lookups:

* ``WALL`` blocks sight and reports the active model's wall value;
* ``COVER`` lets sight through and reports a sandbag-equivalent value;
* ``OPEN`` lets sight through and reports no cover, even over a real wall.

A cell carries at most one designation. Every edit sets :attr:`dirty`, which
the host clears once it has redrawn whatever overlay is on screen.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Set

from core.events.topics import OverlayTopic, PublishesOverlayEvents
from modules.maps.components import GridQuery
from modules.maps.geometry import Cell, normalise_cell

if TYPE_CHECKING:  # pragma: no cover - typing only
    from modules.cover.system import CoverModel

logger = logging.getLogger(__name__)


class Designation(str, Enum):
    WALL = "wall"
    COVER = "cover"
    OPEN = "open"


@dataclass(frozen=True)
class AcceptanceReport:
    """Outcome of a placement check, truthy when the placement is allowed."""

    accepted: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.accepted


ACCEPTED = AcceptanceReport(True)


class HypotheticalOverlay:
    """Per-map set of user-declared terrain overrides plus observer markers."""

    def __init__(self, *, event_bus: Optional[PublishesOverlayEvents] = None) -> None:
        self.walls: Set[Cell] = set()
        self.cover: Set[Cell] = set()
        self.open: Set[Cell] = set()
        self.observer_positions: Set[Cell] = set()
        self.combined_view_active = False
        self._dirty = True
        self._event_bus = event_bus

    # ------------------------------------------------------------------
    # Dirty tracking
    # ------------------------------------------------------------------
    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        self._dirty = True

    def clear_dirty(self) -> None:
        self._dirty = False

    # ------------------------------------------------------------------
    # Designation edits
    # ------------------------------------------------------------------
    def set_wall(self, cell: object) -> None:
        self._designate(cell, Designation.WALL)

    def set_cover(self, cell: object) -> None:
        self._designate(cell, Designation.COVER)

    def set_open(self, cell: object) -> None:
        self._designate(cell, Designation.OPEN)

    def designate(self, cell: object, designation: Designation) -> None:
        self._designate(cell, Designation(designation))

    def clear(self, cell: object) -> None:
        """Drop whatever designation ``cell`` carries."""

        key = normalise_cell(cell)
        for cells in self._sets().values():
            cells.discard(key)
        self._changed(key, None)

    def clear_all(self) -> None:
        """Remove every designation and observer marker."""

        self.walls.clear()
        self.cover.clear()
        self.open.clear()
        self.observer_positions.clear()
        self.combined_view_active = False
        logger.debug("Hypothetical overlay cleared")
        self._changed(None, None)

    def _designate(self, cell: object, designation: Designation) -> None:
        key = normalise_cell(cell)
        sets = self._sets()
        for other, cells in sets.items():
            if other is not designation:
                cells.discard(key)
        sets[designation].add(key)
        self._changed(key, designation)

    def _sets(self) -> Dict[Designation, Set[Cell]]:
        return {
            Designation.WALL: self.walls,
            Designation.COVER: self.cover,
            Designation.OPEN: self.open,
        }

    def _changed(self, cell: Optional[Cell], designation: Optional[Designation]) -> None:
        self._dirty = True
        self._publish(OverlayTopic.OVERLAY_CHANGED, cell=cell, designation=designation)

    def _publish(self, topic: OverlayTopic, **payload: object) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(topic, **payload)

    # ------------------------------------------------------------------
    # Observer markers
    # ------------------------------------------------------------------
    def add_observer(self, cell: object) -> bool:
        key = normalise_cell(cell)
        if key in self.observer_positions:
            return False
        self.observer_positions.add(key)
        self._dirty = True
        self._publish(OverlayTopic.OBSERVERS_CHANGED, cell=key, added=True)
        return True

    def remove_observer(self, cell: object) -> bool:
        key = normalise_cell(cell)
        if key not in self.observer_positions:
            return False
        self.observer_positions.discard(key)
        self._dirty = True
        self._publish(OverlayTopic.OBSERVERS_CHANGED, cell=key, added=False)
        return True

    def set_combined_view(self, active: bool) -> None:
        self.combined_view_active = bool(active)
        self._dirty = True

    # ------------------------------------------------------------------
    # Terrain lookups
    # ------------------------------------------------------------------
    def designation_at(self, cell: Cell) -> Optional[Designation]:
        if cell in self.walls:
            return Designation.WALL
        if cell in self.cover:
            return Designation.COVER
        if cell in self.open:
            return Designation.OPEN
        return None

    def designated_value(self, cell: Cell, model: "CoverModel") -> Optional[float]:
        """Cover dictated by the designation on ``cell``, or ``None`` if undesignated."""

        designation = self.designation_at(cell)
        if designation is Designation.WALL:
            return model.wall_value
        if designation is Designation.COVER:
            return model.hypothetical_cover_value
        if designation is Designation.OPEN:
            return 0.0
        return None

    def blocks_sight(
        self,
        cell: Cell,
        grid: GridQuery,
        model: Optional["CoverModel"] = None,
    ) -> bool:
        if cell in self.walls:
            return True
        if cell in self.open:
            return False
        if not grid.in_bounds(cell):
            return True
        if model is not None:
            return model.blocks_sight(grid.occluding_object_at(cell))
        return not grid.can_see_over_fast(cell)

    def effective_cover_at(self, cell: Cell, grid: GridQuery, model: "CoverModel") -> float:
        designated = self.designated_value(cell, model)
        if designated is not None:
            return designated
        if not grid.in_bounds(cell):
            return 0.0
        return model.real_cover_at(cell, grid)

    # ------------------------------------------------------------------
    # Placement validation
    # ------------------------------------------------------------------
    def can_designate(
        self,
        designation: Designation,
        cell: object,
        grid: GridQuery,
        model: "CoverModel",
    ) -> AcceptanceReport:
        """Check whether a planning tool may place ``designation`` on ``cell``."""

        designation = Designation(designation)
        key = normalise_cell(cell)
        if not grid.in_bounds(key):
            return AcceptanceReport(False, "Out of bounds.")
        if self.designation_at(key) is designation:
            return AcceptanceReport(False, f"Already designated as {designation.value}.")

        real_blocker = model.blocks_sight(grid.occluding_object_at(key))
        if designation is Designation.WALL and real_blocker:
            return AcceptanceReport(False, "Already a wall here.")
        if designation is Designation.OPEN and not real_blocker:
            return AcceptanceReport(False, "No wall or obstacle here to open.")
        return ACCEPTED

    def can_place_observer(self, cell: object, grid: GridQuery) -> AcceptanceReport:
        key = normalise_cell(cell)
        if not grid.in_bounds(key):
            return AcceptanceReport(False, "Out of bounds.")
        if key in self.observer_positions:
            return AcceptanceReport(False, "Already has an observer here.")
        return ACCEPTED

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return not (self.walls or self.cover or self.open)

    def __len__(self) -> int:
        return len(self.walls) + len(self.cover) + len(self.open)

    def __repr__(self) -> str:
        return (
            f"HypotheticalOverlay(walls={len(self.walls)}, cover={len(self.cover)}, "
            f"open={len(self.open)}, observers={len(self.observer_positions)}, "
            f"dirty={self._dirty})"
        )


__all__ = ["ACCEPTED", "AcceptanceReport", "Designation", "HypotheticalOverlay"]
