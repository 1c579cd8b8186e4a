"""Line-of-sight and cover scanning over the host grid.

For an observer, a mode, a range and a direction, :meth:`LineOfSightSystem.scan`
walks a circular footprint around the observer and reports, for every legal
target cell, whether it can be seen and how much cover applies:

1. The ``2 * range + 1`` square window around the observer is clipped to the
   map and cells farther than ``range`` (Euclidean) are dropped.
2. Cells that cannot hold a target (off map, unexplored, or walled in) are
   left out of the results. Hypothetical designations win over real terrain.
3. Sight is tested along :func:`~modules.maps.geometry.walk_line`. In leaning
   mode, corner-peek positions next to the observer are tested as well.
4. Cover comes from the injected :class:`~modules.cover.system.CoverModel`,
   evaluated from every confirmed shooting position: the lowest value is kept
   offensively (best shot), the highest defensively (best protection).

The system holds no cache. A scan is a pure function of its arguments, the
grid snapshot and the overlay snapshot.
"""
from __future__ import annotations

import logging
from itertools import islice
from typing import Dict, Iterable, List, Optional, Tuple

from core.events.topics import OverlayTopic, PublishesOverlayEvents
from modules.cover.system import CoverModel
from modules.los.aggregate import merge_worst_case
from modules.los.lean import lean_sources
from modules.los.results import NOT_VISIBLE, LOSMode, OverlayDirection, ScanResult
from modules.maps.components import GridQuery
from modules.maps.geometry import Cell, distance_squared, normalise_cell, walk_line
from modules.overlay.state import Designation, HypotheticalOverlay
from utils.logger import log_calls

logger = logging.getLogger(__name__)

Region = Tuple[int, int, int, int]


class LineOfSightSystem:
    """Compute visibility and cover fields from observer cells."""

    def __init__(
        self,
        grid: GridQuery,
        cover_model: CoverModel,
        *,
        event_bus: Optional[PublishesOverlayEvents] = None,
    ) -> None:
        self._grid = grid
        self._model = cover_model
        self._event_bus = event_bus
        self._stats = {
            "scans": 0,
            "cells_evaluated": 0,
            "sight_tests": 0,
            "lean_sources_tested": 0,
            "cover_evaluations": 0,
        }

    @property
    def grid(self) -> GridQuery:
        return self._grid

    @property
    def cover_model(self) -> CoverModel:
        return self._model

    def reset_stats(self) -> None:
        for key in self._stats:
            self._stats[key] = 0

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)

    # ------------------------------------------------------------------
    # Cell predicates
    # ------------------------------------------------------------------
    def can_see_over(self, cell: Cell, overlay: Optional[HypotheticalOverlay] = None) -> bool:
        """Whether sight passes through ``cell`` on its way to somewhere else."""

        if overlay is not None:
            designation = overlay.designation_at(cell)
            if designation is Designation.WALL:
                return False
            if designation is not None:
                return True
        if not self._grid.in_bounds(cell):
            return False
        if self._grid.is_unexplored(cell):
            return False
        return self._grid.can_see_over_fast(cell)

    def is_legal_target(self, cell: Cell, overlay: Optional[HypotheticalOverlay] = None) -> bool:
        """Whether ``cell`` could hold a target at all."""

        if not self._grid.in_bounds(cell):
            return False
        if overlay is not None:
            designation = overlay.designation_at(cell)
            if designation is Designation.WALL:
                return False
            if designation is not None:
                return True
        if self._grid.is_unexplored(cell):
            return False
        return not self._model.blocks_sight(self._grid.occluding_object_at(cell))

    # ------------------------------------------------------------------
    # Sight tests
    # ------------------------------------------------------------------
    def has_direct_sight(
        self,
        source: object,
        target: object,
        overlay: Optional[HypotheticalOverlay] = None,
    ) -> bool:
        """Walk from ``source`` to ``target``; the endpoints themselves never block."""

        start = normalise_cell(source)
        end = normalise_cell(target)
        self._stats["sight_tests"] += 1
        if start == end:
            return True
        for cell in islice(walk_line(start, end), 1, None):
            if cell == end:
                return True
            if not self.can_see_over(cell, overlay):
                return False
        return True

    def lean_sources(
        self,
        observer: object,
        target: object,
        overlay: Optional[HypotheticalOverlay] = None,
    ) -> List[Cell]:
        return lean_sources(
            normalise_cell(observer),
            normalise_cell(target),
            can_see_over=lambda cell: self.can_see_over(cell, overlay),
            has_cover=lambda cell: self._model.cover_at(cell, self._grid, overlay) > 0.0,
        )

    def shooting_positions(
        self,
        observer: object,
        target: object,
        mode: LOSMode,
        overlay: Optional[HypotheticalOverlay] = None,
    ) -> List[Cell]:
        """Every position from which ``observer`` has confirmed sight of ``target``."""

        origin = normalise_cell(observer)
        goal = normalise_cell(target)
        mode = LOSMode(mode)
        if mode is LOSMode.OFF:
            return []

        direct = self.has_direct_sight(origin, goal, overlay)
        positions = [origin] if direct else []
        if mode is LOSMode.LEANING and (not direct or self._model.peeks_when_direct_clear):
            for source in self.lean_sources(origin, goal, overlay):
                if source == origin or source == goal:
                    continue
                self._stats["lean_sources_tested"] += 1
                if self.has_direct_sight(source, goal, overlay):
                    positions.append(source)
        return positions

    # ------------------------------------------------------------------
    # Per-cell evaluation
    # ------------------------------------------------------------------
    def evaluate_cell(
        self,
        observer: object,
        target: object,
        mode: LOSMode,
        direction: OverlayDirection = OverlayDirection.OFFENSIVE,
        overlay: Optional[HypotheticalOverlay] = None,
    ) -> Optional[ScanResult]:
        """Result for a single target, or ``None`` when it cannot hold a target."""

        goal = normalise_cell(target)
        if not self.is_legal_target(goal, overlay):
            return None

        positions = self.shooting_positions(observer, goal, mode, overlay)
        if not positions:
            return NOT_VISIBLE

        cover = self._select_cover(positions, goal, OverlayDirection(direction), overlay)
        return ScanResult(True, cover, self._model.normalize(cover))

    def _select_cover(
        self,
        positions: List[Cell],
        target: Cell,
        direction: OverlayDirection,
        overlay: Optional[HypotheticalOverlay],
    ) -> float:
        if direction is OverlayDirection.OFFENSIVE:
            return min(self._cover_between(position, target, overlay) for position in positions)
        return max(self._cover_between(target, position, overlay) for position in positions)

    def _cover_between(
        self,
        shooter: Cell,
        defender: Cell,
        overlay: Optional[HypotheticalOverlay],
    ) -> float:
        self._stats["cover_evaluations"] += 1
        return self._model.effective_cover_between(shooter, defender, self._grid, overlay)

    # ------------------------------------------------------------------
    # Region scans
    # ------------------------------------------------------------------
    @log_calls
    def scan(
        self,
        observer: object,
        mode: LOSMode,
        range_: int,
        direction: OverlayDirection = OverlayDirection.OFFENSIVE,
        overlay: Optional[HypotheticalOverlay] = None,
    ) -> Dict[Cell, ScanResult]:
        """Scan the circular footprint of radius ``range_`` around ``observer``."""

        origin = normalise_cell(observer)
        results = self._scan_observer(origin, LOSMode(mode), int(range_), OverlayDirection(direction), overlay)
        self._publish_scan((origin,), results)
        return results

    @log_calls
    def combined_scan(
        self,
        observers: Iterable[object],
        mode: LOSMode,
        range_: int,
        direction: OverlayDirection = OverlayDirection.OFFENSIVE,
        overlay: Optional[HypotheticalOverlay] = None,
    ) -> Dict[Cell, ScanResult]:
        """Worst-case field over several observers (lowest cover wins)."""

        origins = tuple(normalise_cell(observer) for observer in observers)
        mode = LOSMode(mode)
        direction = OverlayDirection(direction)
        combined = merge_worst_case(
            self._scan_observer(origin, mode, int(range_), direction, overlay)
            for origin in origins
        )
        self._publish_scan(origins, combined)
        return combined

    def combined_scan_from_overlay(
        self,
        overlay: HypotheticalOverlay,
        mode: LOSMode,
        range_: int,
        direction: OverlayDirection = OverlayDirection.OFFENSIVE,
    ) -> Dict[Cell, ScanResult]:
        """Combined scan over the observer markers placed on ``overlay``."""

        return self.combined_scan(sorted(overlay.observer_positions), mode, range_, direction, overlay)

    def _scan_observer(
        self,
        origin: Cell,
        mode: LOSMode,
        range_: int,
        direction: OverlayDirection,
        overlay: Optional[HypotheticalOverlay],
    ) -> Dict[Cell, ScanResult]:
        results: Dict[Cell, ScanResult] = {}
        if mode is LOSMode.OFF or not self._grid.in_bounds(origin):
            return results

        self._stats["scans"] += 1
        ox, oz = origin
        range_sq = range_ * range_
        min_x = max(0, ox - range_)
        max_x = min(self._grid.width - 1, ox + range_)
        min_z = max(0, oz - range_)
        max_z = min(self._grid.height - 1, oz + range_)

        for x in range(min_x, max_x + 1):
            for z in range(min_z, max_z + 1):
                target = (x, z)
                if target == origin:
                    continue
                if distance_squared(target, origin) > range_sq:
                    continue
                result = self.evaluate_cell(origin, target, mode, direction, overlay)
                if result is None:
                    continue
                self._stats["cells_evaluated"] += 1
                results[target] = result

        logger.debug(
            "Scanned %d cells from %s (mode=%s, range=%d, direction=%s)",
            len(results),
            origin,
            mode.value,
            range_,
            direction.value,
        )
        return results

    @log_calls
    def compute_cover_map(
        self,
        overlay: Optional[HypotheticalOverlay] = None,
        region: Optional[Region] = None,
    ) -> Dict[Cell, ScanResult]:
        """Terrain cover of every explored cell, independent of any observer.

        ``region`` is ``(min_x, min_z, max_x, max_z)`` inclusive and defaults to
        the whole map. Cells that block sight are reported as not visible.
        """

        min_x, min_z, max_x, max_z = region if region is not None else (
            0,
            0,
            self._grid.width - 1,
            self._grid.height - 1,
        )
        min_x, min_z = max(0, min_x), max(0, min_z)
        max_x = min(self._grid.width - 1, max_x)
        max_z = min(self._grid.height - 1, max_z)

        results: Dict[Cell, ScanResult] = {}
        for x in range(min_x, max_x + 1):
            for z in range(min_z, max_z + 1):
                cell = (x, z)
                designated = overlay is not None and overlay.designation_at(cell) is not None
                if not designated and self._grid.is_unexplored(cell):
                    continue
                if not self.is_legal_target(cell, overlay):
                    results[cell] = NOT_VISIBLE
                    continue
                cover = self._model.cover_at(cell, self._grid, overlay)
                results[cell] = ScanResult(True, cover, self._model.normalize(cover))
        return results

    def _publish_scan(self, observers: Tuple[Cell, ...], results: Dict[Cell, ScanResult]) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(
                OverlayTopic.SCAN_COMPLETED, observers=observers, cell_count=len(results)
            )


__all__ = ["LineOfSightSystem", "Region"]
