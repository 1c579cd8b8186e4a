"""Per-object overlay display state owned by the host layer.

Hosts let players toggle the overlay on selectable objects (pawns, turrets,
observer markers). The registry remembers each object's mode and direction
and forgets objects that no longer exist on a periodic sweep.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Dict, Hashable, Iterable, List, Optional

from modules.los.results import LOSMode, OverlayDirection

if TYPE_CHECKING:  # pragma: no cover - typing only
    from config.config_loader import OverlaySettings

logger = logging.getLogger(__name__)

ObjectId = Hashable
DEFAULT_REFRESH_INTERVAL_TICKS = 300


@dataclass(frozen=True)
class DisplayState:
    mode: LOSMode = LOSMode.OFF
    direction: OverlayDirection = OverlayDirection.OFFENSIVE


DEFAULT_STATE = DisplayState()


class DisplayStateRegistry:
    """Map of object id to :class:`DisplayState` with tick-driven eviction."""

    def __init__(
        self,
        *,
        refresh_interval_ticks: int = DEFAULT_REFRESH_INTERVAL_TICKS,
        show_on_pawn_select: bool = False,
        show_on_turret_select: bool = True,
    ) -> None:
        if refresh_interval_ticks <= 0:
            raise ValueError("refresh_interval_ticks must be positive")
        self._states: Dict[ObjectId, DisplayState] = {}
        self._interval = refresh_interval_ticks
        self._ticks = 0
        self._auto_show = {
            "pawn": show_on_pawn_select,
            "turret": show_on_turret_select,
        }

    @classmethod
    def from_settings(cls, settings: "OverlaySettings") -> "DisplayStateRegistry":
        return cls(
            refresh_interval_ticks=settings.refresh_interval_ticks,
            show_on_pawn_select=settings.show_on_pawn_select,
            show_on_turret_select=settings.show_on_turret_select,
        )

    def get(self, object_id: ObjectId) -> DisplayState:
        return self._states.get(object_id, DEFAULT_STATE)

    def get_mode(self, object_id: ObjectId) -> LOSMode:
        return self.get(object_id).mode

    def set_mode(self, object_id: ObjectId, mode: LOSMode) -> DisplayState:
        state = replace(self.get(object_id), mode=LOSMode(mode))
        self._states[object_id] = state
        return state

    def cycle_mode(self, object_id: ObjectId) -> LOSMode:
        """Advance Off -> Static -> Leaning -> Off and return the new mode."""

        return self.set_mode(object_id, self.get_mode(object_id).next()).mode

    def set_direction(self, object_id: ObjectId, direction: OverlayDirection) -> DisplayState:
        state = replace(self.get(object_id), direction=OverlayDirection(direction))
        self._states[object_id] = state
        return state

    def toggle_direction(self, object_id: ObjectId) -> OverlayDirection:
        return self.set_direction(object_id, self.get(object_id).direction.flipped()).direction

    def auto_show(self, object_id: ObjectId, kind: str) -> DisplayState:
        """Switch an idle object to static mode when settings ask for it."""

        state = self.get(object_id)
        if state.mode is LOSMode.OFF and self._auto_show.get(kind, False):
            return self.set_mode(object_id, LOSMode.STATIC)
        return state

    def forget(self, object_id: ObjectId) -> None:
        self._states.pop(object_id, None)

    def evict(self, live_ids: Iterable[ObjectId]) -> List[ObjectId]:
        """Drop entries for objects absent from ``live_ids``."""

        live = set(live_ids)
        stale = [object_id for object_id in self._states if object_id not in live]
        for object_id in stale:
            del self._states[object_id]
        if stale:
            logger.debug("Evicted %d stale overlay display states", len(stale))
        return stale

    def tick(self, live_ids: Optional[Iterable[ObjectId]] = None) -> List[ObjectId]:
        """Advance the tick counter, sweeping stale entries once per interval."""

        self._ticks += 1
        if self._ticks < self._interval:
            return []
        self._ticks = 0
        if live_ids is None:
            return []
        return self.evict(live_ids)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._states


__all__ = ["DEFAULT_STATE", "DisplayState", "DisplayStateRegistry"]
