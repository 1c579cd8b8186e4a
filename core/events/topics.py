"""Canonical registry of event bus topics used by the overlay planner.

Each entry is declared as a :class:`~enum.Enum` member and documents the
producer, the intended consumers and the payload guarantees for the associated
event. Importing modules should rely on the enum members (e.g.
``topics.OverlayTopic.OVERLAY_CHANGED``) to avoid drifting topic names.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

__all__ = ["OverlayTopic", "PublishesOverlayEvents"]


class OverlayTopic(str, Enum):
    """Enumeration of every topic published on the overlay event bus."""

    OVERLAY_CHANGED = "OverlayChanged"
    """Published by :class:`modules.overlay.state.HypotheticalOverlay` on any edit.

    Subscribers: host redraw schedulers.
    Guarantees: provides ``cell`` (``None`` for bulk edits) and ``designation``
    (the designation value placed, or ``None`` when cleared).
    """

    OBSERVERS_CHANGED = "ObserversChanged"
    """Published by the overlay when observer markers are added or removed.

    Subscribers: combined-view refreshers.
    Guarantees: provides ``cell`` and ``added`` (bool).
    """

    SCAN_COMPLETED = "ScanCompleted"
    """Published by :class:`modules.los.system.LineOfSightSystem` after a scan.

    Subscribers: overlay renderers and analytics hooks.
    Guarantees: provides ``observers`` (tuple of cells) and ``cell_count``.
    """


@runtime_checkable
class PublishesOverlayEvents(Protocol):
    """The subset of a host event bus the overlay engine relies on."""

    def publish(self, topic: OverlayTopic, **payload: object) -> None:
        """Deliver ``payload`` to every subscriber of ``topic``."""
