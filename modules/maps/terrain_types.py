"""Occluding object descriptors placed on battlefield cells."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Dict


class ObjectCategory(str, Enum):
    """Broad classification of anything that can stand on a cell."""

    BUILDING = "building"
    PLANT = "plant"
    ITEM = "item"


class FillCategory(IntEnum):
    """How much of a cell an object fills when seen from the side."""

    NONE = 0
    PARTIAL = 1
    FULL = 2


@dataclass(frozen=True)
class OccludingObject:
    """Describes an object that may block sight or provide cover."""

    name: str
    category: ObjectCategory
    fill: FillCategory
    fill_percent: float
    is_door: bool = False
    is_open: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.fill_percent <= 1.0:
            raise ValueError("fill_percent must lie within [0, 1]")
        if self.is_open and not self.is_door:
            raise ValueError("only doors can be open")

    @property
    def is_plant(self) -> bool:
        return self.category is ObjectCategory.PLANT

    @property
    def is_open_door(self) -> bool:
        return self.is_door and self.is_open

    def with_door_state(self, is_open: bool) -> "OccludingObject":
        """Return a copy with the door opened or closed."""

        if not self.is_door:
            raise ValueError(f"{self.name} is not a door")
        return replace(self, is_open=is_open)


# Catalog of common objects. Fill percentages follow the usual colony
# construction values (sandbags 55%, tables 40%, trees 25%...).
OBJECT_CATALOG: Dict[str, OccludingObject] = {
    "wall": OccludingObject(
        name="wall",
        category=ObjectCategory.BUILDING,
        fill=FillCategory.FULL,
        fill_percent=1.0,
    ),
    "door": OccludingObject(
        name="door",
        category=ObjectCategory.BUILDING,
        fill=FillCategory.FULL,
        fill_percent=1.0,
        is_door=True,
    ),
    "sandbags": OccludingObject(
        name="sandbags",
        category=ObjectCategory.BUILDING,
        fill=FillCategory.PARTIAL,
        fill_percent=0.55,
    ),
    "barricade": OccludingObject(
        name="barricade",
        category=ObjectCategory.BUILDING,
        fill=FillCategory.PARTIAL,
        fill_percent=0.65,
    ),
    "table": OccludingObject(
        name="table",
        category=ObjectCategory.BUILDING,
        fill=FillCategory.PARTIAL,
        fill_percent=0.4,
    ),
    "rock_chunk": OccludingObject(
        name="rock_chunk",
        category=ObjectCategory.ITEM,
        fill=FillCategory.PARTIAL,
        fill_percent=0.5,
    ),
    "tree": OccludingObject(
        name="tree",
        category=ObjectCategory.PLANT,
        fill=FillCategory.PARTIAL,
        fill_percent=0.25,
    ),
    "bush": OccludingObject(
        name="bush",
        category=ObjectCategory.PLANT,
        fill=FillCategory.PARTIAL,
        fill_percent=0.2,
    ),
}


def get_object(name: str) -> OccludingObject:
    """Look up a catalog entry, raising ``KeyError`` with a helpful message."""

    try:
        return OBJECT_CATALOG[name]
    except KeyError:
        raise KeyError(f"Unknown object descriptor: {name!r}") from None


__all__ = [
    "FillCategory",
    "OBJECT_CATALOG",
    "ObjectCategory",
    "OccludingObject",
    "get_object",
]
