"""Battlefield grid, object descriptors and cell geometry."""
from .components import BattleGrid, GridQuery
from .terrain_types import OBJECT_CATALOG, FillCategory, ObjectCategory, OccludingObject, get_object

__all__ = [
    "BattleGrid",
    "FillCategory",
    "GridQuery",
    "OBJECT_CATALOG",
    "ObjectCategory",
    "OccludingObject",
    "get_object",
]
