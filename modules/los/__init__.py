"""Line-of-sight and cover scanning."""
from .aggregate import merge_worst_case
from .results import LOSMode, NOT_VISIBLE, OverlayDirection, ScanResult, cover_field_array
from .system import LineOfSightSystem

__all__ = [
    "LOSMode",
    "LineOfSightSystem",
    "NOT_VISIBLE",
    "OverlayDirection",
    "ScanResult",
    "cover_field_array",
    "merge_worst_case",
]
