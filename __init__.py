"""los_overlay package root.

Line-of-sight and cover planning engine for grid battlefields. The project
is laid out flat: ``modules`` holds the grid, cover, overlay and sight
engines, ``core`` the event bus and host display state, ``config`` the YAML
settings and ``utils`` logging helpers.
"""

__all__ = ["config", "core", "modules", "utils"]
__version__ = "0.1.0"
