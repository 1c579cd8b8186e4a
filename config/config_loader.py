import os
from dataclasses import dataclass
from typing import Optional

import yaml

from modules.cover.bands import Thresholds, validate_thresholds
from modules.cover.factory import CoverModelKind

DEFAULT_CONFIG_FILE = os.path.join(os.path.dirname(__file__), "settings.yaml")

MIN_RANGE, MAX_RANGE = 10, 60
MIN_OPACITY, MAX_OPACITY = 0.1, 0.9


class ConfigLoader:
    def __init__(self, config_file=DEFAULT_CONFIG_FILE):
        self.config = {}
        if os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                self.config = yaml.safe_load(f) or {}

    def get(self, *keys, default=None):
        """
        Return a value from the nested configuration.
        When a key path does not exist:
          - raise KeyError if no default is provided
          - return the default otherwise
        """
        ref = self.config
        for key in keys:
            if isinstance(ref, dict) and key in ref:
                ref = ref[key]
            else:
                if default is not None:
                    return default
                raise KeyError(f"Configuration key {' -> '.join(keys)} not found and no default provided.")
        return ref


@dataclass(frozen=True)
class OverlaySettings:
    """Validated view of the overlay configuration."""

    default_range: int = 30
    opacity: float = 0.35
    show_on_pawn_select: bool = False
    show_on_turret_select: bool = True
    refresh_interval_ticks: int = 300
    cover_model: CoverModelKind = CoverModelKind.SIMPLE
    exclude_defender_ring: bool = False
    simple_thresholds: Thresholds = (0.05, 0.25, 0.45, 0.65)
    height_thresholds: Thresholds = (0.3, 0.7, 1.1, 1.5)

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "OverlaySettings":
        defaults = cls()
        default_range = int(loader.get("overlay", "default_range", default=defaults.default_range))
        opacity = float(loader.get("overlay", "opacity", default=defaults.opacity))
        refresh = int(loader.get("overlay", "refresh_interval_ticks", default=defaults.refresh_interval_ticks))
        if refresh <= 0:
            raise ValueError("overlay.refresh_interval_ticks must be positive")

        return cls(
            default_range=min(max(default_range, MIN_RANGE), MAX_RANGE),
            opacity=min(max(opacity, MIN_OPACITY), MAX_OPACITY),
            show_on_pawn_select=_get_bool(loader, "overlay", "show_on_pawn_select", defaults.show_on_pawn_select),
            show_on_turret_select=_get_bool(loader, "overlay", "show_on_turret_select", defaults.show_on_turret_select),
            refresh_interval_ticks=refresh,
            cover_model=CoverModelKind.parse(loader.get("cover", "model", default=defaults.cover_model.value)),
            exclude_defender_ring=_get_bool(loader, "cover", "exclude_defender_ring", defaults.exclude_defender_ring),
            simple_thresholds=validate_thresholds(
                loader.get("cover", "thresholds", "simple", default=list(defaults.simple_thresholds))
            ),
            height_thresholds=validate_thresholds(
                loader.get("cover", "thresholds", "height", default=list(defaults.height_thresholds))
            ),
        )

    def thresholds_for(self, kind: CoverModelKind) -> Thresholds:
        if CoverModelKind.parse(kind) is CoverModelKind.HEIGHT:
            return self.height_thresholds
        return self.simple_thresholds


def _get_bool(loader: ConfigLoader, section: str, key: str, fallback: bool) -> bool:
    # ``get`` treats ``False`` like a missing default, so read the raw section.
    section_values = loader.config.get(section) or {}
    if key not in section_values:
        return fallback
    return bool(section_values[key])


def load_settings(config_file: Optional[str] = None) -> OverlaySettings:
    """Read ``config_file`` (the bundled defaults when omitted)."""

    return OverlaySettings.from_loader(ConfigLoader(config_file or DEFAULT_CONFIG_FILE))
