"""Selection of the cover model used for a whole run."""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Union

from modules.cover.system import CoverModel, HeightCoverModel, SimpleCoverModel

if TYPE_CHECKING:  # pragma: no cover - typing only
    from config.config_loader import OverlaySettings

logger = logging.getLogger(__name__)


class CoverModelKind(str, Enum):
    """Available combat physics for cover."""

    SIMPLE = "simple"
    HEIGHT = "height"

    @classmethod
    def parse(cls, value: Union[str, "CoverModelKind"]) -> "CoverModelKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown cover model {value!r}; expected one of: {valid}") from None


def create_cover_model(
    kind: Union[str, CoverModelKind],
    *,
    exclude_defender_ring: bool = False,
) -> CoverModel:
    """Instantiate the model for ``kind``."""

    kind = CoverModelKind.parse(kind)
    if kind is CoverModelKind.HEIGHT:
        logger.info("Height-based cover physics selected.")
        return HeightCoverModel(exclude_defender_ring=exclude_defender_ring)
    logger.info("Simple percentage cover physics selected.")
    return SimpleCoverModel()


def cover_model_from_settings(settings: "OverlaySettings") -> CoverModel:
    return create_cover_model(
        settings.cover_model,
        exclude_defender_ring=settings.exclude_defender_ring,
    )


__all__ = ["CoverModelKind", "cover_model_from_settings", "create_cover_model"]
