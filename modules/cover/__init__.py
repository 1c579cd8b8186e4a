"""Cover physics strategies and their one-time selection."""
from .system import CoverModel, HeightCoverModel, SimpleCoverModel
from .factory import CoverModelKind, cover_model_from_settings, create_cover_model

__all__ = [
    "CoverModel",
    "CoverModelKind",
    "HeightCoverModel",
    "SimpleCoverModel",
    "cover_model_from_settings",
    "create_cover_model",
]
