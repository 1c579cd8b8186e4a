"""Event topic definitions and the publisher seam hosts plug into."""
from .topics import OverlayTopic, PublishesOverlayEvents

__all__ = ["OverlayTopic", "PublishesOverlayEvents"]
