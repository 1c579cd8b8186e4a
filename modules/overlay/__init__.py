"""Hypothetical terrain overlay."""
from .state import ACCEPTED, AcceptanceReport, Designation, HypotheticalOverlay

__all__ = ["ACCEPTED", "AcceptanceReport", "Designation", "HypotheticalOverlay"]
