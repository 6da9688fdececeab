"""Outpost service: pagination over the menu document store."""

__version__ = "1.0.0"
