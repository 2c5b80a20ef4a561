"""Inspection tool for container networking plugins."""

__version__ = "1.0.0"
