"""Padayon: mental-health support backend and application core."""

__version__ = "0.1.0"
