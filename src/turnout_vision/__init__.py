"""Turnout Vision: precinct-level election turnout dashboard."""

__version__ = "0.1.0"
