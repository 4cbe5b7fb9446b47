"""Tidewatch — linked multi-view exploration of investigative entity networks."""

__version__ = "0.1.0"
