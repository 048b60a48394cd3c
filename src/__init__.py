# src/__init__.py — v1
"""linkrepair: validate and repair hyperlinks in Word documents."""

from linkrepair.version import __version__

__all__ = ["__version__"]
