"""Render a live page and save it as a self-contained static bundle."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
