"""Geometry, coordinate mapping, style overrides and line layout for styled subtitle text."""

__version__ = "0.1.0"

__all__ = [
    "coordinates",
    "geometry",
    "layout",
    "settings",
    "styles",
    "text",
    "transform",
]