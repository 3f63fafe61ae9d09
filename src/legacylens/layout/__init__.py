"""
Layout algorithms for LegacyLens graphs.
"""

from .engine import LayoutEngine, LayoutResult, layout

__all__ = ["LayoutEngine", "LayoutResult", "layout"]
