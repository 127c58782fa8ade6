"""
Contour Module
==============

Isolines, stitched contour paths and level sets of a triangle mesh.
"""

from .isolines import Isoline, crossing_point, find_isolines
from .contour_extractor import ContourExtractor, ContourConfig, ContourShape
from .levels import (
    ContourSet,
    contour_ranges,
    contour_levels,
    contour_paint_order,
    compute_contour_set,
)

__all__ = [
    "Isoline",
    "crossing_point",
    "find_isolines",
    "ContourExtractor",
    "ContourConfig",
    "ContourShape",
    "ContourSet",
    "contour_ranges",
    "contour_levels",
    "contour_paint_order",
    "compute_contour_set",
]
