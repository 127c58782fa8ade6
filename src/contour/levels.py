"""
Contour Levels
==============

Evenly spaced level bands over a mesh's elevation range, and the order in
which filled contours are painted.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from mesh.triangle_mesh import TriangleMesh
from .contour_extractor import ContourConfig, ContourExtractor, ContourShape

logger = logging.getLogger(__name__)


def contour_ranges(z_min: float, z_max: float, count: int) -> np.ndarray:
    """
    Split [z_min, z_max] into `count` equal bands.

    Args:
        z_min, z_max: elevation range
        count: number of bands

    Returns:
        ranges: shape (count, 2), band i is
            [z_min + i * delta, z_min + (i + 1) * delta]
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    if z_max < z_min:
        raise ValueError(f"z_max ({z_max}) is below z_min ({z_min})")

    delta = (z_max - z_min) / count
    lower = z_min + delta * np.arange(count)
    return np.column_stack([lower, lower + delta])


def contour_levels(z_min: float, z_max: float, count: int) -> np.ndarray:
    """Contour level of each band: its lower bound."""
    return contour_ranges(z_min, z_max, count)[:, 0]


def contour_paint_order(shapes: Sequence[ContourShape]) -> List[int]:
    """
    Order in which filled contour shapes are painted.

    The shape with the largest bounding box (the first one on ties) is
    painted first, followed by the shapes below it in descending order, then
    the shapes above it in ascending order. For nested "at or above" regions
    the largest shape is the lowest level, so later shapes sit on top.

    Args:
        shapes: contour shapes in level order

    Returns:
        indices into `shapes`
    """
    if not shapes:
        return []

    max_index = 0
    max_area = shapes[0].bounds_area
    for i, shape in enumerate(shapes):
        if shape.bounds_area > max_area:
            max_index, max_area = i, shape.bounds_area

    return list(range(max_index, -1, -1)) + list(range(max_index + 1, len(shapes)))


@dataclass
class ContourSet:
    """
    Filled contours of a mesh.

    Attributes:
        levels: np.ndarray, shape (count,)
        ranges: np.ndarray, shape (count, 2)
        shapes: ContourShape per level
        paint_order: indices into shapes, back to front
    """
    levels: np.ndarray
    ranges: np.ndarray
    shapes: List[ContourShape] = field(default_factory=list)
    paint_order: List[int] = field(default_factory=list)

    @property
    def n_levels(self) -> int:
        return len(self.levels)

    def painted_shapes(self) -> List[ContourShape]:
        """Shapes in paint order."""
        return [self.shapes[i] for i in self.paint_order]


def compute_contour_set(mesh: TriangleMesh, count: int,
                        config: Optional[ContourConfig] = None) -> ContourSet:
    """
    Contour a mesh at `count` evenly spaced levels.

    Args:
        mesh: TriangleMesh instance
        count: number of bands between the mesh's minimum and maximum elevation
        config: ContourConfig

    Returns:
        ContourSet
    """
    ranges = contour_ranges(mesh.z_min, mesh.z_max, count)
    levels = ranges[:, 0]

    extractor = ContourExtractor(mesh, config)
    shapes = [extractor.get_contour_shape(level) for level in levels]

    logger.debug("Contoured %d levels: %d paths total", count,
                 sum(shape.n_paths for shape in shapes))

    return ContourSet(levels=levels, ranges=ranges, shapes=shapes,
                      paint_order=contour_paint_order(shapes))
