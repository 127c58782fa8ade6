"""
Postprocessing Module
=====================

Visualization of meshes and contours.
"""

from .visualization import (
    plot_mesh,
    plot_elevation,
    plot_isolines,
    plot_contour_shape,
    plot_contour_set,
)

__all__ = [
    "plot_mesh",
    "plot_elevation",
    "plot_isolines",
    "plot_contour_shape",
    "plot_contour_set",
]
