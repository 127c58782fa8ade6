"""
Triangle Mesh Contouring
========================

Contour lines and filled contour regions of scattered or gridded
elevation samples.

Modules:
    mesh: Grid and Delaunay triangulation with edge-based perimeter queries
    contour: Isoline extraction, contour stitching and level sets
    postprocess: Visualization of meshes and contours
"""

from . import mesh
from . import contour
from . import postprocess

__version__ = "0.1.0"
__all__ = ["mesh", "contour", "postprocess"]
