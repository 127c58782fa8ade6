"""
Mesh Module
===========

Triangulated mesh of (x, y, z) samples with edge-based perimeter queries.
"""

from .edges import Edge, edge_key, build_edge_table
from .triangle import Triangle
from .triangle_mesh import TriangleMesh, MeshConfig, MeshIntegrityError
from .delaunay import (
    DelaunayResult,
    bounding_points,
    grid_triangulate,
    delaunay_triangulate,
)
from .mesh_generators import (
    peaks,
    gaussian_hill,
    create_grid_points,
    create_grid_mesh,
    create_rectangle_mesh,
    create_scattered_points,
    create_scattered_mesh,
    create_unit_square_saddle,
    perturb_grid_points,
)

__all__ = [
    "Edge",
    "edge_key",
    "build_edge_table",
    "Triangle",
    "TriangleMesh",
    "MeshConfig",
    "MeshIntegrityError",
    "DelaunayResult",
    "bounding_points",
    "grid_triangulate",
    "delaunay_triangulate",
    "peaks",
    "gaussian_hill",
    "create_grid_points",
    "create_grid_mesh",
    "create_rectangle_mesh",
    "create_scattered_points",
    "create_scattered_mesh",
    "create_unit_square_saddle",
    "perturb_grid_points",
]
