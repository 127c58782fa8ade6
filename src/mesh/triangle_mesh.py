"""
Triangle Mesh over Sampled Elevations
=====================================

Core mesh class: owns the (x, y, z) samples, the four synthetic bounding
points, the triangulation, the edge arena and the perimeter queries used by
contour extraction.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .delaunay import delaunay_triangulate, grid_triangulate, bounding_points
from .edges import Edge, EdgeKey, build_edge_table, edge_key
from .triangle import DEGENERATE_TOL, Triangle

logger = logging.getLogger(__name__)


class MeshIntegrityError(RuntimeError):
    """Raised when the mesh topology is structurally invalid."""


@dataclass
class MeshConfig:
    """Configuration for mesh construction."""
    bounds_margin: float = 0.1          # Bounding point offset (fraction of extent)
    degenerate_tol: float = DEGENERATE_TOL  # Minimum height for circumcircle tests
    complete_hull: bool = True          # Fill hull notches after removing bounds
    max_flip_passes: int = 100          # Edge legalization sweeps


class TriangleMesh:
    """
    Triangulated mesh of elevation samples.

    The mesh is built once in the constructor and is read-only afterwards;
    re-triangulating means constructing a new mesh.

    Vertex indices [0, n_points) address the samples, indices
    [n_points, n_points + 4) address the synthetic bounding points that
    enclose the data during triangulation.

    Attributes:
        points: np.ndarray, shape (n_points, 3)
            Sample coordinates (x, y, z)
        nodes: np.ndarray, shape (n_points, 2)
            Sample x/y coordinates
        grid_shape: (rows, cols) or None
            Row-major grid layout of the samples, None for scattered data
        bounds: np.ndarray, shape (4, 2)
            Synthetic bounding points (counterclockwise from lower-left)
        triangles: np.ndarray, shape (n_triangles, 3)
            Vertex indices of each triangle
        triangle_list: list of Triangle
            Triangle objects (cached circumcircles, edge keys)
        edges: dict
            Canonical edge key -> Edge, usage counted over all triangles
        perimeter_edges: list of edge keys with usage 1
        interior_edges: list of edge keys with usage 2
        boundary_nodes: np.ndarray
            Sample indices on the perimeter
        hull_indices: np.ndarray
            Closed perimeter walk as vertex indices (first not repeated)
        hull_path: np.ndarray, shape (n_hull, 2)
            Perimeter walk coordinates
        mesh_path: np.ndarray, shape (n_edges, 2, 2)
            Segment endpoints for every edge
        triangle_areas: np.ndarray, shape (n_triangles,)
        skipped_points: list of int
            Samples the incremental insertion could not place
    """

    def __init__(self, points: np.ndarray,
                 grid_shape: Optional[Tuple[int, int]] = None,
                 config: Optional[MeshConfig] = None):
        """
        Initialize mesh and compute triangulation and connectivity.

        Args:
            points: shape (n_points, 3), sample coordinates (x, y, z)
            grid_shape: (rows, cols) when the samples form a row-major grid
            config: MeshConfig (defaults used if None)
        """
        self.points = np.asarray(points, dtype=np.float64)
        self.config = config if config is not None else MeshConfig()
        self.grid_shape = None if grid_shape is None else tuple(int(n) for n in grid_shape)

        # Validate input
        if self.points.ndim != 2 or self.points.shape[1] != 3:
            raise ValueError("points must have shape (n_points, 3)")
        if self.grid_shape is not None:
            if len(self.grid_shape) != 2:
                raise ValueError("grid_shape must be (rows, cols)")
            rows, cols = self.grid_shape
            if rows < 2 or cols < 2:
                raise ValueError(f"grid needs at least 2 rows and 2 columns, got {rows}x{cols}")
            if rows * cols != self.n_points:
                raise ValueError(
                    f"grid_shape {rows}x{cols} does not match {self.n_points} points")
        elif self.n_points < 3:
            raise ValueError(f"at least 3 points are required, got {self.n_points}")
        if not np.all(np.isfinite(self.points)):
            raise ValueError("points must be finite")

        self.nodes = self.points[:, :2]
        x, y = self.points[:, 0], self.points[:, 1]
        if np.ptp(x) == 0.0 or np.ptp(y) == 0.0:
            raise ValueError("points must span a non-zero x and y extent")

        bx, by = bounding_points(x, y, self.config.bounds_margin)
        self.bounds = np.column_stack([bx, by])
        self._xs = np.concatenate([x, bx])
        self._ys = np.concatenate([y, by])

        # Build triangulation and connectivity
        self._build_triangles()
        self._build_edge_connectivity()
        self._identify_boundary()
        self._compute_geometric_quantities()

    @property
    def n_points(self) -> int:
        """Number of samples (bounding points excluded)."""
        return len(self.points)

    @property
    def n_triangles(self) -> int:
        return len(self.triangles)

    @property
    def n_edges(self) -> int:
        return len(self.edges)

    @property
    def is_grid(self) -> bool:
        return self.grid_shape is not None

    @property
    def z_min(self) -> float:
        return float(self.points[:, 2].min())

    @property
    def z_max(self) -> float:
        return float(self.points[:, 2].max())

    @property
    def area(self) -> float:
        """Total triangulated area."""
        return float(np.sum(self.triangle_areas))

    def x(self, index: int) -> float:
        """X coordinate of a sample or bounding point."""
        return float(self._xs[self._check_index(index, len(self._xs))])

    def y(self, index: int) -> float:
        """Y coordinate of a sample or bounding point."""
        return float(self._ys[self._check_index(index, len(self._ys))])

    def z(self, index: int) -> float:
        """Elevation of a sample; bounding points have none."""
        return float(self.points[self._check_index(index, self.n_points), 2])

    @staticmethod
    def _check_index(index: int, size: int) -> int:
        if not 0 <= index < size:
            raise IndexError(f"vertex index {index} out of range [0, {size})")
        return index

    def _build_triangles(self) -> None:
        """Triangulate the samples (grid or Delaunay)."""
        self.skipped_points: List[int] = []
        if self.is_grid:
            self.triangles = grid_triangulate(*self.grid_shape)
        else:
            result = delaunay_triangulate(
                self.points[:, 0], self.points[:, 1],
                margin=self.config.bounds_margin,
                degenerate_tol=self.config.degenerate_tol,
                complete=self.config.complete_hull,
                max_flip_passes=self.config.max_flip_passes,
            )
            self.triangles = result.triangles
            self.skipped_points = result.skipped_points

        if self.n_triangles == 0:
            raise ValueError("Triangulation produced no triangles (collinear points?)")

        self.triangle_list = [
            Triangle(v1, v2, v3, self._xs, self._ys, self.config.degenerate_tol)
            for v1, v2, v3 in self.triangles
        ]

        unreferenced = np.setdiff1d(np.arange(self.n_points), self.triangles)
        if len(unreferenced) > 0:
            logger.warning("%d point(s) are not part of any triangle: %s",
                           len(unreferenced), unreferenced.tolist())

    def _build_edge_connectivity(self) -> None:
        """
        Create the edge arena from the final triangles.

        Every triangle bumps each of its edges once, so usage 1 marks a
        perimeter edge and usage 2 an interior edge.
        """
        self.edges: Dict[EdgeKey, Edge] = build_edge_table(
            tri.vertices for tri in self.triangle_list)

        bad = [edge for edge in self.edges.values() if not 1 <= edge.usage <= 2]
        if bad:
            raise MeshIntegrityError(
                f"{len(bad)} edge(s) with usage outside {{1, 2}}, e.g. {bad[0]}")

    def _identify_boundary(self) -> None:
        """
        Find perimeter edges and nodes.

        An edge is on the perimeter if it belongs to exactly one triangle.
        """
        self.perimeter_edges = sorted(key for key, edge in self.edges.items()
                                      if edge.is_perimeter)
        self.interior_edges = sorted(key for key, edge in self.edges.items()
                                     if not edge.is_perimeter)

        # Vertex -> perimeter edges, in edge table order
        self._perimeter_index: Dict[int, List[EdgeKey]] = {}
        for key, edge in self.edges.items():
            if edge.is_perimeter:
                self._perimeter_index.setdefault(edge.v1, []).append(key)
                self._perimeter_index.setdefault(edge.v2, []).append(key)

        self.boundary_nodes = np.array(sorted(self._perimeter_index), dtype=np.int64)

    def _compute_geometric_quantities(self) -> None:
        """Compute areas, hull walk and mesh outline."""
        self.triangle_areas = self.compute_triangle_areas()
        self.hull_indices = self._walk_hull()
        self.hull_path = np.column_stack([self._xs[self.hull_indices],
                                          self._ys[self.hull_indices]])
        self.mesh_path = self.compute_mesh_path()

    def compute_triangle_areas(self) -> np.ndarray:
        """
        Compute area of all triangles.

        Returns:
            areas: shape (n_triangles,)
        """
        return np.array([abs(tri.signed_area) for tri in self.triangle_list])

    def compute_mesh_path(self) -> np.ndarray:
        """
        Segment endpoints of every edge, for drawing the mesh outline.

        Returns:
            segments: shape (n_edges, 2, 2)
        """
        segments = np.zeros((self.n_edges, 2, 2))
        for i, (v1, v2) in enumerate(self.edges):
            segments[i, 0] = self._xs[v1], self._ys[v1]
            segments[i, 1] = self._xs[v2], self._ys[v2]
        return segments

    def _walk_hull(self) -> np.ndarray:
        """
        Walk the perimeter from the first perimeter edge back to itself.

        Returns:
            vertex indices in counterclockwise order
        """
        start = self.edges[self.perimeter_edges[0]]
        indices = [start.v1]
        edge = start
        vertex = start.v2

        while vertex != start.v1:
            indices.append(vertex)
            if len(indices) > self.n_edges:
                raise MeshIntegrityError("Perimeter walk does not close")
            edge = self.get_next_perimeter_edge(edge, vertex)
            vertex = edge.other_vertex(vertex)

        indices = np.array(indices, dtype=np.int64)

        # Shoelace sign
        hx, hy = self._xs[indices], self._ys[indices]
        if np.dot(hx, np.roll(hy, -1)) - np.dot(hy, np.roll(hx, -1)) < 0:
            indices = indices[::-1]
        return indices

    def get_edge(self, v1: int, v2: int) -> Edge:
        """
        Return the edge between two vertices.

        Raises:
            KeyError: if the vertices are not connected
        """
        key = edge_key(v1, v2)
        try:
            return self.edges[key]
        except KeyError:
            raise KeyError(f"No edge between vertices {key[0]} and {key[1]}") from None

    def is_perimeter_edge(self, v1: int, v2: int) -> bool:
        edge = self.edges.get(edge_key(v1, v2))
        return edge is not None and edge.is_perimeter

    def get_next_perimeter_edge(self, edge: Union[Edge, EdgeKey], vertex: int) -> Edge:
        """
        Return another perimeter edge sharing `vertex`.

        Args:
            edge: current perimeter edge (Edge or key)
            vertex: endpoint of `edge` to continue from

        Returns:
            the next perimeter Edge

        Raises:
            MeshIntegrityError: if no other perimeter edge touches `vertex`
        """
        key = edge.key if isinstance(edge, Edge) else edge_key(*edge)
        for other in self._perimeter_index.get(vertex, ()):
            if other != key:
                return self.edges[other]
        raise MeshIntegrityError(
            f"No perimeter edge continues from vertex {vertex} after edge {key}")

    def get_triangle_nodes(self, tri_idx: int) -> np.ndarray:
        """
        Return x/y coordinates of triangle vertices.

        Returns:
            coordinates: shape (3, 2)
        """
        return self.nodes[self.triangles[tri_idx]]

    def get_triangle_edges(self, tri_idx: int) -> List[Edge]:
        """Return the three edges of a triangle."""
        return [self.edges[key] for key in self.triangle_list[tri_idx].edge_keys]
