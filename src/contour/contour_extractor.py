"""
Contour Extraction
==================

Stitches per-triangle isolines into closed contour paths.

The paths bound the region where the surface is at or above the requested
level, with that region on their left: outer rings run counterclockwise
and holes clockwise. Chains of isolines that leave the mesh are closed by
walking the mesh perimeter on the high side until the contour re-enters
the mesh or meets its own start. When only closed loops around low ground
exist and the perimeter is high, the hull is added as the outer ring.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from mesh.edges import EdgeKey
from mesh.triangle_mesh import MeshIntegrityError, TriangleMesh
from .isolines import Isoline, find_isolines

logger = logging.getLogger(__name__)


@dataclass
class ContourConfig:
    """Configuration for contour extraction."""
    max_points_factor: int = 2   # Path size limit, in multiples of mesh points
    hull_fallback: bool = True   # Return the hull when the level is below all data


@dataclass
class ContourShape:
    """
    Closed contour paths for one level.

    Attributes:
        level: contour elevation
        paths: list of np.ndarray, shape (k, 2), each implicitly closed
    """
    level: float
    paths: List[np.ndarray] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.paths) == 0

    @property
    def n_paths(self) -> int:
        return len(self.paths)

    @property
    def n_points(self) -> int:
        return sum(len(path) for path in self.paths)

    @property
    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """(x_min, y_min, x_max, y_max) of all paths, None if empty."""
        if self.is_empty:
            return None
        pts = np.vstack(self.paths)
        x_min, y_min = pts.min(axis=0)
        x_max, y_max = pts.max(axis=0)
        return float(x_min), float(y_min), float(x_max), float(y_max)

    @property
    def bounds_area(self) -> float:
        bounds = self.bounds
        if bounds is None:
            return 0.0
        x_min, y_min, x_max, y_max = bounds
        return (x_max - x_min) * (y_max - y_min)


class _IsolinePool:
    """Isolines not yet stitched, indexed by the edges they cross."""

    def __init__(self, isolines: List[Isoline]):
        self._isolines: Dict[int, Isoline] = dict(enumerate(isolines))
        self._by_edge: Dict[EdgeKey, List[int]] = defaultdict(list)
        for iso_id, iso in self._isolines.items():
            self._by_edge[iso.edge1].append(iso_id)
            self._by_edge[iso.edge2].append(iso_id)

    def __len__(self) -> int:
        return len(self._isolines)

    def pop_first(self) -> Isoline:
        return self._remove(next(iter(self._isolines)))

    def take(self, key: EdgeKey) -> Optional[Isoline]:
        """Remove and return an isoline crossing `key`, if any."""
        ids = self._by_edge.get(key)
        if not ids:
            return None
        return self._remove(ids[0])

    def _remove(self, iso_id: int) -> Isoline:
        iso = self._isolines.pop(iso_id)
        self._by_edge[iso.edge1].remove(iso_id)
        self._by_edge[iso.edge2].remove(iso_id)
        return iso


class ContourExtractor:
    """
    Contour paths of a triangle mesh.

    The extractor keeps no state between calls; one instance can serve any
    number of levels.

    Attributes:
        mesh: TriangleMesh instance
        config: ContourConfig instance
    """

    def __init__(self, mesh: TriangleMesh, config: Optional[ContourConfig] = None):
        self.mesh = mesh
        self.config = config if config is not None else ContourConfig()

    @property
    def max_path_points(self) -> int:
        return self.config.max_points_factor * self.mesh.n_points

    def get_isolines(self, level: float) -> List[Isoline]:
        """Return the isolines of every triangle crossing `level`."""
        return find_isolines(self.mesh, level)

    def get_contour_shape(self, level: float) -> ContourShape:
        """Return the contour paths for `level` as a ContourShape."""
        return ContourShape(float(level), self.get_contour_paths(level))

    def get_contour_paths(self, level: float) -> List[np.ndarray]:
        """
        Return closed contour paths for `level`.

        If no triangle crosses the level, the result is the mesh hull when
        the whole mesh lies at or above the level (and hull_fallback is
        enabled), otherwise empty.

        Paths keep the z >= level side on their left. If no isoline reaches
        the perimeter and the perimeter lies at or above the level, every
        loop is a hole and the hull path comes first as the outer ring.

        Args:
            level: contour elevation

        Returns:
            list of np.ndarray, shape (k, 2)

        Raises:
            MeshIntegrityError: if a contour cannot be closed along the
                mesh perimeter
        """
        isolines = self.get_isolines(level)
        if not isolines:
            if self.config.hull_fallback and self.mesh.z_min >= level:
                return [self.mesh.hull_path.copy()]
            return []

        pool = _IsolinePool(isolines)
        paths = []
        while pool:
            points = self._stitch_subpath(pool, level)
            paths.append(np.array(points, dtype=np.float64))

        # A perimeter without crossings lies entirely on one side
        mesh = self.mesh
        touches_perimeter = any(mesh.edges[key].is_perimeter
                                for iso in isolines for key in (iso.edge1, iso.edge2))
        if not touches_perimeter and mesh.z(int(mesh.hull_indices[0])) >= level:
            paths.insert(0, mesh.hull_path.copy())
        return paths

    def _low_side(self, iso: Isoline, start: EdgeKey, level: float) -> float:
        """
        Cross product locating the low vertices of the isoline's triangle
        relative to the isoline traversed from the `start` edge.

        Positive means the low side is on the left. Zero only for an
        isoline collapsed onto a vertex at exactly the level.
        """
        mesh = self.mesh
        low = [int(v) for v in mesh.triangles[iso.triangle] if mesh.z(int(v)) < level]
        cx = np.mean([mesh.x(v) for v in low])
        cy = np.mean([mesh.y(v) for v in low])
        (ax, ay), (bx, by) = iso.point_on(start), iso.other_point(start)
        return float((bx - ax) * (cy - ay) - (by - ay) * (cx - ax))

    def _stitch_subpath(self, pool: _IsolinePool, level: float) -> List[Tuple[float, float]]:
        """
        Build one closed path, consuming its isolines from the pool.

        Returns:
            path points (first point not repeated), z >= level on the left
        """
        mesh = self.mesh
        limit = self.max_path_points

        first = pool.pop_first()
        edge0, edge_n = first.edge1, first.edge2
        points = deque([first.point1, first.point2])
        low_side = self._low_side(first, edge0, level)

        while edge0 != edge_n:

            # Expand forward
            iso = pool.take(edge_n)
            while iso is not None:
                low_side += self._low_side(iso, edge_n, level)
                points.append(iso.other_point(edge_n))
                edge_n = iso.other_edge(edge_n)
                iso = pool.take(edge_n)

            # Expand back
            iso = pool.take(edge0)
            while iso is not None:
                points.appendleft(iso.other_point(edge0))
                edge0 = iso.other_edge(edge0)
                low_side += self._low_side(iso, edge0, level)
                iso = pool.take(edge0)

            if edge0 == edge_n:
                break

            # An open chain can only end on the perimeter
            for key in (edge0, edge_n):
                if not mesh.edges[key].is_perimeter:
                    raise MeshIntegrityError(
                        f"Contour at level {level} ends on interior edge {key}")

            # Walk the perimeter through the high side
            edge = mesh.edges[edge_n]
            vertex = edge.v1 if mesh.z(edge.v1) >= level else edge.v2
            while edge_n != edge0:
                points.append((mesh.x(vertex), mesh.y(vertex)))
                edge = mesh.get_next_perimeter_edge(edge, vertex)
                edge_n = edge.key

                # Contour re-enters the mesh
                iso = pool.take(edge_n)
                if iso is not None:
                    low_side += self._low_side(iso, edge_n, level)
                    points.append(iso.point_on(edge_n))
                    points.append(iso.other_point(edge_n))
                    edge_n = iso.other_edge(edge_n)
                    break

                vertex = edge.other_vertex(vertex)
                if len(points) > limit:
                    break

            if len(points) > limit:
                logger.warning("Contour at level %g exceeded %d points; returning partial path",
                               level, limit)
                break

        # Closing on edge0 through an isoline repeats the first point
        if len(points) > 1 and points[0] == points[-1]:
            points.pop()

        # Every isoline and perimeter step keeps the high side on one hand
        if low_side > 0:
            points.reverse()
        return list(points)
