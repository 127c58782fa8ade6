"""
Isolines
========

Per-triangle crossings of a constant elevation.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

from mesh.edges import EdgeKey, edge_key
from mesh.triangle_mesh import TriangleMesh

Point = Tuple[float, float]


@dataclass
class Isoline:
    """
    Segment where one triangle crosses the contour level.

    Attributes:
        triangle: index of the triangle in the mesh
        edge1, edge2: keys of the two crossed edges
        point1, point2: crossing points on edge1 and edge2
    """
    triangle: int
    edge1: EdgeKey
    point1: Point
    edge2: EdgeKey
    point2: Point

    def other_edge(self, key: EdgeKey) -> EdgeKey:
        return self.edge2 if key == self.edge1 else self.edge1

    def point_on(self, key: EdgeKey) -> Point:
        return self.point1 if key == self.edge1 else self.point2

    def other_point(self, key: EdgeKey) -> Point:
        return self.point2 if key == self.edge1 else self.point1


def crossing_point(mesh: TriangleMesh, key: EdgeKey, level: float) -> Point:
    """
    Linear interpolation of the x/y position where an edge reaches `level`.

    For edge (v1, v2) the point is t * p1 + (1 - t) * p2 with
    t = (level - z2) / (z1 - z2). A flat edge yields p1.

    Args:
        mesh: TriangleMesh instance
        key: canonical edge key
        level: contour elevation

    Returns:
        (x, y)
    """
    v1, v2 = key
    z1, z2 = mesh.z(v1), mesh.z(v2)
    x1, y1 = mesh.x(v1), mesh.y(v1)
    if z1 == z2:
        return x1, y1

    t = (level - z2) / (z1 - z2)
    x2, y2 = mesh.x(v2), mesh.y(v2)
    return t * x1 + (1.0 - t) * x2, t * y1 + (1.0 - t) * y2


def find_isolines(mesh: TriangleMesh, level: float) -> List[Isoline]:
    """
    Find the isoline of every triangle straddling `level`.

    A vertex is above the level when z >= level. In a straddling triangle
    the single vertex on the minority side connects to the two others
    through the crossed edges.

    Args:
        mesh: TriangleMesh instance
        level: contour elevation

    Returns:
        isolines in triangle order
    """
    above = mesh.points[:, 2] >= level
    n_above = above[mesh.triangles].sum(axis=1)
    crossing = np.nonzero((n_above == 1) | (n_above == 2))[0]

    # Both triangles sharing an edge get the same point
    points: Dict[EdgeKey, Point] = {}

    def point_for(key):
        if key not in points:
            points[key] = crossing_point(mesh, key, level)
        return points[key]

    isolines = []
    for t_idx in crossing:
        vertices = mesh.triangles[t_idx]
        high = [int(v) for v in vertices if above[v]]
        low = [int(v) for v in vertices if not above[v]]
        minority, majority = (high, low) if len(high) < len(low) else (low, high)

        key1 = edge_key(minority[0], majority[0])
        key2 = edge_key(minority[0], majority[1])
        isolines.append(Isoline(int(t_idx), key1, point_for(key1),
                                key2, point_for(key2)))

    return isolines
