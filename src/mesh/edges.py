"""
Mesh Edges
==========

Undirected triangle edges keyed by their canonical vertex pair.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

EdgeKey = Tuple[int, int]


def edge_key(v1: int, v2: int) -> EdgeKey:
    """Return the canonical key (smaller vertex index first) for an edge."""
    v1, v2 = int(v1), int(v2)
    return (v1, v2) if v1 <= v2 else (v2, v1)


@dataclass
class Edge:
    """
    Triangle edge between two vertex indices.

    Attributes:
        v1: smaller vertex index
        v2: larger vertex index
        usage: number of triangles referencing the edge
            (1 on the perimeter, 2 for interior edges)
    """
    v1: int
    v2: int
    usage: int = 0

    @property
    def key(self) -> EdgeKey:
        return (self.v1, self.v2)

    @property
    def is_perimeter(self) -> bool:
        """Edge belongs to exactly one triangle."""
        return self.usage == 1

    def bump_usage(self) -> None:
        self.usage += 1

    def has_vertex(self, vertex: int) -> bool:
        return self.v1 == vertex or self.v2 == vertex

    def other_vertex(self, vertex: int) -> int:
        """Return the endpoint that is not `vertex`."""
        if vertex == self.v1:
            return self.v2
        if vertex == self.v2:
            return self.v1
        raise ValueError(f"Vertex {vertex} is not on edge {self.key}")


def build_edge_table(triangles: Iterable[Tuple[int, int, int]]) -> Dict[EdgeKey, Edge]:
    """
    Build the edge arena for a set of triangles.

    Each triangle bumps the usage of its three edges exactly once.

    Args:
        triangles: iterable of vertex index triplets

    Returns:
        dict mapping canonical edge key to Edge, in first-seen order
    """
    edges: Dict[EdgeKey, Edge] = {}
    for a, b, c in triangles:
        for i, j in ((a, b), (b, c), (c, a)):
            key = edge_key(i, j)
            edge = edges.get(key)
            if edge is None:
                edge = edges[key] = Edge(*key)
            edge.bump_usage()
    return edges
