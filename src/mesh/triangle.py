"""
Mesh Triangle
=============

Triangle of three vertex indices with a cached circumcircle.
"""

from functools import cached_property
from typing import Optional, Tuple

import numpy as np

from .edges import EdgeKey, edge_key

DEGENERATE_TOL = 1e-6

# Relative margin of the circumcircle test for cocircular points
INCIRCLE_RTOL = 1e-10


class Triangle:
    """
    Triangle referencing three mesh vertices.

    The triangle does not own its edges; it stores their canonical keys so
    that the owning mesh can look them up in its edge arena.

    Attributes:
        v1, v2, v3: vertex indices
        vertices: (v1, v2, v3)
        edge_keys: canonical keys of edges (v1, v2), (v2, v3), (v3, v1)
    """

    def __init__(self, v1: int, v2: int, v3: int,
                 xs: np.ndarray, ys: np.ndarray,
                 degenerate_tol: float = DEGENERATE_TOL):
        """
        Args:
            v1, v2, v3: vertex indices into xs/ys
            xs, ys: x and y coordinates of every vertex (samples and
                synthetic bounding points)
            degenerate_tol: minimum height for a usable circumcircle
        """
        self.v1, self.v2, self.v3 = int(v1), int(v2), int(v3)
        self.vertices = (self.v1, self.v2, self.v3)
        self.edge_keys: Tuple[EdgeKey, EdgeKey, EdgeKey] = (
            edge_key(self.v1, self.v2),
            edge_key(self.v2, self.v3),
            edge_key(self.v3, self.v1),
        )
        self._xs = xs
        self._ys = ys
        self._tol = degenerate_tol

    def __repr__(self) -> str:
        return f"Triangle(v1={self.v1}, v2={self.v2}, v3={self.v3})"

    def directed_edges(self) -> Tuple[Tuple[int, int], ...]:
        """Edges in vertex order, keeping the triangle's winding."""
        return ((self.v1, self.v2), (self.v2, self.v3), (self.v3, self.v1))

    def has_any_vertex(self, indices) -> bool:
        return any(v in indices for v in self.vertices)

    @cached_property
    def signed_area(self) -> float:
        """Signed area, positive for counterclockwise winding."""
        xs, ys = self._xs, self._ys
        bx = xs[self.v2] - xs[self.v1]
        by = ys[self.v2] - ys[self.v1]
        cx = xs[self.v3] - xs[self.v1]
        cy = ys[self.v3] - ys[self.v1]
        return 0.5 * float(bx * cy - by * cx)

    @cached_property
    def height(self) -> float:
        """Smallest altitude (twice the area over the longest side)."""
        xs, ys = self._xs, self._ys
        longest = 0.0
        for i, j in self.directed_edges():
            longest = max(longest, float(np.hypot(xs[j] - xs[i], ys[j] - ys[i])))
        if longest == 0.0:
            return 0.0
        return 2.0 * abs(self.signed_area) / longest

    @property
    def too_small(self) -> bool:
        """Near-collinear triangle whose circumcircle is numerically unstable."""
        return self.height < self._tol

    @cached_property
    def circumcircle(self) -> Optional[Tuple[float, float, float]]:
        """
        Circumcircle as (center_x, center_y, radius²).

        Returns None for triangles flagged too_small.
        """
        if self.too_small:
            return None

        xs, ys = self._xs, self._ys
        ax, ay = float(xs[self.v1]), float(ys[self.v1])
        bx, by = float(xs[self.v2]) - ax, float(ys[self.v2]) - ay
        cx, cy = float(xs[self.v3]) - ax, float(ys[self.v3]) - ay

        d = 2.0 * (bx * cy - by * cx)
        b_sq = bx * bx + by * by
        c_sq = cx * cx + cy * cy
        ux = (cy * b_sq - by * c_sq) / d
        uy = (bx * c_sq - cx * b_sq) / d
        return ax + ux, ay + uy, ux * ux + uy * uy

    def circumcircle_contains(self, px: float, py: float, strict: bool = False) -> bool:
        """
        Check whether a point lies in the circumcircle.

        Points within a relative tolerance of the circle count as inside
        unless `strict` is set, in which case they count as outside.
        Always False for degenerate (too small) triangles.
        """
        circle = self.circumcircle
        if circle is None:
            return False
        cx, cy, r_sq = circle
        dx = px - cx
        dy = py - cy
        if strict:
            return dx * dx + dy * dy < r_sq * (1.0 - INCIRCLE_RTOL)
        return dx * dx + dy * dy <= r_sq * (1.0 + INCIRCLE_RTOL)
