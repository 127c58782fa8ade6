"""
Tests for Delaunay Triangulation
================================

scipy.spatial serves as the reference triangulation.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from scipy.spatial import ConvexHull, Delaunay

from mesh.delaunay import (
    bowyer_watson, bounding_points, complete_hull, delaunay_triangulate,
    legalize_edges
)
from mesh.triangle_mesh import TriangleMesh, MeshConfig
from mesh.mesh_generators import (
    create_rectangle_mesh, create_scattered_mesh, create_scattered_points,
    gaussian_hill, peaks, perturb_grid_points
)


def circumcircle_violations(mesh, rtol=1e-9):
    """Count triangles whose circumcircle strictly contains another sample."""
    pts = mesh.nodes
    violations = 0
    for tri in mesh.triangle_list:
        cx, cy, r_sq = tri.circumcircle
        d_sq = (pts[:, 0] - cx) ** 2 + (pts[:, 1] - cy) ** 2
        d_sq[list(tri.vertices)] = np.inf
        if np.any(d_sq < r_sq * (1.0 - rtol)):
            violations += 1
    return violations


def triangulated_area(triangles, xs, ys):
    area = 0.0
    for a, b, c in triangles:
        area += 0.5 * abs((xs[b] - xs[a]) * (ys[c] - ys[a]) -
                          (ys[b] - ys[a]) * (xs[c] - xs[a]))
    return area


class TestBowyerWatson:
    """Tests for the incremental insertion."""

    def test_single_triangle(self):
        x = np.array([0.0, 1.0, 0.0])
        y = np.array([0.0, 0.0, 1.0])
        bx, by = bounding_points(x, y)
        xs, ys = np.concatenate([x, bx]), np.concatenate([y, by])

        triangles, skipped = bowyer_watson(xs, ys, 3)

        assert skipped == []
        assert len(triangles) == 1
        assert set(triangles[0].vertices) == {0, 1, 2}

    def test_insertion_order_is_deterministic(self):
        points = create_scattered_points(40, peaks, bounds=(-3, 3, -3, 3), seed=3)
        result1 = delaunay_triangulate(points[:, 0], points[:, 1])
        result2 = delaunay_triangulate(points[:, 0], points[:, 1])

        assert np.array_equal(result1.triangles, result2.triangles)


class TestDelaunayProperty:
    """Tests comparing against scipy on random samples."""

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_empty_circumcircles(self, seed):
        mesh = create_scattered_mesh(60, gaussian_hill, seed=seed)
        assert circumcircle_violations(mesh) == 0

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_covers_convex_hull(self, seed):
        """Hull completion leaves no notches."""
        mesh = create_scattered_mesh(60, gaussian_hill, seed=seed)
        hull = ConvexHull(mesh.nodes)

        assert mesh.area == pytest.approx(hull.volume, rel=1e-9)
        assert set(mesh.hull_indices.tolist()) >= set(hull.vertices.tolist())

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_triangle_count_matches_scipy(self, seed):
        mesh = create_scattered_mesh(60, gaussian_hill, seed=seed)
        reference = Delaunay(mesh.nodes)

        assert mesh.n_triangles == len(reference.simplices)

    def test_every_sample_is_used(self):
        mesh = create_scattered_mesh(80, peaks, bounds=(-3, 3, -3, 3),
                                     include_corners=True, seed=7)
        assert set(np.unique(mesh.triangles)) == set(range(mesh.n_points))

    def test_perimeter_edges_lie_on_hull(self):
        mesh = create_scattered_mesh(50, gaussian_hill, seed=11)
        hull = set(ConvexHull(mesh.nodes).vertices.tolist())

        for v1, v2 in mesh.perimeter_edges:
            assert v1 in hull and v2 in hull

    def test_perturbed_grid(self):
        grid = create_rectangle_mesh(1.0, 1.0, 6, 6, gaussian_hill)
        mesh = perturb_grid_points(grid, magnitude=0.2, seed=5)

        assert not mesh.is_grid
        assert mesh.n_points == grid.n_points
        assert np.isclose(mesh.area, 1.0)
        assert circumcircle_violations(mesh) == 0


class TestHullCompletion:
    """Tests for notch filling and edge legalization."""

    def test_fills_reflex_vertex(self):
        """A notch at vertex 1 of a square-like outline is closed by one ear."""
        xs = np.array([0.0, 1.0, 2.0, 2.0, 0.0, 1.0])
        ys = np.array([0.0, 0.5, 0.0, 2.0, 2.0, 1.5])
        triangles = [(0, 1, 5), (1, 2, 5), (2, 3, 5), (3, 4, 5), (4, 0, 5)]

        completed, n_added = complete_hull(triangles, xs, ys, 6)

        assert n_added == 1
        assert completed[-1] == (0, 2, 1)

    def test_convex_outline_unchanged(self):
        xs = np.array([0.0, 1.0, 1.0, 0.0])
        ys = np.array([0.0, 0.0, 1.0, 1.0])
        triangles = [(0, 1, 2), (0, 2, 3)]

        completed, n_added = complete_hull(triangles, xs, ys, 4)

        assert n_added == 0
        assert completed == triangles

    def test_ear_blocked_by_sample(self):
        """A sample inside the ear keeps the notch open until it is joined."""
        xs = np.array([0.0, 1.0, 2.0, 2.0, 0.0, 1.0, 1.0])
        ys = np.array([0.0, 0.5, 0.0, 2.0, 2.0, 1.5, 0.2])
        triangles = [(0, 1, 5), (1, 2, 5), (2, 3, 5), (3, 4, 5), (4, 0, 5)]

        completed, n_added = complete_hull(triangles, xs, ys, 7)

        assert n_added == 3
        assert 6 in {v for tri in completed for v in tri}
        assert triangulated_area(completed, xs, ys) == pytest.approx(4.0)

    def test_legalize_flips_bad_diagonal(self):
        """Long diagonal of a flat kite is replaced by the short one."""
        xs = np.array([0.0, 1.0, 2.0, 1.0])
        ys = np.array([0.0, -0.2, 0.0, 0.2])
        triangles = [(0, 1, 2), (0, 2, 3)]

        legal, n_flips = legalize_edges(triangles, xs, ys)

        assert n_flips == 1
        edges = {tuple(sorted((a, b))) for tri in legal
                 for a, b in ((tri[0], tri[1]), (tri[1], tri[2]), (tri[2], tri[0]))}
        assert (1, 3) in edges
        assert (0, 2) not in edges

    def test_legalize_keeps_cocircular(self):
        """Square diagonals are equally valid; no flip."""
        xs = np.array([0.0, 1.0, 1.0, 0.0])
        ys = np.array([0.0, 0.0, 1.0, 1.0])
        triangles = [(0, 1, 2), (0, 2, 3)]

        legal, n_flips = legalize_edges(triangles, xs, ys)

        assert n_flips == 0
        assert legal == triangles

    def test_disabled_completion(self):
        mesh = create_scattered_mesh(30, gaussian_hill, seed=4)
        config = MeshConfig(complete_hull=False)
        bare = TriangleMesh(mesh.points, config=config)

        assert bare.n_triangles <= mesh.n_triangles
        assert bare.area <= mesh.area + 1e-12


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
