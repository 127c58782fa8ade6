"""
Tests for Mesh Module
=====================
"""

import logging

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mesh.edges import Edge, edge_key, build_edge_table
from mesh.triangle import Triangle
from mesh.triangle_mesh import TriangleMesh, MeshConfig, MeshIntegrityError
from mesh.delaunay import bounding_points, grid_triangulate
from mesh.mesh_generators import (
    create_grid_mesh, create_rectangle_mesh, create_grid_points,
    create_unit_square_saddle, gaussian_hill
)


def square_with_center():
    """Unit square corners plus its center."""
    return np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.5, 0.5, 1.0],
    ])


class TestEdges:
    """Tests for edge keys and usage counting."""

    def test_edge_key_is_canonical(self):
        assert edge_key(5, 2) == (2, 5)
        assert edge_key(2, 5) == (2, 5)

    def test_usage_marks_perimeter(self):
        edge = Edge(1, 4)
        assert edge.usage == 0
        assert not edge.is_perimeter

        edge.bump_usage()
        assert edge.is_perimeter

        edge.bump_usage()
        assert not edge.is_perimeter
        assert edge.usage == 2

    def test_other_vertex(self):
        edge = Edge(1, 4)
        assert edge.other_vertex(1) == 4
        assert edge.other_vertex(4) == 1
        assert edge.has_vertex(4)
        assert not edge.has_vertex(2)

        with pytest.raises(ValueError):
            edge.other_vertex(2)

    def test_build_edge_table(self):
        """Two triangles sharing an edge."""
        table = build_edge_table([(0, 1, 2), (0, 2, 3)])

        assert len(table) == 5  # 4 perimeter + 1 shared
        assert table[(0, 2)].usage == 2
        perimeter = sorted(key for key, edge in table.items() if edge.is_perimeter)
        assert perimeter == [(0, 1), (0, 3), (1, 2), (2, 3)]


class TestTriangle:
    """Tests for the Triangle geometry."""

    def setup_method(self):
        self.xs = np.array([0.0, 1.0, 0.0, 1.0, 2.0])
        self.ys = np.array([0.0, 0.0, 1.0, 1.0, 0.0])

    def test_edge_keys(self):
        tri = Triangle(2, 0, 1, self.xs, self.ys)
        assert tri.vertices == (2, 0, 1)
        assert tri.edge_keys == ((0, 2), (0, 1), (1, 2))

    def test_signed_area(self):
        """Counterclockwise winding is positive."""
        assert np.isclose(Triangle(0, 1, 2, self.xs, self.ys).signed_area, 0.5)
        assert np.isclose(Triangle(0, 2, 1, self.xs, self.ys).signed_area, -0.5)

    def test_circumcircle(self):
        """Right triangle: center at hypotenuse midpoint."""
        tri = Triangle(0, 1, 2, self.xs, self.ys)
        cx, cy, r_sq = tri.circumcircle

        assert np.isclose(cx, 0.5)
        assert np.isclose(cy, 0.5)
        assert np.isclose(r_sq, 0.5)

    def test_circumcircle_contains(self):
        tri = Triangle(0, 1, 2, self.xs, self.ys)

        assert tri.circumcircle_contains(0.5, 0.5)
        assert not tri.circumcircle_contains(2.0, 2.0)

        # (1, 1) is cocircular
        assert tri.circumcircle_contains(1.0, 1.0)
        assert not tri.circumcircle_contains(1.0, 1.0, strict=True)

    def test_collinear_triangle_is_too_small(self):
        tri = Triangle(0, 1, 4, self.xs, self.ys)

        assert tri.height == 0.0
        assert tri.too_small
        assert tri.circumcircle is None
        assert not tri.circumcircle_contains(1.0, 0.0)

    def test_height(self):
        """Height is twice the area over the longest side."""
        tri = Triangle(0, 1, 2, self.xs, self.ys)
        assert np.isclose(tri.height, 1.0 / np.sqrt(2.0))
        assert not tri.too_small


class TestBoundingPoints:
    """Tests for the synthetic bounding points."""

    def test_ten_percent_margin(self):
        x = np.array([0.0, 2.0, 1.0])
        y = np.array([0.0, 1.0, 0.5])
        bx, by = bounding_points(x, y)

        assert np.allclose(bx, [-0.2, 2.2, 2.2, -0.2])
        assert np.allclose(by, [-0.1, -0.1, 1.1, 1.1])

    def test_mesh_exposes_bounds(self):
        mesh = TriangleMesh(square_with_center())
        n = mesh.n_points

        assert mesh.bounds.shape == (4, 2)
        assert mesh.x(n) == pytest.approx(-0.1)
        assert mesh.y(n) == pytest.approx(-0.1)
        assert mesh.x(n + 2) == pytest.approx(1.1)
        assert mesh.y(n + 2) == pytest.approx(1.1)


class TestGridMesh:
    """Tests for the grid triangulation mode."""

    def test_grid_triangle_order(self):
        """3x3 grid: two triangles per cell, row-major."""
        triangles = grid_triangulate(3, 3)

        expected = [
            [0, 1, 4], [4, 3, 0],
            [1, 2, 5], [5, 4, 1],
            [3, 4, 7], [7, 6, 3],
            [4, 5, 8], [8, 7, 4],
        ]
        assert np.array_equal(triangles, expected)

    def test_grid_mesh_connectivity(self):
        mesh = create_rectangle_mesh(1.0, 1.0, 2, 2, lambda x, y: x + y)

        assert mesh.is_grid
        assert mesh.n_points == 9
        assert mesh.n_triangles == 8
        assert mesh.n_edges == 16
        assert len(mesh.perimeter_edges) == 8
        assert len(mesh.interior_edges) == 8
        assert np.array_equal(mesh.boundary_nodes, [0, 1, 2, 3, 5, 6, 7, 8])
        assert np.isclose(mesh.area, 1.0)

    def test_grid_is_deterministic(self):
        x = np.linspace(0.0, 1.0, 4)
        y = np.linspace(0.0, 2.0, 3)
        mesh1 = create_grid_mesh(x, y, gaussian_hill)
        mesh2 = create_grid_mesh(x, y, gaussian_hill)

        assert np.array_equal(mesh1.triangles, mesh2.triangles)
        assert mesh1.n_triangles == 2 * 2 * 3

    def test_grid_hull_walk(self):
        """Hull visits every boundary sample counterclockwise."""
        mesh = create_rectangle_mesh(1.0, 1.0, 2, 2, lambda x, y: x * y)

        assert list(mesh.hull_indices) == [0, 1, 2, 5, 8, 7, 6, 3]
        assert mesh.hull_path.shape == (8, 2)

    def test_grid_shape_mismatch(self):
        points = create_grid_points(np.arange(3.0), np.arange(3.0),
                                    lambda x, y: x)
        with pytest.raises(ValueError):
            TriangleMesh(points, grid_shape=(2, 4))

    def test_grid_too_small(self):
        points = create_grid_points(np.arange(3.0), np.arange(1.0),
                                    lambda x, y: x)
        with pytest.raises(ValueError):
            TriangleMesh(points, grid_shape=(1, 3))

    def test_z_grid_shape_checked(self):
        with pytest.raises(ValueError):
            create_grid_points(np.arange(3.0), np.arange(2.0), np.zeros((3, 2)))


class TestScatteredMesh:
    """Tests for the Delaunay mode."""

    def test_square_with_center(self):
        """Center point splits the square into a fan of four triangles."""
        mesh = TriangleMesh(square_with_center())

        assert not mesh.is_grid
        assert mesh.n_triangles == 4
        assert mesh.n_edges == 8
        assert mesh.perimeter_edges == [(0, 1), (0, 3), (1, 2), (2, 3)]
        assert np.isclose(mesh.area, 1.0)
        assert np.all(mesh.triangle_areas > 0.0)

    def test_triangles_are_counterclockwise(self):
        mesh = TriangleMesh(square_with_center())
        assert all(tri.signed_area > 0.0 for tri in mesh.triangle_list)

    def test_saddle_diagonal(self):
        """Cocircular corners resolve to the diagonal between samples 1 and 3."""
        mesh = create_unit_square_saddle()

        assert mesh.n_triangles == 2
        assert mesh.interior_edges == [(1, 3)]
        assert len(mesh.hull_indices) == 4

    def test_synthetic_points_removed(self):
        mesh = TriangleMesh(square_with_center())
        assert mesh.triangles.max() < mesh.n_points

    def test_duplicate_point_takes_over(self, caplog):
        points = np.array([
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 1.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 1.0],
            [0.0, 0.0, 2.0],
        ])
        with caplog.at_level(logging.WARNING):
            mesh = TriangleMesh(points)

        assert mesh.n_triangles == 2
        assert 0 not in mesh.triangles
        assert 4 in mesh.triangles
        assert "not part of any triangle" in caplog.text


class TestCoordinateAccess:
    """Tests for x/y/z accessors over samples and bounding points."""

    def test_sample_coordinates(self):
        mesh = TriangleMesh(square_with_center())

        assert mesh.x(4) == 0.5
        assert mesh.y(4) == 0.5
        assert mesh.z(4) == 1.0

    def test_bounding_points_have_no_z(self):
        mesh = TriangleMesh(square_with_center())

        with pytest.raises(IndexError):
            mesh.z(mesh.n_points)

    def test_out_of_range(self):
        mesh = TriangleMesh(square_with_center())

        with pytest.raises(IndexError):
            mesh.x(mesh.n_points + 4)
        with pytest.raises(IndexError):
            mesh.z(-1)

    def test_z_range(self):
        mesh = TriangleMesh(square_with_center())
        assert mesh.z_min == 0.0
        assert mesh.z_max == 1.0


class TestPerimeterQueries:
    """Tests for edge lookup and perimeter walking."""

    def test_get_edge(self):
        mesh = TriangleMesh(square_with_center())

        edge = mesh.get_edge(4, 0)
        assert edge.key == (0, 4)
        assert edge.usage == 2

        with pytest.raises(KeyError):
            mesh.get_edge(0, 2)

    def test_is_perimeter_edge(self):
        mesh = TriangleMesh(square_with_center())

        assert mesh.is_perimeter_edge(1, 0)
        assert not mesh.is_perimeter_edge(0, 4)
        assert not mesh.is_perimeter_edge(0, 2)

    def test_next_perimeter_edge(self):
        mesh = TriangleMesh(square_with_center())

        assert mesh.get_next_perimeter_edge((0, 1), 1).key == (1, 2)
        assert mesh.get_next_perimeter_edge(mesh.get_edge(0, 1), 0).key == (0, 3)

    def test_next_perimeter_edge_missing(self):
        """Interior vertex has no perimeter edges."""
        mesh = TriangleMesh(square_with_center())

        with pytest.raises(MeshIntegrityError):
            mesh.get_next_perimeter_edge((0, 4), 4)

    def test_triangle_queries(self):
        mesh = TriangleMesh(square_with_center())

        nodes = mesh.get_triangle_nodes(0)
        assert nodes.shape == (3, 2)

        edges = mesh.get_triangle_edges(0)
        assert len(edges) == 3
        assert sum(edge.is_perimeter for edge in edges) == 1

    def test_mesh_path(self):
        mesh = TriangleMesh(square_with_center())
        assert mesh.mesh_path.shape == (mesh.n_edges, 2, 2)


class TestValidation:
    """Tests for input validation."""

    def test_wrong_shape(self):
        with pytest.raises(ValueError):
            TriangleMesh(np.zeros((4, 2)))

    def test_too_few_points(self):
        with pytest.raises(ValueError):
            TriangleMesh(np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]]))

    def test_non_finite(self):
        points = square_with_center()
        points[2, 2] = np.nan
        with pytest.raises(ValueError):
            TriangleMesh(points)

    def test_zero_extent(self):
        points = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 2.0, 0.0]])
        with pytest.raises(ValueError):
            TriangleMesh(points)

    def test_overused_edge(self):
        """An edge in three triangles is reported with its usage range."""
        mesh = TriangleMesh(square_with_center())
        mesh.triangle_list.append(mesh.triangle_list[0])

        with pytest.raises(MeshIntegrityError, match=r"usage outside \{1, 2\}"):
            mesh._build_edge_connectivity()

    def test_default_config(self):
        config = MeshConfig()
        assert config.bounds_margin == 0.1
        assert config.degenerate_tol == 1e-6
        assert config.complete_hull


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
