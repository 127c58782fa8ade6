"""
Mesh Generators
===============

Sample sets and meshes for testing and examples.
"""

import numpy as np
from typing import Callable, Optional, Tuple, Union

from .triangle_mesh import TriangleMesh, MeshConfig

ZSource = Union[Callable[[np.ndarray, np.ndarray], np.ndarray], np.ndarray]


def peaks(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Smooth test surface with two maxima and one minimum on [-3, 3]².

    Same formula as MATLAB's peaks function.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    return (3 * (1 - x) ** 2 * np.exp(-x ** 2 - (y + 1) ** 2)
            - 10 * (x / 5 - x ** 3 - y ** 5) * np.exp(-x ** 2 - y ** 2)
            - 1 / 3 * np.exp(-(x + 1) ** 2 - y ** 2))


def gaussian_hill(x: np.ndarray, y: np.ndarray,
                  center: Tuple[float, float] = (0.5, 0.5),
                  width: float = 0.25) -> np.ndarray:
    """Single hill of height 1 centered at `center`."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    r_sq = (x - center[0]) ** 2 + (y - center[1]) ** 2
    return np.exp(-r_sq / (2 * width ** 2))


def create_grid_points(x_values: np.ndarray, y_values: np.ndarray,
                       z: ZSource) -> np.ndarray:
    """
    Create row-major grid samples.

    Row r holds y_values[r], column c holds x_values[c]; the sample index is
    r * len(x_values) + c.

    Args:
        x_values: shape (n_cols,)
        y_values: shape (n_rows,)
        z: function z(x, y) or array of shape (n_rows, n_cols)

    Returns:
        points: shape (n_rows * n_cols, 3)
    """
    x_values = np.asarray(x_values, dtype=np.float64)
    y_values = np.asarray(y_values, dtype=np.float64)
    X, Y = np.meshgrid(x_values, y_values)

    if callable(z):
        Z = np.asarray(z(X, Y), dtype=np.float64)
    else:
        Z = np.asarray(z, dtype=np.float64)
    if Z.shape != X.shape:
        raise ValueError(f"z grid has shape {Z.shape}, expected {X.shape}")

    return np.column_stack([X.ravel(), Y.ravel(), Z.ravel()])


def create_grid_mesh(x_values: np.ndarray, y_values: np.ndarray, z: ZSource,
                     config: Optional[MeshConfig] = None) -> TriangleMesh:
    """
    Create a grid-mode mesh (two triangles per cell).

    Args:
        x_values: column coordinates, shape (n_cols,)
        y_values: row coordinates, shape (n_rows,)
        z: function z(x, y) or array of shape (n_rows, n_cols)
        config: MeshConfig

    Returns:
        TriangleMesh instance
    """
    points = create_grid_points(x_values, y_values, z)
    grid_shape = (len(y_values), len(x_values))
    return TriangleMesh(points, grid_shape=grid_shape, config=config)


def create_rectangle_mesh(Lx: float, Ly: float, nx: int, ny: int,
                          z: ZSource, config: Optional[MeshConfig] = None
                          ) -> TriangleMesh:
    """
    Create a grid-mode mesh on rectangle [0, Lx] × [0, Ly].

    Args:
        Lx, Ly: domain dimensions
        nx, ny: number of divisions in x and y
        z: function z(x, y) or array of shape (ny+1, nx+1)
        config: MeshConfig

    Returns:
        TriangleMesh instance
    """
    return create_grid_mesh(np.linspace(0.0, Lx, nx + 1),
                            np.linspace(0.0, Ly, ny + 1), z, config)


def create_scattered_points(n_points: int, z: Callable,
                            bounds: Tuple[float, float, float, float] = (0.0, 1.0, 0.0, 1.0),
                            include_corners: bool = False,
                            seed: Optional[int] = None) -> np.ndarray:
    """
    Uniformly random samples in a rectangle.

    Args:
        n_points: number of random samples
        z: function z(x, y)
        bounds: (x_min, x_max, y_min, y_max)
        include_corners: prepend the four rectangle corners
        seed: random seed for reproducibility

    Returns:
        points: shape (n_points [+ 4], 3)
    """
    if seed is not None:
        np.random.seed(seed)

    x_min, x_max, y_min, y_max = bounds
    x = np.random.uniform(x_min, x_max, n_points)
    y = np.random.uniform(y_min, y_max, n_points)

    if include_corners:
        x = np.concatenate([[x_min, x_max, x_max, x_min], x])
        y = np.concatenate([[y_min, y_min, y_max, y_max], y])

    return np.column_stack([x, y, z(x, y)])


def create_scattered_mesh(n_points: int, z: Callable,
                          bounds: Tuple[float, float, float, float] = (0.0, 1.0, 0.0, 1.0),
                          include_corners: bool = False,
                          seed: Optional[int] = None,
                          config: Optional[MeshConfig] = None) -> TriangleMesh:
    """
    Create a Delaunay mesh of uniformly random samples.

    Args:
        n_points: number of random samples
        z: function z(x, y)
        bounds: (x_min, x_max, y_min, y_max)
        include_corners: add the four rectangle corners
        seed: random seed for reproducibility
        config: MeshConfig

    Returns:
        TriangleMesh instance
    """
    points = create_scattered_points(n_points, z, bounds, include_corners, seed)
    return TriangleMesh(points, config=config)


def create_unit_square_saddle(config: Optional[MeshConfig] = None) -> TriangleMesh:
    """
    Four-point mesh on the unit square with two high and two low corners.

    Samples: (0,0,0), (1,0,1), (1,1,0), (0,1,1).

    Returns:
        TriangleMesh instance
    """
    points = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 1.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 1.0],
    ])
    return TriangleMesh(points, config=config)


def perturb_grid_points(mesh: TriangleMesh, magnitude: float = 0.1,
                        seed: Optional[int] = None) -> TriangleMesh:
    """
    Randomly perturb interior samples of a grid mesh and re-triangulate.

    The result is a scattered (Delaunay) mesh with the same elevations.

    Args:
        mesh: grid-mode mesh
        magnitude: perturbation magnitude as fraction of min edge length
        seed: random seed for reproducibility

    Returns:
        New scattered TriangleMesh
    """
    if seed is not None:
        np.random.seed(seed)

    segments = mesh.mesh_path
    min_length = np.min(np.linalg.norm(segments[:, 1] - segments[:, 0], axis=1))
    pert = magnitude * min_length

    # Copy points
    new_points = mesh.points.copy()

    # Perturb interior x/y only
    boundary_set = set(mesh.boundary_nodes.tolist())
    for i in range(mesh.n_points):
        if i not in boundary_set:
            new_points[i, :2] += np.random.uniform(-pert, pert, 2)

    return TriangleMesh(new_points, config=mesh.config)
