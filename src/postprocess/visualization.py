"""
Visualization
=============

Plotting functions for meshes, isolines and filled contours.
"""

import numpy as np
from typing import Optional, List, TYPE_CHECKING

try:
    import matplotlib.pyplot as plt
    from matplotlib.cm import ScalarMappable
    from matplotlib.collections import LineCollection
    from matplotlib.colors import Normalize
    from matplotlib.patches import PathPatch
    from matplotlib.path import Path
    from matplotlib.tri import Triangulation
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

if TYPE_CHECKING:
    from mesh.triangle_mesh import TriangleMesh
    from contour.isolines import Isoline
    from contour.contour_extractor import ContourShape
    from contour.levels import ContourSet


def _require_matplotlib():
    if not HAS_MATPLOTLIB:
        raise ImportError("matplotlib is required for visualization")


def _closed_path(paths: List[np.ndarray]) -> 'Path':
    """
    Compound matplotlib Path with every sub-path closed.

    Contour paths wind counterclockwise around filled ground and clockwise
    around holes, so the nonzero fill rule leaves holes empty.
    """
    vertices = []
    codes = []
    for path in paths:
        path = np.asarray(path, dtype=np.float64)
        vertices.append(path)
        vertices.append(path[:1])
        codes.append(Path.MOVETO)
        codes.extend([Path.LINETO] * (len(path) - 1))
        codes.append(Path.CLOSEPOLY)
    return Path(np.vstack(vertices), codes)


def plot_mesh(mesh: 'TriangleMesh',
              ax: Optional['plt.Axes'] = None,
              show_points: bool = False,
              show_hull: bool = True,
              point_labels: bool = False,
              **kwargs) -> 'plt.Axes':
    """
    Plot mesh triangulation.

    Args:
        mesh: TriangleMesh instance
        ax: matplotlib axes (created if None)
        show_points: whether to show sample points
        show_hull: whether to outline the mesh perimeter
        point_labels: whether to label samples with indices
        **kwargs: passed to triplot

    Returns:
        ax: matplotlib axes
    """
    _require_matplotlib()

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    tri = Triangulation(mesh.nodes[:, 0], mesh.nodes[:, 1], mesh.triangles)
    ax.triplot(tri, 'k-', lw=0.5, **kwargs)

    if show_hull:
        hull = np.vstack([mesh.hull_path, mesh.hull_path[:1]])
        ax.plot(hull[:, 0], hull[:, 1], 'b-', lw=1.5)

    if show_points:
        ax.plot(mesh.nodes[:, 0], mesh.nodes[:, 1], 'ko', ms=3)

    if point_labels:
        for i, (x, y) in enumerate(mesh.nodes):
            ax.annotate(str(i), (x, y), fontsize=8)

    ax.set_aspect('equal')
    ax.set_xlabel('x')
    ax.set_ylabel('y')

    return ax


def plot_elevation(mesh: 'TriangleMesh',
                   ax: Optional['plt.Axes'] = None,
                   cmap: str = 'viridis',
                   colorbar: bool = True,
                   **kwargs) -> 'plt.Axes':
    """
    Plot the sampled elevation, interpolated over each triangle.

    Args:
        mesh: TriangleMesh instance
        ax: matplotlib axes
        cmap: colormap name
        colorbar: whether to show colorbar
        **kwargs: passed to tripcolor

    Returns:
        ax: matplotlib axes
    """
    _require_matplotlib()

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 8))

    tri = Triangulation(mesh.nodes[:, 0], mesh.nodes[:, 1], mesh.triangles)
    tcf = ax.tripcolor(tri, mesh.points[:, 2], shading='gouraud', cmap=cmap, **kwargs)
    ax.set_aspect('equal')

    if colorbar:
        plt.colorbar(tcf, ax=ax, label='z')

    ax.set_xlabel('x')
    ax.set_ylabel('y')

    return ax


def plot_isolines(isolines: List['Isoline'],
                  ax: Optional['plt.Axes'] = None,
                  color: str = 'k',
                  linewidth: float = 1.0,
                  **kwargs) -> 'plt.Axes':
    """
    Plot unstitched per-triangle isolines as line segments.

    Args:
        isolines: list of Isoline instances
        ax: matplotlib axes
        color: line color
        linewidth: line width
        **kwargs: passed to LineCollection

    Returns:
        ax: matplotlib axes
    """
    _require_matplotlib()

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    segments = [[iso.point1, iso.point2] for iso in isolines]
    lc = LineCollection(segments, colors=color, linewidths=linewidth, **kwargs)
    ax.add_collection(lc)
    ax.autoscale()
    ax.set_aspect('equal')
    ax.set_xlabel('x')
    ax.set_ylabel('y')

    return ax


def plot_contour_shape(shape: 'ContourShape',
                       ax: Optional['plt.Axes'] = None,
                       fill: bool = True,
                       color=None,
                       edgecolor=None,
                       **kwargs) -> 'plt.Axes':
    """
    Plot the closed paths of one contour level.

    Args:
        shape: ContourShape instance
        ax: matplotlib axes
        fill: fill the enclosed region; otherwise draw outlines only
        color: fill color (first default cycle color if None)
        edgecolor: outline color (same as fill if None)
        **kwargs: passed to PathPatch

    Returns:
        ax: matplotlib axes
    """
    _require_matplotlib()

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    if shape.is_empty:
        return ax

    if color is None:
        color = 'C0'
    if edgecolor is None:
        edgecolor = color

    patch = PathPatch(_closed_path(shape.paths),
                      facecolor=color if fill else 'none',
                      edgecolor=edgecolor, **kwargs)
    ax.add_patch(patch)
    ax.autoscale_view()
    ax.set_aspect('equal')

    return ax


def plot_contour_set(contour_set: 'ContourSet',
                     mesh: Optional['TriangleMesh'] = None,
                     ax: Optional['plt.Axes'] = None,
                     cmap: str = 'viridis',
                     show_lines: bool = True,
                     colorbar: bool = True) -> 'plt.Axes':
    """
    Plot filled contours back to front.

    Shapes are painted in the set's paint order so that nested regions stay
    visible. When a mesh is given, its hull is first filled with the color of
    the first painted shape, so that no gaps show between the mesh outline
    and the contours.

    Args:
        contour_set: ContourSet instance
        mesh: TriangleMesh the set was computed from (optional)
        ax: matplotlib axes
        cmap: colormap name
        show_lines: outline each contour path
        colorbar: whether to show colorbar

    Returns:
        ax: matplotlib axes
    """
    _require_matplotlib()

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 8))

    colormap = plt.get_cmap(cmap)
    z_low = float(contour_set.ranges[0, 0]) if contour_set.n_levels else 0.0
    z_high = float(contour_set.ranges[-1, 1]) if contour_set.n_levels else 1.0
    norm = Normalize(vmin=z_low, vmax=z_high)

    def level_color(i):
        return colormap(norm(contour_set.levels[i]))

    if mesh is not None and contour_set.paint_order:
        hull = np.vstack([mesh.hull_path, mesh.hull_path[:1]])
        ax.fill(hull[:, 0], hull[:, 1], color=level_color(contour_set.paint_order[0]))

    for i in contour_set.paint_order:
        shape = contour_set.shapes[i]
        color = level_color(i)
        plot_contour_shape(shape, ax=ax, fill=True, color=color,
                           edgecolor='k' if show_lines else color,
                           linewidth=0.5 if show_lines else 0.0)

    ax.set_aspect('equal')

    if colorbar:
        sm = ScalarMappable(norm=norm, cmap=colormap)
        sm.set_array([])
        plt.colorbar(sm, ax=ax, label='z')

    ax.set_xlabel('x')
    ax.set_ylabel('y')

    return ax
