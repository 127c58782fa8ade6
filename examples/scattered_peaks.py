"""
Scattered Peaks Example
=======================

Triangulates random samples of the peaks surface and draws filled contours.
"""

import logging
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from logging_config import setup_logging
from mesh import create_scattered_mesh, peaks
from contour import ContourExtractor, compute_contour_set


def run_scattered_peaks(n_points=400, n_levels=10, seed=42):
    """Contour randomly sampled peaks data."""
    print("=" * 60)
    print("Tricontour: Scattered Peaks")
    print("=" * 60)

    # Create mesh
    mesh = create_scattered_mesh(n_points, peaks, bounds=(-3.0, 3.0, -3.0, 3.0),
                                 include_corners=True, seed=seed)
    print(f"\nMesh: {mesh.n_points} points, {mesh.n_triangles} triangles, "
          f"{mesh.n_edges} edges")
    print(f"Perimeter: {len(mesh.perimeter_edges)} edges, area {mesh.area:.4f}")
    print(f"Elevation: {mesh.z_min:.4f} to {mesh.z_max:.4f}")

    # Contour every level
    contour_set = compute_contour_set(mesh, n_levels)

    print("\n" + "-" * 60)
    print(f"{'Level':>10} {'Paths':>8} {'Points':>8} {'Bounds area':>14}")
    print("-" * 60)
    for shape in contour_set.shapes:
        print(f"{shape.level:10.4f} {shape.n_paths:8d} {shape.n_points:8d} "
              f"{shape.bounds_area:14.4f}")
    print(f"\nPaint order: {contour_set.paint_order}")

    # Single level with the raw isolines
    extractor = ContourExtractor(mesh)
    isolines = extractor.get_isolines(0.0)
    paths = extractor.get_contour_paths(0.0)
    print(f"\nLevel 0: {len(isolines)} isolines stitched into {len(paths)} paths")

    # Optional: Plot results if matplotlib available
    try:
        import matplotlib.pyplot as plt
        from postprocess import plot_mesh, plot_contour_set, plot_isolines

        fig, axes = plt.subplots(1, 2, figsize=(14, 6))

        plot_mesh(mesh, ax=axes[0], show_points=True)
        plot_isolines(isolines, ax=axes[0], color='r', linewidth=1.5)
        axes[0].set_title('Triangulation and level 0 isolines')

        plot_contour_set(contour_set, mesh=mesh, ax=axes[1])
        axes[1].set_title(f'{n_levels} filled contour levels')

        plt.tight_layout()
        plt.savefig('scattered_peaks.png', dpi=150)
        print("\nResults saved to 'scattered_peaks.png'")
        plt.show()

    except ImportError:
        print("\nNote: matplotlib not available, skipping plots")

    return contour_set


if __name__ == "__main__":
    setup_logging(logging.DEBUG)
    contour_set = run_scattered_peaks()
