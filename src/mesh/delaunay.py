"""
Triangulation
=============

Grid triangulation and incremental (Bowyer-Watson) Delaunay triangulation
of scattered points.

The scattered algorithm seeds two triangles spanning four synthetic
bounding points placed just outside the data, inserts every sample in index
order, and finally drops every triangle that still touches a bounding point.
Because the bounding points sit close to the data, dropping them can leave
notches along the convex hull; these are filled with ear triangles and the
affected edges are flipped back to Delaunay.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .edges import edge_key
from .triangle import DEGENERATE_TOL, Triangle

logger = logging.getLogger(__name__)

VertexTriplet = Tuple[int, int, int]

N_BOUNDING_POINTS = 4


@dataclass
class DelaunayResult:
    """Output of delaunay_triangulate."""
    triangles: np.ndarray
    bounds_x: np.ndarray
    bounds_y: np.ndarray
    skipped_points: List[int] = field(default_factory=list)
    n_hull_ears: int = 0
    n_flips: int = 0


def bounding_points(x: np.ndarray, y: np.ndarray,
                    margin: float = 0.1) -> Tuple[np.ndarray, np.ndarray]:
    """
    Four synthetic points enclosing the data.

    The data's x/y bounding box is expanded by `margin` times its width and
    height on each side.

    Args:
        x, y: sample coordinates
        margin: fractional expansion of the bounding box

    Returns:
        (bx, by): coordinates of the corners in counterclockwise order,
            starting at the lower-left corner
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    x_min, x_max = x.min(), x.max()
    y_min, y_max = y.min(), y.max()
    dx = margin * (x_max - x_min)
    dy = margin * (y_max - y_min)

    bx = np.array([x_min - dx, x_max + dx, x_max + dx, x_min - dx])
    by = np.array([y_min - dy, y_min - dy, y_max + dy, y_max + dy])
    return bx, by


def grid_triangulate(n_rows: int, n_cols: int) -> np.ndarray:
    """
    Triangulate a row-major grid of samples.

    Every cell (row, col) yields two triangles, in row-major cell order:
        A = (top-left, top-right, bottom-right)
        B = (bottom-right, bottom-left, top-left)
    where "top" is the lower row index.

    Args:
        n_rows, n_cols: grid shape (sample index = row * n_cols + col)

    Returns:
        triangles: shape (2 * (n_rows-1) * (n_cols-1), 3)
    """
    if n_rows < 2 or n_cols < 2:
        raise ValueError(f"grid needs at least 2 rows and 2 columns, got {n_rows}x{n_cols}")

    def idx(row, col):
        return row * n_cols + col

    triangles = []
    for row in range(n_rows - 1):
        for col in range(n_cols - 1):
            top_left = idx(row, col)
            top_right = idx(row, col + 1)
            bottom_left = idx(row + 1, col)
            bottom_right = idx(row + 1, col + 1)
            triangles.append([top_left, top_right, bottom_right])
            triangles.append([bottom_right, bottom_left, top_left])

    return np.array(triangles, dtype=np.int64)


def bowyer_watson(xs: np.ndarray, ys: np.ndarray, n_points: int,
                  degenerate_tol: float = DEGENERATE_TOL
                  ) -> Tuple[List[Triangle], List[int]]:
    """
    Incremental Delaunay triangulation.

    Args:
        xs, ys: coordinates of the n_points samples followed by the four
            bounding points
        n_points: number of real samples
        degenerate_tol: minimum triangle height for circumcircle tests

    Returns:
        (triangles, skipped): surviving counterclockwise triangles that do
        not touch a bounding point, and the samples no circumcircle
        contained
    """
    s = n_points
    live = [Triangle(s, s + 1, s + 2, xs, ys, degenerate_tol),
            Triangle(s, s + 2, s + 3, xs, ys, degenerate_tol)]
    skipped = []

    # Insertion order is the sample order
    for p in range(n_points):
        px, py = xs[p], ys[p]

        bad, keep = [], []
        for tri in live:
            if tri.circumcircle_contains(px, py):
                bad.append(tri)
            else:
                keep.append(tri)

        if not bad:
            skipped.append(p)
            continue

        # Points on a circumcircle join the cavity, so a duplicate sample
        # takes over the star of the earlier one
        # Edges shared by two removed triangles are inside the cavity
        counts = Counter(key for tri in bad for key in tri.edge_keys)
        live = keep
        for tri in bad:
            for a, b in tri.directed_edges():
                if counts[edge_key(a, b)] == 1:
                    live.append(Triangle(a, b, p, xs, ys, degenerate_tol))

    synthetic = set(range(s, s + N_BOUNDING_POINTS))
    triangles = [tri for tri in live if not tri.has_any_vertex(synthetic)]
    return triangles, skipped


def _orient(xs, ys, a, b, c) -> float:
    """Twice the signed area of (a, b, c)."""
    return ((xs[b] - xs[a]) * (ys[c] - ys[a]) -
            (ys[b] - ys[a]) * (xs[c] - xs[a]))


def _perimeter_links(triangles: Sequence[VertexTriplet]
                     ) -> Tuple[Dict[int, List[int]], Dict[int, List[int]]]:
    """
    Directed perimeter edges of counterclockwise triangles.

    Returns:
        (successors, predecessors) keyed by vertex; the interior lies to the
        left of every directed edge
    """
    counts = Counter(edge_key(i, j)
                     for a, b, c in triangles
                     for i, j in ((a, b), (b, c), (c, a)))
    successors = defaultdict(list)
    predecessors = defaultdict(list)
    for a, b, c in triangles:
        for i, j in ((a, b), (b, c), (c, a)):
            if counts[edge_key(i, j)] == 1:
                successors[i].append(j)
                predecessors[j].append(i)
    return successors, predecessors


def _covers_sample(xs: np.ndarray, ys: np.ndarray, n_points: int,
                   tri: VertexTriplet, ignore: Sequence[int]) -> bool:
    """True if a sample other than the corners lies inside or on a CCW triangle."""
    a, b, c = tri
    qx, qy = xs[:n_points], ys[:n_points]
    inside = ((xs[b] - xs[a]) * (qy - ys[a]) - (ys[b] - ys[a]) * (qx - xs[a]) >= 0.0)
    inside &= ((xs[c] - xs[b]) * (qy - ys[b]) - (ys[c] - ys[b]) * (qx - xs[b]) >= 0.0)
    inside &= ((xs[a] - xs[c]) * (qy - ys[c]) - (ys[a] - ys[c]) * (qx - xs[c]) >= 0.0)
    inside[[v for v in tri if v < n_points]] = False
    if ignore:
        inside[list(ignore)] = False
    return bool(inside.any())


def _segments_cross(xs, ys, p, q, r, s) -> bool:
    """Proper intersection of segments p-q and r-s."""
    d1 = _orient(xs, ys, p, q, r)
    d2 = _orient(xs, ys, p, q, s)
    d3 = _orient(xs, ys, r, s, p)
    d4 = _orient(xs, ys, r, s, q)
    return d1 * d2 < 0.0 and d3 * d4 < 0.0


def _find_hull_ear(triangles: Sequence[VertexTriplet], xs: np.ndarray,
                   ys: np.ndarray, n_points: int, degenerate_tol: float,
                   ignore: Sequence[int] = ()) -> Optional[VertexTriplet]:
    """Find an empty triangle filling a reflex perimeter vertex."""
    successors, predecessors = _perimeter_links(triangles)

    for b, nexts in successors.items():
        # Pinched vertices are left alone
        if len(nexts) != 1 or len(predecessors[b]) != 1:
            continue
        a = predecessors[b][0]
        c = nexts[0]
        if a == c or _orient(xs, ys, a, b, c) >= 0.0:
            continue

        ear = Triangle(a, c, b, xs, ys, degenerate_tol)
        if ear.too_small:
            continue
        if not _covers_sample(xs, ys, n_points, ear.vertices, ignore):
            return ear.vertices

    return None


def _find_attachment(triangles: Sequence[VertexTriplet], xs: np.ndarray,
                     ys: np.ndarray, n_points: int, degenerate_tol: float,
                     isolated: Sequence[int],
                     ignore: Sequence[int] = ()) -> Optional[VertexTriplet]:
    """Find an empty triangle joining an isolated sample to a perimeter edge."""
    successors, _ = _perimeter_links(triangles)
    perimeter = [(a, b) for a, nexts in successors.items() for b in nexts]

    for q in isolated:
        for a, b in perimeter:
            # The sample must lie outside, to the right of a -> b
            if _orient(xs, ys, a, b, q) >= 0.0:
                continue
            tri = Triangle(b, a, q, xs, ys, degenerate_tol)
            if tri.too_small:
                continue
            if _covers_sample(xs, ys, n_points, tri.vertices, ignore):
                continue
            if any(_segments_cross(xs, ys, q, v, r, s)
                   for v in (a, b)
                   for r, s in perimeter
                   if v != r and v != s):
                continue
            return tri.vertices

    return None


def complete_hull(triangles: Sequence[VertexTriplet], xs: np.ndarray,
                  ys: np.ndarray, n_points: int,
                  degenerate_tol: float = DEGENERATE_TOL,
                  ignore: Sequence[int] = ()
                  ) -> Tuple[List[VertexTriplet], int]:
    """
    Fill reflex notches of the perimeter until it is convex.

    Ears are added first; when none fits, a sample that lost all of its
    triangles together with the bounding points is joined to a perimeter
    edge it can see.

    Args:
        triangles: counterclockwise vertex triplets
        xs, ys: vertex coordinates
        n_points: number of real samples
        degenerate_tol: triangles lower than this are not added
        ignore: samples that must stay out of the triangulation (duplicates)

    Returns:
        (triangles, n_added)
    """
    triangles = list(triangles)
    ignored = set(ignore)
    n_added = 0
    while True:
        tri = _find_hull_ear(triangles, xs, ys, n_points, degenerate_tol, ignore)
        if tri is None:
            referenced = {v for t in triangles for v in t}
            isolated = [p for p in range(n_points)
                        if p not in referenced and p not in ignored]
            if not isolated:
                break
            tri = _find_attachment(triangles, xs, ys, n_points, degenerate_tol,
                                   isolated, ignore)
            if tri is None:
                break
        triangles.append(tri)
        n_added += 1
    return triangles, n_added


def _opposite_vertex(tri: VertexTriplet, key: Tuple[int, int]) -> int:
    for v in tri:
        if v != key[0] and v != key[1]:
            return v
    raise ValueError(f"Triangle {tri} has no vertex opposite to edge {key}")


def _counterclockwise(xs, ys, a, b, c) -> VertexTriplet:
    return (a, b, c) if _orient(xs, ys, a, b, c) > 0.0 else (a, c, b)


def legalize_edges(triangles: Sequence[VertexTriplet], xs: np.ndarray,
                   ys: np.ndarray, degenerate_tol: float = DEGENERATE_TOL,
                   max_passes: int = 100) -> Tuple[List[VertexTriplet], int]:
    """
    Lawson edge flipping until every interior edge is locally Delaunay.

    An interior edge (a, b) between triangles (a, b, c) and (b, a, d) is
    flipped to (c, d) when d lies strictly inside the circumcircle of
    (a, b, c). Cocircular quads are left as they are.

    Args:
        triangles: vertex triplets
        xs, ys: vertex coordinates
        degenerate_tol: triangles lower than this are never flipped
        max_passes: maximum number of sweeps over all edges

    Returns:
        (triangles, n_flips)
    """
    triangles = list(triangles)
    n_flips = 0

    for _ in range(max_passes):
        edge_map = defaultdict(list)
        for t_idx, (a, b, c) in enumerate(triangles):
            for i, j in ((a, b), (b, c), (c, a)):
                edge_map[edge_key(i, j)].append(t_idx)

        touched = set()
        for key, owners in edge_map.items():
            if len(owners) != 2:
                continue
            t1, t2 = owners
            if t1 in touched or t2 in touched:
                continue

            a, b = key
            c = _opposite_vertex(triangles[t1], key)
            d = _opposite_vertex(triangles[t2], key)
            tri = Triangle(a, b, c, xs, ys, degenerate_tol)
            if not tri.circumcircle_contains(xs[d], ys[d], strict=True):
                continue

            # The quad is convex when d is inside the circumcircle
            new1 = _counterclockwise(xs, ys, c, d, a)
            new2 = _counterclockwise(xs, ys, d, c, b)
            if (Triangle(*new1, xs, ys, degenerate_tol).too_small or
                    Triangle(*new2, xs, ys, degenerate_tol).too_small):
                continue

            triangles[t1] = new1
            triangles[t2] = new2
            touched.update((t1, t2))
            n_flips += 1

        if not touched:
            break
    else:
        logger.warning("Edge legalization stopped after %d passes", max_passes)

    return triangles, n_flips


def delaunay_triangulate(x: np.ndarray, y: np.ndarray,
                         margin: float = 0.1,
                         degenerate_tol: float = DEGENERATE_TOL,
                         complete: bool = True,
                         max_flip_passes: int = 100) -> DelaunayResult:
    """
    Delaunay triangulation of scattered points.

    Args:
        x, y: sample coordinates, shape (n_points,)
        margin: bounding point offset as a fraction of the data extent
        degenerate_tol: minimum triangle height for circumcircle tests
        complete: fill hull notches left by the bounding points
        max_flip_passes: bound on edge legalization sweeps

    Returns:
        DelaunayResult with counterclockwise triangles of shape (m, 3)
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n_points = len(x)

    bx, by = bounding_points(x, y, margin)
    xs = np.concatenate([x, bx])
    ys = np.concatenate([y, by])

    triangles, skipped = bowyer_watson(xs, ys, n_points, degenerate_tol)
    if skipped:
        logger.warning("Could not insert %d point(s): %s", len(skipped), skipped)
    triplets = [tri.vertices for tri in triangles]

    # Duplicates taken over by a later sample stay out of the hull
    referenced = {v for tri in triplets for v in tri}
    placed = {(xs[v], ys[v]) for v in referenced}
    duplicates = [p for p in range(n_points)
                  if p not in referenced and (xs[p], ys[p]) in placed]

    n_ears = n_flips = 0
    if complete and triplets:
        triplets, n_ears = complete_hull(triplets, xs, ys, n_points,
                                         degenerate_tol, duplicates)
        if n_ears:
            triplets, n_flips = legalize_edges(triplets, xs, ys, degenerate_tol,
                                               max_flip_passes)

    logger.debug("Triangulated %d points: %d triangles, %d hull triangles, %d flips",
                 n_points, len(triplets), n_ears, n_flips)

    return DelaunayResult(
        triangles=np.array(triplets, dtype=np.int64).reshape(-1, 3),
        bounds_x=bx,
        bounds_y=by,
        skipped_points=skipped,
        n_hull_ears=n_ears,
        n_flips=n_flips,
    )
