"""Ear-clipping triangulation for simple polygons."""

from typing import List, Tuple

import numpy as np


def _signed_area(points: np.ndarray) -> float:
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def _cross(o, a, b) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _point_in_triangle(p, a, b, c) -> bool:
    d1 = _cross(a, b, p)
    d2 = _cross(b, c, p)
    d3 = _cross(c, a, p)
    has_neg = d1 < 0 or d2 < 0 or d3 < 0
    has_pos = d1 > 0 or d2 > 0 or d3 > 0
    return not (has_neg and has_pos)


def triangulate(points: np.ndarray) -> List[Tuple[int, int, int]]:
    """
    Triangulate a simple polygon given as an (N, 2) array.

    Works for either winding. Triangles are returned counter-clockwise as
    index triples into ``points``. Self-intersecting input falls back to a
    fan once no ear can be found.
    """
    pts = np.asarray(points, dtype=float)
    n = len(pts)
    if n < 3:
        return []

    indices = list(range(n))
    if _signed_area(pts) < 0:
        indices.reverse()

    triangles = []
    guard = 0
    while len(indices) > 3 and guard < n * n:
        guard += 1
        ear_found = False
        count = len(indices)
        for i in range(count):
            prev_i = indices[(i - 1) % count]
            cur_i = indices[i]
            next_i = indices[(i + 1) % count]
            a, b, c = pts[prev_i], pts[cur_i], pts[next_i]

            # Reflex or collinear corner
            if _cross(a, b, c) <= 0:
                continue
            if any(
                _point_in_triangle(pts[j], a, b, c)
                for j in indices
                if j not in (prev_i, cur_i, next_i)
            ):
                continue

            triangles.append((prev_i, cur_i, next_i))
            indices.pop(i)
            ear_found = True
            break

        if not ear_found:
            break

    # Whatever remains is either the last triangle or a degenerate fan
    for k in range(1, len(indices) - 1):
        triangles.append((indices[0], indices[k], indices[k + 1]))

    return triangles
