from __future__ import annotations

from typing import Sequence

from .errors import DegenerateTriangleError, InvalidPointCountError
from .types import AffineTransform, Point2D, as_points

DEGENERACY_EPSILON = 1e-8


def triangle_affine(
    src: Sequence[Point2D | Sequence[float]],
    dst: Sequence[Point2D | Sequence[float]],
    eps: float = DEGENERACY_EPSILON,
    require_invertible: bool = False,
) -> AffineTransform:
    """Unique affine map sending ``src[k]`` onto ``dst[k]`` for k = 0, 1, 2.

    Solved in closed form from the edge vectors leaving the first vertex of
    each triangle. Raises ``DegenerateTriangleError`` when the source triangle
    has (near-)zero area, or, with ``require_invertible``, when the destination
    triangle does.
    """
    s = as_points(src)
    t = as_points(dst)
    if len(s) != 3 or len(t) != 3:
        raise InvalidPointCountError(f"Need 3 source and 3 destination points, got {len(s)} and {len(t)}")

    s0, s1, s2 = s
    d0, d1, d2 = t

    dx1, dy1 = s1.x - s0.x, s1.y - s0.y
    dx2, dy2 = s2.x - s0.x, s2.y - s0.y
    du1, dv1 = d1.x - d0.x, d1.y - d0.y
    du2, dv2 = d2.x - d0.x, d2.y - d0.y

    det = dx1 * dy2 - dx2 * dy1
    if abs(det) < eps:
        raise DegenerateTriangleError(f"Source triangle {[p.as_tuple() for p in s]} has zero area")
    if require_invertible and abs(du1 * dv2 - du2 * dv1) < eps:
        raise DegenerateTriangleError(f"Destination triangle {[p.as_tuple() for p in t]} has zero area")

    a = (du1 * dy2 - du2 * dy1) / det
    b = (dv1 * dy2 - dv2 * dy1) / det
    c = (du2 * dx1 - du1 * dx2) / det
    d = (dv2 * dx1 - dv1 * dx2) / det
    e = d0.x - a * s0.x - c * s0.y
    f = d0.y - b * s0.x - d * s0.y
    return AffineTransform(a, b, c, d, e, f)
