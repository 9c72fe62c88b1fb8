from __future__ import annotations

from typing import Sequence

import numpy as np

from .errors import DegenerateQuadError, InvalidPointCountError, SingularSystemError
from .linalg import solve_linear_system
from .types import HomographyCoefficients, Point2D, as_points


def build_perspective_system(
    src: Sequence[Point2D | Sequence[float]],
    dst: Sequence[Point2D | Sequence[float]],
) -> tuple[np.ndarray, np.ndarray]:
    src_pts = as_points(src)
    dst_pts = as_points(dst)
    if len(src_pts) != 4 or len(dst_pts) != 4:
        raise InvalidPointCountError(
            f"Need 4 source and 4 destination points, got {len(src_pts)} and {len(dst_pts)}"
        )

    rows: list[list[float]] = []
    rhs: list[float] = []
    for s, t in zip(src_pts, dst_pts):
        rows.append([s.x, s.y, 1.0, 0.0, 0.0, 0.0, -s.x * t.x, -s.y * t.x])
        rows.append([0.0, 0.0, 0.0, s.x, s.y, 1.0, -s.x * t.y, -s.y * t.y])
        rhs.extend((t.x, t.y))
    return np.array(rows, dtype=np.float64), np.array(rhs, dtype=np.float64)


def estimate_perspective_transform(
    src: Sequence[Point2D | Sequence[float]],
    dst: Sequence[Point2D | Sequence[float]],
) -> HomographyCoefficients:
    """Projective map taking the 4 ``src`` corners onto the 4 ``dst`` corners (TL, TR, BR, BL)."""
    A, b = build_perspective_system(src, dst)
    try:
        h = solve_linear_system(A, b)
    except SingularSystemError as exc:
        raise DegenerateQuadError(f"Corner configuration has no unique homography: {exc}") from exc
    return HomographyCoefficients.from_vector(h)


def apply_homography_to_points(H: np.ndarray, points: np.ndarray) -> np.ndarray:
    pts = points.astype(np.float64)
    ones = np.ones((pts.shape[0], 1), dtype=np.float64)
    pts_h = np.concatenate([pts, ones], axis=1)
    projected = (H @ pts_h.T).T
    return projected[:, :2] / projected[:, 2:3]
