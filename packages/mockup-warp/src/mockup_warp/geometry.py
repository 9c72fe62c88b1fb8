from __future__ import annotations

import numpy as np


def is_convex_quad(quad: np.ndarray) -> bool:
    if quad.shape != (4, 2):
        return False

    cross_signs: list[float] = []
    for i in range(4):
        p0 = quad[i]
        p1 = quad[(i + 1) % 4]
        p2 = quad[(i + 2) % 4]
        v1 = p1 - p0
        v2 = p2 - p1
        cross = float(v1[0] * v2[1] - v1[1] * v2[0])
        if abs(cross) > 1e-7:
            cross_signs.append(cross)

    if not cross_signs:
        return False

    first_positive = cross_signs[0] > 0
    return all((c > 0) == first_positive for c in cross_signs)


def polygon_area(quad: np.ndarray) -> float:
    x = quad[:, 0]
    y = quad[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) * 0.5)


def fit_display_scale(width: int, height: int, max_dim: int | None) -> float:
    """Downscale factor that fits ``width`` x ``height`` inside ``max_dim``; never upscales."""
    if max_dim is None or width <= 0 or height <= 0:
        return 1.0
    return min(max_dim / width, max_dim / height, 1.0)
