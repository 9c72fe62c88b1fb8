from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, Sequence

import numpy as np

from .errors import InvalidPointCountError

CORNER_NAMES = ("Top-Left", "Top-Right", "Bottom-Right", "Bottom-Left")


@dataclass(frozen=True, slots=True)
class Point2D:
    x: float
    y: float

    @classmethod
    def of(cls, value: Point2D | Sequence[float]) -> Point2D:
        if isinstance(value, Point2D):
            return value
        if len(value) != 2:
            raise ValueError(f"Expected an (x, y) pair, got {len(value)} values")
        return cls(float(value[0]), float(value[1]))

    def as_tuple(self) -> tuple[float, float]:
        return self.x, self.y


def as_points(values: Iterable[Point2D | Sequence[float]]) -> tuple[Point2D, ...]:
    return tuple(Point2D.of(v) for v in values)


@dataclass(frozen=True, slots=True)
class Quadrilateral:
    """Four corners in TL, TR, BR, BL order. The order is never re-sorted."""

    points: tuple[Point2D, ...]

    def __post_init__(self) -> None:
        if len(self.points) != 4:
            raise InvalidPointCountError(f"Quadrilateral needs exactly 4 points, got {len(self.points)}")

    @classmethod
    def from_points(cls, values: Iterable[Point2D | Sequence[float]]) -> Quadrilateral:
        return cls(as_points(values))

    @classmethod
    def rectangle(cls, width: float, height: float) -> Quadrilateral:
        w = float(width)
        h = float(height)
        return cls((Point2D(0.0, 0.0), Point2D(w, 0.0), Point2D(w, h), Point2D(0.0, h)))

    @property
    def tl(self) -> Point2D:
        return self.points[0]

    @property
    def tr(self) -> Point2D:
        return self.points[1]

    @property
    def br(self) -> Point2D:
        return self.points[2]

    @property
    def bl(self) -> Point2D:
        return self.points[3]

    def as_array(self) -> np.ndarray:
        return np.array([p.as_tuple() for p in self.points], dtype=np.float64)


@dataclass(slots=True)
class RasterImage:
    """Decoded pixels (H x W or H x W x C). Only read by the engine."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim not in (2, 3):
            raise ValueError(f"Expected a 2D or 3D pixel array, got shape {self.pixels.shape}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])


@dataclass(frozen=True, slots=True)
class AffineTransform:
    """x' = a*x + c*y + e, y' = b*x + d*y + f."""

    a: float
    b: float
    c: float
    d: float
    e: float
    f: float

    @classmethod
    def identity(cls) -> AffineTransform:
        return cls(1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    def apply(self, point: Point2D | Sequence[float]) -> Point2D:
        p = Point2D.of(point)
        return Point2D(
            self.a * p.x + self.c * p.y + self.e,
            self.b * p.x + self.d * p.y + self.f,
        )

    def as_matrix(self) -> np.ndarray:
        # 2x3 layout accepted by cv2.warpAffine
        return np.array(
            [
                [self.a, self.c, self.e],
                [self.b, self.d, self.f],
            ],
            dtype=np.float64,
        )

    def coefficients(self) -> tuple[float, float, float, float, float, float]:
        return self.a, self.b, self.c, self.d, self.e, self.f

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.coefficients())


@dataclass(frozen=True, slots=True)
class HomographyCoefficients:
    h11: float
    h12: float
    h13: float
    h21: float
    h22: float
    h23: float
    h31: float
    h32: float

    @classmethod
    def from_vector(cls, values: Sequence[float]) -> HomographyCoefficients:
        if len(values) != 8:
            raise ValueError(f"Expected 8 homography coefficients, got {len(values)}")
        return cls(*(float(v) for v in values))

    def as_matrix(self) -> np.ndarray:
        return np.array(
            [
                [self.h11, self.h12, self.h13],
                [self.h21, self.h22, self.h23],
                [self.h31, self.h32, 1.0],
            ],
            dtype=np.float64,
        )

    def apply(self, point: Point2D | Sequence[float]) -> Point2D:
        p = Point2D.of(point)
        w = self.h31 * p.x + self.h32 * p.y + 1.0
        if w == 0.0:
            raise ZeroDivisionError(f"Point {p.as_tuple()} maps to infinity")
        return Point2D(
            (self.h11 * p.x + self.h12 * p.y + self.h13) / w,
            (self.h21 * p.x + self.h22 * p.y + self.h23) / w,
        )
