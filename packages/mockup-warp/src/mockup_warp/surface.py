from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol, Sequence

import cv2
import numpy as np

from .errors import InvalidPointCountError
from .types import AffineTransform, HomographyCoefficients, Point2D, RasterImage, as_points

# fractional bits kept when rasterising clip polygons
CLIP_SHIFT_BITS = 4

INTERPOLATION_FLAGS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "lanczos": cv2.INTER_LANCZOS4,
}


def interpolation_flag(name: str) -> int:
    try:
        return INTERPOLATION_FLAGS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown interpolation {name!r}; expected one of {sorted(INTERPOLATION_FLAGS)}") from None


class DrawingSurface(Protocol):
    """Destination of the warp engine.

    ``begin_clip_polygon`` saves the current clip and transform before
    narrowing the clip; ``restore`` undoes exactly one such acquisition.
    """

    def begin_clip_polygon(self, points: Sequence[Point2D]) -> None: ...

    def set_transform(self, transform: AffineTransform) -> None: ...

    def draw_image(self, image: RasterImage) -> None: ...

    def restore(self) -> None: ...


class ProjectiveSurface(DrawingSurface, Protocol):
    def draw_projective(self, image: RasterImage, homography: HomographyCoefficients) -> None: ...


@contextmanager
def clipped(surface: DrawingSurface, polygon: Sequence[Point2D]) -> Iterator[DrawingSurface]:
    surface.begin_clip_polygon(polygon)
    try:
        yield surface
    finally:
        surface.restore()


@contextmanager
def layered(surface: DrawingSurface) -> Iterator[DrawingSurface]:
    """Group draws so each surface pixel is blended once. No-op for surfaces without layers."""
    begin = getattr(surface, "begin_layer", None)
    if begin is None:
        yield surface
        return
    begin()
    try:
        yield surface
    except BaseException:
        surface.end_layer(commit=False)
        raise
    surface.end_layer()


@dataclass(slots=True)
class _SavedState:
    clip: np.ndarray | None
    transform: AffineTransform


class RasterSurface:
    """Drawing surface over a BGR ``uint8`` canvas, modified in place."""

    def __init__(self, canvas: np.ndarray, interpolation: str = "linear") -> None:
        if canvas.ndim != 3 or canvas.shape[2] != 3:
            raise ValueError(f"Canvas must be an H x W x 3 array, got shape {canvas.shape}")
        if canvas.dtype != np.uint8:
            raise ValueError(f"Canvas must be uint8, got {canvas.dtype}")
        self.canvas = canvas
        self.flags = interpolation_flag(interpolation)
        self._clip: np.ndarray | None = None
        self._transform = AffineTransform.identity()
        self._saved: list[_SavedState] = []
        self._layer: np.ndarray | None = None

    @property
    def width(self) -> int:
        return int(self.canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self.canvas.shape[0])

    @property
    def depth(self) -> int:
        return len(self._saved)

    @property
    def transform(self) -> AffineTransform:
        return self._transform

    @property
    def clip(self) -> np.ndarray | None:
        return self._clip

    def begin_clip_polygon(self, points: Sequence[Point2D]) -> None:
        pts = as_points(points)
        if len(pts) < 3:
            raise InvalidPointCountError(f"Clip polygon needs at least 3 points, got {len(pts)}")

        mask = np.zeros((self.height, self.width), dtype=np.uint8)
        fixed = np.round(np.array([p.as_tuple() for p in pts]) * (1 << CLIP_SHIFT_BITS)).astype(np.int32)
        cv2.fillPoly(mask, [fixed.reshape((-1, 1, 2))], 255, lineType=cv2.LINE_8, shift=CLIP_SHIFT_BITS)

        self._saved.append(_SavedState(clip=self._clip, transform=self._transform))
        self._clip = mask if self._clip is None else cv2.bitwise_and(self._clip, mask)

    def set_transform(self, transform: AffineTransform) -> None:
        self._transform = transform

    def draw_image(self, image: RasterImage) -> None:
        if image.width == 0 or image.height == 0:
            return
        matrix = self._transform.as_matrix()
        size = (self.width, self.height)
        warped = cv2.warpAffine(image.pixels, matrix, size, flags=self.flags, borderMode=cv2.BORDER_CONSTANT)
        coverage = cv2.warpAffine(_full_mask(image), matrix, size, flags=cv2.INTER_NEAREST, borderMode=cv2.BORDER_CONSTANT)
        self._composite(warped, coverage)

    def draw_projective(self, image: RasterImage, homography: HomographyCoefficients) -> None:
        """Per-pixel perspective draw; ignores the affine transform, honours the clip."""
        if image.width == 0 or image.height == 0:
            return
        H = homography.as_matrix()
        size = (self.width, self.height)
        warped = cv2.warpPerspective(image.pixels, H, size, flags=self.flags, borderMode=cv2.BORDER_CONSTANT)
        coverage = cv2.warpPerspective(_full_mask(image), H, size, flags=cv2.INTER_NEAREST, borderMode=cv2.BORDER_CONSTANT)
        self._composite(warped, coverage)

    def restore(self) -> None:
        if not self._saved:
            raise RuntimeError("restore() called without a matching begin_clip_polygon()")
        state = self._saved.pop()
        self._clip = state.clip
        self._transform = state.transform

    def begin_layer(self) -> None:
        """Redirect draws to an offscreen BGRA layer; later draws overwrite earlier ones."""
        if self._layer is not None:
            raise RuntimeError("A layer is already open")
        self._layer = np.zeros((self.height, self.width, 4), dtype=np.uint8)

    def end_layer(self, commit: bool = True) -> None:
        if self._layer is None:
            raise RuntimeError("end_layer() called without a matching begin_layer()")
        layer, self._layer = self._layer, None
        if commit:
            self._blend(layer[..., :3], layer[..., 3])

    def _composite(self, warped: np.ndarray, coverage: np.ndarray) -> None:
        mask = coverage if self._clip is None else cv2.bitwise_and(coverage, self._clip)
        visible = mask > 0
        if not np.any(visible):
            return

        bgra = _as_bgra(warped)
        if self._layer is not None:
            self._layer[visible] = bgra[visible]
            return
        alpha = np.where(visible, bgra[..., 3], 0).astype(np.uint8)
        self._blend(bgra[..., :3], alpha)

    def _blend(self, bgr: np.ndarray, alpha: np.ndarray) -> None:
        visible = alpha > 0
        if not np.any(visible):
            return
        if np.all(alpha[visible] == 255):
            self.canvas[visible] = bgr[visible]
            return
        a = alpha.astype(np.float32)[..., None] / 255.0
        blended = self.canvas.astype(np.float32) * (1.0 - a) + bgr.astype(np.float32) * a
        self.canvas[...] = np.clip(np.round(blended), 0, 255).astype(np.uint8)


def _as_bgra(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim == 2:
        return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGRA)
    channels = pixels.shape[2]
    if channels == 4:
        return pixels
    if channels == 3:
        return cv2.cvtColor(pixels, cv2.COLOR_BGR2BGRA)
    raise ValueError(f"Unsupported image channel count: {channels}")


def _full_mask(image: RasterImage) -> np.ndarray:
    return np.full((image.height, image.width), 255, dtype=np.uint8)
