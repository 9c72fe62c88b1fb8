from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path

import cv2
import numpy as np

from .config import MockupConfig
from .geometry import fit_display_scale, is_convex_quad, polygon_area
from .io import write_image
from .renderer import WarpResult, make_renderer
from .state import PointCollectionState
from .surface import RasterSurface
from .types import Point2D, Quadrilateral, RasterImage

logger = logging.getLogger(__name__)

MIN_QUAD_AREA_PX = 1.0


def mockup_filename(base_path: Path | None, suffix: str = "_mockup", ext: str = ".png") -> str:
    stem = base_path.stem if base_path is not None and base_path.stem else "mockup"
    return f"{stem}{suffix}{ext}"


def _as_bgr(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim == 2:
        return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGR)
    if pixels.shape[2] == 4:
        return cv2.cvtColor(pixels, cv2.COLOR_BGRA2BGR)
    return pixels


@dataclass(slots=True)
class MockupSession:
    """Everything one mockup needs: images, picked corners and the composited canvas."""

    config: MockupConfig = field(default_factory=MockupConfig)
    base: RasterImage | None = None
    base_path: Path | None = None
    design: RasterImage | None = None
    points: PointCollectionState = field(default_factory=PointCollectionState)
    display_scale: float = 1.0
    display: np.ndarray | None = None
    canvas: np.ndarray | None = None
    last_result: WarpResult | None = None

    def load_base(self, image: RasterImage, path: Path | None = None) -> None:
        scale = fit_display_scale(image.width, image.height, self.config.max_display_dim)
        pixels = _as_bgr(image.pixels)
        if scale < 1.0:
            size = (max(1, int(round(image.width * scale))), max(1, int(round(image.height * scale))))
            display = cv2.resize(pixels, size, interpolation=cv2.INTER_AREA)
        else:
            display = pixels.copy()

        self.base = image
        self.base_path = path
        self.display_scale = scale
        self.display = np.ascontiguousarray(display, dtype=np.uint8)
        self.reset_points()

    def load_design(self, image: RasterImage) -> None:
        self.design = image

    @property
    def can_apply(self) -> bool:
        return self.base is not None and self.design is not None and self.points.is_ready

    def add_point(self, x: float, y: float, space: str = "display") -> bool:
        if self.base is None:
            raise RuntimeError("Load a base image before picking points")
        if space == "image":
            x, y = x * self.display_scale, y * self.display_scale
        elif space != "display":
            raise ValueError(f"space must be 'display' or 'image', got {space!r}")

        accepted = self.points.add_point(Point2D(float(x), float(y)))
        if not accepted:
            logger.info("4 points already selected; reset points to select new ones")
        return accepted

    def apply(self) -> WarpResult:
        if self.display is None or self.design is None:
            raise RuntimeError("Need a base image and a design image before applying the mockup")
        quad = self.points.to_quadrilateral()
        if self.config.warn_on_nonconvex:
            self._check_quad(quad)

        canvas = self.display.copy()
        surface = RasterSurface(canvas, interpolation=self.config.interpolation)
        result = make_renderer(self.config.strategy).render(surface, self.design, quad)
        self.canvas = canvas
        self.last_result = result
        return result

    def reset_points(self) -> None:
        self.points.reset()
        self.canvas = self.display.copy() if self.display is not None else None
        self.last_result = None

    def output_name(self) -> str:
        return mockup_filename(self.base_path, self.config.output_suffix, self.config.output_ext)

    def save(self, path: Path) -> Path:
        if self.canvas is None:
            raise RuntimeError("Nothing to save; load a base image first")
        return write_image(path, self.canvas)

    def _check_quad(self, quad: Quadrilateral) -> None:
        corners = quad.as_array()
        if polygon_area(corners) < MIN_QUAD_AREA_PX:
            logger.warning("Destination quad has near-zero area; output may be empty")
        elif not is_convex_quad(corners):
            logger.warning(
                "Destination quad is not convex or not in TL, TR, BR, BL order; the two triangles may overlap"
            )
