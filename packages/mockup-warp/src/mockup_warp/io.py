from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

from .types import RasterImage


def load_raster_image(path: Path, keep_alpha: bool = False) -> RasterImage:
    """Decode ``path`` as BGR (or BGRA when ``keep_alpha`` and the file has alpha)."""
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    flags = cv2.IMREAD_UNCHANGED if keep_alpha else cv2.IMREAD_COLOR
    pixels = cv2.imread(str(path), flags)
    if pixels is None:
        raise ValueError(f"Failed to decode image: {path}")

    if pixels.dtype == np.uint16:
        pixels = (pixels >> 8).astype(np.uint8)
    elif pixels.dtype != np.uint8:
        raise ValueError(f"Unsupported pixel type {pixels.dtype}: {path}")

    if pixels.ndim == 2:
        pixels = cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGR)
    elif pixels.shape[2] == 4 and not keep_alpha:
        pixels = cv2.cvtColor(pixels, cv2.COLOR_BGRA2BGR)
    return RasterImage(pixels)


def write_image(path: Path, pixels: np.ndarray) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), pixels):
        raise ValueError(f"Failed to encode image: {path}")
    return path
