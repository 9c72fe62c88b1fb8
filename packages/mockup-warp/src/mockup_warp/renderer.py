from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Protocol

from .affine import triangle_affine
from .errors import DegenerateTriangleError
from .homography import estimate_perspective_transform
from .surface import DrawingSurface, ProjectiveSurface, clipped, layered
from .types import AffineTransform, HomographyCoefficients, Point2D, Quadrilateral, RasterImage

logger = logging.getLogger(__name__)

# Corner indices (TL=0, TR=1, BR=2, BL=3); both triangles share the TR-BL diagonal.
TRIANGLES: tuple[tuple[str, tuple[int, int, int]], ...] = (
    ("A", (0, 1, 3)),
    ("B", (1, 2, 3)),
)


@dataclass(slots=True)
class TriangleOutcome:
    name: str
    source: tuple[Point2D, Point2D, Point2D]
    destination: tuple[Point2D, Point2D, Point2D]
    transform: AffineTransform | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.transform is not None


@dataclass(slots=True)
class WarpResult:
    strategy: str
    triangles: list[TriangleOutcome] = field(default_factory=list)
    homography: HomographyCoefficients | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        if self.homography is not None:
            return True
        return bool(self.triangles) and all(t.ok for t in self.triangles)

    @property
    def partial(self) -> bool:
        return not self.complete

    @property
    def transforms(self) -> dict[str, AffineTransform]:
        return {t.name: t.transform for t in self.triangles if t.transform is not None}


class QuadRenderer(Protocol):
    name: str

    def render(self, surface: DrawingSurface, image: RasterImage, quad: Quadrilateral) -> WarpResult: ...


def _triangle_outcomes(width: float, height: float, quad: Quadrilateral) -> list[TriangleOutcome]:
    src = Quadrilateral.rectangle(width, height).points
    dst = quad.points
    return [
        TriangleOutcome(
            name=name,
            source=(src[i], src[j], src[k]),
            destination=(dst[i], dst[j], dst[k]),
        )
        for name, (i, j, k) in TRIANGLES
    ]


def _solve(outcome: TriangleOutcome) -> None:
    try:
        outcome.transform = triangle_affine(outcome.source, outcome.destination, require_invertible=True)
    except DegenerateTriangleError as exc:
        outcome.error = str(exc)


def compute_triangle_transforms(width: float, height: float, quad: Quadrilateral) -> list[TriangleOutcome]:
    """Affine map of each triangle of the ``width`` x ``height`` source rectangle, without drawing."""
    outcomes = _triangle_outcomes(width, height, quad)
    for outcome in outcomes:
        _solve(outcome)
    return outcomes


class QuadWarpRenderer:
    """Draws an image onto a quad as two affine-mapped triangles split along TR-BL."""

    name = "affine"

    def render(self, surface: DrawingSurface, image: RasterImage, quad: Quadrilateral) -> WarpResult:
        result = WarpResult(strategy=self.name)
        with layered(surface):
            for outcome in _triangle_outcomes(image.width, image.height, quad):
                result.triangles.append(outcome)
                with clipped(surface, outcome.destination):
                    _solve(outcome)
                    if outcome.transform is None:
                        message = f"Skipped triangle {outcome.name}: {outcome.error}"
                        logger.warning(message)
                        result.warnings.append(message)
                        continue
                    logger.debug("triangle %s transform %s", outcome.name, outcome.transform.coefficients())
                    surface.set_transform(outcome.transform)
                    surface.draw_image(image)

        drawn = sum(1 for t in result.triangles if t.ok)
        if drawn < len(result.triangles):
            message = f"Partial result: drew {drawn} of {len(result.triangles)} triangles"
            logger.warning(message)
            result.warnings.append(message)
        return result


class PerspectiveQuadRenderer:
    """Resamples the whole image through the quad homography. Needs ``draw_projective``."""

    name = "perspective"

    def render(self, surface: ProjectiveSurface, image: RasterImage, quad: Quadrilateral) -> WarpResult:
        H = estimate_perspective_transform(Quadrilateral.rectangle(image.width, image.height).points, quad.points)
        logger.debug("homography %s", H.as_matrix().tolist())
        with clipped(surface, quad.points):
            surface.draw_projective(image, H)
        return WarpResult(strategy=self.name, homography=H)


RENDERERS: dict[str, type] = {
    QuadWarpRenderer.name: QuadWarpRenderer,
    PerspectiveQuadRenderer.name: PerspectiveQuadRenderer,
}


def make_renderer(name: str) -> QuadRenderer:
    try:
        return RENDERERS[name]()
    except KeyError:
        raise ValueError(f"Unknown render strategy {name!r}; expected one of {sorted(RENDERERS)}") from None
