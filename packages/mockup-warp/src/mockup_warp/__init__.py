from .affine import triangle_affine
from .errors import (
    DegenerateQuadError,
    DegenerateTriangleError,
    InvalidPointCountError,
    MockupWarpError,
    SingularSystemError,
)
from .homography import estimate_perspective_transform
from .linalg import solve_linear_system
from .renderer import (
    PerspectiveQuadRenderer,
    QuadWarpRenderer,
    WarpResult,
    compute_triangle_transforms,
    make_renderer,
)
from .state import CollectionPhase, PointCollectionState
from .surface import DrawingSurface, RasterSurface, clipped, layered
from .types import AffineTransform, HomographyCoefficients, Point2D, Quadrilateral, RasterImage

__all__ = [
    "AffineTransform",
    "CollectionPhase",
    "DegenerateQuadError",
    "DegenerateTriangleError",
    "DrawingSurface",
    "HomographyCoefficients",
    "InvalidPointCountError",
    "MockupWarpError",
    "PerspectiveQuadRenderer",
    "Point2D",
    "PointCollectionState",
    "QuadWarpRenderer",
    "Quadrilateral",
    "RasterImage",
    "RasterSurface",
    "SingularSystemError",
    "WarpResult",
    "clipped",
    "compute_triangle_transforms",
    "estimate_perspective_transform",
    "layered",
    "make_renderer",
    "solve_linear_system",
    "triangle_affine",
]
