from __future__ import annotations

import logging

import numpy as np
import pytest

from mockup_warp.errors import DegenerateQuadError
from mockup_warp.renderer import (
    PerspectiveQuadRenderer,
    QuadWarpRenderer,
    compute_triangle_transforms,
    make_renderer,
)
from mockup_warp.types import AffineTransform, Point2D, Quadrilateral, RasterImage

SCENARIO_QUAD = Quadrilateral.from_points([(10, 10), (210, 20), (200, 120), (20, 110)])


class RecordingSurface:
    def __init__(self, fail_on_draw: bool = False) -> None:
        self.calls: list[tuple] = []
        self.depth = 0
        self.fail_on_draw = fail_on_draw

    def begin_clip_polygon(self, points) -> None:
        self.depth += 1
        self.calls.append(("clip", tuple(points)))

    def set_transform(self, transform: AffineTransform) -> None:
        self.calls.append(("transform", transform))

    def draw_image(self, image: RasterImage) -> None:
        self.calls.append(("draw", image))
        if self.fail_on_draw:
            raise RuntimeError("draw failed")

    def draw_projective(self, image, homography) -> None:
        self.calls.append(("projective", homography))

    def restore(self) -> None:
        self.depth -= 1
        self.calls.append(("restore",))

    def kinds(self) -> list[str]:
        return [c[0] for c in self.calls]


def _image(width: int, height: int) -> RasterImage:
    return RasterImage(np.zeros((height, width, 3), dtype=np.uint8))


def _close(p: Point2D, expected: tuple[float, float], tol: float = 1e-6) -> bool:
    return abs(p.x - expected[0]) <= tol and abs(p.y - expected[1]) <= tol


def test_scenario_transforms_meet_on_shared_diagonal() -> None:
    outcomes = {o.name: o for o in compute_triangle_transforms(100, 50, SCENARIO_QUAD)}
    a = outcomes["A"].transform
    b = outcomes["B"].transform
    assert a is not None and b is not None

    for t in (a, b):
        assert _close(t.apply((100, 0)), (210, 20))
        assert _close(t.apply((0, 50)), (20, 110))
    assert _close(a.apply((0, 0)), (10, 10))
    assert _close(b.apply((100, 50)), (200, 120))


@pytest.mark.parametrize(
    "corners",
    [
        [(0, 0), (300, 0), (300, 200), (0, 200)],
        [(50, 40), (400, 10), (380, 300), (30, 260)],
        [(120, 5), (240, 90), (130, 210), (10, 100)],
        [(0.5, 0.25), (99.75, 3.5), (97.125, 64.0), (2.0, 70.5)],
    ],
)
def test_shared_edge_continuity(corners) -> None:
    quad = Quadrilateral.from_points(corners)
    outcomes = {o.name: o for o in compute_triangle_transforms(640, 480, quad)}
    a = outcomes["A"].transform
    b = outcomes["B"].transform
    for src, dst in (((640, 0), quad.tr), ((0, 480), quad.bl)):
        pa = a.apply(src)
        pb = b.apply(src)
        assert _close(pa, dst.as_tuple())
        assert _close(pb, dst.as_tuple())
        assert _close(pa, pb.as_tuple())


def test_identity_quad_gives_identity_transforms() -> None:
    quad = Quadrilateral.rectangle(100, 50)
    for outcome in compute_triangle_transforms(100, 50, quad):
        assert outcome.transform is not None
        assert outcome.transform.coefficients() == pytest.approx((1.0, 0.0, 0.0, 1.0, 0.0, 0.0), abs=1e-12)


def test_render_issues_clip_transform_draw_restore_per_triangle() -> None:
    surface = RecordingSurface()
    image = _image(100, 50)
    result = QuadWarpRenderer().render(surface, image, SCENARIO_QUAD)

    assert surface.kinds() == ["clip", "transform", "draw", "restore"] * 2
    assert surface.depth == 0
    assert result.complete
    assert result.warnings == []
    assert surface.calls[0][1] == (SCENARIO_QUAD.tl, SCENARIO_QUAD.tr, SCENARIO_QUAD.bl)
    assert surface.calls[4][1] == (SCENARIO_QUAD.tr, SCENARIO_QUAD.br, SCENARIO_QUAD.bl)
    assert surface.calls[1][1] == result.transforms["A"]
    assert surface.calls[5][1] == result.transforms["B"]
    assert surface.calls[2][1] is image


def test_render_skips_degenerate_triangle_and_keeps_the_other(caplog) -> None:
    quad = Quadrilateral.from_points([(50, 50), (50, 50), (200, 120), (20, 110)])
    surface = RecordingSurface()
    with caplog.at_level(logging.WARNING, logger="mockup_warp.renderer"):
        result = QuadWarpRenderer().render(surface, _image(100, 50), quad)

    assert surface.kinds() == ["clip", "restore", "clip", "transform", "draw", "restore"]
    assert surface.depth == 0
    assert result.partial
    assert set(result.transforms) == {"B"}
    assert "Destination triangle" in result.triangles[0].error
    assert any("Skipped triangle A" in w for w in result.warnings)
    assert any("drew 1 of 2" in w for w in result.warnings)
    assert "Skipped triangle A" in caplog.text


def test_render_zero_width_image_skips_both_triangles() -> None:
    surface = RecordingSurface()
    result = QuadWarpRenderer().render(surface, _image(0, 50), SCENARIO_QUAD)
    assert surface.kinds() == ["clip", "restore", "clip", "restore"]
    assert result.transforms == {}
    assert all("Source triangle" in t.error for t in result.triangles)


def test_render_restores_surface_when_draw_raises() -> None:
    surface = RecordingSurface(fail_on_draw=True)
    with pytest.raises(RuntimeError, match="draw failed"):
        QuadWarpRenderer().render(surface, _image(100, 50), SCENARIO_QUAD)
    assert surface.depth == 0
    assert surface.kinds() == ["clip", "transform", "draw", "restore"]


def test_perspective_renderer_clips_to_quad() -> None:
    surface = RecordingSurface()
    result = PerspectiveQuadRenderer().render(surface, _image(100, 50), SCENARIO_QUAD)
    assert surface.kinds() == ["clip", "projective", "restore"]
    assert surface.calls[0][1] == SCENARIO_QUAD.points
    assert result.complete
    assert result.homography is not None
    mapped = result.homography.apply((100, 50))
    assert _close(mapped, (200, 120))


def test_perspective_renderer_degenerate_quad_is_hard_failure() -> None:
    surface = RecordingSurface()
    with pytest.raises(DegenerateQuadError):
        PerspectiveQuadRenderer().render(surface, _image(0, 50), SCENARIO_QUAD)
    assert surface.calls == []


def test_make_renderer() -> None:
    assert isinstance(make_renderer("affine"), QuadWarpRenderer)
    assert isinstance(make_renderer("perspective"), PerspectiveQuadRenderer)
    with pytest.raises(ValueError, match="Unknown render strategy"):
        make_renderer("mesh")
