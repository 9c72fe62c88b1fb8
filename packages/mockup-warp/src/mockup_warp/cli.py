from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import MockupConfig, load_config
from .errors import MockupWarpError
from .io import load_raster_image
from .renderer import RENDERERS
from .session import MockupSession
from .types import CORNER_NAMES


def _parse_point(text: str) -> tuple[float, float]:
    parts = text.replace(" ", "").split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Expected X,Y but got {text!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected numeric X,Y but got {text!r}") from None


def _build_config(args: argparse.Namespace) -> MockupConfig:
    config = load_config(args.config) if args.config is not None else MockupConfig()
    if args.strategy is not None:
        config.strategy = args.strategy
    if args.interpolation is not None:
        config.interpolation = args.interpolation
    if args.max_display_dim is not None:
        config.max_display_dim = args.max_display_dim if args.max_display_dim > 0 else None
    config.validate()
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Warp a design image onto a quadrilateral of a base image")
    parser.add_argument("--base", type=Path, required=True, help="Base (background) image")
    parser.add_argument("--design", type=Path, required=True, help="Design image to place on the base")
    parser.add_argument(
        "--point",
        type=_parse_point,
        action="append",
        required=True,
        metavar="X,Y",
        help="Destination corner; give 4 in order: " + ", ".join(CORNER_NAMES),
    )
    parser.add_argument(
        "--points-space",
        choices=["image", "display"],
        default="image",
        help="Coordinates of --point: base image pixels (default) or downscaled display pixels",
    )
    parser.add_argument("--output", type=Path, default=None, help="Defaults to <base dir>/<base stem>_mockup.png")
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--strategy", choices=sorted(RENDERERS), default=None)
    parser.add_argument("--interpolation", default=None, help="nearest|linear|cubic|lanczos")
    parser.add_argument("--max-display-dim", type=int, default=None, help="Longest output side; 0 keeps full size")
    parser.add_argument("--verbose", action="store_true")
    return parser


def run(args: argparse.Namespace) -> Path:
    config = _build_config(args)
    if len(args.point) != 4:
        raise MockupWarpError(f"Need exactly 4 --point values, got {len(args.point)}")

    session = MockupSession(config=config)
    session.load_base(load_raster_image(args.base), path=args.base)
    session.load_design(load_raster_image(args.design, keep_alpha=True))
    for x, y in args.point:
        session.add_point(x, y, space=args.points_space)

    result = session.apply()
    for warning in result.warnings:
        print(f"warning: {warning}")

    output = args.output if args.output is not None else args.base.parent / session.output_name()
    session.save(output)
    return output


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        output = run(args)
    except (ValueError, FileNotFoundError, RuntimeError) as exc:
        print(f"error: {exc}")
        raise SystemExit(1) from exc
    print(f"wrote mockup to {output}")


if __name__ == "__main__":
    main()
