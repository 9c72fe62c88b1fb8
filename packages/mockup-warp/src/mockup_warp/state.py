from __future__ import annotations

from enum import Enum
from typing import Sequence

from .errors import InvalidPointCountError
from .types import CORNER_NAMES, Point2D, Quadrilateral

MAX_POINTS = 4


class CollectionPhase(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    READY = "ready"


class PointCollectionState:
    """Destination corners picked so far, in TL, TR, BR, BL order."""

    def __init__(self) -> None:
        self._points: list[Point2D] = []

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> tuple[Point2D, ...]:
        return tuple(self._points)

    @property
    def phase(self) -> CollectionPhase:
        if not self._points:
            return CollectionPhase.IDLE
        if len(self._points) < MAX_POINTS:
            return CollectionPhase.COLLECTING
        return CollectionPhase.READY

    @property
    def is_ready(self) -> bool:
        return self.phase is CollectionPhase.READY

    @property
    def next_label(self) -> str | None:
        if self.is_ready:
            return None
        return CORNER_NAMES[len(self._points)]

    def add_point(self, point: Point2D | Sequence[float]) -> bool:
        if self.is_ready:
            return False
        self._points.append(Point2D.of(point))
        return True

    def reset(self) -> None:
        self._points.clear()

    def to_quadrilateral(self) -> Quadrilateral:
        if not self.is_ready:
            raise InvalidPointCountError(f"Need {MAX_POINTS} points, have {len(self._points)}")
        return Quadrilateral(tuple(self._points))

    def prompt(self) -> str:
        if self.phase is CollectionPhase.IDLE:
            return "Click 4 points on the image: " + ", ".join(CORNER_NAMES) + "."
        if self.phase is CollectionPhase.COLLECTING:
            return f"Point {len(self._points)} added. Click {self.next_label}."
        return "4 points selected. Load Design Image or Apply Mockup."
