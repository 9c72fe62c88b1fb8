from __future__ import annotations


class MockupWarpError(ValueError):
    """Base class for geometry failures raised by the warp engine."""


class SingularSystemError(MockupWarpError):
    pass


class DegenerateQuadError(MockupWarpError):
    pass


class DegenerateTriangleError(MockupWarpError):
    pass


class InvalidPointCountError(MockupWarpError):
    pass
