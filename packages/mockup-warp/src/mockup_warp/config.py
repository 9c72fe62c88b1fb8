from __future__ import annotations

from dataclasses import dataclass, fields
import json
from pathlib import Path

from .renderer import RENDERERS
from .surface import INTERPOLATION_FLAGS


@dataclass(slots=True)
class MockupConfig:
    max_display_dim: int | None = 800
    strategy: str = "affine"
    interpolation: str = "linear"
    warn_on_nonconvex: bool = True
    output_suffix: str = "_mockup"
    output_ext: str = ".png"

    def validate(self) -> None:
        if self.max_display_dim is not None and (
            isinstance(self.max_display_dim, bool) or not isinstance(self.max_display_dim, int)
        ):
            raise ValueError("max_display_dim must be an integer or None")
        for name in ("strategy", "interpolation", "output_suffix", "output_ext"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"{name} must be a string")
        if not isinstance(self.warn_on_nonconvex, bool):
            raise ValueError("warn_on_nonconvex must be a boolean")

        self.interpolation = self.interpolation.lower()
        if self.max_display_dim is not None and self.max_display_dim < 1:
            raise ValueError("max_display_dim must be >= 1 or None")
        if self.strategy not in RENDERERS:
            raise ValueError(f"strategy must be one of {sorted(RENDERERS)}")
        if self.interpolation not in INTERPOLATION_FLAGS:
            raise ValueError(f"interpolation must be one of {sorted(INTERPOLATION_FLAGS)}")
        if not self.output_ext.startswith("."):
            raise ValueError("output_ext must start with '.'")


def load_config(path: Path) -> MockupConfig:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Config root must be a JSON object: {path}")

    known = {f.name for f in fields(MockupConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ValueError(f"Config {path} has unknown keys: {unknown}")

    config = MockupConfig(**payload)
    config.validate()
    return config
