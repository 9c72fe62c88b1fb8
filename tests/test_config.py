from __future__ import annotations

import json

import pytest

from mockup_warp.config import MockupConfig, load_config


def test_default_config_is_valid() -> None:
    config = MockupConfig()
    config.validate()
    assert config.max_display_dim == 800
    assert config.strategy == "affine"


def test_load_config_reads_known_keys(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"strategy": "perspective", "max_display_dim": None}), encoding="utf-8")

    config = load_config(path)
    assert config.strategy == "perspective"
    assert config.max_display_dim is None
    assert config.interpolation == "linear"


def test_load_config_rejects_unknown_key(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"strategy": "affine", "extra": 1}), encoding="utf-8")

    with pytest.raises(ValueError, match="unknown keys"):
        load_config(path)


def test_load_config_rejects_non_object(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        load_config(path)


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"max_display_dim": 0}, "max_display_dim"),
        ({"strategy": "mesh"}, "strategy"),
        ({"interpolation": "area"}, "interpolation"),
        ({"output_ext": "png"}, "output_ext"),
    ],
)
def test_validate_rejects_bad_values(overrides, message) -> None:
    config = MockupConfig(**overrides)
    with pytest.raises(ValueError, match=message):
        config.validate()


def test_validate_normalises_interpolation_case() -> None:
    config = MockupConfig(interpolation="Linear")
    config.validate()
    assert config.interpolation == "linear"


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"output_ext": 5}, "output_ext must be a string"),
        ({"max_display_dim": "800"}, "max_display_dim must be an integer"),
        ({"max_display_dim": True}, "max_display_dim must be an integer"),
        ({"strategy": ["affine"]}, "strategy must be a string"),
        ({"interpolation": 1}, "interpolation must be a string"),
        ({"output_suffix": None}, "output_suffix must be a string"),
        ({"warn_on_nonconvex": "yes"}, "warn_on_nonconvex must be a boolean"),
    ],
)
def test_load_config_rejects_wrong_types(tmp_path, payload, message) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_config(path)
