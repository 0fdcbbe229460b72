import json
import logging

import pytest

from murmur.config import AppConfig, LoggingSettings, config_from_dict, load_config
from murmur.log import setup_logging


def test_defaults_are_valid():
    config = AppConfig().validate()

    assert config.morph.resolution == 128
    assert config.morph.style == "hard"
    assert config.render.blending == "additive"
    assert config.meshes == ()


def test_overrides_are_applied():
    config = config_from_dict(
        {
            "asset_root": "data",
            "window": {"width": 800, "height": 600},
            "render": {"blending": "normal", "background": [0.1, 0.2, 0.3]},
            "morph": {
                "resolution": 64,
                "seed": 4,
                "animation": {"chaos_amplitude": 0.1},
            },
            "meshes": [{"name": "cat", "mesh": "cat.obj", "texture": "cat.png"}],
        }
    )

    assert config.asset_root == "data"
    assert config.window.width == 800
    assert config.window.title == "Murmur"
    assert config.render.blending == "normal"
    assert config.render.background == (0.1, 0.2, 0.3)
    assert config.morph.resolution == 64
    assert config.morph.seed == 4
    assert config.morph.animation.chaos_amplitude == 0.1
    assert config.meshes[0].name == "cat"
    assert config.meshes[0].texture == "cat.png"


@pytest.mark.parametrize(
    "data",
    [
        {"colour": "red"},
        {"window": {"depth": 3}},
        {"morph": {"animation": {"wobble": 1}}},
    ],
)
def test_unknown_keys_are_rejected(data):
    with pytest.raises(ValueError, match="Unknown keys"):
        config_from_dict(data)


@pytest.mark.parametrize(
    "data",
    [
        {"morph": {"resolution": 100}},
        {"morph": {"style": "neon"}},
        {"morph": {"size_mode": "volume"}},
        {"morph": {"duration": 9.0}},
        {"render": {"blending": "subtractive"}},
        {"morph": {"animation": {"synchronization": 2.0}}},
    ],
)
def test_invalid_values_are_rejected(data):
    with pytest.raises(ValueError):
        config_from_dict(data)


def test_load_config_from_json(tmp_path):
    path = tmp_path / "murmur.json"
    path.write_text(json.dumps({"morph": {"resolution": 32, "style": "glow"}}))

    config = load_config(path)

    assert config.morph.resolution == 32
    assert config.morph.style == "glow"


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "murmur.log"
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))

    try:
        setup_logging(LoggingSettings(level="debug", log_file=str(log_file)))
        logging.getLogger("murmur.test").info("hello from the test")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        assert "hello from the test" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[1]
        root.setLevel(saved[0])
