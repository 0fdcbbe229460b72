# murmur/config.py
"""
Application configuration.

Every section is a frozen dataclass with defaults, so the application runs
with no config file at all. `load_config` overlays a JSON file on top of
those defaults; unknown keys are rejected so typos do not go unnoticed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from murmur.animation.params import STYLES, AnimationParameters
from murmur.baking.baker import RESOLUTIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoggingSettings:
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None


@dataclass(frozen=True, slots=True)
class WindowSettings:
    width: int = 1600
    height: int = 900
    title: str = "Murmur"
    fps: int = 60


@dataclass(frozen=True, slots=True)
class RenderSettings:
    """Pass-through state for the particle draw."""

    blending: str = "additive"  # "additive" | "normal"
    depth_write: bool = False
    wireframe: bool = False
    background: Tuple[float, float, float] = (0.02, 0.02, 0.03)


@dataclass(frozen=True, slots=True)
class MeshEntry:
    name: str
    mesh: str
    texture: Optional[str] = None


@dataclass(frozen=True, slots=True)
class MorphSettings:
    resolution: int = 128
    duration: float = 2.15
    easing: str = "in_out_cubic"
    style: str = "hard"
    seed: Optional[int] = None
    size_mode: str = "constant"
    animation: AnimationParameters = field(default_factory=AnimationParameters)


@dataclass(frozen=True, slots=True)
class AppConfig:
    asset_root: str = "assets"
    noise_texture: Optional[str] = None
    meshes: Tuple[MeshEntry, ...] = ()
    window: WindowSettings = field(default_factory=WindowSettings)
    render: RenderSettings = field(default_factory=RenderSettings)
    morph: MorphSettings = field(default_factory=MorphSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    def validate(self) -> AppConfig:
        if self.morph.resolution not in RESOLUTIONS:
            raise ValueError(
                f"resolution must be one of {RESOLUTIONS}, got {self.morph.resolution}"
            )
        if self.morph.style not in STYLES:
            raise ValueError(f"Unknown particle style '{self.morph.style}'")
        if self.morph.size_mode not in ("constant", "area"):
            raise ValueError(f"Unknown size mode '{self.morph.size_mode}'")
        if not 0.1 <= self.morph.duration <= 5.0:
            raise ValueError(f"duration must lie in [0.1, 5.0], got {self.morph.duration}")
        if self.render.blending not in ("additive", "normal"):
            raise ValueError(f"Unknown blending '{self.render.blending}'")
        self.morph.animation.validated()
        return self


def _overlay(instance, values: Mapping[str, Any], section: str):
    known = {f.name for f in fields(instance)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown keys in [{section}]: {sorted(unknown)}")
    return replace(instance, **values)


def config_from_dict(data: Mapping[str, Any]) -> AppConfig:
    cfg = AppConfig()
    top: Dict[str, Any] = dict(data)

    sections = {
        "window": cfg.window,
        "render": cfg.render,
        "logging": cfg.logging,
    }
    changes: Dict[str, Any] = {}
    for name, default in sections.items():
        if name in top:
            changes[name] = _overlay(default, top.pop(name), name)

    if "render" in changes and "background" in data["render"]:
        changes["render"] = replace(
            changes["render"], background=tuple(data["render"]["background"])
        )

    if "morph" in top:
        morph_values = dict(top.pop("morph"))
        animation_values = morph_values.pop("animation", {})
        morph = _overlay(cfg.morph, morph_values, "morph")
        animation = _overlay(morph.animation, animation_values, "morph.animation")
        changes["morph"] = replace(morph, animation=animation)

    if "meshes" in top:
        changes["meshes"] = tuple(MeshEntry(**entry) for entry in top.pop("meshes"))

    cfg = _overlay(cfg, top, "root")
    return replace(cfg, **changes).validate()


def load_config(path: Path) -> AppConfig:
    """Loads a JSON configuration file."""
    logger.info("Loading configuration from %s", path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return config_from_dict(data)
