# murmur/animation/params.py
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Tuple


@dataclass(frozen=True, slots=True)
class ParticleStyle:
    """Sprite shape triple plus the particle size it was tuned for."""

    particle_size: float
    shape_radius: float
    shape_cutoff: float
    shape_hardness: float


STYLES: Dict[str, ParticleStyle] = {
    "glow": ParticleStyle(
        particle_size=0.1, shape_radius=0.05, shape_cutoff=0.1, shape_hardness=1.0
    ),
    "hard": ParticleStyle(
        particle_size=0.03, shape_radius=0.4, shape_cutoff=0.0, shape_hardness=50.0
    ),
    "smooth": ParticleStyle(
        particle_size=0.1, shape_radius=0.1, shape_cutoff=0.2, shape_hardness=2.0
    ),
}

STYLE_LABELS: Dict[str, str] = {
    "glow": "Soft Glow",
    "hard": "Hard Dot",
    "smooth": "Smooth",
}

DEFAULT_STYLE = "hard"

# Inclusive (min, max) for every scalar the control surface may edit.
PARAMETER_BOUNDS: Dict[str, Tuple[float, float]] = {
    "progress": (0.0, 1.0),
    "synchronization": (0.0, 1.0),
    "chaos_amplitude": (0.0, 1.5),
    "chaos_frequency": (0.0, 0.5),
    "oscillation_amplitude": (0.0, 0.1),
    "oscillation_speed": (0.0, 1.0),
    "particle_size": (0.0, 0.2),
    "shape_radius": (0.0, 0.5),
    "shape_hardness": (0.0, 50.0),
    "shape_cutoff": (0.0, 0.5),
}


@dataclass(frozen=True, slots=True)
class AnimationParameters:
    """
    Read-only snapshot of everything the evaluator reads for one frame.

    Edits produce a new snapshot (see `ParameterStore`); a snapshot is never
    mutated while a frame is being evaluated.
    """

    mesh_a: int = 0
    mesh_b: int = 1
    progress: float = 0.0
    synchronization: float = 0.55
    chaos_amplitude: float = 0.65
    chaos_frequency: float = 0.2
    oscillation_amplitude: float = 0.02
    oscillation_speed: float = 0.1
    particle_size: float = STYLES[DEFAULT_STYLE].particle_size
    shape_radius: float = STYLES[DEFAULT_STYLE].shape_radius
    shape_hardness: float = STYLES[DEFAULT_STYLE].shape_hardness
    shape_cutoff: float = STYLES[DEFAULT_STYLE].shape_cutoff

    def with_style(self, style: ParticleStyle) -> AnimationParameters:
        return replace(
            self,
            particle_size=style.particle_size,
            shape_radius=style.shape_radius,
            shape_hardness=style.shape_hardness,
            shape_cutoff=style.shape_cutoff,
        )

    def validated(self) -> AnimationParameters:
        """Return self, or raise ValueError if a scalar leaves its bounds."""
        validate_values({f.name: getattr(self, f.name) for f in fields(self)})
        return self


def validate_values(values: Mapping[str, object]) -> None:
    for name, value in values.items():
        if name in ("mesh_a", "mesh_b"):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an int, got {value!r}")
            continue

        bounds = PARAMETER_BOUNDS.get(name)
        if bounds is None:
            raise ValueError(f"Unknown animation parameter: {name}")

        lo, hi = bounds
        if not isinstance(value, (int, float)) or not lo <= value <= hi:
            raise ValueError(f"{name}={value!r} outside [{lo}, {hi}]")


def style(name: str) -> ParticleStyle:
    try:
        return STYLES[name]
    except KeyError:
        raise ValueError(
            f"Unknown particle style '{name}', expected one of {sorted(STYLES)}"
        ) from None


def dominant_mesh(params: AnimationParameters) -> int:
    """The mesh that reads as 'current': A until halfway, then B."""
    return params.mesh_a if params.progress < 0.5 else params.mesh_b
