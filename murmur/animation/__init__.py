from murmur.animation.evaluator import (
    ParticleFrame,
    evaluate,
    evaluate_parallel,
    local_progress,
    shape_opacity,
)
from murmur.animation.noise import NoiseField
from murmur.animation.params import STYLES, AnimationParameters, ParticleStyle
from murmur.animation.sampling import ColorTexture
from murmur.animation.timeline import TimelineController, TimelineState

__all__ = [
    "AnimationParameters",
    "ColorTexture",
    "NoiseField",
    "ParticleFrame",
    "ParticleStyle",
    "STYLES",
    "TimelineController",
    "TimelineState",
    "evaluate",
    "evaluate_parallel",
    "local_progress",
    "shape_opacity",
]
