# murmur/animation/easing.py
from typing import Callable, Dict

EaseFn = Callable[[float], float]


def linear(t: float) -> float:
    return t


def smoothstep(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2.0 * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 2 / 2.0


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


def ease_out_quad(t: float) -> float:
    # gsap "power1.out"
    return 1.0 - (1.0 - t) * (1.0 - t)


EASINGS: Dict[str, EaseFn] = {
    "linear": linear,
    "smoothstep": smoothstep,
    "in_out_quad": ease_in_out_quad,
    "in_out_cubic": ease_in_out_cubic,
    "out_quad": ease_out_quad,
}


def get_easing(name: str) -> EaseFn:
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(
            f"Unknown easing '{name}', expected one of {sorted(EASINGS)}"
        ) from None
