# murmur/animation/timeline.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from murmur.animation.easing import EaseFn, ease_in_out_cubic

logger = logging.getLogger(__name__)


class TimelineState(str, Enum):
    IDLE = "idle"
    ANIMATING = "animating"


@dataclass
class Tween:
    """Eased interpolation of a scalar from `start` to `target`."""

    start: float
    target: float
    duration: float
    ease: EaseFn
    elapsed: float = 0.0

    @property
    def finished(self) -> bool:
        return self.elapsed >= self.duration

    def advance(self, dt: float) -> float:
        self.elapsed = min(self.elapsed + dt, self.duration)
        if self.duration <= 0.0:
            return self.target
        t = self.ease(self.elapsed / self.duration)
        return self.start + (self.target - self.start) * t


class TimelineController:
    """
    Owns the morph progress and animates it toward 0 or 1 on `trigger()`.

    Only one tween runs at a time: triggers while animating are rejected
    rather than queued, and direct progress writes are ignored until the
    tween lands.
    """

    def __init__(
        self,
        duration: float = 2.15,
        progress: float = 0.0,
        ease: EaseFn = ease_in_out_cubic,
    ) -> None:
        if duration < 0.0:
            raise ValueError(f"Duration must not be negative, got {duration}")
        self.duration = duration
        self.ease = ease
        self._progress = _clamp01(progress)
        self._tween: Optional[Tween] = None
        self._listeners: List[Callable[[float], None]] = []

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def state(self) -> TimelineState:
        return TimelineState.ANIMATING if self._tween else TimelineState.IDLE

    @property
    def is_animating(self) -> bool:
        return self._tween is not None

    @property
    def target(self) -> Optional[float]:
        return self._tween.target if self._tween else None

    def on_complete(self, callback: Callable[[float], None]) -> None:
        """Register `callback(progress)`; called each time a tween lands."""
        self._listeners.append(callback)

    def trigger(self) -> bool:
        """
        Start a tween toward the far end of the morph.

        Returns False (and does nothing) while a tween is already running.
        """
        if self._tween is not None:
            logger.debug("Trigger ignored, tween toward %s in flight", self._tween.target)
            return False

        target = 0.0 if self._progress >= 0.5 else 1.0
        # Partial replays complete proportionally faster
        duration = self.duration * abs(target - self._progress)
        self._tween = Tween(
            start=self._progress, target=target, duration=duration, ease=self.ease
        )
        logger.info(
            "Morph %.3f -> %.0f over %.2fs", self._progress, target, duration
        )

        if duration <= 0.0:
            self._finish()
        return True

    def set_progress(self, value: float) -> bool:
        """Direct write, honoured only while idle. Returns whether it applied."""
        if self._tween is not None:
            return False
        self._progress = _clamp01(value)
        return True

    def update(self, dt: float) -> float:
        """Advance the running tween by `dt` seconds; returns the progress."""
        if self._tween is None:
            return self._progress

        self._progress = self._tween.advance(dt)
        if self._tween.finished:
            self._finish()
        return self._progress

    def _finish(self) -> None:
        assert self._tween is not None
        self._progress = self._tween.target
        self._tween = None
        for callback in list(self._listeners):
            callback(self._progress)


def _clamp01(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)
