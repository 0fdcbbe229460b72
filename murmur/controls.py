# murmur/controls.py
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, Optional

from murmur.animation.params import (
    AnimationParameters,
    dominant_mesh,
    style,
    validate_values,
)
from murmur.animation.timeline import TimelineController
from murmur.errors import InvalidLayerIndex

logger = logging.getLogger(__name__)


class ParameterStore:
    """
    Holds the current animation parameters as an immutable snapshot.

    Every edit validates and swaps in a new snapshot; `snapshot()` hands out
    the current one, so a frame evaluated from it never sees a half-applied
    edit.
    """

    def __init__(
        self, layer_count: int, initial: Optional[AnimationParameters] = None
    ) -> None:
        if layer_count < 1:
            raise ValueError("At least one mesh layer is required")
        self.layer_count = layer_count
        self._lock = threading.Lock()

        params = (initial or AnimationParameters()).validated()
        # With a single mesh both selectors fall back to it
        if layer_count == 1 and initial is None:
            params = replace(params, mesh_a=0, mesh_b=0)
        self._check_layer(params.mesh_a)
        self._check_layer(params.mesh_b)
        self._params = params

    def _check_layer(self, index: int) -> None:
        if not 0 <= index < self.layer_count:
            raise InvalidLayerIndex(index, self.layer_count)

    def snapshot(self) -> AnimationParameters:
        with self._lock:
            return self._params

    def set(self, **changes: Any) -> AnimationParameters:
        """
        Apply plain value writes, e.g. `store.set(chaos_amplitude=0.3)`.

        Progress belongs to the timeline; write it through
        `MorphControls.set_progress` so the next tick does not revert it.

        Raises:
            ValueError: unknown name, value outside its bounds, or `progress`.
            InvalidLayerIndex: mesh selector outside the loaded meshes.
        """
        if "progress" in changes:
            raise ValueError(
                "progress is driven by the timeline, use MorphControls.set_progress"
            )
        return self._apply(changes)

    def publish_progress(self, progress: float) -> AnimationParameters:
        """Timeline-side write of the morph progress."""
        return self._apply({"progress": progress})

    def _apply(self, changes: Dict[str, Any]) -> AnimationParameters:
        validate_values(changes)
        for name in ("mesh_a", "mesh_b"):
            if name in changes:
                self._check_layer(changes[name])

        with self._lock:
            self._params = replace(self._params, **changes)
            return self._params

    def apply_style(self, name: str) -> AnimationParameters:
        preset = style(name)
        with self._lock:
            self._params = self._params.with_style(preset)
            logger.debug("Particle style set to '%s'", name)
            return self._params

    def select_mesh_a(self, index: int) -> AnimationParameters:
        return self.set(mesh_a=index)

    def select_mesh_b(self, index: int) -> AnimationParameters:
        return self.set(mesh_b=index)

    def dominant_mesh(self) -> int:
        return dominant_mesh(self.snapshot())


class MorphControls:
    """
    Control surface tying the timeline to the parameter store.

    Progress belongs to the timeline; `tick()` publishes it into the store
    once per frame, before the frame's snapshot is taken.
    """

    def __init__(self, store: ParameterStore, timeline: TimelineController) -> None:
        self.store = store
        self.timeline = timeline
        self.store.publish_progress(timeline.progress)

    def trigger(self) -> bool:
        return self.timeline.trigger()

    def set_progress(self, value: float) -> bool:
        applied = self.timeline.set_progress(value)
        if applied:
            self.store.publish_progress(self.timeline.progress)
        return applied

    def set_duration(self, seconds: float) -> None:
        if not 0.1 <= seconds <= 5.0:
            raise ValueError(f"duration={seconds!r} outside [0.1, 5.0]")
        self.timeline.duration = seconds

    def tick(self, dt: float) -> AnimationParameters:
        progress = self.timeline.update(dt)
        return self.store.publish_progress(progress)
