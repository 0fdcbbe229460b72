# murmur/session.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import List, Optional, Sequence

from murmur.animation.easing import get_easing
from murmur.animation.evaluator import ParticleFrame, evaluate, evaluate_parallel
from murmur.animation.noise import NoiseField
from murmur.animation.params import AnimationParameters
from murmur.animation.sampling import ColorTexture
from murmur.animation.timeline import TimelineController
from murmur.assets.types import MeshAsset
from murmur.baking.baker import BakedParticles, ParticleBaker
from murmur.baking.sampler import SurfaceSampler
from murmur.config import MorphSettings
from murmur.controls import MorphControls, ParameterStore

logger = logging.getLogger(__name__)


class MorphSession:
    """
    Everything needed to produce particle frames, without a window.

    Frame order: `tick()` advances the timeline and publishes progress,
    then one parameter snapshot is taken and every particle is evaluated
    against it.
    """

    def __init__(
        self,
        meshes: Sequence[MeshAsset],
        noise: NoiseField,
        settings: MorphSettings = MorphSettings(),
        workers: Optional[int] = None,
    ) -> None:
        if not meshes:
            raise ValueError("A morph session needs at least one mesh")
        self.meshes: List[MeshAsset] = list(meshes)
        self.noise = noise
        self.settings = settings
        self.textures = [ColorTexture(m.texture) for m in self.meshes]

        self.baker = ParticleBaker(
            SurfaceSampler(seed=settings.seed, size_mode=settings.size_mode)  # type: ignore[arg-type]
        )
        self.baked: BakedParticles = self.baker.bake(self.meshes, settings.resolution)

        initial = settings.animation
        if len(self.meshes) == 1:
            initial = replace(initial, mesh_a=0, mesh_b=0)
        self.store = ParameterStore(len(self.meshes), initial)
        self.store.apply_style(settings.style)
        self.timeline = TimelineController(
            duration=settings.duration,
            progress=initial.progress,
            ease=get_easing(settings.easing),
        )
        self.controls = MorphControls(self.store, self.timeline)

        self.elapsed = 0.0
        self._executor = (
            ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ParticleEval")
            if workers and workers > 1
            else None
        )
        self._workers = workers or 1

    @property
    def resolution(self) -> int:
        return self.baked.resolution

    def set_resolution(self, resolution: int) -> BakedParticles:
        """Blocking rebuild of the baked buffers at a new particle budget."""
        if resolution != self.baked.resolution:
            logger.info("Re-baking particles at resolution %d", resolution)
            self.baked = self.baker.bake(self.meshes, resolution)
        return self.baked

    def mesh_name(self, index: int) -> str:
        return self.meshes[index].name

    def step(self, dt: float) -> ParticleFrame:
        self.elapsed += dt
        self.controls.tick(dt)
        return self.evaluate()

    def evaluate(self, params: Optional[AnimationParameters] = None) -> ParticleFrame:
        params = params or self.store.snapshot()
        if self._executor is not None:
            return evaluate_parallel(
                self.baked,
                params,
                self.noise,
                self.textures,
                self.elapsed,
                executor=self._executor,
                chunks=self._workers,
            )
        return evaluate(self.baked, params, self.noise, self.textures, self.elapsed)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
