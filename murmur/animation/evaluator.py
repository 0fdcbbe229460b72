# murmur/animation/evaluator.py
"""
Per-particle morph evaluation.

Every particle is evaluated independently from the baked buffers, one
parameter snapshot and the elapsed time; nothing is carried over between
frames. The functions below are vectorized over particle indices, so a call
with any subset of indices returns exactly the rows a full call would.
"""

from __future__ import annotations

import os
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from murmur.animation.noise import NoiseField, pcg_hash
from murmur.animation.params import AnimationParameters
from murmur.animation.sampling import ColorTexture
from murmur.baking.baker import BakedParticles
from murmur.errors import BufferResolutionMismatch

# Noise texture repeats this many times across a mesh's uv space
NOISE_UV_SCALE = 1.5
# Spread of the per-particle random uv used for chaos and oscillation
RANDOM_UV_SCALE = 10.0
# Seed offset for the second random uv component
RANDOM_UV_SEED_OFFSET = 100
# Converts chaos frequency / oscillation speed to uv drift per second
DRIFT_SCALE = 0.1

SPRITE_SIZE = 32
# Placeholder sprite on per-chunk frames, replaced once the frame is assembled
_NO_SPRITE = np.zeros((0, 0), dtype=np.float32)


@dataclass(frozen=True)
class ParticleFrame:
    """
    Evaluator output for one frame.

    positions:      (N, 3) float32
    sizes:          (N,)   float32
    colors:         (N, 4) float32
    local_progress: (N,)   float32
    sprite:         (S, S) float32 opacity of the sprite quad, shared by all
                    particles since the shape parameters are global
    """

    indices: NDArray[np.int64]
    positions: NDArray[np.float32]
    sizes: NDArray[np.float32]
    colors: NDArray[np.float32]
    local_progress: NDArray[np.float32]
    sprite: NDArray[np.float32]

    def __len__(self) -> int:
        return len(self.indices)


def smoothstep(edge0, edge1, x) -> NDArray:
    """
    Hermite step between two (broadcastable) edges.

    When the edges coincide the result is a hard step at the edge.
    """
    edge0 = np.asarray(edge0, dtype=np.float64)
    edge1 = np.asarray(edge1, dtype=np.float64)
    x = np.asarray(x, dtype=np.float64)
    width = edge1 - edge0
    safe = np.where(width > 0.0, width, 1.0)
    t = np.clip((x - edge0) / safe, 0.0, 1.0)
    smooth = t * t * (3.0 - 2.0 * t)
    return np.where(width > 0.0, smooth, (x >= edge0).astype(np.float64))


def local_progress(
    progress: float, synchronization: float, final_noise: NDArray
) -> NDArray:
    """
    Per-particle morph fraction.

    Particles with high noise start late; each one sweeps over a window of
    width `synchronization` placed inside [0, 1]. The sweep always starts at
    0 and ends at 1, also when the window collapses to a step.
    """
    delay = (1.0 - synchronization) * np.asarray(final_noise, dtype=np.float64)
    window_end = delay + synchronization
    lp = smoothstep(delay, window_end, progress)
    if progress <= 0.0:
        return np.zeros_like(lp)
    if progress >= 1.0:
        return np.ones_like(lp)
    return lp


def chaos_weight(lp: NDArray) -> NDArray:
    """Bell curve: 0 at both ends of a transition, 1 halfway through."""
    return 4.0 * lp * (1.0 - lp)


def random_uv(indices: NDArray) -> NDArray[np.float64]:
    """Stable pseudo-random uv per particle index."""
    indices = np.asarray(indices, dtype=np.int64)
    return (
        np.stack(
            [pcg_hash(indices), pcg_hash(indices + RANDOM_UV_SEED_OFFSET)], axis=1
        )
        * RANDOM_UV_SCALE
    )


def shape_opacity(
    local_uv: NDArray, radius: float, hardness: float, cutoff: float
) -> NDArray[np.float32]:
    """
    Opacity of a sprite at sprite-space coordinates in [0, 1]^2.

    clamp((radius / distance_from_center) ** hardness - cutoff, 0, 1)
    """
    local_uv = np.asarray(local_uv, dtype=np.float64)
    dist = np.linalg.norm(local_uv - 0.5, axis=-1)
    dist = np.maximum(dist, 1e-6)
    with np.errstate(over="ignore"):
        value = np.power(radius / dist, hardness) - cutoff
    return np.clip(value, 0.0, 1.0).astype(np.float32)


def shape_sprite(params: AnimationParameters, size: int = SPRITE_SIZE) -> NDArray:
    """Opacity mask of one particle quad sampled at texel centers."""
    coords = (np.arange(size) + 0.5) / size
    u, v = np.meshgrid(coords, coords)
    return shape_opacity(
        np.stack([u, v], axis=-1),
        params.shape_radius,
        params.shape_hardness,
        params.shape_cutoff,
    )


def _check_inputs(
    baked: BakedParticles,
    params: AnimationParameters,
    textures: Sequence[ColorTexture],
    expected_resolution: Optional[int],
) -> None:
    if expected_resolution is not None and baked.resolution != expected_resolution:
        raise BufferResolutionMismatch(expected_resolution, baked.resolution)
    baked.check_layer(params.mesh_a)
    baked.check_layer(params.mesh_b)
    if len(textures) != baked.layer_count:
        raise ValueError(
            f"Expected {baked.layer_count} color textures, got {len(textures)}"
        )


def _resolve_indices(baked: BakedParticles, indices) -> NDArray[np.int64]:
    if indices is None:
        return np.arange(baked.particle_count, dtype=np.int64)
    indices = np.asarray(indices, dtype=np.int64).ravel()
    if indices.size and (indices.min() < 0 or indices.max() >= baked.particle_count):
        raise IndexError(
            f"Particle indices must lie in [0, {baked.particle_count})"
        )
    return indices


def _evaluate_rows(
    baked: BakedParticles,
    params: AnimationParameters,
    noise: NoiseField,
    textures: Sequence[ColorTexture],
    time: float,
    indices: NDArray[np.int64],
) -> ParticleFrame:
    """Per-particle part of a frame; `sprite` is left empty for the caller."""
    texel_a = baked.layer_positions(params.mesh_a)[indices]
    texel_b = baked.layer_positions(params.mesh_b)[indices]
    uv_a = baked.layer_uvs(params.mesh_a)[indices]
    uv_b = baked.layer_uvs(params.mesh_b)[indices]

    # Timing desync
    noise_a = noise.sample_red(uv_a * NOISE_UV_SCALE)
    noise_b = noise.sample_red(uv_b * NOISE_UV_SCALE)
    final_noise = noise_a * (1.0 - params.progress) + noise_b * params.progress
    lp = local_progress(params.progress, params.synchronization, final_noise)
    lp_col = lp[:, None]

    base = texel_a[:, :3] * (1.0 - lp_col) + texel_b[:, :3] * lp_col

    rand_uv = random_uv(indices)

    chaos_uv = rand_uv + time * params.chaos_frequency * DRIFT_SCALE
    chaos = (
        noise.sample_signed(chaos_uv)
        * chaos_weight(lp_col)
        * params.chaos_amplitude
    )

    oscillation_uv = rand_uv + time * params.oscillation_speed * DRIFT_SCALE
    oscillation = noise.sample_signed(oscillation_uv) * params.oscillation_amplitude

    positions = base + chaos + oscillation

    size_a = texel_a[:, 3]
    size_b = texel_b[:, 3]
    sizes = (size_a * (1.0 - lp) + size_b * lp) * params.particle_size

    # Vertex colors tint the texture; untextured meshes carry a white texture
    tint_a = baked.layer_colors(params.mesh_a)[indices]
    tint_b = baked.layer_colors(params.mesh_b)[indices]
    color_a = textures[params.mesh_a].sample(uv_a) * tint_a
    color_b = textures[params.mesh_b].sample(uv_b) * tint_b
    colors = color_a * (1.0 - lp_col) + color_b * lp_col

    return ParticleFrame(
        indices=indices,
        positions=positions.astype(np.float32),
        sizes=sizes.astype(np.float32),
        colors=colors.astype(np.float32),
        local_progress=lp.astype(np.float32),
        sprite=_NO_SPRITE,
    )


def evaluate(
    baked: BakedParticles,
    params: AnimationParameters,
    noise: NoiseField,
    textures: Sequence[ColorTexture],
    time: float,
    indices=None,
    expected_resolution: Optional[int] = None,
) -> ParticleFrame:
    """
    Evaluate particles at `indices` (all particles when None) for one frame.

    Raises:
        InvalidLayerIndex: mesh_a or mesh_b outside the baked layers.
        BufferResolutionMismatch: baked for another resolution than expected.
    """
    _check_inputs(baked, params, textures, expected_resolution)
    indices = _resolve_indices(baked, indices)
    frame = _evaluate_rows(baked, params, noise, textures, time, indices)
    return replace(frame, sprite=shape_sprite(params))


def evaluate_parallel(
    baked: BakedParticles,
    params: AnimationParameters,
    noise: NoiseField,
    textures: Sequence[ColorTexture],
    time: float,
    executor: Optional[Executor] = None,
    chunks: Optional[int] = None,
    expected_resolution: Optional[int] = None,
) -> ParticleFrame:
    """
    Same result as `evaluate` over all particles, computed in index chunks.

    Chunks are independent, so they run on `executor` without coordination;
    numpy releases the GIL inside the heavy array operations.
    """
    _check_inputs(baked, params, textures, expected_resolution)

    chunks = chunks or os.cpu_count() or 1
    all_indices = np.arange(baked.particle_count, dtype=np.int64)
    parts = [p for p in np.array_split(all_indices, chunks) if p.size]

    owned = executor is None
    pool = executor or ThreadPoolExecutor(
        max_workers=len(parts), thread_name_prefix="ParticleEval"
    )
    try:
        futures = [
            pool.submit(_evaluate_rows, baked, params, noise, textures, time, part)
            for part in parts
        ]
        frames: List[ParticleFrame] = [f.result() for f in futures]
    finally:
        if owned:
            pool.shutdown(wait=True)

    return ParticleFrame(
        indices=all_indices,
        positions=np.concatenate([f.positions for f in frames]),
        sizes=np.concatenate([f.sizes for f in frames]),
        colors=np.concatenate([f.colors for f in frames]),
        local_progress=np.concatenate([f.local_progress for f in frames]),
        sprite=shape_sprite(params),
    )
