# murmur/animation/noise.py
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from murmur.animation.sampling import sample_bilinear
from murmur.assets.types import TextureData

logger = logging.getLogger(__name__)


def pcg_hash(seed: NDArray) -> NDArray[np.float64]:
    """
    PCG integer hash mapped to [0, 1).

    Same construction as the GPU `hash()` helper: one LCG step followed by a
    random xorshift and a multiply, all in uint32 arithmetic.
    """
    state = np.atleast_1d(np.asarray(seed)).astype(np.uint32) * np.uint32(747796405) + np.uint32(
        2891336453
    )
    shift = (state >> np.uint32(28)) + np.uint32(4)
    word = ((state >> shift) ^ state) * np.uint32(277803737)
    result = (word >> np.uint32(22)) ^ word
    return result.astype(np.float64) / 2.0**32


class NoiseField:
    """
    Tileable RGB noise image used for every noise lookup in the evaluator.

    Lookups repeat outside [0, 1] and are bilinearly filtered; the red channel
    drives timing desync and all three channels drive displacement directions.
    """

    def __init__(self, texels: NDArray[np.float32]) -> None:
        if texels.ndim != 3 or texels.shape[2] < 3:
            raise ValueError(f"Noise texels must be (H, W, >=3), got {texels.shape}")
        self.texels = np.ascontiguousarray(texels[:, :, :3], dtype=np.float32)
        self.texels.setflags(write=False)

    @classmethod
    def from_texture(cls, data: TextureData) -> "NoiseField":
        return cls(data.to_array())

    @classmethod
    def generate(
        cls,
        size: int = 256,
        octaves: int = 4,
        base_cells: int = 8,
        seed: Optional[int] = None,
    ) -> "NoiseField":
        """
        Procedural fractal value noise, tileable in both directions.

        Each channel is an independent sum of `octaves` layers of smoothly
        interpolated lattice noise, normalized to [0, 1].
        """
        rng = np.random.default_rng(seed)
        coords = (np.arange(size) + 0.5) / size
        u, v = np.meshgrid(coords, coords)
        uv = np.stack([u.ravel(), v.ravel()], axis=1)

        channels = []
        for _ in range(3):
            total = np.zeros(size * size)
            amplitude = 1.0
            cells = base_cells
            for _ in range(octaves):
                total += amplitude * _value_noise(uv, cells, rng)
                amplitude *= 0.5
                cells *= 2
            lo, hi = total.min(), total.max()
            channels.append((total - lo) / (hi - lo) if hi > lo else total * 0.0)

        texels = np.stack(channels, axis=1).reshape(size, size, 3)
        logger.debug("Generated %dx%d noise field (%d octaves)", size, size, octaves)
        return cls(texels.astype(np.float32))

    def sample(self, uv: NDArray) -> NDArray[np.float32]:
        """(N, 2) uv -> (N, 3) values in [0, 1]."""
        return sample_bilinear(self.texels, uv, "repeat")

    def sample_red(self, uv: NDArray) -> NDArray[np.float32]:
        return self.sample(uv)[:, 0]

    def sample_signed(self, uv: NDArray) -> NDArray[np.float32]:
        """Noise remapped from [0, 1] to [-1, 1]."""
        return self.sample(uv) * 2.0 - 1.0


def _value_noise(uv: NDArray, cells: int, rng: np.random.Generator) -> NDArray:
    """One octave of lattice noise with smoothstep blending, wrapping at `cells`."""
    lattice = rng.random((cells, cells))
    scaled = uv * cells
    i0 = np.floor(scaled).astype(np.int64)
    f = scaled - i0
    f = f * f * (3.0 - 2.0 * f)
    x0 = i0[:, 0] % cells
    y0 = i0[:, 1] % cells
    x1 = (x0 + 1) % cells
    y1 = (y0 + 1) % cells
    fx, fy = f[:, 0], f[:, 1]
    top = lattice[y0, x0] * (1.0 - fx) + lattice[y0, x1] * fx
    bottom = lattice[y1, x0] * (1.0 - fx) + lattice[y1, x1] * fx
    return top * (1.0 - fy) + bottom * fy
