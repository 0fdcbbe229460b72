# murmur/baking/baker.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from murmur.assets.types import MeshAsset
from murmur.baking.sampler import SurfaceSampler
from murmur.errors import BufferResolutionMismatch, InvalidLayerIndex

logger = logging.getLogger(__name__)

# Resolutions offered by the application. The baker itself accepts any R >= 1.
RESOLUTIONS: Tuple[int, ...] = (32, 64, 128, 256, 512)


@dataclass(frozen=True)
class BakedParticles:
    """
    Multi-layer particle buffers, one layer per mesh.

    positions: (layers, R, R, 4) float32, texel = (x, y, z, size_hint)
    uvs:       (layers, R, R, 2) float32
    colors:    (layers, R, R, 4) float32 vertex-color tint, white when omitted

    Texel [m, y, x] belongs to particle y * R + x of mesh m.
    """

    positions: NDArray[np.float32]
    uvs: NDArray[np.float32]
    resolution: int
    mesh_names: Tuple[str, ...]
    colors: Optional[NDArray[np.float32]] = None

    def __post_init__(self) -> None:
        r = self.resolution
        layers = len(self.mesh_names)
        if self.colors is None:
            white = np.ones(self.positions.shape[:-1] + (4,), dtype=np.float32)
            white.setflags(write=False)
            object.__setattr__(self, "colors", white)
        for name, buffer in (("positions", self.positions), ("uvs", self.uvs)):
            if buffer.ndim > 0 and buffer.shape[0] != layers:
                raise ValueError(
                    f"{name} buffer has {buffer.shape[0]} layers, "
                    f"expected {layers} (one per mesh)"
                )
        if self.positions.shape != (layers, r, r, 4):
            raise BufferResolutionMismatch(r, _side_of(self.positions))
        if self.uvs.shape != (layers, r, r, 2):
            raise BufferResolutionMismatch(r, _side_of(self.uvs))
        if self.colors.shape != (layers, r, r, 4):
            raise BufferResolutionMismatch(r, _side_of(self.colors))

    @property
    def layer_count(self) -> int:
        return len(self.mesh_names)

    @property
    def particle_count(self) -> int:
        return self.resolution * self.resolution

    def check_layer(self, index: int) -> int:
        if not 0 <= index < self.layer_count:
            raise InvalidLayerIndex(index, self.layer_count)
        return index

    def layer_positions(self, index: int) -> NDArray[np.float32]:
        """Flat (R*R, 4) view of one layer's position buffer."""
        return self.positions[self.check_layer(index)].reshape(-1, 4)

    def layer_uvs(self, index: int) -> NDArray[np.float32]:
        """Flat (R*R, 2) view of one layer's uv buffer."""
        return self.uvs[self.check_layer(index)].reshape(-1, 2)

    def layer_colors(self, index: int) -> NDArray[np.float32]:
        """Flat (R*R, 4) view of one layer's vertex-color tint."""
        return self.colors[self.check_layer(index)].reshape(-1, 4)


def _side_of(buffer: NDArray) -> int:
    return int(buffer.shape[1]) if buffer.ndim >= 2 else 0


class ParticleBaker:
    """
    Bakes a set of meshes into index-aligned particle buffers.

    This is the one blocking rebuild point: run it again whenever the mesh set
    or the resolution changes, and reallocate anything sized by R*R.
    """

    def __init__(self, sampler: Optional[SurfaceSampler] = None) -> None:
        self.sampler = sampler or SurfaceSampler()

    def bake(self, meshes: Sequence[MeshAsset], resolution: int) -> BakedParticles:
        if resolution < 1:
            raise ValueError(f"Resolution must be positive, got {resolution}")
        if not meshes:
            raise ValueError("At least one mesh is required to bake particles")

        start = time.perf_counter()
        count = resolution * resolution
        layers = len(meshes)

        positions = np.zeros((layers, resolution, resolution, 4), dtype=np.float32)
        uvs = np.zeros((layers, resolution, resolution, 2), dtype=np.float32)
        colors = np.ones((layers, resolution, resolution, 4), dtype=np.float32)

        for m, asset in enumerate(meshes):
            samples = self.sampler.sample(asset, count)
            # Row-major reshape puts sample k at (y = k // R, x = k % R)
            positions[m, :, :, :3] = samples.positions.reshape(
                resolution, resolution, 3
            )
            positions[m, :, :, 3] = samples.size_hints.reshape(
                resolution, resolution
            )
            uvs[m] = samples.uvs.reshape(resolution, resolution, 2)
            colors[m] = samples.colors.reshape(resolution, resolution, 4)

        positions.setflags(write=False)
        uvs.setflags(write=False)
        colors.setflags(write=False)

        logger.info(
            "Baked %d meshes at %dx%d (%d particles each) in %.3fs",
            layers,
            resolution,
            resolution,
            count,
            time.perf_counter() - start,
        )

        return BakedParticles(
            positions=positions,
            uvs=uvs,
            resolution=resolution,
            mesh_names=tuple(a.name for a in meshes),
            colors=colors,
        )
