# murmur/baking/sampler.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from murmur.assets.types import MeshAsset
from murmur.errors import InvalidMeshAsset

logger = logging.getLogger(__name__)

SizeMode = Literal["constant", "area"]

# Clamp for area-derived size hints, relative to the mean triangle.
_SIZE_HINT_RANGE = (0.5, 2.0)


@dataclass(frozen=True)
class SurfaceSamples:
    """
    `count` points scattered over a mesh surface.

    positions:  (count, 3) float32
    uvs:        (count, 2) float32
    size_hints: (count,)   float32
    colors:     (count, 4) float32, interpolated vertex colors (white when
                the mesh has none)
    """

    positions: NDArray[np.float32]
    uvs: NDArray[np.float32]
    size_hints: NDArray[np.float32]
    colors: NDArray[np.float32]

    def __len__(self) -> int:
        return len(self.positions)


def triangle_areas(positions: NDArray, triangles: NDArray) -> NDArray[np.float64]:
    """Vectorized area of every triangle."""
    p = positions.astype(np.float64)
    a = p[triangles[:, 0]]
    b = p[triangles[:, 1]]
    c = p[triangles[:, 2]]
    return 0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1)


def sample_surface(
    asset: MeshAsset,
    count: int,
    rng: np.random.Generator,
    size_mode: SizeMode = "constant",
) -> SurfaceSamples:
    """
    Area-weighted uniform sampling of a triangle mesh.

    Triangles are drawn with probability proportional to their area, then a
    point is placed uniformly inside each drawn triangle using the square-root
    barycentric warp. UVs and vertex colors are interpolated with the same
    weights.

    Raises:
        InvalidMeshAsset: no triangles, zero total area or non-finite vertices.
        ValueError: count < 1.
    """
    if count < 1:
        raise ValueError(f"Sample count must be positive, got {count}")

    mesh = asset.mesh
    if mesh.triangle_count == 0:
        raise InvalidMeshAsset(asset.name, "mesh has no triangles")
    if not np.all(np.isfinite(mesh.positions)):
        raise InvalidMeshAsset(asset.name, "mesh has non-finite vertex positions")

    areas = triangle_areas(mesh.positions, mesh.triangles)
    total = float(areas.sum())
    if not np.isfinite(total) or total <= 0.0:
        raise InvalidMeshAsset(asset.name, "mesh has zero surface area")

    cdf = np.cumsum(areas)
    cdf /= cdf[-1]
    picks = np.searchsorted(cdf, rng.random(count), side="right")
    # Guard float round-off at the top of the cdf
    picks = np.minimum(picks, len(areas) - 1)

    # Square-root warp: uniform over the triangle, not biased to a corner
    r1 = np.sqrt(rng.random(count))
    r2 = rng.random(count)
    w0 = 1.0 - r1
    w1 = r1 * (1.0 - r2)
    w2 = r1 * r2
    weights = np.stack([w0, w1, w2], axis=1)[:, :, None]

    tris = mesh.triangles[picks]
    corners = mesh.positions.astype(np.float64)[tris]  # (count, 3, 3)
    corner_uvs = mesh.uvs.astype(np.float64)[tris]  # (count, 3, 2)

    positions = (corners * weights).sum(axis=1)
    uvs = (corner_uvs * weights).sum(axis=1)

    if mesh.colors is not None:
        colors = (mesh.colors.astype(np.float64)[tris] * weights).sum(axis=1)
    else:
        colors = np.ones((count, 4))

    if size_mode == "constant":
        size_hints = np.ones(count, dtype=np.float32)
    elif size_mode == "area":
        mean_area = total / len(areas)
        size_hints = np.clip(
            np.sqrt(areas[picks] / mean_area), *_SIZE_HINT_RANGE
        ).astype(np.float32)
    else:
        raise ValueError(f"Unknown size mode: {size_mode}")

    return SurfaceSamples(
        positions=positions.astype(np.float32),
        uvs=uvs.astype(np.float32),
        size_hints=size_hints,
        colors=colors.astype(np.float32),
    )


class SurfaceSampler:
    """
    Produces exactly `count` surface samples for a mesh, cached by
    (mesh id, count) so a resolution switch back and forth is cheap.
    """

    def __init__(
        self, seed: Optional[int] = None, size_mode: SizeMode = "constant"
    ) -> None:
        self.seed = seed
        self.size_mode: SizeMode = size_mode
        self._cache: Dict[Tuple[int, int], SurfaceSamples] = {}
        self._lock = threading.Lock()

    def _rng_for(self, asset: MeshAsset, count: int) -> np.random.Generator:
        if self.seed is None:
            return np.random.default_rng()
        # Independent stream per (mesh, count), reproducible for a fixed seed
        return np.random.default_rng([self.seed, int(asset.id), count])

    def sample(self, asset: MeshAsset, count: int) -> SurfaceSamples:
        key = (int(asset.id), count)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        samples = sample_surface(
            asset, count, self._rng_for(asset, count), self.size_mode
        )
        logger.debug(
            "Sampled %d points from '%s' (%d triangles)",
            count,
            asset.name,
            asset.mesh.triangle_count,
        )

        with self._lock:
            return self._cache.setdefault(key, samples)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
