# murmur/assets/types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from murmur.assets.handle import AssetId


def _frozen(array: NDArray, dtype) -> NDArray:
    out = np.ascontiguousarray(array, dtype=dtype)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class MeshData:
    """
    Indexed triangle mesh loaded from disk.

    positions: (V, 3) float32
    uvs:       (V, 2) float32
    triangles: (T, 3) int64, indices into positions/uvs
    colors:    (V, 4) float32 in 0..1, optional
    """

    positions: NDArray[np.float32]
    uvs: NDArray[np.float32]
    triangles: NDArray[np.int64]
    colors: Optional[NDArray[np.float32]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", _frozen(self.positions, np.float32))
        object.__setattr__(self, "uvs", _frozen(self.uvs, np.float32))
        object.__setattr__(self, "triangles", _frozen(self.triangles, np.int64))
        if self.colors is not None:
            object.__setattr__(self, "colors", _frozen(self.colors, np.float32))

        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise ValueError(f"positions must be (V, 3), got {self.positions.shape}")
        if self.uvs.shape != (len(self.positions), 2):
            raise ValueError(
                f"uvs must be ({len(self.positions)}, 2), got {self.uvs.shape}"
            )
        if self.triangles.size and (
            self.triangles.ndim != 2 or self.triangles.shape[1] != 3
        ):
            raise ValueError(f"triangles must be (T, 3), got {self.triangles.shape}")
        if self.triangles.size and (
            self.triangles.min() < 0 or self.triangles.max() >= len(self.positions)
        ):
            raise ValueError("triangle indices out of range")
        if self.colors is not None and self.colors.shape != (len(self.positions), 4):
            raise ValueError(
                f"colors must be ({len(self.positions)}, 4), got {self.colors.shape}"
            )

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    @property
    def aabb(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        if not len(self.positions):
            return ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        lo = self.positions.min(axis=0)
        hi = self.positions.max(axis=0)
        return (tuple(map(float, lo)), tuple(map(float, hi)))  # type: ignore[return-value]


@dataclass(frozen=True)
class TextureData:
    """Raw texture data and metadata. Rows are stored top to bottom."""

    data: bytes
    width: int
    height: int
    components: int  # 3 (RGB) or 4 (RGBA)

    def to_array(self) -> NDArray[np.float32]:
        """Return the texels as a (height, width, components) float array in 0..1."""
        raw = np.frombuffer(self.data, dtype=np.uint8)
        return raw.reshape(self.height, self.width, self.components).astype(
            np.float32
        ) / 255.0


@dataclass(frozen=True)
class ShaderSource:
    """Raw shader source code."""

    source: str
    path: str  # For debugging / error reporting.


@dataclass(frozen=True)
class MeshAsset:
    """A named mesh together with the texture used to color its particles."""

    id: AssetId
    name: str
    mesh: MeshData
    texture: TextureData
