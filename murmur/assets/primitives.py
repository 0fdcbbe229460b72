# murmur/assets/primitives.py
"""
Procedural meshes used when no mesh files are configured, and by the tests.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Callable, Dict, List, Tuple

import numpy as np

from murmur.assets.handle import asset_id_for
from murmur.assets.types import MeshAsset, MeshData, TextureData


class BuiltinMesh(StrEnum):
    SPHERE = "builtin/sphere"
    TORUS = "builtin/torus"
    BOX = "builtin/box"
    PLANE = "builtin/plane"


def _grid_triangles(rows: int, cols: int) -> np.ndarray:
    """Two triangles per cell of a (rows+1) x (cols+1) vertex grid."""
    r, c = np.meshgrid(np.arange(rows), np.arange(cols), indexing="ij")
    a = (r * (cols + 1) + c).ravel()
    b = a + 1
    d = a + (cols + 1)
    e = d + 1
    return np.concatenate(
        [np.stack([a, d, b], axis=1), np.stack([b, d, e], axis=1)]
    ).astype(np.int64)


def _grid_uvs(rows: int, cols: int) -> np.ndarray:
    v, u = np.meshgrid(
        np.linspace(0.0, 1.0, rows + 1), np.linspace(0.0, 1.0, cols + 1), indexing="ij"
    )
    return np.stack([u.ravel(), 1.0 - v.ravel()], axis=1)


def sphere(radius: float = 1.0, rings: int = 24, segments: int = 48) -> MeshData:
    uvs = _grid_uvs(rings, segments)
    theta = (1.0 - uvs[:, 1]) * math.pi  # 0 at the north pole
    phi = uvs[:, 0] * 2.0 * math.pi
    positions = np.stack(
        [
            radius * np.sin(theta) * np.cos(phi),
            radius * np.cos(theta),
            radius * np.sin(theta) * np.sin(phi),
        ],
        axis=1,
    )
    return MeshData(positions, uvs, _grid_triangles(rings, segments))


def torus(
    major: float = 1.0, minor: float = 0.35, rings: int = 24, segments: int = 48
) -> MeshData:
    uvs = _grid_uvs(rings, segments)
    a = uvs[:, 0] * 2.0 * math.pi
    b = uvs[:, 1] * 2.0 * math.pi
    positions = np.stack(
        [
            (major + minor * np.cos(b)) * np.cos(a),
            minor * np.sin(b),
            (major + minor * np.cos(b)) * np.sin(a),
        ],
        axis=1,
    )
    return MeshData(positions, uvs, _grid_triangles(rings, segments))


def plane(size: float = 2.0, divisions: int = 8) -> MeshData:
    uvs = _grid_uvs(divisions, divisions)
    positions = np.stack(
        [
            (uvs[:, 0] - 0.5) * size,
            np.zeros(len(uvs)),
            (0.5 - uvs[:, 1]) * size,
        ],
        axis=1,
    )
    return MeshData(positions, uvs, _grid_triangles(divisions, divisions))


def box(size: float = 1.5) -> MeshData:
    h = size / 2.0
    # Each face: origin corner, u axis, v axis
    faces = [
        ((-h, -h, h), (1, 0, 0), (0, 1, 0)),
        ((h, -h, -h), (-1, 0, 0), (0, 1, 0)),
        ((h, -h, h), (0, 0, -1), (0, 1, 0)),
        ((-h, -h, -h), (0, 0, 1), (0, 1, 0)),
        ((-h, h, h), (1, 0, 0), (0, 0, -1)),
        ((-h, -h, -h), (1, 0, 0), (0, 0, 1)),
    ]
    positions: List[Tuple[float, float, float]] = []
    uvs: List[Tuple[float, float]] = []
    triangles: List[Tuple[int, int, int]] = []
    for origin, u_axis, v_axis in faces:
        o = np.asarray(origin, dtype=np.float64)
        du = np.asarray(u_axis, dtype=np.float64) * size
        dv = np.asarray(v_axis, dtype=np.float64) * size
        base = len(positions)
        for cu, cv in ((0, 0), (1, 0), (0, 1), (1, 1)):
            positions.append(tuple(o + du * cu + dv * cv))
            uvs.append((float(cu), float(cv)))
        triangles.append((base, base + 1, base + 2))
        triangles.append((base + 1, base + 3, base + 2))
    return MeshData(
        np.asarray(positions), np.asarray(uvs), np.asarray(triangles, dtype=np.int64)
    )


def gradient_texture(
    start: Tuple[int, int, int], end: Tuple[int, int, int], size: int = 64
) -> TextureData:
    """Diagonal RGBA gradient, handy for telling particles apart by uv."""
    coords = np.linspace(0.0, 1.0, size)
    t = (coords[None, :] + coords[:, None]) / 2.0
    rgb = (
        np.asarray(start, dtype=np.float64)[None, None, :] * (1.0 - t[..., None])
        + np.asarray(end, dtype=np.float64)[None, None, :] * t[..., None]
    )
    rgba = np.concatenate([rgb, np.full((size, size, 1), 255.0)], axis=2)
    return TextureData(
        data=rgba.round().astype(np.uint8).tobytes(),
        width=size,
        height=size,
        components=4,
    )


_BUILDERS: Dict[BuiltinMesh, Callable[[], MeshData]] = {
    BuiltinMesh.SPHERE: sphere,
    BuiltinMesh.TORUS: torus,
    BuiltinMesh.BOX: box,
    BuiltinMesh.PLANE: plane,
}

_COLORS: Dict[BuiltinMesh, Tuple[Tuple[int, int, int], Tuple[int, int, int]]] = {
    BuiltinMesh.SPHERE: ((255, 80, 120), (255, 210, 90)),
    BuiltinMesh.TORUS: ((60, 200, 255), (150, 90, 255)),
    BuiltinMesh.BOX: ((90, 255, 140), (20, 120, 255)),
    BuiltinMesh.PLANE: ((240, 240, 240), (90, 90, 110)),
}


def builtin_asset(kind: BuiltinMesh) -> MeshAsset:
    start, end = _COLORS[kind]
    return MeshAsset(
        id=asset_id_for(kind.value),
        name=kind.name.lower(),
        mesh=_BUILDERS[kind](),
        texture=gradient_texture(start, end),
    )


def builtin_assets() -> List[MeshAsset]:
    return [builtin_asset(kind) for kind in BuiltinMesh]
