import numpy as np
import pytest

from murmur.animation.noise import NoiseField
from murmur.assets.handle import AssetId
from murmur.assets.importers.texture import solid_texture
from murmur.assets.primitives import BuiltinMesh, builtin_asset
from murmur.assets.types import MeshAsset, MeshData


def make_asset(
    name: str,
    positions,
    triangles,
    uvs=None,
    texture=None,
    asset_id: int = 1,
) -> MeshAsset:
    positions = np.asarray(positions, dtype=np.float32)
    if uvs is None:
        uvs = np.zeros((len(positions), 2), dtype=np.float32)
    return MeshAsset(
        id=AssetId(asset_id),
        name=name,
        mesh=MeshData(positions, uvs, np.asarray(triangles, dtype=np.int64)),
        texture=texture or solid_texture(),
    )


@pytest.fixture
def sphere_asset():
    return builtin_asset(BuiltinMesh.SPHERE)


@pytest.fixture
def torus_asset():
    return builtin_asset(BuiltinMesh.TORUS)


@pytest.fixture
def two_meshes(sphere_asset, torus_asset):
    return [sphere_asset, torus_asset]


@pytest.fixture
def triangle_asset():
    return make_asset(
        "triangle",
        [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)],
        [(0, 1, 2)],
        uvs=[(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)],
    )


@pytest.fixture(scope="session")
def noise():
    """Small seeded noise field; generation is cheap at this size."""
    return NoiseField.generate(size=32, octaves=2, base_cells=4, seed=3)
