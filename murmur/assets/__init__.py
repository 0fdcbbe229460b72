from murmur.assets.handle import AssetHandle, AssetId
from murmur.assets.server import AssetLoadError, AssetServer, load_mesh_assets
from murmur.assets.types import (
    MeshAsset,
    MeshData,
    ShaderSource,
    TextureData,
)

__all__ = [
    "AssetServer",
    "AssetHandle",
    "AssetId",
    "AssetLoadError",
    "MeshAsset",
    "MeshData",
    "TextureData",
    "ShaderSource",
    "load_mesh_assets",
]
