from murmur.errors import (
    BufferResolutionMismatch,
    InvalidLayerIndex,
    InvalidMeshAsset,
    MurmurError,
)

__all__ = [
    "BufferResolutionMismatch",
    "InvalidLayerIndex",
    "InvalidMeshAsset",
    "MurmurError",
]
