# murmur/errors.py


class MurmurError(Exception):
    """Base class for configuration errors raised by the morph core."""


class InvalidMeshAsset(MurmurError):
    """A mesh has no triangles, zero surface area or non-finite data."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Mesh '{name}' cannot be sampled: {reason}")
        self.name = name
        self.reason = reason


class InvalidLayerIndex(MurmurError, IndexError):
    """A mesh selector points outside the baked layer range."""

    def __init__(self, index: int, layer_count: int) -> None:
        super().__init__(
            f"Layer index {index} out of range (0..{layer_count - 1})"
        )
        self.index = index
        self.layer_count = layer_count


class BufferResolutionMismatch(MurmurError):
    """Baked buffers do not match the resolution the caller expects."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Baked buffers have resolution {actual}, expected {expected}"
        )
        self.expected = expected
        self.actual = actual
