# murmur/animation/sampling.py
from __future__ import annotations

from typing import Literal

import numpy as np
from numpy.typing import NDArray

from murmur.assets.types import TextureData

WrapMode = Literal["repeat", "clamp"]


def sample_bilinear(
    texels: NDArray[np.float32], uv: NDArray, wrap: WrapMode = "repeat"
) -> NDArray[np.float32]:
    """
    Filtered lookup of a (H, W, C) texel grid at (N, 2) uv coordinates.

    v = 0 is the bottom row of the image, matching OpenGL texture space.
    Texel centers sit at half-integer positions. Returns (N, C).
    """
    h, w = texels.shape[:2]
    uv = np.asarray(uv, dtype=np.float64).reshape(-1, 2)

    x = uv[:, 0] * w - 0.5
    y = (1.0 - uv[:, 1]) * h - 0.5

    x0 = np.floor(x)
    y0 = np.floor(y)
    fx = (x - x0)[:, None]
    fy = (y - y0)[:, None]
    x0 = x0.astype(np.int64)
    y0 = y0.astype(np.int64)
    x1 = x0 + 1
    y1 = y0 + 1

    if wrap == "repeat":
        x0 %= w
        x1 %= w
        y0 %= h
        y1 %= h
    elif wrap == "clamp":
        x0 = np.clip(x0, 0, w - 1)
        x1 = np.clip(x1, 0, w - 1)
        y0 = np.clip(y0, 0, h - 1)
        y1 = np.clip(y1, 0, h - 1)
    else:
        raise ValueError(f"Unknown wrap mode: {wrap}")

    top = texels[y0, x0] * (1.0 - fx) + texels[y0, x1] * fx
    bottom = texels[y1, x0] * (1.0 - fx) + texels[y1, x1] * fx
    return (top * (1.0 - fy) + bottom * fy).astype(np.float32)


class ColorTexture:
    """CPU-side RGBA texture sampled per particle to color it."""

    def __init__(self, data: TextureData, wrap: WrapMode = "repeat") -> None:
        texels = data.to_array()
        if data.components == 3:
            alpha = np.ones(texels.shape[:2] + (1,), dtype=np.float32)
            texels = np.concatenate([texels, alpha], axis=2)
        self.texels = texels
        self.wrap: WrapMode = wrap
        self.width = data.width
        self.height = data.height

    def sample(self, uv: NDArray) -> NDArray[np.float32]:
        return sample_bilinear(self.texels, uv, self.wrap)
