# murmur/graphics/camera.py
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numpy.typing import NDArray


def look_at(
    eye: NDArray, target: NDArray, up: Tuple[float, float, float] = (0.0, 1.0, 0.0)
) -> NDArray[np.float32]:
    """Right-handed view matrix (row-major, column vectors)."""
    eye = np.asarray(eye, dtype=np.float64)
    target = np.asarray(target, dtype=np.float64)

    f = target - eye
    f /= np.linalg.norm(f)
    s = np.cross(f, np.asarray(up, dtype=np.float64))
    s_len = np.linalg.norm(s)
    if s_len < 1e-9:
        # Looking straight up/down; pick any perpendicular right vector
        s = np.array([1.0, 0.0, 0.0])
    else:
        s /= s_len
    u = np.cross(s, f)

    view = np.eye(4)
    view[0, :3] = s
    view[1, :3] = u
    view[2, :3] = -f
    view[0, 3] = -np.dot(s, eye)
    view[1, 3] = -np.dot(u, eye)
    view[2, 3] = np.dot(f, eye)
    return view.astype(np.float32)


def perspective(fov_deg: float, aspect: float, near: float, far: float) -> NDArray[np.float32]:
    f = 1.0 / math.tan(math.radians(fov_deg) / 2.0)
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = (2.0 * far * near) / (near - far)
    proj[3, 2] = -1.0
    return proj.astype(np.float32)


@dataclass
class OrbitCamera:
    """Camera circling a target point; yaw is driven by the application."""

    target: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    distance: float = 5.5
    height: float = 1.3
    yaw: float = 0.0
    fov: float = 50.0
    near: float = 0.05
    far: float = 100.0

    @property
    def eye(self) -> NDArray[np.float32]:
        tx, ty, tz = self.target
        return np.array(
            [
                tx + math.sin(self.yaw) * self.distance,
                ty + self.height,
                tz + math.cos(self.yaw) * self.distance,
            ],
            dtype=np.float32,
        )

    def view(self) -> NDArray[np.float32]:
        return look_at(self.eye, np.asarray(self.target))

    def projection(self, width: int, height: int) -> NDArray[np.float32]:
        return perspective(self.fov, width / max(height, 1), self.near, self.far)
