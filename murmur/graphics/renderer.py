# murmur/graphics/renderer.py
from __future__ import annotations

import logging
import math
from pathlib import Path

import moderngl
import numpy as np

from murmur.animation.evaluator import ParticleFrame
from murmur.animation.params import AnimationParameters
from murmur.assets.importers.shader import ShaderImporter
from murmur.config import RenderSettings
from murmur.errors import BufferResolutionMismatch

logger = logging.getLogger(__name__)

SHADER_DIR = Path(__file__).parent / "shaders"

# Unit quad as a triangle strip, uv doubles as the corner position
_QUAD_UVS = np.array(
    [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]], dtype=np.float32
)

# 3f position, 1f size, 4f color
_INSTANCE_FORMAT = "3f 1f 4f /i"
_INSTANCE_FLOATS = 8


class ParticleRenderer:
    """
    Draws one camera-facing quad per particle with instancing.

    The instance buffer is sized for one particle resolution; call `resize()`
    after re-baking at another resolution.
    """

    def __init__(
        self,
        ctx: moderngl.Context,
        resolution: int,
        settings: RenderSettings = RenderSettings(),
    ) -> None:
        self.ctx = ctx
        self.settings = settings

        importer = ShaderImporter()
        vert = importer.import_file(SHADER_DIR / "particle.vert")
        frag = importer.import_file(SHADER_DIR / "particle.frag")
        self.program = ctx.program(
            vertex_shader=vert.source, fragment_shader=frag.source
        )

        missing = [
            name
            for name in (
                "u_view",
                "u_proj",
                "u_shape_radius",
                "u_shape_hardness",
                "u_shape_cutoff",
            )
            if self.program.get(name, None) is None
        ]
        if missing:
            raise RuntimeError(f"Particle program missing uniforms: {missing}")

        self.quad_vbo = ctx.buffer(_QUAD_UVS.tobytes())
        self.instance_vbo: moderngl.Buffer | None = None
        self.vao: moderngl.VertexArray | None = None
        self.resolution = 0
        self.particle_count = 0
        self.resize(resolution)

    def resize(self, resolution: int) -> None:
        """Reallocate per-instance storage for a new particle resolution."""
        if self.vao is not None:
            self.vao.release()
        if self.instance_vbo is not None:
            self.instance_vbo.release()

        self.resolution = resolution
        self.particle_count = particle_count = resolution * resolution
        self.instance_vbo = self.ctx.buffer(
            reserve=particle_count * _INSTANCE_FLOATS * 4, dynamic=True
        )
        self.vao = self.ctx.vertex_array(
            self.program,
            [
                (self.quad_vbo, "2f", "in_uv"),
                (self.instance_vbo, _INSTANCE_FORMAT, "i_pos", "i_size", "i_color"),
            ],
        )
        logger.debug("Particle renderer sized for %d instances", particle_count)

    def upload(self, frame: ParticleFrame) -> None:
        check_frame_size(len(frame), self.resolution)
        assert self.instance_vbo is not None

        packed = np.empty((len(frame), _INSTANCE_FLOATS), dtype=np.float32)
        packed[:, 0:3] = frame.positions
        packed[:, 3] = frame.sizes
        packed[:, 4:8] = frame.colors
        self.instance_vbo.write(packed.tobytes())

    def render(
        self,
        frame: ParticleFrame,
        params: AnimationParameters,
        view: np.ndarray,
        proj: np.ndarray,
    ) -> None:
        self.upload(frame)

        # Matrices are row-major in numpy, GLSL expects column-major
        self.program["u_view"].write(view.astype(np.float32).T.tobytes())
        self.program["u_proj"].write(proj.astype(np.float32).T.tobytes())
        self.program["u_shape_radius"].value = params.shape_radius
        self.program["u_shape_hardness"].value = params.shape_hardness
        self.program["u_shape_cutoff"].value = params.shape_cutoff

        gl = self.ctx
        gl.enable(moderngl.BLEND | moderngl.DEPTH_TEST)
        gl.disable(moderngl.CULL_FACE)
        if self.settings.blending == "additive":
            gl.blend_func = moderngl.SRC_ALPHA, moderngl.ONE
        else:
            gl.blend_func = moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA
        gl.fbo.depth_mask = self.settings.depth_write
        gl.wireframe = self.settings.wireframe

        assert self.vao is not None
        self.vao.render(mode=moderngl.TRIANGLE_STRIP, instances=self.particle_count)

        gl.fbo.depth_mask = True
        gl.wireframe = False

    def release(self) -> None:
        if self.vao is not None:
            self.vao.release()
        if self.instance_vbo is not None:
            self.instance_vbo.release()
        self.quad_vbo.release()
        self.program.release()


def check_frame_size(particle_count: int, resolution: int) -> None:
    """Raise if a frame was evaluated from buffers of another resolution."""
    if particle_count != resolution * resolution:
        raise BufferResolutionMismatch(resolution, math.isqrt(particle_count))
