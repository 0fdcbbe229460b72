# murmur/app.py
from __future__ import annotations

import logging
import math
import time
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import moderngl
import pygame

from murmur.animation.noise import NoiseField
from murmur.animation.params import STYLE_LABELS, STYLES
from murmur.assets.primitives import builtin_assets
from murmur.assets.server import AssetServer, load_mesh_assets
from murmur.assets.types import MeshAsset, TextureData
from murmur.baking.baker import RESOLUTIONS
from murmur.config import AppConfig
from murmur.graphics.camera import OrbitCamera
from murmur.graphics.renderer import ParticleRenderer
from murmur.session import MorphSession

logger = logging.getLogger(__name__)

# Radians per second while an orbit key is held
ORBIT_SPEED = 1.2

_RESOLUTION_KEYS = {
    pygame.K_1: 0,
    pygame.K_2: 1,
    pygame.K_3: 2,
    pygame.K_4: 3,
    pygame.K_5: 4,
}


def load_assets(config: AppConfig) -> tuple[List[MeshAsset], NoiseField]:
    """Resolve the configured meshes and noise image, falling back to built-ins."""
    if not config.meshes and config.noise_texture is None:
        logger.info("No assets configured, using built-in meshes and generated noise")
        return builtin_assets(), NoiseField.generate(seed=config.morph.seed)

    server = AssetServer(asset_root=Path(config.asset_root))
    try:
        meshes = (
            load_mesh_assets(
                server, [(m.name, m.mesh, m.texture) for m in config.meshes]
            )
            if config.meshes
            else builtin_assets()
        )

        if config.noise_texture:
            handle = server.load(config.noise_texture)
            server.wait([handle])
            data = server.get(handle)
            if not isinstance(data, TextureData):
                raise TypeError(f"{config.noise_texture} is not a texture")
            noise = NoiseField.from_texture(data)
        else:
            noise = NoiseField.generate(seed=config.morph.seed)
    finally:
        server.shutdown()

    return meshes, noise


class MorphApplication:
    """
    Window, input and draw loop around a `MorphSession`.

    Keys:
        SPACE / click  trigger the morph
        1..5           particle resolution (32 .. 512)
        TAB            cycle particle style
        Q / W          previous / next start mesh
        A / S          previous / next end mesh
        B              toggle additive / normal blending
        LEFT / RIGHT   orbit the camera
        ESC            quit
    """

    def __init__(self, config: AppConfig, workers: Optional[int] = None) -> None:
        self.config = config
        meshes, noise = load_assets(config)
        self.session = MorphSession(meshes, noise, config.morph, workers=workers)
        self.camera = OrbitCamera()

        self.screen_size = (config.window.width, config.window.height)
        self.window: pygame.Surface | None = None
        self.ctx: moderngl.Context | None = None
        self.renderer: ParticleRenderer | None = None
        self.clock: pygame.time.Clock | None = None
        self.running = False

        self._styles = list(STYLES)
        self._style_index = self._styles.index(config.morph.style)
        self._render_settings = config.render

    def _ensure_window(self) -> None:
        if self.window is not None:
            return

        pygame.init()
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MAJOR_VERSION, 3)
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MINOR_VERSION, 3)
        pygame.display.gl_set_attribute(
            pygame.GL_CONTEXT_PROFILE_MASK, pygame.GL_CONTEXT_PROFILE_CORE
        )
        pygame.display.gl_set_attribute(pygame.GL_DEPTH_SIZE, 24)

        self.window = pygame.display.set_mode(
            self.screen_size, pygame.OPENGL | pygame.DOUBLEBUF
        )
        self.ctx = moderngl.create_context()
        logger.info("OpenGL %s", self.ctx.info.get("GL_VERSION", "unknown"))

        self.renderer = ParticleRenderer(
            self.ctx, self.session.resolution, self._render_settings
        )
        self.clock = pygame.time.Clock()
        self._update_title()

    def _update_title(self) -> None:
        current = self.session.mesh_name(self.session.store.dominant_mesh())
        style = STYLE_LABELS[self._styles[self._style_index]]
        pygame.display.set_caption(
            f"{self.config.window.title} - {current.title()} "
            f"[{self.session.resolution}^2, {style}]"
        )

    def set_resolution(self, resolution: int) -> None:
        self.session.set_resolution(resolution)
        if self.renderer is not None:
            self.renderer.resize(self.session.resolution)
        self._update_title()

    def _cycle_mesh(self, which: str, step: int) -> None:
        params = self.session.store.snapshot()
        count = len(self.session.meshes)
        if which == "a":
            self.session.store.select_mesh_a((params.mesh_a + step) % count)
        else:
            self.session.store.select_mesh_b((params.mesh_b + step) % count)
        self._update_title()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.session.controls.trigger()
        elif event.type == pygame.KEYDOWN:
            key = event.key
            if key == pygame.K_ESCAPE:
                self.running = False
            elif key == pygame.K_SPACE:
                self.session.controls.trigger()
            elif key in _RESOLUTION_KEYS:
                self.set_resolution(RESOLUTIONS[_RESOLUTION_KEYS[key]])
            elif key == pygame.K_TAB:
                self._style_index = (self._style_index + 1) % len(self._styles)
                self.session.store.apply_style(self._styles[self._style_index])
                self._update_title()
            elif key == pygame.K_q:
                self._cycle_mesh("a", -1)
            elif key == pygame.K_w:
                self._cycle_mesh("a", 1)
            elif key == pygame.K_a:
                self._cycle_mesh("b", -1)
            elif key == pygame.K_s:
                self._cycle_mesh("b", 1)
            elif key == pygame.K_b:
                blending = (
                    "normal"
                    if self._render_settings.blending == "additive"
                    else "additive"
                )
                self._render_settings = replace(
                    self._render_settings, blending=blending
                )
                if self.renderer is not None:
                    self.renderer.settings = self._render_settings

    def render_frame(self, dt: float) -> None:
        assert self.ctx is not None and self.renderer is not None
        frame = self.session.step(dt)
        params = self.session.store.snapshot()

        w, h = self.screen_size
        self.ctx.clear(*self._render_settings.background, depth=1.0)
        self.renderer.render(
            frame, params, self.camera.view(), self.camera.projection(w, h)
        )

    def run(self) -> None:
        self._ensure_window()
        assert self.clock is not None
        self.running = True
        last_dominant = self.session.store.dominant_mesh()
        last = time.perf_counter()

        while self.running:
            for event in pygame.event.get():
                self.handle_event(event)

            now = time.perf_counter()
            # Clamp so a stall does not fast-forward the tween
            dt = min(now - last, 0.25)
            last = now

            keys = pygame.key.get_pressed()
            if keys[pygame.K_LEFT]:
                self.camera.yaw -= ORBIT_SPEED * dt
            if keys[pygame.K_RIGHT]:
                self.camera.yaw += ORBIT_SPEED * dt
            self.camera.yaw %= 2.0 * math.pi

            self.render_frame(dt)

            dominant = self.session.store.dominant_mesh()
            if dominant != last_dominant:
                last_dominant = dominant
                self._update_title()

            pygame.display.flip()
            self.clock.tick(self.config.window.fps)

        self.shutdown()

    def shutdown(self) -> None:
        if self.renderer is not None:
            self.renderer.release()
            self.renderer = None
        self.session.close()
        if self.window is not None:
            pygame.quit()
            self.window = None
