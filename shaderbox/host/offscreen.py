# shaderbox/host/offscreen.py
from __future__ import annotations

import logging
from typing import Optional

import moderngl
import numpy as np
from PIL import Image

from shaderbox.gl.backend import GLBackend
from shaderbox.gl.opengl import OpenGLBackend
from shaderbox.host.surface import Surface
from shaderbox.settings import SurfaceSettings

log = logging.getLogger(__name__)


class OffscreenSurface(Surface):
    """
    A headless surface: moderngl standalone context plus an RGBA framebuffer.

    Used for still captures and for compiling shaders without a window.
    """

    def __init__(
        self,
        settings: Optional[SurfaceSettings] = None,
        *,
        require: int = 430,
        backend: Optional[GLBackend] = None,
    ):
        super().__init__(settings)
        self._require = require
        self._backend = backend or OpenGLBackend()
        self._ctx: Optional[moderngl.Context] = None
        self._fbo: Optional[moderngl.Framebuffer] = None

    def _acquire_device(self) -> GLBackend:
        ctx = moderngl.create_standalone_context(require=self._require)
        try:
            fbo = ctx.simple_framebuffer(self.size, components=4)
        except moderngl.Error:
            ctx.release()
            raise

        fbo.use()
        self._ctx = ctx
        self._fbo = fbo

        log.info(
            "Offscreen context created: %s (%dx%d)",
            ctx.info.get("GL_VERSION", "?"),
            self.width,
            self.height,
        )
        return self._backend

    def _release_device(self) -> None:
        if self._fbo is not None:
            self._fbo.release()
            self._fbo = None
        if self._ctx is not None:
            self._ctx.release()
            self._ctx = None

    def _on_resize(self, width: int, height: int) -> None:
        if self._ctx is None:
            return
        if self._fbo is not None:
            self._fbo.release()
        self._fbo = self._ctx.simple_framebuffer((width, height), components=4)
        self._fbo.use()

    def _read_pixels(self) -> Image.Image:
        assert self._fbo is not None
        data = self._fbo.read(components=4, alignment=1)
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(self.height, self.width, 4)
        # GL rows start at the bottom.
        return Image.fromarray(np.ascontiguousarray(np.flipud(pixels)), "RGBA")
