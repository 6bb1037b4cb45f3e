# shaderbox/host/window.py
from __future__ import annotations

import logging
from typing import List, Optional

import moderngl
import numpy as np
import pygame
from PIL import Image

from shaderbox.gl.backend import GLBackend
from shaderbox.gl.opengl import OpenGLBackend
from shaderbox.host.surface import Surface
from shaderbox.settings import SurfaceSettings

log = logging.getLogger(__name__)


class WindowSurface(Surface):
    """
    Manages the OS Window and OpenGL Context.
    """

    def __init__(
        self,
        settings: Optional[SurfaceSettings] = None,
        *,
        gl_version: tuple[int, int] = (4, 3),
        backend: Optional[GLBackend] = None,
    ):
        super().__init__(settings)
        self._gl_version = gl_version
        self._backend = backend or OpenGLBackend()
        self._screen: Optional[pygame.Surface] = None
        self._ctx: Optional[moderngl.Context] = None
        self._caption = self.settings.title

    def _acquire_device(self) -> GLBackend:
        if not pygame.get_init():
            pygame.init()
        if not pygame.display.get_init():
            pygame.display.init()

        major, minor = self._gl_version
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MAJOR_VERSION, major)
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MINOR_VERSION, minor)
        pygame.display.gl_set_attribute(
            pygame.GL_CONTEXT_PROFILE_MASK, pygame.GL_CONTEXT_PROFILE_CORE
        )
        pygame.display.gl_set_attribute(pygame.GL_DOUBLEBUFFER, 1)
        if self.settings.alpha:
            pygame.display.gl_set_attribute(pygame.GL_ALPHA_SIZE, 8)
        if self.settings.antialias:
            pygame.display.gl_set_attribute(pygame.GL_MULTISAMPLEBUFFERS, 1)
            pygame.display.gl_set_attribute(pygame.GL_MULTISAMPLESAMPLES, 4)

        self._screen = pygame.display.set_mode(
            self.size,
            pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE,
            vsync=int(self.settings.vsync),
        )
        pygame.display.set_caption(self._caption)

        self._ctx = moderngl.create_context()
        log.info("OpenGL context created: %s", self._ctx.info.get("GL_VERSION", "?"))
        return self._backend

    def _release_device(self) -> None:
        if self._ctx is not None:
            self._ctx.release()
            self._ctx = None
        # Closing the display destroys the SDL GL context and every object in
        # it; set_mode would otherwise hand the same context back on restore.
        self._screen = None
        if pygame.display.get_init():
            pygame.display.quit()

    def _read_pixels(self) -> Image.Image:
        assert self._ctx is not None
        data = self._ctx.screen.read(viewport=(0, 0, *self.size), components=4, alignment=1)
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(self.height, self.width, 4)
        return Image.fromarray(np.ascontiguousarray(np.flipud(pixels)), "RGBA")

    def set_caption(self, text: str) -> None:
        self._caption = text
        if pygame.display.get_init():
            pygame.display.set_caption(text)

    def poll_events(self) -> List[pygame.event.Event]:
        """
        Drain the pygame queue.

        Device resets are handled here (context lost, then restored); every
        event is still returned for the caller's input handling.
        """
        if not pygame.display.get_init():
            return []

        events = pygame.event.get()
        for event in events:
            if event.type == pygame.RENDER_DEVICE_RESET:
                log.warning("Render device reset")
                self.lose_context()
                self.restore_context()
        return events

    def present(self) -> None:
        if not self.is_context_lost:
            pygame.display.flip()

    def close(self) -> None:
        super().close()
        if pygame.get_init():
            pygame.quit()
