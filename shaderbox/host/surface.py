# shaderbox/host/surface.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from PIL import Image

from shaderbox.gl.backend import GLBackend
from shaderbox.settings import SurfaceSettings
from shaderbox.types import Resolution

log = logging.getLogger(__name__)

CONTEXT_LOST = "contextlost"
CONTEXT_RESTORED = "contextrestored"


class ContextEvent:
    """
    Notification that a surface's context was lost or restored.

    A lost-context listener calls prevent_default() to tell the surface
    it will rebuild its own resources; without it the surface treats the
    loss as final and never restores.
    """

    __slots__ = ("type", "_default_prevented")

    def __init__(self, type: str):
        self.type = type
        self._default_prevented = False

    def prevent_default(self) -> None:
        self._default_prevented = True

    @property
    def default_prevented(self) -> bool:
        return self._default_prevented

    def __repr__(self) -> str:
        return f"ContextEvent({self.type!r})"


ContextListener = Callable[[ContextEvent], None]


class Surface(ABC):
    """
    A drawing surface with at most one GL context.

    Subclasses provide the actual context (window, offscreen framebuffer)
    through _acquire_device/_release_device. The context can be lost at any
    point; listeners registered for CONTEXT_LOST / CONTEXT_RESTORED hear
    about it.
    """

    def __init__(self, settings: Optional[SurfaceSettings] = None):
        self.settings = settings or SurfaceSettings()
        self.width = self.settings.width
        self.height = self.settings.height

        self._listeners: Dict[str, List[ContextListener]] = defaultdict(list)
        self._gl: Optional[GLBackend] = None
        self._lost = False
        self._restorable = False

    @property
    def size(self) -> Resolution:
        return (self.width, self.height)

    @property
    def preserve_drawing_buffer(self) -> bool:
        return self.settings.preserve_drawing_buffer

    @property
    def is_context_lost(self) -> bool:
        return self._lost

    # -- context -----------------------------------------------------------
    def get_context(self) -> Optional[GLBackend]:
        """
        Return the surface's GL backend, creating the context on first use.

        Returns None if no context can be created on this machine.
        """
        if self._gl is not None or self._lost:
            return self._gl

        try:
            self._gl = self._acquire_device()
        except Exception:
            log.exception("Could not create a GL context for %s", type(self).__name__)
            return None
        return self._gl

    def lose_context(self) -> None:
        """Drop the context now and notify listeners."""
        if self._gl is None or self._lost:
            return

        self._lost = True
        self._release_device()

        event = ContextEvent(CONTEXT_LOST)
        self.dispatch_event(event)
        self._restorable = event.default_prevented
        if not self._restorable:
            log.info("Context lost with no listener taking over; it stays lost")

    def restore_context(self) -> bool:
        """Recreate a lost context. Returns True if listeners were notified."""
        if not self._lost:
            return False
        if not self._restorable:
            log.warning("Context cannot be restored: loss was not handled")
            return False

        try:
            self._gl = self._acquire_device()
        except Exception:
            log.exception("Context restore failed")
            return False

        self._lost = False
        self._restorable = False
        self.dispatch_event(ContextEvent(CONTEXT_RESTORED))
        return True

    # -- listeners ---------------------------------------------------------
    def add_event_listener(self, type: str, listener: ContextListener) -> None:
        if listener not in self._listeners[type]:
            self._listeners[type].append(listener)

    def remove_event_listener(self, type: str, listener: ContextListener) -> None:
        if listener in self._listeners[type]:
            self._listeners[type].remove(listener)

    def listener_count(self, type: str) -> int:
        return len(self._listeners[type])

    def dispatch_event(self, event: ContextEvent) -> bool:
        """Call listeners in registration order. False if default was prevented."""
        for listener in list(self._listeners[event.type]):
            listener(event)
        return not event.default_prevented

    # -- surface -----------------------------------------------------------
    def resize(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        if self._gl is not None and not self._lost:
            self._on_resize(self.width, self.height)

    def to_image(self) -> Image.Image:
        """
        Read the rendered pixels back as a Pillow image.

        Only defined for surfaces created with preserve_drawing_buffer.
        """
        if not self.preserve_drawing_buffer:
            raise RuntimeError(
                "Surface was created without preserve_drawing_buffer; "
                "its contents are undefined after a frame"
            )
        if self._gl is None or self._lost:
            raise RuntimeError("Surface has no live context to read from")

        image = self._read_pixels()
        if not self.settings.alpha:
            image = image.convert("RGB")
        return image

    def present(self) -> None:
        """Show the finished frame, if the surface is visible."""
        pass

    def close(self) -> None:
        if self._gl is not None and not self._lost:
            self._release_device()
        self._gl = None
        self._lost = False
        self._listeners.clear()

    # -- subclass hooks ----------------------------------------------------
    @abstractmethod
    def _acquire_device(self) -> GLBackend:
        """Create the GL context and make it current. Raises on failure."""

    @abstractmethod
    def _release_device(self) -> None: ...

    @abstractmethod
    def _read_pixels(self) -> Image.Image:
        """RGBA image, top row first."""

    def _on_resize(self, width: int, height: int) -> None:
        pass
