# shaderbox/settings.py
import logging
from dataclasses import dataclass, field

from shaderbox.types import Color

DEFAULT_LOG_LEVEL = logging.INFO

THUMBNAIL_SIZE = 128
THUMBNAIL_TIME = 1.0


@dataclass(frozen=True, slots=True)
class BuiltinUniformNames:
    """
    Reserved uniform names the engine fills in every frame.

    Shaders may declare any subset of them; absent ones are ignored.
    """

    resolution: str = "u_resolution"
    time: str = "u_time"
    pointer: str = "u_mouse"

    def __iter__(self):
        yield self.resolution
        yield self.time
        yield self.pointer


BUILTIN_UNIFORMS = BuiltinUniformNames()
RESERVED_UNIFORM_NAMES = frozenset(BUILTIN_UNIFORMS)


@dataclass(slots=True)
class SurfaceSettings:
    """
    Controls the drawing surface the engine is bound to.
    """

    width: int = 800
    height: int = 600
    title: str = "shaderbox"
    vsync: bool = True
    # Keep the rendered image readable after the frame (thumbnails).
    preserve_drawing_buffer: bool = False
    alpha: bool = False
    antialias: bool = False


@dataclass(slots=True)
class EngineSettings:
    clear_color: Color = (0.0, 0.0, 0.0, 1.0)
    target_fps: int = 60
    frame_rate_interval: float = 0.5


@dataclass(slots=True)
class ViewerSettings:
    """
    Resource: The master configuration for the interactive viewer.
    """

    surface: SurfaceSettings = field(default_factory=SurfaceSettings)
    engine: EngineSettings = field(default_factory=EngineSettings)

    reload_debounce: float = 0.3
    show_frame_rate: bool = False
