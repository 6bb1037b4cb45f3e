# shaderbox/host/__init__.py
from shaderbox.host.scheduler import FrameCallback, FrameScheduler
from shaderbox.host.surface import (
    CONTEXT_LOST,
    CONTEXT_RESTORED,
    ContextEvent,
    Surface,
)

__all__ = [
    "CONTEXT_LOST",
    "CONTEXT_RESTORED",
    "ContextEvent",
    "FrameCallback",
    "FrameScheduler",
    "Surface",
]
