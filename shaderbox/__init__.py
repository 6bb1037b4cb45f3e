# shaderbox/__init__.py
from shaderbox.compiler import CompileDiagnostic, CompileResult
from shaderbox.engine import EngineState, RenderEngine
from shaderbox.errors import (
    CompileError,
    DeviceLostError,
    InitError,
    LinkError,
    ShaderBoxError,
)
from shaderbox.events import EventManager
from shaderbox.host import FrameScheduler, Surface
from shaderbox.uniforms import UniformDescriptor, UniformValue, discover_uniforms

__version__ = "0.1.0"

__all__ = [
    "CompileDiagnostic",
    "CompileError",
    "CompileResult",
    "DeviceLostError",
    "EngineState",
    "EventManager",
    "FrameScheduler",
    "InitError",
    "LinkError",
    "RenderEngine",
    "ShaderBoxError",
    "Surface",
    "UniformDescriptor",
    "UniformValue",
    "discover_uniforms",
]
