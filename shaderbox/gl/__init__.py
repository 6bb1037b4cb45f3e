# shaderbox/gl/__init__.py
from shaderbox.gl.backend import GLBackend, StageKind, UniformBinding

__all__ = ["GLBackend", "StageKind", "UniformBinding"]
