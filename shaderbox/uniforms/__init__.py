# shaderbox/uniforms/__init__.py
from shaderbox.uniforms.discovery import (
    UniformDescriptor,
    discover_uniforms,
    format_declaration,
    format_hint_comment,
)
from shaderbox.uniforms.values import UniformValue, push_uniform

__all__ = [
    "UniformDescriptor",
    "UniformValue",
    "discover_uniforms",
    "format_declaration",
    "format_hint_comment",
    "push_uniform",
]
