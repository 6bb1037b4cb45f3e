# shaderbox/uniforms/discovery.py
"""
Static discovery of tunable uniforms in fragment shader source.

Declarations of the form `uniform <type> <name>;` with a supported type
become UniformDescriptor entries. A trailing line comment may carry hints:

    uniform float u_zoom;   // range: 0.1, 10.0, default: 1.0
    uniform vec2 u_center;  // range: -2.0, 2.0, default: -0.5, 0.0
    uniform float u_cells;  // range: 2.0, 20.0, default: 8.0, step: 1.0

Hints are independent, comma separated, in any order. Other uniform types
(mat4, sampler2D, arrays) are skipped without warning, and duplicate names
produce duplicate descriptors.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from typing import List, Tuple, Union

import numpy as np

from shaderbox.settings import RESERVED_UNIFORM_NAMES
from shaderbox.types import UniformType

_NUMBER = r"[+-]?\d+(?:\.\d+)?"

_DECLARATION = re.compile(r"uniform\s+(float|int|vec2|vec3|vec4)\s+(\w+)\s*;([^\n]*)")
_COMMENT_PREFIX = re.compile(r"^\s*//\s*")
_RANGE_HINT = re.compile(rf"range:\s*({_NUMBER})\s*,\s*({_NUMBER})")
_DEFAULT_HINT = re.compile(rf"default:\s*((?:{_NUMBER}(?:\s*,\s*)?)+)")
_STEP_HINT = re.compile(rf"step:\s*({_NUMBER})")

DescriptorValue = Union[float, int, Tuple[float, ...]]


@dataclass(frozen=True, slots=True)
class UniformDescriptor:
    """Proposed control definition for one custom uniform."""

    name: str
    type: UniformType
    value: DescriptorValue
    min: float
    max: float
    step: float

    @property
    def is_color(self) -> bool:
        return self.type == "vec3" and "color" in self.name.lower()

    def to_dict(self) -> dict:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {
            "name": self.name,
            "type": self.type,
            "value": value,
            "min": self.min,
            "max": self.max,
            "step": self.step,
        }


def default_descriptor(type_: UniformType, name: str) -> UniformDescriptor:
    """Seed values for a declaration with no hints."""
    if type_ == "float":
        return UniformDescriptor(name, type_, 0.5, 0.0, 1.0, 0.01)
    if type_ == "int":
        return UniformDescriptor(name, type_, 1, 0, 10, 1)
    if type_ == "vec2":
        return UniformDescriptor(name, type_, (0.0, 0.0), -1.0, 1.0, 0.01)
    if type_ == "vec3":
        if "color" in name.lower():
            return UniformDescriptor(name, type_, (1.0, 1.0, 1.0), 0.0, 1.0, 0.01)
        return UniformDescriptor(name, type_, (0.0, 0.0, 0.0), -1.0, 1.0, 0.01)
    if type_ == "vec4":
        return UniformDescriptor(name, type_, (0.0, 0.0, 0.0, 1.0), 0.0, 1.0, 0.01)
    raise ValueError(f"Unsupported uniform type: {type_}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def apply_hints(descriptor: UniformDescriptor, comment: str) -> UniformDescriptor:
    """Override seed values from a trailing comment's hints."""
    text = _COMMENT_PREFIX.sub("", comment, count=1).strip()
    if not text:
        return descriptor

    changes = {}

    match = _RANGE_HINT.search(text)
    if match:
        changes["min"] = float(match.group(1))
        changes["max"] = float(match.group(2))

    match = _DEFAULT_HINT.search(text)
    if match:
        values = [float(v) for v in match.group(1).split(",") if v.strip()]
        if descriptor.type == "int":
            changes["value"] = _round_half_up(values[0])
        elif descriptor.type == "float":
            changes["value"] = values[0]
        else:
            current = list(descriptor.value)  # type: ignore[arg-type]
            for i, v in enumerate(values[: len(current)]):
                current[i] = v
            changes["value"] = tuple(current)

    match = _STEP_HINT.search(text)
    if match:
        changes["step"] = float(match.group(1))

    return replace(descriptor, **changes) if changes else descriptor


def discover_uniforms(source: str) -> List[UniformDescriptor]:
    """
    Scan shader source for controllable uniforms, in declaration order.

    Built-in names filled in by the engine are never reported.
    """
    found: List[UniformDescriptor] = []

    for match in _DECLARATION.finditer(source):
        type_, name, comment = match.group(1), match.group(2), match.group(3)
        if name in RESERVED_UNIFORM_NAMES:
            continue

        descriptor = default_descriptor(type_, name)  # type: ignore[arg-type]
        found.append(apply_hints(descriptor, comment or ""))

    return found


def _format_number(value: float) -> str:
    # Positional notation only: the hint grammar has no exponent form.
    return np.format_float_positional(float(value), trim="0")


def format_hint_comment(descriptor: UniformDescriptor) -> str:
    """Render a descriptor's metadata in the hint comment grammar."""
    if isinstance(descriptor.value, tuple):
        default = ", ".join(_format_number(v) for v in descriptor.value)
    else:
        default = _format_number(descriptor.value)

    return (
        f"// range: {_format_number(descriptor.min)}, {_format_number(descriptor.max)}, "
        f"default: {default}, step: {_format_number(descriptor.step)}"
    )


def format_declaration(descriptor: UniformDescriptor) -> str:
    """A full declaration line that discover_uniforms parses back to `descriptor`."""
    return f"uniform {descriptor.type} {descriptor.name}; {format_hint_comment(descriptor)}"
