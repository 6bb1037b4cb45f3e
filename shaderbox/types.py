# shaderbox/types.py
from __future__ import annotations

from typing import Literal, Sequence, Tuple, TypeAlias, Union

UniformType: TypeAlias = Literal["float", "int", "vec2", "vec3", "vec4"]

Scalar: TypeAlias = float

# What callers hand to set_custom_uniform: a number or a short list/tuple.
UniformInput: TypeAlias = Union[int, float, Sequence[float]]

# What the engine stores and pushes: a number or a fixed-length tuple.
UniformData: TypeAlias = Union[int, float, Tuple[float, ...]]

Resolution = Tuple[int, int]  # width, height in device pixels
PointerPosition = Tuple[float, float]  # x, y, origin bottom-left

Color = Tuple[float, float, float, float]

VECTOR_TYPES: dict[int, UniformType] = {2: "vec2", 3: "vec3", 4: "vec4"}

COMPONENT_COUNTS: dict[str, int] = {
    "float": 1,
    "int": 1,
    "vec2": 2,
    "vec3": 3,
    "vec4": 4,
}
