# shaderbox/uniforms/values.py
from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from shaderbox.gl.backend import GLBackend, UniformBinding
from shaderbox.types import (
    COMPONENT_COUNTS,
    VECTOR_TYPES,
    UniformData,
    UniformInput,
    UniformType,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UniformValue:
    """
    A custom uniform value with its structurally inferred type.

    Scalars stay scalars; vectors are stored as tuples of floats.
    """

    type: UniformType
    data: UniformData

    @classmethod
    def infer(cls, value: UniformInput) -> UniformValue:
        """
        Infer the type from the value's shape.

        int -> int, other real numbers -> float, a sequence of 2/3/4
        numbers -> vec2/vec3/vec4. Anything else is a ValueError.
        """
        if isinstance(value, bool):
            raise ValueError("Uniform values must be numbers, not bool")

        if isinstance(value, numbers.Integral):
            return cls(type="int", data=int(value))

        if isinstance(value, numbers.Real):
            return cls(type="float", data=float(value))

        components = np.asarray(value, dtype=np.float64)
        if components.ndim != 1 or len(components) not in VECTOR_TYPES:
            raise ValueError(
                f"Uniform value must be a number or 2-4 numbers, got {value!r}"
            )
        return cls(
            type=VECTOR_TYPES[len(components)],
            data=tuple(float(c) for c in components),
        )

    @property
    def components(self) -> Tuple[float, ...]:
        if isinstance(self.data, tuple):
            return self.data
        return (float(self.data),)


def push_uniform(
    gl: GLBackend, binding: Optional[UniformBinding], value: UniformValue
) -> bool:
    """
    Upload a value to a resolved binding.

    The declared type reported by the driver decides the upload call, so a
    float slider driving an int uniform (or the reverse) still works.
    Returns False when nothing was pushed.
    """
    if binding is None:
        return False

    kind = binding.kind
    if kind is None:
        log.debug("Uniform %s has an unsupported declared type", binding.name)
        return False

    components = value.components
    if len(components) != COMPONENT_COUNTS[kind]:
        log.debug(
            "Uniform %s is declared %s but holds %d component(s), skipped",
            binding.name,
            kind,
            len(components),
        )
        return False

    if kind == "int":
        gl.uniform_int(binding.location, int(round(components[0])))
    else:
        gl.uniform_float(binding.location, components)
    return True
