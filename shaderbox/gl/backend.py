# shaderbox/gl/backend.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

from shaderbox.types import UniformType


class StageKind(str, Enum):
    VERTEX = "vertex"
    FRAGMENT = "fragment"


@dataclass(frozen=True, slots=True)
class UniformBinding:
    """
    A uniform location resolved against one linked program.

    `kind` is the declared GLSL type as reported by the driver, or None
    for types the engine never pushes (matrices, samplers, ...).
    """

    name: str
    location: int
    kind: Optional[UniformType] = None


class GLBackend(ABC):
    """
    The GPU device interface used by the pipeline and the engine.

    Handles are plain integers; 0 means "no object", matching GL.
    Nothing here tracks ownership: callers release what they create.
    """

    # -- stages ----------------------------------------------------------
    @abstractmethod
    def create_shader(self, kind: StageKind) -> int: ...

    @abstractmethod
    def compile_shader(self, shader: int, source: str) -> bool:
        """Upload source and compile. Returns the compile status."""

    @abstractmethod
    def shader_info_log(self, shader: int) -> str: ...

    @abstractmethod
    def delete_shader(self, shader: int) -> None: ...

    # -- programs --------------------------------------------------------
    @abstractmethod
    def create_program(self) -> int: ...

    @abstractmethod
    def link_program(self, program: int, shaders: Sequence[int]) -> bool:
        """Attach the stages and link. Returns the link status."""

    @abstractmethod
    def program_info_log(self, program: int) -> str: ...

    @abstractmethod
    def delete_program(self, program: int) -> None: ...

    @abstractmethod
    def active_uniforms(self, program: int) -> Dict[str, UniformBinding]:
        """Every uniform the linker kept, keyed by name."""

    @abstractmethod
    def use_program(self, program: int) -> None: ...

    # -- uniform upload --------------------------------------------------
    @abstractmethod
    def uniform_float(self, location: int, components: Sequence[float]) -> None: ...

    @abstractmethod
    def uniform_int(self, location: int, value: int) -> None: ...

    # -- geometry and frame state ----------------------------------------
    @abstractmethod
    def create_vertex_array(self) -> int: ...

    @abstractmethod
    def delete_vertex_array(self, vao: int) -> None: ...

    @abstractmethod
    def reset_state(self) -> None:
        """Disable depth, stencil and blending."""

    @abstractmethod
    def viewport(self, x: int, y: int, width: int, height: int) -> None: ...

    @abstractmethod
    def clear(self, r: float, g: float, b: float, a: float) -> None: ...

    @abstractmethod
    def draw_triangles(self, vao: int, count: int) -> None: ...
