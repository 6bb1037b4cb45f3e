# shaderbox/compiler/pipeline.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from shaderbox.compiler.diagnostics import CompileDiagnostic, parse_info_log
from shaderbox.compiler.fullscreen import VERTEX_SHADER_SOURCE
from shaderbox.errors import CompileError, LinkError, ShaderBoxError
from shaderbox.gl.backend import GLBackend, StageKind

log = logging.getLogger(__name__)

Diagnostics = Tuple[CompileDiagnostic, ...]


@dataclass(frozen=True, slots=True)
class _Outcome:
    success: bool
    diagnostics: Diagnostics = ()
    error: Optional[ShaderBoxError] = field(default=None, compare=False)

    def raise_for_status(self) -> None:
        """Raise the attached error, if any."""
        if self.error is not None:
            raise self.error


@dataclass(frozen=True, slots=True)
class StageResult(_Outcome):
    handle: Optional[int] = None


@dataclass(frozen=True, slots=True)
class LinkResult(_Outcome):
    handle: Optional[int] = None


@dataclass(frozen=True, slots=True)
class CompileResult(_Outcome):
    """
    Outcome of one engine compile, as reported to the UI.

    `to_dict()` gives the broadcast shape:
    {"success": bool, "diagnostics": [{"line": int, "message": str}, ...]}
    """

    @classmethod
    def ok(cls) -> CompileResult:
        return cls(success=True)

    @classmethod
    def failure(
        cls,
        diagnostics: Sequence[CompileDiagnostic],
        error: Optional[ShaderBoxError] = None,
    ) -> CompileResult:
        return cls(success=False, diagnostics=tuple(diagnostics), error=error)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass(slots=True)
class CompiledProgram:
    """
    A linked program and the two stages it was built from.

    Owned by exactly one party; whoever owns it calls release().
    """

    program: int
    vertex: int
    fragment: int

    def release(self, gl: GLBackend) -> None:
        gl.delete_program(self.program)
        gl.delete_shader(self.vertex)
        gl.delete_shader(self.fragment)


@dataclass(frozen=True, slots=True)
class ProgramBuild(_Outcome):
    compiled: Optional[CompiledProgram] = None


def compile_stage(gl: GLBackend, source: str, kind: StageKind) -> StageResult:
    """
    Compile one shader stage.

    On failure the stage object is deleted before returning and the
    driver log is parsed into diagnostics. Never raises for bad source.
    """
    shader = gl.create_shader(kind)
    if not shader:
        diagnostics = (CompileDiagnostic(0, "Failed to create shader object"),)
        return StageResult(
            success=False,
            diagnostics=diagnostics,
            error=CompileError(diagnostics, stage=kind.value),
        )

    keep = False
    try:
        if gl.compile_shader(shader, source):
            keep = True
            return StageResult(success=True, handle=shader)

        diagnostics = tuple(parse_info_log(gl.shader_info_log(shader)))
        if not diagnostics:
            diagnostics = (
                CompileDiagnostic(0, f"{kind.value} shader failed to compile"),
            )
        return StageResult(
            success=False,
            diagnostics=diagnostics,
            error=CompileError(diagnostics, stage=kind.value),
        )
    finally:
        if not keep:
            gl.delete_shader(shader)


def link_program(gl: GLBackend, vertex: int, fragment: int) -> LinkResult:
    """
    Link two compiled stages.

    The program object is deleted on failure. The stages always stay
    with the caller.
    """
    program = gl.create_program()
    if not program:
        diagnostics = (CompileDiagnostic(0, "Failed to create program object"),)
        return LinkResult(
            success=False, diagnostics=diagnostics, error=LinkError(diagnostics)
        )

    keep = False
    try:
        if gl.link_program(program, (vertex, fragment)):
            keep = True
            return LinkResult(success=True, handle=program)

        diagnostics = tuple(parse_info_log(gl.program_info_log(program)))
        if not diagnostics:
            diagnostics = (CompileDiagnostic(0, "Program failed to link"),)
        return LinkResult(
            success=False, diagnostics=diagnostics, error=LinkError(diagnostics)
        )
    finally:
        if not keep:
            gl.delete_program(program)


def build_program(gl: GLBackend, fragment_source: str) -> ProgramBuild:
    """
    Full compile cycle: fixed vertex stage, the given fragment stage, link.

    Every intermediate handle is released on every failure path; on
    success ownership of all three moves into the returned CompiledProgram.
    """
    vertex = compile_stage(gl, VERTEX_SHADER_SOURCE, StageKind.VERTEX)
    if not vertex.success:
        log.error("Fixed vertex stage failed to compile: %s", vertex.error)
        return ProgramBuild(
            success=False, diagnostics=vertex.diagnostics, error=vertex.error
        )

    assert vertex.handle is not None
    owned = [vertex.handle]
    try:
        fragment = compile_stage(gl, fragment_source, StageKind.FRAGMENT)
        if not fragment.success:
            return ProgramBuild(
                success=False, diagnostics=fragment.diagnostics, error=fragment.error
            )

        assert fragment.handle is not None
        owned.append(fragment.handle)

        linked = link_program(gl, vertex.handle, fragment.handle)
        if not linked.success:
            return ProgramBuild(
                success=False, diagnostics=linked.diagnostics, error=linked.error
            )

        assert linked.handle is not None
        compiled = CompiledProgram(
            program=linked.handle, vertex=vertex.handle, fragment=fragment.handle
        )
        owned.clear()
        return ProgramBuild(success=True, compiled=compiled)
    finally:
        for shader in owned:
            gl.delete_shader(shader)
