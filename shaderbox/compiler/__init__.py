# shaderbox/compiler/__init__.py
from shaderbox.compiler.diagnostics import CompileDiagnostic, parse_info_log
from shaderbox.compiler.fullscreen import (
    FULLSCREEN_VERTEX_COUNT,
    VERTEX_SHADER_SOURCE,
)
from shaderbox.compiler.pipeline import (
    CompiledProgram,
    CompileResult,
    LinkResult,
    ProgramBuild,
    StageResult,
    build_program,
    compile_stage,
    link_program,
)

__all__ = [
    "CompileDiagnostic",
    "CompiledProgram",
    "CompileResult",
    "FULLSCREEN_VERTEX_COUNT",
    "LinkResult",
    "ProgramBuild",
    "StageResult",
    "VERTEX_SHADER_SOURCE",
    "build_program",
    "compile_stage",
    "link_program",
    "parse_info_log",
]
