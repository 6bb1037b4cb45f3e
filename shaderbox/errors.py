# shaderbox/errors.py
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from shaderbox.compiler.diagnostics import CompileDiagnostic


class ShaderBoxError(Exception):
    """Base class for all shaderbox errors."""

    pass


class InitError(ShaderBoxError):
    """No device context could be obtained for a surface."""

    pass


class DeviceLostError(ShaderBoxError):
    """
    The device context is lost.

    Never raised by the engine itself; it is attached to results produced
    while the context is lost so callers can tell why nothing happened.
    """

    pass


class ShaderError(ShaderBoxError):
    """A shader stage or program was rejected by the driver."""

    def __init__(self, diagnostics: Sequence[CompileDiagnostic]):
        self.diagnostics = tuple(diagnostics)
        super().__init__(self._summary())

    def _summary(self) -> str:
        if not self.diagnostics:
            return "no diagnostics reported"
        first = self.diagnostics[0]
        more = len(self.diagnostics) - 1
        text = str(first)
        if more:
            text += f" (+{more} more)"
        return text


class CompileError(ShaderError):
    def __init__(self, diagnostics: Sequence[CompileDiagnostic], stage: str = ""):
        self.stage = stage
        super().__init__(diagnostics)

    def _summary(self) -> str:
        prefix = f"{self.stage} stage: " if self.stage else ""
        return prefix + super()._summary()


class LinkError(ShaderError):
    pass
