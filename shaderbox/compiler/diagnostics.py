# shaderbox/compiler/diagnostics.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

# "ERROR: 0:12: 'foo' : undeclared identifier"
_LOG_LINE = re.compile(r"^(?:ERROR|WARNING):\s*\d+:(\d+):\s*(.+)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class CompileDiagnostic:
    """
    One compiler or linker message.

    line == 0 means the message could not be attributed to a source line.
    """

    line: int
    message: str

    def __str__(self) -> str:
        if self.line:
            return f"{self.line}: {self.message}"
        return self.message

    def to_dict(self) -> dict:
        return {"line": self.line, "message": self.message}


def parse_info_log(log: str) -> List[CompileDiagnostic]:
    """
    Split a driver info log into diagnostics.

    Lines in the usual "SEVERITY: 0:LINE: message" shape get their line
    number; anything else is kept verbatim with line 0 so no text is lost.
    """
    diagnostics: List[CompileDiagnostic] = []
    if not log or not log.strip():
        return diagnostics

    for raw in log.splitlines():
        text = raw.strip()
        if not text:
            continue

        match = _LOG_LINE.match(text)
        if match:
            diagnostics.append(
                CompileDiagnostic(line=int(match.group(1)), message=match.group(2).strip())
            )
        else:
            diagnostics.append(CompileDiagnostic(line=0, message=text))

    return diagnostics
