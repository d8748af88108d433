"""
Diagnostic records

Every problem the preprocessor reports carries enough location context to be
actionable: file, line, and the phase in which it happened.
"""

from enum import Enum
from dataclasses import dataclass


class Severity(Enum):
    WARNING = "WARNING"
    ERROR = "ERROR"


class Phase(Enum):
    """Where in the run a diagnostic originated"""
    BLOCK = "lua error"
    INLINE = "inline lua error"
    SPAN = "warning"
    SCAN = "error"
    IO = "io error"
    PREAMBLE = "preamble error"
    PROTOCOL = "diversion error"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single reported problem

    Attributes:
        severity: WARNING for recoverable oddities, ERROR otherwise
        phase: Phase that produced the diagnostic
        filename: File or stream name
        line: 1-based line number (0 when not tied to a line)
        message: Human-readable description

    Example:
        >>> str(Diagnostic(Severity.ERROR, Phase.SCAN, "a.ms", 3, "unterminated .lua block"))
        'a.ms:3: error: unterminated .lua block'
    """
    severity: Severity
    phase: Phase
    filename: str
    line: int
    message: str

    def __str__(self) -> str:
        if self.line:
            return f"{self.filename}:{self.line}: {self.phase.value}: {self.message}"
        return f"{self.filename}: {self.phase.value}: {self.message}"

    @property
    def fatal(self) -> bool:
        """True for the classes that fail the run."""
        return self.phase in (Phase.SCAN, Phase.IO, Phase.PROTOCOL)
