"""Exception types raised by the pplua core."""

from typing import Optional


class PpluaError(Exception):
    """Base class for pplua errors"""
    pass


class DiversionError(PpluaError):
    """divert_end() called with no active diversion"""
    pass


class EvaluationError(PpluaError):
    """
    A script chunk failed to compile or run

    Attributes:
        chunk: Label the chunk was submitted under (e.g. "@doc.ms:12")
    """

    def __init__(self, message: str, chunk: Optional[str] = None) -> None:
        super().__init__(message)
        self.chunk = chunk


class ScanError(PpluaError):
    """Input ended inside a script block"""

    def __init__(self, filename: str, line: int) -> None:
        super().__init__(f"{filename}:{line}: unterminated script block")
        self.filename = filename
        self.line = line
