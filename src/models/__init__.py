"""
Models package for pplua

Contains data structures and type definitions for the preprocessing pipeline.
"""

from .state import ProgramState, pipeline
from .document import Line, ScriptBlock, DocumentState
from .values import Value, ValueKind, value_classify
from .diagnostics import Diagnostic, Phase, Severity
from .surface import SurfaceSpec, SurfaceCategory

__all__ = [
    "ProgramState",
    "pipeline",
    "Line",
    "ScriptBlock",
    "DocumentState",
    "Value",
    "ValueKind",
    "value_classify",
    "Diagnostic",
    "Phase",
    "Severity",
    "SurfaceSpec",
    "SurfaceCategory",
]
