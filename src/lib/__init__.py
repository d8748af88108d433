r"""
pplua - Lua preprocessor for the groff pipeline

Scans groff documents for .lua/.endlua blocks and \lua'expr' inline
expressions, runs them, and writes the resulting groff source.
"""

__version__ = "0.1.0"

from .output import OutputSink, DiversionStore
from .emitter import MarkupEmitter
from .surface import SurfaceRegistry
from .evaluator import Evaluator, LuaEvaluator
from .inline import InlineExpander
from .scanner import DocumentScanner
from .preprocessor import Preprocessor
from .errors import PpluaError, DiversionError, EvaluationError, ScanError
from .log import LOG, state_connectToLogger

__all__ = [
    "OutputSink",
    "DiversionStore",
    "MarkupEmitter",
    "SurfaceRegistry",
    "Evaluator",
    "LuaEvaluator",
    "InlineExpander",
    "DocumentScanner",
    "Preprocessor",
    "PpluaError",
    "DiversionError",
    "EvaluationError",
    "ScanError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
