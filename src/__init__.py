r"""
pplua - Lua preprocessor for the groff pipeline

Embeds Lua in groff documents: blocks between .lua and .endlua requests and
inline \lua'expr' expressions are evaluated, and their output is spliced into
the document before it reaches groff.
"""

__version__ = "0.1.0"

from .lib import Preprocessor, LuaEvaluator, DiversionError, LOG, state_connectToLogger

__all__ = ["Preprocessor", "LuaEvaluator", "DiversionError", "LOG", "state_connectToLogger", "__version__"]
