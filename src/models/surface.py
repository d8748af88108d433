"""
Engine surface specification models

Defines the functions pplua exposes to embedded scripts (the ``lroff``
table), grouped by category for registration, documentation and tests.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List


class SurfaceCategory(Enum):
    """
    Categories of lroff functions

    Used for organization and for listing the surface by concern.
    """
    OUTPUT = "output"            # emit, request, comment
    ESCAPING = "escaping"        # escape, inline_escape
    FONTS = "fonts"              # font, size
    REGISTERS = "registers"      # nr_*, ds_*
    DIVERSIONS = "diversions"    # divert_*
    MACROS = "macros"            # macro_define
    STYLING = "styling"          # bold, italic (return strings)
    STRUCTURE = "structure"      # section, paragraph (ms macros)
    COMPOUND = "compound"        # table, lists
    UTILITY = "utility"          # unique, version


@dataclass
class SurfaceSpec:
    """
    Specification for one lroff function

    Attributes:
        name: Name under which scripts call the function (lroff.<name>)
        category: Category for organization
        description: Human-readable description
        handler: Python callable invoked with the script's arguments
        returns_text: Whether the function returns a string instead of emitting
        examples: Example Lua calls
    """
    name: str
    category: SurfaceCategory
    description: str
    handler: Callable
    returns_text: bool = False
    examples: List[str] = field(default_factory=list)
