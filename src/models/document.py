"""
Document-level data models

Input records consumed by the scanner and the shadow of groff state kept by
the markup emitter.
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class Line:
    """
    A single input record

    Attributes:
        number: 1-based line index within its file
        filename: Name of the owning file or stream (e.g. "<stdin>")
        text: Raw text without the trailing newline
    """
    number: int
    filename: str
    text: str


@dataclass
class ScriptBlock:
    """
    Source of one .lua ... .endlua region

    Attributes:
        start_line: Line number reported for errors in this block (the line
                    after the opening request)
        parts: Accumulated source fragments, each already newline-terminated
    """
    start_line: int
    parts: List[str] = field(default_factory=list)

    def append(self, text: str) -> None:
        self.parts.append(text + "\n")

    @property
    def source(self) -> str:
        return "".join(self.parts)


@dataclass
class DocumentState:
    """
    Bookkeeping mirror of troff state

    Because pplua is a preprocessor and not an engine embedded in the
    formatter, it cannot interrogate groff at run time. This shadow copy is
    what scripts can query, and it stays in sync only as long as every state
    change goes through the emitter.

    Attributes:
        number_registers: Values set through nr_set/nr_incr
        string_registers: Values set through ds_set
        font_family: Current family (T = Times)
        font_style: Current style (R, B, I, BI, ...)
        point_size: Current point size
        vert_spacing: Current vertical spacing
        unique_counter: Last number handed out by unique_name()
    """
    number_registers: Dict[str, int] = field(default_factory=dict)
    string_registers: Dict[str, str] = field(default_factory=dict)
    font_family: str = "T"
    font_style: str = "R"
    point_size: int = 10
    vert_spacing: int = 12
    unique_counter: int = 0

    def unique_name(self, prefix: str = "_lua") -> str:
        """
        Generate a name that is distinct within this run.

        Example:
            >>> state = DocumentState()
            >>> state.unique_name(), state.unique_name("tbl")
            ('_lua1', 'tbl2')
        """
        self.unique_counter += 1
        return f"{prefix}{self.unique_counter}"
