"""
Markup emitter for groff source

Turns semantic requests (escape, style, table, list, register update) into
groff text written through the DiversionStore. Functions that change
formatter state also update the DocumentState shadow so scripts can query it.

Two kinds of operations live here:
- Emitters write to the current diversion target and return nothing
  (request, table_emit, font, nr_set, ...)
- Builders return a string and never write (escape, styled, nr_ref, ...)

Example:
    >>> sink = OutputSink()
    >>> emitter = MarkupEmitter(DiversionStore(sink), DocumentState())
    >>> emitter.section("Introduction")
    >>> emitter.emitln(emitter.bold("pplua") + " is a preprocessor.")
    >>> print(sink.contents(), end="")
    .SH
    Introduction
    \\fBpplua\\fP is a preprocessor.
"""

from typing import List, Optional, Sequence, Tuple

from . import __version__
from .output import DiversionStore
from ..models.document import DocumentState

VERSION_STRING = f"pplua {__version__}"


class MarkupEmitter:
    """
    groff-aware output helpers bound to one run

    Args:
        diversions: Store every emitted line is routed through
        state: Shadow of formatter state owned by the same run
        block_open: Request that opens a script block (for macro_define_lua)
        block_close: Request that closes a script block
        unique_prefix: Default prefix for unique()
    """

    def __init__(
        self,
        diversions: DiversionStore,
        state: DocumentState,
        block_open: str = ".lua",
        block_close: str = ".endlua",
        unique_prefix: str = "_lua",
    ) -> None:
        self.diversions = diversions
        self.state = state
        self.block_open = block_open
        self.block_close = block_close
        self.unique_prefix = unique_prefix

    # ------------------------------------------------------------------
    #  Output
    # ------------------------------------------------------------------

    def emit(self, text: str) -> None:
        self.diversions.write(text)

    def emitln(self, text: str) -> None:
        self.diversions.writeln(text)

    def blank(self) -> None:
        self.diversions.blank_line()

    def request(self, req: str) -> None:
        """Emit a bare request line, e.g. request("PP") -> ``.PP``."""
        self.diversions.writeln(f".{req}")

    def request_with(self, req: str, args: str) -> None:
        self.diversions.writeln(f".{req} {args}")

    def comment(self, text: str) -> None:
        self.diversions.writeln(f'.\\" {text}')

    # ------------------------------------------------------------------
    #  Escaping
    # ------------------------------------------------------------------

    def escape(self, text: str) -> str:
        r"""
        Make arbitrary text safe to place in groff input.

        Backslashes are doubled. A period or apostrophe at the start of a
        line would be read as a control line, so it gets the zero-width
        ``\&`` in front of it. Line-start state is true initially and after
        every newline; any other character clears it.

        Args:
            text: Text to escape

        Returns:
            Escaped text

        Example:
            >>> emitter.escape(".start\nback\\slash 'quote' a.b")
            "\\&.start\nback\\\\slash 'quote' a.b"
        """
        out: List[str] = []
        at_line_start = True
        for char in text:
            if char == "\\":
                out.append("\\\\")
                at_line_start = False
            elif char == "\n":
                out.append("\n")
                at_line_start = True
            elif char in ".'":
                if at_line_start:
                    out.append("\\&")
                out.append(char)
                at_line_start = False
            else:
                out.append(char)
                at_line_start = False
        return "".join(out)

    def inline_escape(self, code: str, arg: str) -> str:
        """
        Build an inline escape sequence.

        The short form ``\\<code><arg>`` is only unambiguous when both parts
        are single characters; everything else uses ``\\<code>[<arg>]``.
        """
        if len(code) == 1 and len(arg) == 1:
            return f"\\{code}{arg}"
        return f"\\{code}[{arg}]"

    # ------------------------------------------------------------------
    #  Fonts / sizes
    # ------------------------------------------------------------------

    def font(self, name: str) -> None:
        self.state.font_style = name
        self.request_with("ft", name)

    def font_bold(self) -> None:
        self.font("B")

    def font_italic(self) -> None:
        self.font("I")

    def font_roman(self) -> None:
        self.font("R")

    def font_bold_italic(self) -> None:
        self.font("BI")

    def font_previous(self) -> None:
        # .ft with no argument = previous font in groff
        self.request("ft")

    def size(self, points: int) -> None:
        points = int(points)
        self.state.point_size = points
        self.request_with("ps", str(points))

    def size_relative(self, delta: int) -> None:
        delta = int(delta)
        self.state.point_size += delta
        self.request_with("ps", f"+{delta}" if delta >= 0 else str(delta))

    def size_get(self) -> int:
        return self.state.point_size

    # ------------------------------------------------------------------
    #  Number registers
    # ------------------------------------------------------------------

    def nr_set(self, name: str, value: int) -> None:
        value = int(value)
        self.state.number_registers[name] = value
        self.request_with("nr", f"{name} {value}")

    def nr_incr(self, name: str, delta: int) -> None:
        """
        Increment a number register.

        groff reads ``.nr x +1`` as relative and ``.nr x 1`` as absolute, so
        non-negative deltas always carry an explicit plus sign.
        """
        delta = int(delta)
        self.state.number_registers[name] = self.state.number_registers.get(name, 0) + delta
        sign = "+" if delta >= 0 else ""
        self.request_with("nr", f"{name} {sign}{delta}")

    def nr_get(self, name: str) -> Optional[int]:
        return self.state.number_registers.get(name)

    def nr_ref(self, name: str) -> str:
        return self._register_ref("n", name)

    # ------------------------------------------------------------------
    #  String registers
    # ------------------------------------------------------------------

    def ds_set(self, name: str, value: str) -> None:
        self.state.string_registers[name] = value
        self.diversions.writeln(f".ds {name} {value}")

    def ds_get(self, name: str) -> Optional[str]:
        return self.state.string_registers.get(name)

    def ds_ref(self, name: str) -> str:
        return self._register_ref("*", name)

    @staticmethod
    def _register_ref(code: str, name: str) -> str:
        """
        Interpolation syntax for a register name.

        One character: ``\\nX``; two: ``\\n(XX``; longer: ``\\n[name]``.
        """
        if len(name) == 1:
            return f"\\{code}{name}"
        if len(name) == 2:
            return f"\\{code}({name}"
        return f"\\{code}[{name}]"

    # ------------------------------------------------------------------
    #  Diversions (preprocessor-level, independent of groff diversions)
    # ------------------------------------------------------------------

    def divert_begin(self, name: str) -> None:
        self.diversions.begin(name)

    def divert_end(self) -> None:
        self.diversions.end()

    def divert_emit(self, name: str) -> None:
        """Replay a diversion into the current target."""
        self.diversions.write(self.diversions.get(name))

    def divert_get(self, name: str) -> str:
        return self.diversions.get(name)

    def divert_clear(self, name: str) -> None:
        self.diversions.clear(name)

    def divert_erase(self, name: str) -> None:
        self.diversions.erase(name)

    # ------------------------------------------------------------------
    #  Macros
    # ------------------------------------------------------------------

    def macro_define(self, name: str, body: str) -> None:
        self.diversions.writeln(f".de {name}")
        self.diversions.write(body)
        if body and not body.endswith("\n"):
            self.diversions.write("\n")
        self.diversions.writeln("..")

    def macro_define_lua(self, name: str, code: str) -> None:
        """Define a groff macro whose body is a script block."""
        self.diversions.writeln(f".de {name}")
        self.diversions.writeln(self.block_open)
        self.diversions.write(code)
        if code and not code.endswith("\n"):
            self.diversions.write("\n")
        self.diversions.writeln(self.block_close)
        self.diversions.writeln("..")

    # ------------------------------------------------------------------
    #  Inline styling helpers (return strings, never emit)
    # ------------------------------------------------------------------

    def styled(self, code: str, text: str) -> str:
        # Bracket form for multi-character font names
        if len(code) > 1:
            return f"\\f[{code}]{text}\\f[P]"
        return f"\\f{code}{text}\\fP"

    def bold(self, text: str) -> str:
        return self.styled("B", text)

    def italic(self, text: str) -> str:
        return self.styled("I", text)

    def bold_italic(self, text: str) -> str:
        return self.styled("BI", text)

    def mono(self, text: str) -> str:
        return self.styled("CR", text)

    def special_char(self, name: str) -> str:
        if len(name) <= 2:
            return f"\\({name}"
        return f"\\[{name}]"

    # ------------------------------------------------------------------
    #  Document structure helpers (ms macros)
    # ------------------------------------------------------------------

    def paragraph(self, macro: str = "PP") -> None:
        self.request(macro)

    def section(self, title: str) -> None:
        self.diversions.writeln(".SH")
        self.diversions.writeln(title)

    def subsection(self, title: str) -> None:
        self.diversions.writeln(".SS")
        self.diversions.writeln(title)

    def title(self, text: str) -> None:
        self.diversions.writeln(".TL")
        self.diversions.writeln(text)

    def author(self, name: str) -> None:
        self.diversions.writeln(".AU")
        self.diversions.writeln(name)

    def display_begin(self, kind: str = "") -> None:
        if kind:
            self.request_with("DS", kind)
        else:
            self.request("DS")

    def display_end(self) -> None:
        self.request("DE")

    # ------------------------------------------------------------------
    #  Compound structures
    # ------------------------------------------------------------------

    def table_emit(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        fmt: str = "",
    ) -> None:
        """
        Emit a tbl table.

        Column formats are generated from the header count: header cells are
        centered bold (``cb``), data cells left aligned (``l``). A caller
        supplied ``fmt`` (e.g. ``"box center;"``) goes before them as the
        global options line.

        Args:
            headers: Header cell texts
            rows: Data rows, each a sequence of cell texts
            fmt: Optional tbl global options line

        Example:
            table_emit(["A", "B"], [["1", "2"]]) writes:
                .TS
                cb cb
                l l.
                A<TAB>B
                _
                1<TAB>2
                .TE
        """
        write = self.diversions.writeln
        write(".TS")
        if fmt:
            write(fmt)
        write(" ".join("cb" for _ in headers))
        write(" ".join("l" for _ in headers) + ".")
        write("\t".join(str(cell) for cell in headers))
        write("_")
        for row in rows:
            write("\t".join(str(cell) for cell in row))
        write(".TE")

    def bullet_list(self, items: Sequence[str]) -> None:
        for item in items:
            self.diversions.writeln(".IP \\(bu 2")
            self.diversions.writeln(str(item))

    def numbered_list(self, items: Sequence[str]) -> None:
        for index, item in enumerate(items):
            self.diversions.writeln(f".IP {index + 1}. 4")
            self.diversions.writeln(str(item))

    def def_list(self, items: Sequence[Tuple[str, str]]) -> None:
        for term, definition in items:
            self.diversions.writeln(".TP")
            self.diversions.writeln(f"\\fB{term}\\fP")
            self.diversions.writeln(str(definition))

    # ------------------------------------------------------------------
    #  Utility
    # ------------------------------------------------------------------

    def unique(self, prefix: Optional[str] = None) -> str:
        return self.state.unique_name(prefix if prefix is not None else self.unique_prefix)

    def version(self) -> str:
        return VERSION_STRING
