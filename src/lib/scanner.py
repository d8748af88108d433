"""
Document scanner for .lua / .endlua blocks

Reads an input stream line by line and runs a two-state machine:

    OUTSIDE  --(.lua)-->    IN_BLOCK
    IN_BLOCK --(.endlua)--> OUTSIDE

Outside a block, lines are markup: inline expressions are expanded and the
line is written through the DiversionStore. Inside a block, lines are
collected as script source and handed to the evaluator when the block
closes, followed by an ``.lf`` request so groff keeps counting lines of the
original file.

Delimiter matching ignores leading spaces and tabs, and accepts the marker
alone or followed by a space or tab:

    .lua                    opens a block
      .lua  -- comment      opens a block (trailer becomes block source)
    .luax                   ordinary markup line
    .lua x = 1 .endlua      same-line block, evaluated immediately
"""

from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

from ..config.settings import AppSettings
from ..models.document import Line, ScriptBlock
from ..models.diagnostics import Diagnostic, Phase, Severity
from .errors import EvaluationError, ScanError
from .evaluator import Evaluator
from .inline import InlineExpander
from .log import LOG
from .output import DiversionStore


class ScanState(Enum):
    OUTSIDE = "outside"
    IN_BLOCK = "in_block"


def marker_strip(text: str) -> str:
    """Text with leading horizontal whitespace removed."""
    return text.lstrip(" \t")


def marker_matches(trimmed: str, marker: str) -> bool:
    """
    Whether an already-stripped line is the given request.

    Example:
        >>> marker_matches(".lua", ".lua"), marker_matches(".lua\\tx", ".lua")
        (True, True)
        >>> marker_matches(".luax", ".lua")
        False
    """
    return (
        trimmed == marker
        or trimmed.startswith(marker + " ")
        or trimmed.startswith(marker + "\t")
    )


def lines_read(stream: Iterable[str], filename: str) -> Iterator[Line]:
    """Number the lines of a text stream, dropping line terminators."""
    for number, raw in enumerate(stream, start=1):
        yield Line(number=number, filename=filename, text=raw.rstrip("\n"))


class DocumentScanner:
    """
    Block/inline scanning state machine for one Preprocessor

    Args:
        settings: Block markers and line-accounting switch
        evaluator: Engine script blocks are submitted to
        diversions: Store all output is written through
        expander: Inline expander used for markup lines
        report: Callback receiving evaluation diagnostics
    """

    def __init__(
        self,
        settings: AppSettings,
        evaluator: Evaluator,
        diversions: DiversionStore,
        expander: InlineExpander,
        report: Callable[[Diagnostic], None],
    ) -> None:
        self.settings = settings
        self.evaluator = evaluator
        self.diversions = diversions
        self.expander = expander
        self.report = report
        self.state = ScanState.OUTSIDE
        self.block: Optional[ScriptBlock] = None
        self.current_file = ""
        self.current_line = 0

    def scan(self, stream: Iterable[str], filename: str) -> None:
        """
        Process one input stream to completion.

        Args:
            stream: Iterable of lines (a file object, a list of strings, ...)
            filename: Name used for .lf requests and diagnostics

        Raises:
            ScanError: If the stream ends inside a script block
            DiversionError: If a script calls divert_end() with nothing active
        """
        self.state = ScanState.OUTSIDE
        self.current_file = filename
        self.current_line = 0
        self.block = None

        for line in lines_read(stream, filename):
            self.current_line = line.number

            if self.state is ScanState.IN_BLOCK:
                if marker_matches(marker_strip(line.text), self.settings.block_close):
                    self.state = ScanState.OUTSIDE
                    self.source_run(self.block.source, filename, self.block.start_line)
                    self.block = None
                    self.lf_emit(line.number + 1, filename)
                else:
                    self.block.append(line.text)
                continue

            if self.blockOpen_check(line):
                continue

            self.diversions.writeln(self.expander.expand(line.text, filename, line.number))

        if self.state is ScanState.IN_BLOCK:
            raise ScanError(filename, self.block.start_line)

    def blockOpen_check(self, line: Line) -> bool:
        """
        Handle a line seen while OUTSIDE if it opens a block.

        Anything after the marker and one separator is the first line of
        block source. If that trailer also holds the close marker, the block
        is run at once and the scanner stays OUTSIDE. Otherwise the pending
        block is kept in ``self.block`` until its close marker.

        Returns:
            True if the line opened a block and so produces no markup
        """
        opener = self.settings.block_open
        closer = self.settings.block_close
        trimmed = marker_strip(line.text)
        if not marker_matches(trimmed, opener):
            return False

        block = ScriptBlock(start_line=line.number + 1)
        if len(trimmed) > len(opener):
            rest = trimmed[len(opener) + 1:]
            close_at = rest.find(closer)
            if close_at != -1:
                self.source_run(rest[:close_at], line.filename, line.number)
                self.lf_emit(line.number + 1, line.filename)
                return True
            block.append(rest)

        self.block = block
        self.state = ScanState.IN_BLOCK
        LOG(f"{line.filename}:{line.number}: block opened", level=3)
        return True

    def source_run(self, source: str, filename: str, lineno: int) -> None:
        """
        Evaluate block source and write what it returns.

        Text is written verbatim and numbers in decimal, neither with a
        terminator; anything else is dropped. Evaluation errors are reported
        and scanning continues.
        """
        try:
            value = self.evaluator.execute(source, f"@{filename}:{lineno}")
        except EvaluationError as err:
            self.report(Diagnostic(Severity.ERROR, Phase.BLOCK, filename, lineno, str(err)))
            return
        text = value.rendered()
        if text is not None:
            self.diversions.write(text)

    def lf_emit(self, line: int, filename: str) -> None:
        """Re-sync groff's line counter, if line accounting is enabled."""
        if self.settings.emit_lf:
            self.diversions.writeln(self.settings.lfDirective_make(line, filename))
