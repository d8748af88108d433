"""
The pplua preprocessor engine

Owns everything one run needs: the output sink, diversion store, document
state shadow, markup emitter, evaluator, and scanner. Separate Preprocessor
instances never share any of these.

Example:
    >>> pp = Preprocessor()
    >>> pp.process([".lua", "return lroff.bold('hi')", ".endlua", "text"], "doc.ms")
    True
    >>> pp.output.contents()
    '\\\\fBhi\\\\fP.lf 4 doc.ms\\ntext\\n'
"""

import io
import sys
from typing import Iterable, List, Optional, TextIO

from ..config.settings import AppSettings, appsettings
from ..models.document import DocumentState
from ..models.diagnostics import Diagnostic, Phase, Severity
from .emitter import MarkupEmitter
from .errors import DiversionError, EvaluationError, ScanError
from .evaluator import Evaluator, LuaEvaluator
from .inline import InlineExpander
from .log import LOG, diagnostic_log
from .output import DiversionStore, OutputSink
from .scanner import DocumentScanner
from .surface import SurfaceRegistry


class Preprocessor:
    """
    Preprocess groff documents with embedded Lua

    Args:
        settings: Delimiters and run options (defaults to the PPLUA_
                  environment-backed singleton)
        evaluator: Script engine; a LuaEvaluator is created when omitted

    Attributes:
        output: OutputSink all un-diverted text ends up in
        diversions: DiversionStore routing every write
        state: DocumentState shadow of formatter state
        emitter: MarkupEmitter exposed to scripts through the surface
        diagnostics: Every warning and error reported during this run
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        evaluator: Optional[Evaluator] = None,
    ) -> None:
        self.settings = settings if settings is not None else appsettings
        self.output = OutputSink()
        self.diversions = DiversionStore(self.output)
        self.state = DocumentState()
        self.emitter = MarkupEmitter(
            self.diversions,
            self.state,
            block_open=self.settings.block_open,
            block_close=self.settings.block_close,
            unique_prefix=self.settings.unique_prefix,
        )
        self.surface = SurfaceRegistry(self.emitter)
        self.evaluator = evaluator if evaluator is not None else LuaEvaluator(self.settings.lua_paths)
        self.evaluator.surface_install(self.surface)
        self.diagnostics: List[Diagnostic] = []

        self.expander = InlineExpander(self.evaluator, self.settings, self.report)
        self.scanner = DocumentScanner(
            self.settings, self.evaluator, self.diversions, self.expander, self.report
        )

        for path in self.settings.preamble_files:
            self.preamble_run(path)

    def report(self, diagnostic: Diagnostic) -> None:
        """Record a diagnostic and log it."""
        self.diagnostics.append(diagnostic)
        diagnostic_log(diagnostic)

    def preamble_run(self, path: str) -> bool:
        """
        Execute a preamble file; errors are reported, not fatal.

        Returns:
            True if the preamble ran without error
        """
        LOG(f"Running preamble {path}", level=2)
        try:
            with open(path, encoding="utf-8") as handle:
                source = handle.read()
        except OSError as err:
            self.report(Diagnostic(
                Severity.ERROR, Phase.PREAMBLE, path, 0, f"cannot read '{path}': {err.strerror}",
            ))
            return False
        except UnicodeDecodeError as err:
            self.report(Diagnostic(
                Severity.ERROR, Phase.PREAMBLE, path, 0, f"cannot decode '{path}': {err.reason}",
            ))
            return False
        try:
            self.evaluator.execute(source, f"@{path}")
        except EvaluationError as err:
            self.report(Diagnostic(Severity.ERROR, Phase.PREAMBLE, path, 0, str(err)))
            return False
        return True

    def process(self, stream: Iterable[str], filename: str = "<stdin>") -> bool:
        """
        Process a single input stream.

        Args:
            stream: Lines of the document
            filename: Name used for .lf directives and diagnostics

        Returns:
            True on success, False if the stream ended inside a block or
            could not be decoded

        Raises:
            DiversionError: If a script ends a diversion that is not active
        """
        LOG(f"Processing {filename}", level=2)
        try:
            self.scanner.scan(stream, filename)
        except ScanError as err:
            self.report(Diagnostic(
                Severity.ERROR, Phase.SCAN, err.filename, err.line, "unterminated .lua block",
            ))
            return False
        except UnicodeDecodeError as err:
            self.report(Diagnostic(
                Severity.ERROR, Phase.IO, filename, 0, f"cannot decode input: {err.reason}",
            ))
            return False
        except DiversionError as err:
            self.report(Diagnostic(
                Severity.ERROR, Phase.PROTOCOL, filename, self.scanner.current_line, str(err),
            ))
            raise
        LOG(f"Processed {self.scanner.current_line} lines of {filename}", level=2)
        return True

    def process_text(self, text: str, filename: str = "<string>") -> bool:
        """Process a document held in memory."""
        return self.process(io.StringIO(text), filename)

    def process_file(self, path: str) -> bool:
        """
        Process a named file.

        Returns:
            False if the file cannot be opened or decoded, or ends inside a
            block
        """
        try:
            handle = open(path, encoding="utf-8")
        except OSError as err:
            self.report(Diagnostic(
                Severity.ERROR, Phase.IO, path, 0, f"cannot open '{path}': {err.strerror}",
            ))
            return False
        with handle:
            return self.process(handle, path)

    def flush(self, out: Optional[TextIO] = None) -> None:
        """Write all accumulated output to ``out`` (stdout by default) and clear it."""
        out = out if out is not None else sys.stdout
        out.write(self.output.contents())
        out.flush()
        self.output.clear()
