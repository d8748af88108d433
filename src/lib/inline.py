r"""
Inline expression expansion

Replaces every ``\lua'expr'`` span on an ordinary line with the text the
expression evaluates to. Only lines the block scanner did not claim are
expanded.

Scanning rules:
- A backslash inside a span escapes the next character, which is kept
  verbatim and never ends the span
- The first unescaped close character ends the span; spans do not nest
- An unterminated span is a warning: the rest of the line, open delimiter
  included, is copied through and the line is not scanned further

Example:
    >>> expander.expand(r"Total: \lua'1+1' items", "doc.ms", 4)
    'Total: 2 items'
"""

from typing import Callable, List, Optional

from ..config.settings import AppSettings
from ..models.diagnostics import Diagnostic, Phase, Severity
from .errors import EvaluationError
from .evaluator import Evaluator
from .log import LOG


class InlineExpander:
    """
    Locate and evaluate inline expression spans

    Args:
        evaluator: Engine the enclosed expressions are submitted to
        settings: Delimiters and the text-coercion chunk template
        report: Callback receiving warnings and evaluation errors
    """

    def __init__(
        self,
        evaluator: Evaluator,
        settings: AppSettings,
        report: Callable[[Diagnostic], None],
    ) -> None:
        self.evaluator = evaluator
        self.settings = settings
        self.report = report

    def spanClose_find(self, line: str, start: int) -> Optional[int]:
        """
        Find the close character of a span.

        Args:
            line: Line being scanned
            start: Index just past the open delimiter

        Returns:
            Index of the first unescaped close character, or None if the
            line ends first
        """
        close = self.settings.inline_close
        pos = start
        while pos < len(line):
            char = line[pos]
            if char == "\\" and pos + 1 < len(line):
                pos += 2
                continue
            if char == close:
                return pos
            pos += 1
        return None

    def expand(self, line: str, filename: str, lineno: int) -> str:
        """
        Expand every inline expression on one line.

        Args:
            line: Raw line text without terminator
            filename: Name of the file being processed, for diagnostics
            lineno: 1-based line number, for diagnostics and chunk labels

        Returns:
            The line with each well-formed span replaced by its value
        """
        opener = self.settings.inline_open

        # Quick reject: the common case is a line with no inline expression
        if opener not in line:
            return line

        result: List[str] = []
        pos = 0
        while pos < len(line):
            start = line.find(opener, pos)
            if start == -1:
                result.append(line[pos:])
                break

            result.append(line[pos:start])
            expr_start = start + len(opener)
            expr_end = self.spanClose_find(line, expr_start)

            if expr_end is None:
                self.report(Diagnostic(
                    Severity.WARNING, Phase.SPAN, filename, lineno,
                    f"unterminated {opener} expression",
                ))
                result.append(line[start:])
                break

            expression = line[expr_start:expr_end]
            result.append(self.expression_evaluate(expression, filename, lineno))
            pos = expr_end + 1

        return "".join(result)

    def expression_evaluate(self, expression: str, filename: str, lineno: int) -> str:
        """Evaluate one span; errors yield an empty substitution."""
        chunk = self.settings.inlineChunk_make(expression)
        LOG(f"{filename}:{lineno}: inline expression: {expression}", level=3)
        try:
            value = self.evaluator.execute(chunk, f"@{filename}:{lineno}:inline")
        except EvaluationError as err:
            self.report(Diagnostic(Severity.ERROR, Phase.INLINE, filename, lineno, str(err)))
            return ""
        text = value.rendered()
        return text if text is not None else ""
