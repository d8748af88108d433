"""
Output buffering and diversion management

All groff text emitted by the scanner and by scripts flows through these
classes. OutputSink is the final destination; DiversionStore decides whether
a write lands there or in a named diversion.

Example:
    >>> sink = OutputSink()
    >>> store = DiversionStore(sink)
    >>> store.begin("toc")
    >>> store.writeln(".XP")
    >>> store.end()
    >>> store.write("body")
    >>> store.get("toc"), sink.contents()
    ('.XP\\n', 'body')
"""

import io
from typing import Dict, List

from .errors import DiversionError


class OutputSink:
    """Linear accumulator for groff source text"""

    def __init__(self) -> None:
        self._buf = io.StringIO()

    def write(self, text: str) -> None:
        """Append raw text (no trailing newline)."""
        self._buf.write(text)

    def writeln(self, text: str) -> None:
        """Append raw text followed by exactly one newline."""
        self._buf.write(text)
        self._buf.write("\n")

    def blank_line(self) -> None:
        """Append a bare newline (blank line = paragraph break in groff)."""
        self._buf.write("\n")

    def contents(self) -> str:
        return self._buf.getvalue()

    def clear(self) -> None:
        self._buf.seek(0)
        self._buf.truncate(0)

    def empty(self) -> bool:
        return self._buf.tell() == 0

    def __len__(self) -> int:
        return len(self._buf.getvalue())


class DiversionStore:
    """
    Named diversions, nestable

    When no diversion is active, writes go straight to the OutputSink.
    begin("foo") pushes "foo" onto the stack and redirects writes into that
    named buffer; end() pops. Buffers outlive the stack: re-opening a name
    appends to what it already holds.

    The stack holds names only; the buffers live in a separate dict, so a
    name may appear several times on the stack while owning one buffer.
    """

    def __init__(self, sink: OutputSink) -> None:
        self.sink = sink
        self._buffers: Dict[str, io.StringIO] = {}
        self._stack: List[str] = []

    # -- stack operations --

    def begin(self, name: str) -> None:
        self._stack.append(name)
        if name not in self._buffers:
            self._buffers[name] = io.StringIO()

    def end(self) -> None:
        """
        Pop the active diversion.

        Raises:
            DiversionError: If no diversion is active
        """
        if not self._stack:
            raise DiversionError("divert_end: no active diversion")
        self._stack.pop()

    # -- writing (routed to current target) --

    def _target_write(self, text: str) -> None:
        if self._stack:
            self._buffers.setdefault(self._stack[-1], io.StringIO()).write(text)
        else:
            self.sink.write(text)

    def write(self, text: str) -> None:
        self._target_write(text)

    def writeln(self, text: str) -> None:
        self._target_write(text + "\n")

    def blank_line(self) -> None:
        self._target_write("\n")

    # -- query / retrieve --

    def get(self, name: str) -> str:
        """Full text of a diversion; unknown names yield an empty string."""
        buf = self._buffers.get(name)
        return buf.getvalue() if buf is not None else ""

    def exists(self, name: str) -> bool:
        return name in self._buffers

    def clear(self, name: str) -> None:
        """Empty a diversion in place; no-op for unknown names."""
        buf = self._buffers.get(name)
        if buf is not None:
            buf.seek(0)
            buf.truncate(0)

    def erase(self, name: str) -> None:
        """
        Forget a diversion entirely.

        An erased name that is still on the stack gets a fresh buffer on
        its next write.
        """
        self._buffers.pop(name, None)

    def is_diverting(self) -> bool:
        return bool(self._stack)

    def current_name(self) -> str:
        return self._stack[-1] if self._stack else ""

    def depth(self) -> int:
        return len(self._stack)
