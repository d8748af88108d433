"""
Output sink and diversion tests

Covers routing of writes between the main output and named diversions,
re-opening semantics, and the diversion stack protocol.
"""

import pytest

from pplua.lib.output import OutputSink, DiversionStore
from pplua.lib.errors import DiversionError


class TestOutputSink:
    """Test the linear output accumulator"""

    def test_write_variants(self, sink):
        """write adds no newline, writeln adds exactly one, blank_line only one"""
        sink.write("a")
        sink.writeln("b")
        sink.blank_line()
        assert sink.contents() == "ab\n\n"
        assert len(sink) == 4

    def test_clear(self, sink):
        """clear empties the buffer and writing resumes from scratch"""
        sink.write("old")
        sink.clear()
        assert sink.empty()
        sink.write("new")
        assert sink.contents() == "new"


class TestDiversionRouting:
    """Test that writes land in the right buffer"""

    def test_no_diversion_writes_to_sink(self, store, sink):
        """With an empty stack everything goes to the main output"""
        store.writeln(".PP")
        assert sink.contents() == ".PP\n"
        assert not store.is_diverting()
        assert store.current_name() == ""

    def test_reopen_appends_to_same_buffer(self, store, sink):
        """begin x, A, begin x, B, end, C, end -> x holds ABC"""
        store.begin("x")
        store.write("A")
        store.begin("x")
        store.write("B")
        store.end()
        store.write("C")
        store.end()

        assert store.get("x") == "ABC"
        assert sink.contents() == ""
        assert not store.is_diverting()

    def test_writes_target_top_of_stack(self, store, sink):
        """Nested diversions route to the most recently begun name"""
        store.begin("outer")
        store.write("1")
        store.begin("inner")
        assert store.current_name() == "inner"
        store.write("2")
        store.end()
        assert store.current_name() == "outer"
        store.write("3")
        store.end()
        store.write("4")

        assert store.get("outer") == "13"
        assert store.get("inner") == "2"
        assert sink.contents() == "4"

    def test_reentrant_name_deeper_in_stack(self, store):
        """A name repeated on the stack still shares one buffer"""
        store.begin("a")
        store.begin("b")
        store.begin("a")
        store.write("x")
        store.end()
        store.write("y")
        store.end()
        store.write("z")
        store.end()
        assert store.get("a") == "xz"
        assert store.get("b") == "y"

    def test_writeln_and_blank_line_diverted(self, store):
        """Line helpers honour the active diversion too"""
        store.begin("d")
        store.writeln("text")
        store.blank_line()
        store.end()
        assert store.get("d") == "text\n\n"

    def test_reopen_after_end_keeps_content(self, store):
        """Diversions persist after end() and re-opening appends"""
        store.begin("notes")
        store.write("first ")
        store.end()
        store.begin("notes")
        store.write("second")
        store.end()
        assert store.get("notes") == "first second"


class TestDiversionProtocol:
    """Test end() misuse and buffer management"""

    def test_end_on_empty_stack_raises(self, store):
        """end() with nothing active is a protocol error"""
        with pytest.raises(DiversionError, match="no active diversion"):
            store.end()

    def test_failed_end_mutates_nothing(self, store, sink):
        """A failing end() leaves buffers and output untouched"""
        store.begin("x")
        store.write("A")
        store.end()
        sink.write("main")

        with pytest.raises(DiversionError):
            store.end()

        assert store.get("x") == "A"
        assert sink.contents() == "main"
        assert not store.is_diverting()

    def test_get_unknown_is_empty(self, store):
        """Unknown names are not an error"""
        assert store.get("nope") == ""
        assert not store.exists("nope")

    def test_clear_empties_in_place(self, store):
        """clear keeps the buffer (and any stack entry) but drops its text"""
        store.begin("d")
        store.write("junk")
        store.clear("d")
        store.write("kept")
        store.end()
        assert store.get("d") == "kept"
        assert store.exists("d")

    def test_clear_unknown_is_noop(self, store):
        """Clearing a name that was never opened does nothing"""
        store.clear("ghost")
        assert not store.exists("ghost")

    def test_erase_then_begin_starts_fresh(self, store):
        """erase removes the buffer; a later begin starts empty"""
        store.begin("d")
        store.write("old")
        store.end()
        store.erase("d")
        assert store.get("d") == ""
        assert not store.exists("d")

        store.begin("d")
        store.write("new")
        store.end()
        assert store.get("d") == "new"

    def test_erase_while_active(self, store):
        """Erasing the active diversion drops its text; writes continue into a fresh buffer"""
        store.begin("d")
        store.write("old")
        store.erase("d")
        assert store.get("d") == ""
        store.write("new")
        store.end()
        assert store.get("d") == "new"

    def test_depth(self, store):
        """depth reports the stack size"""
        store.begin("a")
        store.begin("a")
        assert store.depth() == 2
        store.end()
        assert store.depth() == 1

    def test_separate_stores_do_not_share(self):
        """Two stores never see each other's diversions"""
        first = DiversionStore(OutputSink())
        second = DiversionStore(OutputSink())
        first.begin("x")
        first.write("mine")
        first.end()
        assert second.get("x") == ""
