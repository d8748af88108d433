"""
Document scanner tests

Tests the OUTSIDE / IN_BLOCK state machine through a Preprocessor wired to a
scripted evaluator: block collection, delimiter matching, line accounting,
error recovery, and routing of all output through diversions.
"""

import io

import pytest

from pplua.lib.errors import DiversionError, EvaluationError
from pplua.lib.preprocessor import Preprocessor
from pplua.lib.scanner import ScanState, marker_matches, marker_strip, lines_read
from pplua.models.diagnostics import Phase, Severity
from pplua.models.values import Value

from conftest import FakeEvaluator


class TestMarkerMatching:
    """Test delimiter recognition helpers"""

    @pytest.mark.parametrize("text,expected", [
        (".lua", True),
        (".lua x = 1", True),
        (".lua\tx = 1", True),
        (".luax", False),
        ("lua", False),
        (".lu", False),
    ])
    def test_marker_matches(self, text, expected):
        """Marker alone or followed by a space or tab"""
        assert marker_matches(text, ".lua") is expected

    def test_marker_strip(self):
        """Only leading spaces and tabs are removed"""
        assert marker_strip(" \t .lua ") == ".lua "

    def test_lines_read_numbers_from_one(self):
        """Lines are numbered from 1 and lose their terminator"""
        lines = list(lines_read(["a\n", "b"], "f.ms"))
        assert [(l.number, l.text) for l in lines] == [(1, "a"), (2, "b")]
        assert lines[0].filename == "f.ms"


class TestPassthrough:
    """Test markup lines outside blocks"""

    def test_plain_document_unchanged(self, pp, fake):
        """A document with no scripts comes out identical"""
        text = ".TL\nTitle\n.PP\nBody with 'quotes'.\n"
        assert pp.process_text(text, "doc.ms")
        assert pp.output.contents() == text
        assert fake.calls == []

    def test_missing_final_newline_added(self, pp):
        """Every passthrough line is newline-terminated"""
        pp.process(["no newline"], "doc.ms")
        assert pp.output.contents() == "no newline\n"

    def test_inline_expanded(self, pp, fake):
        """\\lua'1+1' on a markup line becomes 2"""
        fake.responses["return tostring(1+1)"] = Value.text("2")
        pp.process_text("Sum: \\lua'1+1'\n", "doc.ms")
        assert pp.output.contents() == "Sum: 2\n"

    def test_similar_request_not_a_block(self, pp, fake):
        """.luax is ordinary markup"""
        pp.process_text(".luax\n", "doc.ms")
        assert pp.output.contents() == ".luax\n"
        assert fake.calls == []


class TestBlocks:
    """Test script block collection and evaluation"""

    def test_block_source_and_chunk_label(self, pp, fake):
        """Block body lines are joined with newlines; chunk names the first body line"""
        pp.process_text("intro\n.lua\nx = 1\ny = 2\n.endlua\nafter\n", "doc.ms")
        assert fake.calls == [("x = 1\ny = 2\n", "@doc.ms:3")]
        assert pp.output.contents() == "intro\n.lf 6 doc.ms\nafter\n"

    def test_text_result_written_without_newline(self, pp, fake):
        """Returned text is emitted verbatim, then the .lf request"""
        fake.responses["return 'hi'\n"] = Value.text("hi")
        pp.process_text(".lua\nreturn 'hi'\n.endlua\n", "doc.ms")
        assert pp.output.contents() == "hi.lf 4 doc.ms\n"

    def test_number_result(self, pp, fake):
        """Numbers are emitted in decimal"""
        fake.responses["return 2\n"] = Value.number(2)
        pp.process_text(".lua\nreturn 2\n.endlua\n", "doc.ms")
        assert pp.output.contents().startswith("2.lf")

    def test_none_result_writes_nothing(self, pp):
        """Blocks returning nothing only produce the .lf request"""
        pp.process_text(".lua\nlocal x = 1\n.endlua\n", "doc.ms")
        assert pp.output.contents() == ".lf 4 doc.ms\n"

    def test_indented_delimiters(self, pp, fake):
        """Leading whitespace before either marker is ignored"""
        pp.process_text("  .lua\nx = 1\n\t.endlua\n", "doc.ms")
        assert fake.calls == [("x = 1\n", "@doc.ms:2")]

    def test_opener_trailer_is_source(self, pp, fake):
        """Text after the opener becomes the first source line"""
        pp.process_text(".lua x = 1\ny = 2\n.endlua\n", "doc.ms")
        assert fake.calls[0][0] == "x = 1\ny = 2\n"

    def test_same_line_block(self, pp, fake):
        """Opener and closer on one line run immediately"""
        fake.responses["return 'inline' "] = Value.text("inline")
        pp.process_text(".lua return 'inline' .endlua\nnext\n", "doc.ms")
        assert fake.calls == [("return 'inline' ", "@doc.ms:1")]
        assert pp.output.contents() == "inline.lf 2 doc.ms\nnext\n"

    def test_same_line_block_line_not_passed_through(self, settings, fake):
        """The markers line produces no markup; the next line is the first output"""
        pp = Preprocessor(settings.model_copy(update={"emit_lf": False}), fake)
        pp.process_text("  .lua x = 1 .endlua\nfirst\n", "doc.ms")
        assert pp.output.contents() == "first\n"
        assert pp.scanner.state is ScanState.OUTSIDE
        assert pp.scanner.block is None

    def test_block_lines_not_inline_expanded(self, pp, fake):
        """Inline syntax inside a block is left to the script"""
        pp.process_text(".lua\ns = \"\\lua'x'\"\n.endlua\n", "doc.ms")
        assert len(fake.calls) == 1
        assert fake.calls[0][0] == "s = \"\\lua'x'\"\n"

    def test_empty_block(self, pp, fake):
        """An empty block submits empty source"""
        pp.process_text(".lua\n.endlua\n", "doc.ms")
        assert fake.calls == [("", "@doc.ms:2")]

    def test_no_lf_when_disabled(self, settings, fake):
        """emit_lf=False drops line-accounting requests"""
        pp = Preprocessor(settings.model_copy(update={"emit_lf": False}), fake)
        pp.process_text("a\n.lua\nx = 1\n.endlua\nb\n", "doc.ms")
        assert pp.output.contents() == "a\nb\n"


class TestScriptEffects:
    """Test output produced by scripts through the surface"""

    def test_table_through_surface(self, pp, fake):
        """A block calling table() produces the exact tbl text"""
        def table_call(registry):
            registry.get("table")(["A", "B"], [["1", "2"]])
            return Value.none()

        fake.responses["lroff.table({'A','B'},{{'1','2'}})\n"] = table_call
        pp.process_text(".lua\nlroff.table({'A','B'},{{'1','2'}})\n.endlua\n", "doc.ms")
        assert pp.output.contents() == (
            ".TS\ncb cb\nl l.\nA\tB\n_\n1\t2\n.TE\n.lf 4 doc.ms\n"
        )

    def test_passthrough_follows_diversion(self, settings, fake):
        """Markup lines inside an open diversion are captured"""
        fake.responses["begin\n"] = lambda reg: reg.get("divert_begin")("notes") or Value.none()
        fake.responses["end\n"] = lambda reg: reg.get("divert_end")() or Value.none()
        fake.responses["replay\n"] = lambda reg: reg.get("divert_emit")("notes") or Value.none()

        pp = Preprocessor(settings.model_copy(update={"emit_lf": False}), fake)
        pp.process_text(
            ".lua\nbegin\n.endlua\n"
            "captured\n"
            ".lua\nend\n.endlua\n"
            "visible\n"
            ".lua\nreplay\n.endlua\n",
            "doc.ms",
        )
        assert pp.output.contents() == "visible\ncaptured\n"
        assert pp.diversions.get("notes") == "captured\n"


class TestErrors:
    """Test error recovery and fatal conditions"""

    def test_block_error_reported_and_scanning_continues(self, pp, fake):
        """A failing block is reported; later lines are still processed"""
        fake.responses["error('boom')\n"] = EvaluationError("doc.ms:2: boom", "@doc.ms:2")
        assert pp.process_text("a\n.lua\nerror('boom')\n.endlua\nb\n", "doc.ms")
        assert pp.output.contents() == "a\n.lf 5 doc.ms\nb\n"

        assert len(pp.diagnostics) == 1
        diagnostic = pp.diagnostics[0]
        assert diagnostic.phase is Phase.BLOCK
        assert diagnostic.severity is Severity.ERROR
        assert diagnostic.line == 3
        assert str(diagnostic) == "doc.ms:3: lua error: doc.ms:2: boom"

    def test_unterminated_block(self, pp, fake):
        """Input ending inside a block fails; earlier output is kept"""
        ok = pp.process_text("kept\n.lua\nx = 1\n", "doc.ms")
        assert ok is False
        assert pp.output.contents() == "kept\n"
        assert fake.calls == []
        assert pp.diagnostics[-1].phase is Phase.SCAN
        assert pp.diagnostics[-1].line == 3
        assert pp.diagnostics[-1].fatal

    def test_divert_end_without_begin_propagates(self, pp, fake):
        """Diversion protocol errors abort processing"""
        fake.responses["lroff.divert_end()\n"] = lambda reg: reg.get("divert_end")()
        with pytest.raises(DiversionError):
            pp.process_text("before\n.lua\nlroff.divert_end()\n.endlua\nafter\n", "doc.ms")
        assert pp.output.contents() == "before\n"
        assert pp.scanner.current_line == 4

        diagnostic = pp.diagnostics[-1]
        assert diagnostic.phase is Phase.PROTOCOL
        assert diagnostic.line == 4
        assert diagnostic.fatal

    def test_undecodable_input(self, pp):
        """Bytes that are not UTF-8 are an IO error, not a crash"""
        stream = io.TextIOWrapper(io.BytesIO(b"caf\xe9\n"), encoding="utf-8")
        assert pp.process(stream, "latin1.ms") is False
        assert pp.diagnostics[-1].phase is Phase.IO
        assert "cannot decode" in pp.diagnostics[-1].message

        assert pp.process_text("next\n", "doc.ms")
        assert pp.output.contents() == "next\n"

    def test_missing_file(self, pp, tmp_path):
        """Unopenable files are an IO error"""
        assert pp.process_file(str(tmp_path / "absent.ms")) is False
        assert pp.diagnostics[-1].phase is Phase.IO
        assert "cannot open" in pp.diagnostics[-1].message


class TestRunIsolation:
    """Test that runs share nothing"""

    def test_second_process_call_accumulates(self, pp):
        """Successive inputs append to the same output"""
        pp.process_text("one\n", "a.ms")
        pp.process_text("two\n", "b.ms")
        assert pp.output.contents() == "one\ntwo\n"

    def test_flush_writes_and_clears(self, pp, capsys):
        """flush sends output to stdout and empties the sink"""
        pp.process_text("line\n", "doc.ms")
        pp.flush()
        assert capsys.readouterr().out == "line\n"
        assert pp.output.empty()

    def test_separate_preprocessors(self, settings):
        """Two preprocessors never see each other's state"""
        first = Preprocessor(settings, FakeEvaluator())
        second = Preprocessor(settings, FakeEvaluator())
        first.emitter.nr_set("x", 1)
        first.diversions.begin("d")
        assert second.state.number_registers == {}
        assert not second.diversions.is_diverting()
        assert second.output.empty()
