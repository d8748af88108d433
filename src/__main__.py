#!/usr/bin/env python3
r"""
pplua - Lua preprocessor for the groff pipeline

Reads groff documents, runs the Lua they embed, and writes plain groff source
to stdout, ready to pipe into groff.

Philosophy:
    - Documents stay ordinary groff: pplua only touches .lua blocks and
      \lua'...' expressions
    - Line numbers survive: .lf requests keep groff's diagnostics pointing
      at the original file
    - Scripts talk to the document through the lroff table, which also keeps
      a shadow of font, size and register state

Usage:
    pplua [options] [file ...]

    If no files are given, reads from stdin. "-" also means stdin.

Examples:
    # Preprocess and typeset
    pplua report.ms | groff -ms -t -Tpdf > report.pdf

    # Define a global and load helpers first
    pplua -D EDITION=2 -l macros.lua -I lib report.ms

    # Show the input with syntax highlighting
    pplua --highlight report.ms
"""

import sys
from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter
from typing import List, Optional, Tuple

from .config import appsettings
from .lib import Preprocessor, DiversionError, EvaluationError, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline


EPILOG = r"""
Input is read from files (or stdin if none given).
Output is written to stdout.

Lua blocks are delimited by .lua / .endlua requests.
Inline expressions use \lua'expr' syntax.
"""

# Define CLI arguments
parser = ArgumentParser(
    prog="pplua",
    description="A Lua preprocessor for the groff pipeline.",
    epilog=EPILOG,
    formatter_class=RawDescriptionHelpFormatter,
)

parser.add_argument(
    "inputFiles", nargs="*", metavar="file", help="Input files ('-' for stdin)"
)

parser.add_argument(
    "-e", dest="execBefore", action="append", default=[], metavar="CODE",
    help="Execute Lua CODE before processing input",
)

parser.add_argument(
    "-l", dest="preambleFiles", action="append", default=[], metavar="FILE",
    help="Run a Lua preamble file",
)

parser.add_argument(
    "-I", dest="luaPaths", action="append", default=[], metavar="PATH",
    help="Add PATH to Lua package.path",
)

parser.add_argument(
    "-D", dest="defines", action="append", default=[], metavar="NAME=VALUE",
    help="Define a Lua global variable (string)",
)

parser.add_argument(
    "-n", dest="noLf", action="store_true",
    help="Suppress .lf line-number directives",
)

parser.add_argument(
    "--highlight", action="store_true",
    help="Print the input with syntax highlighting instead of preprocessing it",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase log verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def define_split(define: str) -> Tuple[str, str]:
    """
    Split a -D argument into name and value.

    Example:
        >>> define_split("EDITION=2"), define_split("DRAFT")
        (('EDITION', '2'), ('DRAFT', '1'))
    """
    name, sep, value = define.partition("=")
    return (name, value) if sep else (name, "1")


def luaPaths_expand(paths: List[str]) -> List[str]:
    """package.path patterns for each -I directory."""
    patterns: List[str] = []
    for path in paths:
        patterns.append(f"{path}/?.lua")
        patterns.append(f"{path}/?/init.lua")
    return patterns


def engine_setup(inputstate: ProgramState) -> ProgramState:
    """
    Build the preprocessor and prepare the Lua environment.

    Runs preamble files (errors reported, not fatal), sets -D globals, then
    runs -e chunks (any error is fatal).

    Returns:
        ProgramState with added fields:
            - preprocessor: Ready-to-use Preprocessor
            - setupOK: False if an -e chunk failed
    """
    state = inputstate.copy()

    settings = appsettings.model_copy(update={
        "emit_lf": appsettings.emit_lf and not state.noLf,
        "preamble_files": appsettings.preamble_files + state.preambleFiles,
        "lua_paths": appsettings.lua_paths + luaPaths_expand(state.luaPaths),
    })
    LOG(f"Settings: {settings.model_dump()}", level=3)

    try:
        state.preprocessor = Preprocessor(settings)
    except DiversionError as e:
        print(f"pplua: preamble: {e}", file=sys.stderr)
        state.exitCode = 1
        return state

    for define in state.defines:
        name, value = define_split(define)
        state.preprocessor.evaluator.global_set(name, value)
        LOG(f"Defined {name}={value!r}", level=2)

    for code in state.execBefore:
        try:
            state.preprocessor.evaluator.execute(code, "@-e")
        except (EvaluationError, DiversionError) as e:
            print(f"pplua: -e: {e}", file=sys.stderr)
            state.exitCode = 1
            return state

    state.setupOK = True
    return state


def inputs_process(inputstate: ProgramState) -> ProgramState:
    """
    Preprocess every input in order.

    A file that cannot be opened or decoded, or that ends inside a block,
    makes the run fail, but later files are still processed. A diversion
    protocol error aborts the remaining inputs.

    Returns:
        ProgramState with exitCode updated
    """
    state = inputstate.copy()
    if not state.setupOK:
        return state

    pp: Preprocessor = state.preprocessor
    for path in state.inputFiles or ["-"]:
        try:
            if path == "-":
                ok = pp.process(sys.stdin, "<stdin>")
            else:
                ok = pp.process_file(path)
        except DiversionError as e:
            print(f"pplua: {path}:{pp.scanner.current_line}: {e}", file=sys.stderr)
            state.exitCode = 1
            break
        if not ok:
            state.exitCode = 1

    return state


def output_flush(inputstate: ProgramState) -> ProgramState:
    """Write everything produced so far to stdout."""
    state = inputstate.copy()
    if state.preprocessor is not None and state.setupOK:
        state.preprocessor.flush(sys.stdout)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """Summarize the run at verbose levels (terminal pipeline stage)."""
    state = inputstate.copy()
    if state.preprocessor is not None:
        diagnostics = state.preprocessor.diagnostics
        LOG(f"{len(diagnostics)} diagnostic(s), exit status {state.exitCode}", level=2)
    return state


def inputs_highlight(inputstate: ProgramState) -> ProgramState:
    """Print each input with pplua syntax highlighting."""
    from pygments import highlight
    from pygments.formatters import TerminalFormatter
    from .lib.lexer import PpluaLexer

    state = inputstate.copy()
    lexer = PpluaLexer()
    formatter = TerminalFormatter()
    for path in state.inputFiles or ["-"]:
        try:
            if path == "-":
                source = sys.stdin.read()
            else:
                with open(path, encoding="utf-8") as handle:
                    source = handle.read()
        except OSError as e:
            print(f"pplua: cannot open '{path}': {e.strerror}", file=sys.stderr)
            state.exitCode = 1
            continue
        except UnicodeDecodeError as e:
            print(f"pplua: cannot decode '{path}': {e.reason}", file=sys.stderr)
            state.exitCode = 1
            continue
        sys.stdout.write(highlight(source, lexer, formatter))
    return state


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point - preprocess documents and write groff to stdout.

    Orchestrates the pipeline:
        1. engine_setup: Build the preprocessor, run preambles, -D, -e
        2. inputs_process: Scan each input file (or stdin)
        3. output_flush: Write accumulated output to stdout
        4. results_report: Summarize at verbose levels

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit status: non-zero if any input could not be opened,
        ended inside a block, or misused diversions, or if -e failed
    """
    options: Namespace = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    if state.highlight:
        final = pipeline(state, inputs_highlight)
    else:
        final = pipeline(state, engine_setup, inputs_process, output_flush, results_report)
    return final.exitCode


if __name__ == "__main__":
    sys.exit(main())
