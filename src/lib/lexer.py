r"""
Custom Pygments lexer for pplua documents

Highlights groff source annotated with embedded Lua, for ``pplua --highlight``
listings and for showing pplua input in other documents.

Token types:
- Keyword.Namespace: .lua / .endlua block requests
- Name.Builtin: inline expression delimiters (\lua' and ')
- Keyword: other groff requests (.SH, .PP, .TS, ...)
- Comment: groff comments (.\" and \")
- String.Escape: groff escapes (\fB, \n[reg], \(bu, ...)
- Lua tokens: everything inside a block or an inline expression
"""

from pygments.lexer import RegexLexer, bygroups, include, using
from pygments.lexers.scripting import LuaLexer
from pygments.token import (
    Text,
    Punctuation,
    Name,
    Keyword,
    Comment,
    String,
)


class PpluaLexer(RegexLexer):
    r"""
    Lexer for groff documents with embedded Lua

    Example:
        .SH Results
        .lua
        lroff.table({"A", "B"}, rows)
        .endlua
        Total: \lua'#rows' rows.

    Tokens:
        .SH → Keyword
        .lua → Keyword.Namespace
        lroff.table(...) → Lua tokens
        \lua' → Name.Builtin
        #rows → Lua tokens
    """

    name = 'pplua'
    aliases = ['pplua', 'groff-lua']
    filenames = ['*.ms.lua', '*.mom.lua']

    tokens = {
        'root': [
            # Same-line block: .lua code .endlua
            (r'^([ \t]*)(\.lua)([ \t]+)(.*?)(\.endlua)(.*\n?)',
             bygroups(Text, Keyword.Namespace, Text, using(LuaLexer), Keyword.Namespace, Comment)),

            # Block opener, optional first line of code
            (r'^([ \t]*)(\.lua)(?=[ \t\n]|$)([ \t]*)(.*\n?)',
             bygroups(Text, Keyword.Namespace, Text, using(LuaLexer)), 'block'),

            # Comment lines: .\" text
            (r'^\.\\".*\n?', Comment.Single),

            # Requests and macro calls
            (r'^([.\'])([A-Za-z][\w]*)', bygroups(Punctuation, Keyword)),

            include('inline'),
        ],

        'block': [
            (r'^([ \t]*)(\.endlua)(?=[ \t\n]|$)(.*\n?)',
             bygroups(Text, Keyword.Namespace, Comment), '#pop'),
            (r'[^\n]*\n', using(LuaLexer)),
        ],

        'inline': [
            # Inline expression: \lua'expr' (backslash escapes inside)
            (r"(\\lua')((?:\\.|[^'\\])*)(')",
             bygroups(Name.Builtin, using(LuaLexer), Name.Builtin)),

            # Rest-of-line comments: \" text
            (r'\\".*', Comment.Single),

            # groff escapes
            (r'\\[fns*]\[[^\]\n]*\]', String.Escape),
            (r'\\[fns*]\([^\s]{2}', String.Escape),
            (r'\\[fns*][^\s(\[]', String.Escape),
            (r'\\\([^\s]{2}', String.Escape),
            (r'\\\[[^\]\n]*\]', String.Escape),
            (r'\\.', String.Escape),
            (r'\\', String.Escape),

            # Everything else is text
            (r'[^\\\n]+', Text),
            (r'\n', Text),
        ],
    }


def get_lexer() -> PpluaLexer:
    """
    Get the PpluaLexer instance

    Returns:
        PpluaLexer instance ready for use with Pygments
    """
    return PpluaLexer()
