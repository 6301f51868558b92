"""prompt_toolkit lexer for live Tern syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable, List

from lark import Token
from lark.exceptions import UnexpectedCharacters
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .parser import lex_source

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "type": "bold ansiblue",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

KEYWORDS = {"LET", "FN", "STRUCT", "IMPL", "IF", "ELSE", "WHILE", "FOR", "IN", "MATCH"}

_TYPE_GROUP = {
    "TRUE": "boolean",
    "FALSE": "boolean",
    "NUMBER": "number",
    "STRING": "string",
    "IDENT": "identifier",
    "COMMENT": "comment",
    "IOP": "operator",
    "CMP_OP": "operator",
    "ADD_OP": "operator",
    "MUL_OP": "operator",
    "AND": "operator",
    "OR": "operator",
}

# Identifiers right after these keywords name a declaration.
_DECL_HEADS = {"STRUCT": "type", "IMPL": "type", "FN": "function"}


def _significant(tokens: List[Token], idx: int, step: int) -> Token | None:
    j = idx + step
    while 0 <= j < len(tokens):
        if tokens[j].type != "WS":
            return tokens[j]
        j += step
    return None

def _group(tokens: List[Token], idx: int) -> str:
    tok = tokens[idx]

    if tok.type in KEYWORDS:
        return "keyword"

    if tok.type == "IDENT":
        prev_tok = _significant(tokens, idx, -1)
        if prev_tok is not None and prev_tok.type in _DECL_HEADS:
            return _DECL_HEADS[prev_tok.type]

        next_tok = _significant(tokens, idx, 1)
        if next_tok is not None and next_tok.value == "(":
            return "function"

    return _TYPE_GROUP.get(tok.type, "punctuation")

def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    tokens: List[Token] = []
    try:
        for tok in lex_source(text):
            tokens.append(tok)
    except UnexpectedCharacters:
        # keep what lexed cleanly; the rest is flagged below
        pass

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.start_pos > pos:
            result.append(("", text[pos:tok.start_pos]))

        style = "" if tok.type == "WS" else GROUP_STYLE.get(_group(tokens, i), "")
        result.append((style, str(tok)))
        pos = tok.end_pos

    if pos < len(text):
        result.append((GROUP_STYLE["error"], text[pos:]))

    return result if result else [("", text)]


class TernLexer(Lexer):
    """prompt_toolkit Lexer that highlights Tern source with the grammar's own lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
