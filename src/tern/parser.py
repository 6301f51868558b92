"""Source text to expression trees, using the bundled lark grammar."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator, List

from lark import Lark, Token, Transformer, Tree, UnexpectedInput
from lark.visitors import v_args

from .tree import tree_children

# Syntax errors surface as lark's own exception hierarchy.
ParseError = UnexpectedInput

GRAMMAR_FILE = "grammar.lark"


@lru_cache(maxsize=None)
def build_parser() -> Lark:
    return Lark.open(
        GRAMMAR_FILE,
        rel_to=__file__,
        parser="earley",
        lexer="basic",
        start="program",
        ambiguity="resolve",
        maybe_placeholders=False,
        propagate_positions=True,
    )


class Lower(Transformer):
    """Rewrite surface-only nodes into evaluator node kinds."""

    @v_args(meta=True)
    def impl_block(self, meta, c):
        struct, *methods = c
        impls: List[Tree] = []

        for method in methods:
            name, params, body = tree_children(method)
            impls.append(Tree('impl', [struct, name, params, body], meta=method.meta))

        return Tree('block', impls, meta=meta)


def parse_source(source: str) -> Tree:
    tree = build_parser().parse(source)
    return Lower().transform(tree)

def lex_source(source: str) -> Iterator[Token]:
    """Tokens of *source* including whitespace and comments, for highlighting."""
    return build_parser().lex(source, dont_ignore=True)
