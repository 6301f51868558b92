from __future__ import annotations

from typing import Any, List

from lark import Token

from ..runtime import TernNumber, TernString, TypeMismatchError
from ..tree import ident_name, token_kind, tree_children, tree_label, unquote_string

def node_kind(node: Any) -> str:
    label = tree_label(node)
    if label is not None:
        return label

    kind = token_kind(node)
    return kind.lower() if kind is not None else "unknown"

def expect_ident(node: Any) -> str:
    """Return the name of a bare identifier node or fail with a type mismatch."""
    name = ident_name(node)
    if name is None:
        raise TypeMismatchError("ident", node_kind(node))

    return name

def ident_list(node: Any) -> List[str]:
    return [expect_ident(child) for child in tree_children(node)]

def token_number(token: Token) -> TernNumber:
    return TernNumber(float(token.value))

def token_string(token: Token) -> TernString:
    return TernString(unquote_string(str(token.value)))
