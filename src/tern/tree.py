"""Shape helpers for the expression trees the evaluator consumes.

Trees are plain ``lark.Tree``/``lark.Token`` objects, so anything that builds
them (the bundled grammar, another parser, or tests) works with the evaluator.
The constructors below document the expected shape of every node kind.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, TypeGuard

from lark import Token, Tree
from typing_extensions import TypeAlias

Node: TypeAlias = Tree | Token

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
_QUOTES = {v: k for k, v in _ESCAPES.items()}


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Node) -> Optional[str]:
    return str(node.data) if is_tree(node) else None

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def token_kind(node: object) -> Optional[str]:
    if not is_token(node):
        return None

    return str(node.type)

def ident_name(node: object) -> Optional[str]:
    if is_token(node) and node.type == 'IDENT':
        return str(node.value)

    return None

def node_position(node: object) -> Tuple[Optional[int], Optional[int]]:
    """Best-effort (line, column) of a node, or (None, None)."""
    if is_token(node):
        return getattr(node, "line", None), getattr(node, "column", None)

    if is_tree(node):
        meta = node.meta
        if not getattr(meta, "empty", True):
            return getattr(meta, "line", None), getattr(meta, "column", None)

        for child in node.children:
            line, col = node_position(child)
            if line is not None:
                return line, col

    return None, None

# ---------- String literal encoding ----------

def quote_string(text: str) -> str:
    return '"' + "".join(f"\\{_QUOTES[ch]}" if ch in _QUOTES else ch for ch in text) + '"'

def unquote_string(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"':
        raw = raw[1:-1]

    out: List[str] = []
    it = iter(raw)

    for ch in it:
        if ch != "\\":
            out.append(ch)
            continue

        nxt = next(it, "")
        # unknown escapes are kept verbatim
        out.append(_ESCAPES.get(nxt, "\\" + nxt))

    return "".join(out)

# ---------- Constructors ----------

def ident(name: str) -> Token:
    return Token('IDENT', name)

def number(value: float | int) -> Token:
    return Token('NUMBER', repr(float(value)))

def string(text: str) -> Token:
    return Token('STRING', quote_string(text))

def boolean(value: bool) -> Token:
    return Token('TRUE', 'true') if value else Token('FALSE', 'false')

def empty() -> Tree:
    return Tree('empty', [])

def block(*body: Node) -> Tree:
    return Tree('block', list(body))

def binop(op: str, left: Node, right: Node) -> Tree:
    return Tree('binop', [left, Token('OP', op), right])

def if_then(cond: Node, then: Node, else_: Optional[Node] = None) -> Tree:
    if else_ is None:
        return Tree('ifthen', [cond, then])

    return Tree('ifthenelse', [cond, then, else_])

def assign(name: str, value: Node) -> Tree:
    return Tree('assign', [ident(name), value])

def set_var(name: str, value: Node) -> Tree:
    return Tree('setvar', [ident(name), value])

def iop(op: str, name: str, value: Node) -> Tree:
    return Tree('iop', [ident(name), Token('IOP', op), value])

def while_loop(cond: Node, body: Node) -> Tree:
    return Tree('while', [cond, body])

def for_loop(name: Node | str, iterable: Node, body: Node) -> Tree:
    target = ident(name) if isinstance(name, str) and not is_token(name) else name
    return Tree('for', [target, iterable, body])

def _ident_list(label: str, names: Iterable[Node | str]) -> Tree:
    return Tree(label, [ident(n) if isinstance(n, str) and not is_token(n) else n for n in names])

def fun_def(name: str, params: Sequence[Node | str], body: Node) -> Tree:
    return Tree('fundef', [ident(name), _ident_list('params', params), body])

def call(name: str, *args: Node) -> Tree:
    return Tree('call', [ident(name), Tree('args', list(args))])

def list_of(*elems: Node) -> Tree:
    return Tree('list', list(elems))

def index(name: Node | str, idx: Node) -> Tree:
    target = ident(name) if isinstance(name, str) and not is_token(name) else name
    return Tree('index', [target, idx])

def range_of(start: Node, end: Node) -> Tree:
    return Tree('range', [start, end])

def struct_def(name: str, fields: Sequence[Node | str]) -> Tree:
    return Tree('structdef', [ident(name), _ident_list('fields', fields)])

def call_struct(name: str, pairs: Sequence[Tuple[Node | str, Node]]) -> Tree:
    kids: List[Node] = [ident(name)]

    for key, value in pairs:
        key_node = ident(key) if isinstance(key, str) and not is_token(key) else key
        kids.append(Tree('pair', [key_node, value]))

    return Tree('callstruct', kids)

def get_attr(name: str, attr: str) -> Tree:
    return Tree('getattr', [ident(name), ident(attr)])

def impl(struct: str, method: str, params: Sequence[Node | str], body: Node) -> Tree:
    return Tree('impl', [ident(struct), ident(method), _ident_list('params', params), body])

def get_func(instance: str, method: str, *args: Node) -> Tree:
    return Tree('getfunc', [ident(instance), ident(method), Tree('args', list(args))])

def match(value: Node, cases: Sequence[Tuple[Node, Node]]) -> Tree:
    return Tree('match', [value] + [Tree('case', [pat, body]) for pat, body in cases])
