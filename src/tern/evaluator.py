from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, Optional

from lark import Token, Tree

from .runtime import (
    Environment,
    TernBool,
    TernNone,
    TernRuntimeError,
    TernValue,
    init_stdlib,
)
from .tree import Node, is_token, is_tree, node_position

from .eval.bind import eval_assign, eval_iop, eval_set_var
from .eval.blocks import eval_program
from .eval.common import token_number, token_string
from .eval.expr import eval_binop, eval_if
from .eval.fn import eval_call, eval_fn_def
from .eval.loops import eval_for, eval_while
from .eval.match import eval_match
from .eval.objects import eval_call_struct, eval_get_attr, eval_get_func, eval_impl, eval_struct_def
from .eval.selector import eval_index, eval_list, eval_range


def _maybe_attach_location(exc: TernRuntimeError, node: Node) -> None:
    # innermost node wins; outer frames leave it alone
    if exc.meta is not None:
        return

    line, col = node_position(node)
    if line is None:
        return

    exc.meta = SimpleNamespace(line=line, column=col)

# ---------------- Public API ----------------

def eval_expr(ast: Node, env: Optional[Environment]=None, source: Optional[str]=None) -> TernValue:
    init_stdlib()

    if env is None:
        env = Environment(source=source)
    elif source is not None:
        env.source = source

    return eval_node(ast, env)

# ---------------- Core evaluator ----------------

def eval_node(n: Node, env: Environment) -> TernValue:
    try:
        return _eval_node_inner(n, env)
    except TernRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, env: Environment) -> TernValue:
    if is_token(n):
        return _eval_token(n, env)

    if not is_tree(n):
        raise TernRuntimeError(f"Not an expression node: {n!r}")

    handler = _NODE_DISPATCH.get(str(n.data))
    if handler is None:
        raise TernRuntimeError(f"Unknown node: {n.data}")

    return handler(n, env)

# ---------------- Tokens ----------------

def _eval_token(t: Token, env: Environment) -> TernValue:
    if t.type == 'IDENT':
        return env.get(t.value)

    handler = _TOKEN_DISPATCH.get(t.type)
    if handler:
        return handler(t, env)

    raise TernRuntimeError(f"Unhandled token {t.type}:{t.value}")

# ---------------- Dispatch ----------------

_NODE_DISPATCH: dict[str, Callable[[Tree, Environment], TernValue]] = {
    'empty': lambda _, __: TernNone(),
    'block': lambda n, env: eval_program(n.children, env, eval_node),
    'binop': lambda n, env: eval_binop(n, env, eval_node),
    'ifthen': lambda n, env: eval_if(n, env, eval_node),
    'ifthenelse': lambda n, env: eval_if(n, env, eval_node),
    'assign': lambda n, env: eval_assign(n, env, eval_node),
    'setvar': lambda n, env: eval_set_var(n, env, eval_node),
    'iop': lambda n, env: eval_iop(n, env, eval_node),
    'while': lambda n, env: eval_while(n, env, eval_node),
    'for': lambda n, env: eval_for(n, env, eval_node),
    'fundef': lambda n, env: eval_fn_def(n, env, eval_node),
    'call': lambda n, env: eval_call(n, env, eval_node),
    'list': lambda n, env: eval_list(n, env, eval_node),
    'index': lambda n, env: eval_index(n, env, eval_node),
    'range': lambda n, env: eval_range(n, env, eval_node),
    'structdef': lambda n, env: eval_struct_def(n, env, eval_node),
    'callstruct': lambda n, env: eval_call_struct(n, env, eval_node),
    'getattr': lambda n, env: eval_get_attr(n, env, eval_node),
    'impl': lambda n, env: eval_impl(n, env, eval_node),
    'getfunc': lambda n, env: eval_get_func(n, env, eval_node),
    'match': lambda n, env: eval_match(n, env, eval_node),
}

_TOKEN_DISPATCH: dict[str, Callable[[Token, Environment], TernValue]] = {
    'NUMBER': lambda t, _: token_number(t),
    'STRING': lambda t, _: token_string(t),
    'TRUE': lambda _, __: TernBool(True),
    'FALSE': lambda _, __: TernBool(False),
}
