from __future__ import annotations

from lark import Tree

from ..runtime import (
    Environment,
    EvalFunc,
    TernNone,
    TernNumber,
    TernRuntimeError,
    TernValue,
    TypeMismatchError,
    VarAlreadyDefinedError,
    VarNotFoundError,
    get_type,
)
from .common import expect_ident
from .expr import float_div

_IOPS = {
    '+=': lambda a, b: a + b,
    '-=': lambda a, b: a - b,
    '*=': lambda a, b: a * b,
    '/=': float_div,
}

def eval_assign(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    """`let name = value`: first definition only, never rebinds."""
    name_node, value_node = n.children
    name = expect_ident(name_node)
    value = eval_func(value_node, env)

    if env.exists_local(name):
        raise VarAlreadyDefinedError(name)

    env.bind(name, value)

    return TernNone()

def eval_set_var(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    name_node, value_node = n.children
    name = expect_ident(name_node)

    if not env.exists(name):
        raise VarNotFoundError(name)

    env.set(name, eval_func(value_node, env))

    return TernNone()

def eval_iop(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    name_node, op, value_node = n.children
    name = expect_ident(name_node)
    apply = _IOPS.get(str(op))

    if apply is None:
        raise TernRuntimeError(f"Unknown in-place operator {str(op)!r}")

    value = eval_func(value_node, env)
    if not isinstance(value, TernNumber):
        raise TypeMismatchError("int or float", get_type(value))

    current = env.lookup(name)
    if current is None:
        raise VarNotFoundError(name)

    if not isinstance(current, TernNumber):
        raise TypeMismatchError("number", get_type(current))

    env.set(name, TernNumber(apply(current.value, value.value)))

    return TernNone()
