from __future__ import annotations

from typing import Iterable

from lark import Tree

from ..runtime import (
    Environment,
    EvalFunc,
    TernBool,
    TernList,
    TernNone,
    TernNumber,
    TernRange,
    TernValue,
    TypeMismatchError,
    get_type,
)
from .common import expect_ident

def eval_while(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    cond, body = n.children
    strict = env.config.strict_while

    while True:
        value = eval_func(cond, env)

        if not isinstance(value, TernBool):
            if strict:
                raise TypeMismatchError("bool", get_type(value))
            break

        if not value.value:
            break

        eval_func(body, env)

    return TernNone()

def _iteration_values(value: TernValue) -> Iterable[TernValue]:
    match value:
        case TernList(items=items):
            return list(items)
        case TernRange():
            return (TernNumber(float(i)) for i in value)
        case _:
            raise TypeMismatchError("list", get_type(value))

def eval_for(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    """Bind the loop variable in the enclosing environment; it stays bound afterwards."""
    target, iter_node, body = n.children
    name = expect_ident(target)
    last: TernValue = TernNone()

    for item in _iteration_values(eval_func(iter_node, env)):
        env.bind(name, item)
        last = eval_func(body, env)

    return last
