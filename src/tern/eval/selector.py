from __future__ import annotations

import math
import sys

from lark import Tree

from ..runtime import (
    Environment,
    EvalFunc,
    IndexOutOfBoundsError,
    TernList,
    TernNumber,
    TernRange,
    TernValue,
    TypeMismatchError,
    VarNotFoundError,
    get_type,
)
from .common import expect_ident

def truncate(num: float) -> int:
    """Float to integer the way a saturating cast does: toward zero, NaN is 0."""
    if math.isnan(num):
        return 0

    if math.isinf(num):
        return sys.maxsize if num > 0 else -sys.maxsize - 1

    return int(num)

def eval_list(n: Tree, env: Environment, eval_func: EvalFunc) -> TernList:
    return TernList([eval_func(child, env) for child in n.children])

def eval_range(n: Tree, env: Environment, eval_func: EvalFunc) -> TernRange:
    start_node, end_node = n.children
    start = eval_func(start_node, env)
    end = eval_func(end_node, env)

    if not isinstance(start, TernNumber):
        raise TypeMismatchError("number", get_type(start))

    if not isinstance(end, TernNumber):
        raise TypeMismatchError("number", get_type(end))

    return TernRange(truncate(start.value), truncate(end.value))

def eval_index(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    target, index_node = n.children
    name = expect_ident(target)

    value = env.lookup(name)
    if value is None:
        raise VarNotFoundError(name)

    if not isinstance(value, TernList):
        raise TypeMismatchError("list", get_type(value))

    items = value.items
    index = eval_func(index_node, env)

    match index:
        case TernNumber(value=num):
            if not math.isfinite(num) or num < 0 or truncate(num) >= len(items):
                raise IndexOutOfBoundsError(truncate(num) if math.isfinite(num) else num, name)
            return items[truncate(num)]
        case TernRange(start=start, stop=stop):
            if start < 0 or start >= len(items):
                raise IndexOutOfBoundsError(start, name)
            if stop > len(items) or stop < start:
                raise IndexOutOfBoundsError(stop, name)
            return TernList(items[start:stop])
        case _:
            raise TypeMismatchError("number", get_type(index))
