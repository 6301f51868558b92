from __future__ import annotations

import math
import operator
from typing import Callable, Dict, Tuple, Type

from lark import Tree

from ..runtime import (
    CannotAddError,
    CannotCompareError,
    CannotDivError,
    CannotModError,
    CannotMulError,
    CannotSubError,
    Environment,
    EvalFunc,
    TernBool,
    TernNone,
    TernNumber,
    TernRuntimeError,
    TernString,
    TernValue,
    TypeMismatchError,
    display,
    get_type,
)
from ..types import OperandError

def float_div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)

    return a / b

def float_mod(a: float, b: float) -> float:
    # truncated remainder (sign of the dividend); x % 0 and inf % y are NaN
    if b == 0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
        return math.nan

    return math.fmod(a, b)

_ARITH: Dict[str, Tuple[Callable[[float, float], float], Type[OperandError]]] = {
    '+': (operator.add, CannotAddError),
    '-': (operator.sub, CannotSubError),
    '*': (operator.mul, CannotMulError),
    '/': (float_div, CannotDivError),
    '%': (float_mod, CannotModError),
}

_ORDER: Dict[str, Callable[[float, float], bool]] = {
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
}

_EQUALITY: Dict[str, Callable[[object, object], bool]] = {
    '==': operator.eq,
    '!=': operator.ne,
}

_LOGIC: Dict[str, Callable[[bool, bool], bool]] = {
    '&&': lambda a, b: a and b,
    '||': lambda a, b: a or b,
    'and': lambda a, b: a and b,
    'or': lambda a, b: a or b,
}

def operand_text(value: TernValue) -> str:
    try:
        return display(value)
    except NotImplementedError:
        return repr(value)

def apply_binary_operator(op: str, lhs: TernValue, rhs: TernValue) -> TernValue:
    if op in _ARITH:
        fn, error = _ARITH[op]
        match (lhs, rhs):
            case (TernNumber(value=a), TernNumber(value=b)):
                return TernNumber(fn(a, b))
        raise error(operand_text(lhs), operand_text(rhs))

    if op in _EQUALITY:
        cmp = _EQUALITY[op]
        match (lhs, rhs):
            case (TernNumber(value=a), TernNumber(value=b)) | (TernString(value=a), TernString(value=b)) | (TernBool(value=a), TernBool(value=b)):
                return TernBool(cmp(a, b))
        raise CannotCompareError(operand_text(lhs), operand_text(rhs))

    if op in _ORDER:
        match (lhs, rhs):
            case (TernNumber(value=a), TernNumber(value=b)):
                return TernBool(_ORDER[op](a, b))
        raise CannotCompareError(operand_text(lhs), operand_text(rhs))

    if op in _LOGIC:
        match (lhs, rhs):
            case (TernBool(value=a), TernBool(value=b)):
                return TernBool(_LOGIC[op](a, b))
        raise CannotCompareError(operand_text(lhs), operand_text(rhs))

    raise TernRuntimeError(f"Unknown operator {op!r}")

def eval_binop(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    left, op, right = n.children
    lhs = eval_func(left, env)
    rhs = eval_func(right, env)

    return apply_binary_operator(str(op), lhs, rhs)

def eval_condition(node, env: Environment, eval_func: EvalFunc) -> bool:
    value = eval_func(node, env)
    if not isinstance(value, TernBool):
        raise TypeMismatchError("bool", get_type(value))

    return value.value

def eval_if(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    cond, then, *rest = n.children

    if eval_condition(cond, env, eval_func):
        return eval_func(then, env)

    if rest:
        return eval_func(rest[0], env)

    return TernNone()
