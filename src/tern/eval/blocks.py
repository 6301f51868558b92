from __future__ import annotations

from typing import Iterable

from ..runtime import Environment, EvalFunc, TernNone, TernValue
from ..tree import Node

def eval_program(children: Iterable[Node], env: Environment, eval_func: EvalFunc) -> TernValue:
    """Evaluate statements in order in one environment; the last value is the result."""
    result: TernValue = TernNone()

    for child in children:
        result = eval_func(child, env)

    return result
