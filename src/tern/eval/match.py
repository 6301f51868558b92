"""
Match evaluation.

Two modes, picked by ``InterpreterConfig.match_mode``:
- legacy: every arm runs. Its pattern is evaluated in the enclosing
  environment with errors discarded, then the scrutinee is evaluated and
  discarded, then the body runs in a fresh environment. The last arm's value
  wins.
- first: the scrutinee is evaluated once and compared with each pattern in
  order; only the first matching arm runs. A bare ``_`` matches anything.
"""
from __future__ import annotations

import logging
from typing import List, Tuple

from lark import Tree

from ..runtime import (
    Environment,
    EvalFunc,
    TernBool,
    TernNone,
    TernNumber,
    TernRuntimeError,
    TernString,
    TernValue,
)
from ..tree import Node, ident_name, tree_children, tree_label

logger = logging.getLogger(__name__)

def _cases(n: Tree) -> Tuple[Node, List[Tuple[Node, Node]]]:
    value, *case_nodes = n.children
    cases: List[Tuple[Node, Node]] = []

    for case in case_nodes:
        if tree_label(case) != 'case':
            raise TernRuntimeError(f"Malformed match arm: {tree_label(case) or case!r}")

        pattern, body = tree_children(case)
        cases.append((pattern, body))

    return value, cases

def _arm_env(env: Environment) -> Environment:
    return env.spawn(parent=env if env.config.lexical_scope else None)

def values_match(lhs: TernValue, rhs: TernValue) -> bool:
    match (lhs, rhs):
        case (TernNumber(value=a), TernNumber(value=b)) | (TernString(value=a), TernString(value=b)) | (TernBool(value=a), TernBool(value=b)):
            return a == b
        case (TernNone(), TernNone()):
            return True
        case _:
            return False

def eval_match(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    value_node, cases = _cases(n)

    if env.config.match_mode == "first":
        return _eval_match_first(value_node, cases, env, eval_func)

    logger.debug("match: legacy mode over %d arms", len(cases))
    result: TernValue = TernNone()

    for pattern, body in cases:
        try:
            eval_func(pattern, env)
        except TernRuntimeError as exc:
            logger.debug("match: pattern error discarded: %s", exc)
        eval_func(value_node, env)
        result = eval_func(body, _arm_env(env))

    return result

def _eval_match_first(value_node: Node, cases: List[Tuple[Node, Node]], env: Environment, eval_func: EvalFunc) -> TernValue:
    subject = eval_func(value_node, env)

    for idx, (pattern, body) in enumerate(cases):
        if ident_name(pattern) != "_" and not values_match(subject, eval_func(pattern, env)):
            continue

        logger.debug("match: arm %d selected", idx)
        return eval_func(body, _arm_env(env))

    return TernNone()
