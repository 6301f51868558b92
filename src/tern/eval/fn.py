from __future__ import annotations

import logging

from lark import Tree

from ..runtime import (
    Environment,
    EvalFunc,
    FunctionNotFoundError,
    IsBuiltinError,
    TernFunction,
    TernValue,
    TypeMismatchError,
    call_builtin,
    call_function,
    get_type,
)
from ..tree import tree_children
from .common import expect_ident, ident_list

logger = logging.getLogger(__name__)

def eval_fn_def(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    name_node, params_node, body = n.children
    name = expect_ident(name_node)

    if env.is_builtin(name):
        raise IsBuiltinError(name)

    params = ident_list(params_node)
    fn_value = TernFunction(name=name, params=params, body=body, frame=env)
    env.bind(name, fn_value)
    logger.debug("defined function %s(%s)", name, ", ".join(params))

    return fn_value

def eval_call(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    name_node, args_node = n.children
    name = expect_ident(name_node)
    arg_nodes = tree_children(args_node)

    if env.is_builtin(name):
        return call_builtin(env, name, arg_nodes, eval_func)

    fn = env.lookup(name)
    if fn is None:
        raise FunctionNotFoundError(name)

    if not isinstance(fn, TernFunction):
        raise TypeMismatchError("function", get_type(fn))

    return call_function(fn, arg_nodes, env, eval_func)
