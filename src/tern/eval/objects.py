from __future__ import annotations

import logging
from typing import Dict

from lark import Tree

from ..runtime import (
    AttrNotFoundError,
    Environment,
    EvalFunc,
    StructNotFoundError,
    TernFunction,
    TernInstance,
    TernNone,
    TernStruct,
    TernValue,
    TypeMismatchError,
    call_method,
    get_type,
    resolve_method,
)
from ..tree import tree_children, tree_label
from .common import expect_ident, ident_list

logger = logging.getLogger(__name__)

def _lookup_struct(env: Environment, name: str) -> TernStruct:
    value = env.lookup(name)
    if value is None:
        raise StructNotFoundError(name)

    if not isinstance(value, TernStruct):
        raise TypeMismatchError("struct", get_type(value))

    return value

def eval_struct_def(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    name_node, fields_node = n.children
    name = expect_ident(name_node)
    fields = ident_list(fields_node)

    env.bind(name, TernStruct(name=name, fields=fields))
    logger.debug("defined struct %s { %s }", name, ", ".join(fields))

    return TernNone()

def eval_call_struct(n: Tree, env: Environment, eval_func: EvalFunc) -> TernInstance:
    """Build an instance; keys that are not declared fields are evaluated but dropped."""
    name_node, *pairs = n.children
    name = expect_ident(name_node)
    struct = _lookup_struct(env, name)
    declared = set(struct.fields)
    slots: Dict[str, TernValue] = {}

    for pair in pairs:
        if tree_label(pair) != 'pair':
            raise TypeMismatchError("pair", tree_label(pair) or "unknown")

        key_node, value_node = tree_children(pair)
        key = expect_ident(key_node)
        value = eval_func(value_node, env)

        if key in declared:
            slots[key] = value

    return TernInstance(name=name, fields=slots)

def eval_get_attr(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    name_node, attr_node = n.children
    attr = expect_ident(attr_node)
    instance = env.lookup(expect_ident(name_node))

    # unbound names and non-instances report the same mismatch
    if not isinstance(instance, TernInstance):
        raise TypeMismatchError("struct", "unknown")

    if attr not in instance.fields:
        raise AttrNotFoundError(attr)

    return instance.fields[attr]

def eval_impl(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    struct_node, method_node, params_node, body = n.children
    struct = _lookup_struct(env, expect_ident(struct_node))
    method = expect_ident(method_node)
    params = ident_list(params_node)

    struct.methods[method] = TernFunction(name=method, params=params, body=body, frame=env)
    logger.debug("impl %s.%s(%s)", struct.name, method, ", ".join(params))

    return TernNone()

def eval_get_func(n: Tree, env: Environment, eval_func: EvalFunc) -> TernValue:
    instance_node, method_node, args_node = n.children
    target = resolve_method(env, expect_ident(instance_node), expect_ident(method_node))

    return call_method(target, tree_children(args_node), env, eval_func)
