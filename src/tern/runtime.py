from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .tree import Node
from .types import (
    ArityError,
    AttrNotFoundError,
    BuiltinFn,
    BuiltinFunction,
    Builtins,
    CannotAddError,
    CannotCompareError,
    CannotDivError,
    CannotModError,
    CannotMulError,
    CannotSubError,
    Environment,
    FunctionNotFoundError,
    Ident,
    IndexOutOfBoundsError,
    IsBuiltinError,
    StructNotFoundError,
    TernBool,
    TernEnum,
    TernEnumVariant,
    TernFunction,
    TernInstance,
    TernList,
    TernNone,
    TernNumber,
    TernRange,
    TernRuntimeError,
    TernString,
    TernStruct,
    TernType,
    TernValue,
    TypeKind,
    TypeMismatchError,
    VarAlreadyDefinedError,
    VarNotFoundError,
    display,
    get_type,
)

logger = logging.getLogger(__name__)

EvalFunc = Callable[[Node, Environment], TernValue]

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load the builtin modules (idempotent) so their register_builtin hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module(".stdlib", __package__)
    _STDLIB_INITIALIZED = True

def register_builtin(name: str):
    def dec(fn: BuiltinFn):
        Builtins.functions[name] = BuiltinFunction(name=name, fn=fn)
        return fn

    return dec

# ---------------- Calls ----------------

def _scope_parent(fn: TernFunction, caller: Environment) -> Optional[Environment]:
    if caller.config.lexical_scope:
        return fn.frame

    return None

def call_builtin(env: Environment, name: str, arg_nodes: Sequence[Node], eval_func: EvalFunc) -> TernValue:
    builtin = env.builtin(name)
    args: List[TernValue] = []

    for node in arg_nodes:
        try:
            args.append(eval_func(node, env))
        except TernRuntimeError as exc:
            # builtin arguments never fail the call; a broken argument prints as None
            logger.debug("builtin %s: argument replaced with None (%s)", name, exc)
            args.append(TernNone())

    return builtin.fn(env, args)

def call_function(fn: TernFunction, arg_nodes: Sequence[Node], caller: Environment, eval_func: EvalFunc) -> TernValue:
    if len(arg_nodes) < len(fn.params):
        raise ArityError(fn.name, len(fn.params), len(arg_nodes))

    callee = caller.spawn(parent=_scope_parent(fn, caller))
    callee.bind(fn.name, fn)

    for param, node in zip(fn.params, arg_nodes):
        callee.bind(param, eval_func(node, caller))

    logger.debug("call %s(%s)", fn.name, ", ".join(fn.params))

    return eval_func(fn.body, callee)

@dataclass(frozen=True)
class MethodTarget:
    """A resolved method call: the receiver, its definition and the method to run."""
    instance: TernInstance
    struct: TernStruct
    method: TernFunction

def resolve_method(env: Environment, instance_name: Ident, method_name: str) -> MethodTarget:
    instance = env.lookup(instance_name)
    if not isinstance(instance, TernInstance):
        raise TypeMismatchError("struct", "unknown")

    struct = env.lookup(instance.name)
    if not isinstance(struct, TernStruct):
        raise TypeMismatchError("struct", "unknown")

    method = struct.methods.get(method_name)
    if method is None:
        raise FunctionNotFoundError(method_name)

    return MethodTarget(instance=instance, struct=struct, method=method)

def call_method(target: MethodTarget, arg_nodes: Sequence[Node], caller: Environment, eval_func: EvalFunc) -> TernValue:
    method = target.method

    if caller.config.method_args == "params":
        if len(arg_nodes) < len(method.params):
            raise ArityError(f"{target.struct.name}.{method.name}", len(method.params), len(arg_nodes))
        names = method.params
        arg_nodes = arg_nodes[:len(names)]
    else:
        # legacy binding: arguments line up with the struct's fields, not the method's params
        names = target.struct.fields

    # bindings made while evaluating arguments stay out of the caller
    scratch = caller.spawn(parent=caller)
    args = [eval_func(node, scratch) for node in arg_nodes]

    callee = caller.spawn(parent=_scope_parent(method, caller))
    callee.bind("self", target.instance)

    for name, value in zip(names, args):
        callee.bind(name, value)

    logger.debug("call %s.%s via %s binding", target.struct.name, method.name, caller.config.method_args)

    return eval_func(method.body, callee)

__all__ = [
    "ArityError",
    "AttrNotFoundError",
    "CannotAddError",
    "CannotCompareError",
    "CannotDivError",
    "CannotModError",
    "CannotMulError",
    "CannotSubError",
    "Environment",
    "EvalFunc",
    "FunctionNotFoundError",
    "IndexOutOfBoundsError",
    "IsBuiltinError",
    "MethodTarget",
    "StructNotFoundError",
    "TernBool",
    "TernEnum",
    "TernEnumVariant",
    "TernFunction",
    "TernInstance",
    "TernList",
    "TernNone",
    "TernNumber",
    "TernRange",
    "TernRuntimeError",
    "TernString",
    "TernStruct",
    "TernType",
    "TernValue",
    "TypeKind",
    "TypeMismatchError",
    "VarAlreadyDefinedError",
    "VarNotFoundError",
    "call_builtin",
    "call_function",
    "call_method",
    "display",
    "get_type",
    "init_stdlib",
    "register_builtin",
    "resolve_method",
]
