"""Builtin functions (print, println) registered via tern.runtime."""

from __future__ import annotations

from typing import List

from .runtime import Environment, TernNone, TernValue, display, register_builtin

def _render(args: List[TernValue]) -> str:
    return "".join(display(arg) for arg in args)

@register_builtin("print")
def std_print(env: Environment, args: List[TernValue]) -> TernNone:
    env.write(_render(args))
    return TernNone()

@register_builtin("println")
def std_println(env: Environment, args: List[TernValue]) -> TernNone:
    env.write(_render(args) + "\n")
    return TernNone()
