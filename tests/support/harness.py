from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from tern.config import InterpreterConfig
from tern.evaluator import eval_expr
from tern.parser import ParseError, parse_source
from tern.runner import run as run_program
from tern.runtime import (
    ArityError,
    AttrNotFoundError,
    CannotAddError,
    CannotCompareError,
    CannotDivError,
    CannotModError,
    CannotMulError,
    CannotSubError,
    Environment,
    FunctionNotFoundError,
    IndexOutOfBoundsError,
    IsBuiltinError,
    StructNotFoundError,
    TernBool,
    TernFunction,
    TernInstance,
    TernList,
    TernNone,
    TernNumber,
    TernRange,
    TernRuntimeError,
    TernString,
    TernValue,
    TypeMismatchError,
    VarAlreadyDefinedError,
    VarNotFoundError,
)
from tern.tree import Node

RuntimeExpectation = Optional[Tuple[str, object]]


class OutputSink:
    """Collects everything builtins write, in order."""

    def __init__(self) -> None:
        self.chunks: List[str] = []

    def __call__(self, text: str) -> None:
        self.chunks.append(text)

    @property
    def text(self) -> str:
        return "".join(self.chunks)


def make_env(config: Optional[InterpreterConfig] = None) -> Tuple[Environment, OutputSink]:
    sink = OutputSink()
    return Environment(config=config, write=sink), sink


def run_with_output(source: str, config: Optional[InterpreterConfig] = None) -> Tuple[TernValue, str]:
    """Run a program with a capturing sink; returns (result, printed text)."""
    env, sink = make_env(config)
    result = run_program(source, env)
    return result, sink.text


def eval_tree(tree: Node, config: Optional[InterpreterConfig] = None) -> Tuple[TernValue, Environment, OutputSink]:
    """Evaluate a hand-built tree in a fresh environment."""
    env, sink = make_env(config)
    return eval_expr(tree, env), env, sink


def _plain(value: object) -> object:
    if isinstance(value, TernList):
        return [_plain(item) for item in value.items]
    if isinstance(value, TernNone):
        return None
    return getattr(value, "value", value)


def verify_result(value: object, kind: str, expected: object) -> None:
    """Assert runtime result shape/value compatibility with expectations."""
    match kind:
        case "string":
            assert isinstance(
                value, TernString
            ), f"expected TernString, got {type(value).__name__}"
            assert (
                value.value == expected
            ), f"expected {expected!r}, got {value.value!r}"
            return
        case "number":
            assert isinstance(
                value, TernNumber
            ), f"expected number, got {type(value).__name__}"
            assert (
                abs(value.value - float(expected)) <= 1e-9
            ), f"expected {expected}, got {value.value}"
            return
        case "bool":
            assert isinstance(
                value, TernBool
            ), f"expected bool, got {type(value).__name__}"
            assert value.value is bool(
                expected
            ), f"expected {expected}, got {value.value}"
            return
        case "none":
            assert isinstance(
                value, TernNone
            ), f"expected TernNone, got {type(value).__name__}"
            return
        case "list":
            assert isinstance(
                value, TernList
            ), f"expected TernList, got {type(value).__name__}"
            actual_items = _plain(value)
            assert (
                actual_items == expected
            ), f"expected {expected!r}, got {actual_items!r}"
            return
        case "range":
            assert isinstance(
                value, TernRange
            ), f"expected TernRange, got {type(value).__name__}"
            assert (
                (value.start, value.stop) == expected
            ), f"expected {expected!r}, got {(value.start, value.stop)!r}"
            return
        case "instance":
            assert isinstance(
                value, TernInstance
            ), f"expected TernInstance, got {type(value).__name__}"
            name, fields = expected
            assert value.name == name, f"expected {name}, got {value.name}"
            actual_fields = {k: _plain(v) for k, v in value.fields.items()}
            assert (
                actual_fields == fields
            ), f"expected {fields!r}, got {actual_fields!r}"
            return
        case "function":
            assert isinstance(
                value, TernFunction
            ), f"expected TernFunction, got {type(value).__name__}"
            assert value.name == expected, f"expected {expected}, got {value.name}"
            return
        case _:
            raise AssertionError(f"unknown expectation kind {kind}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
    config: Optional[InterpreterConfig] = None,
) -> None:
    """Execute one runtime scenario with optional expected exception."""
    env, _sink = make_env(config)

    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source, env)
        return

    result = run_program(source, env)
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])


def parse_ok(source: str) -> Node:
    return parse_source(source)
