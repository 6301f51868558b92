from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    InterpreterConfig,
    TypeMismatchError,
    VarNotFoundError,
    run_runtime_case,
    run_with_output,
)

SCENARIOS = [
    pytest.param(
        "let i = 0; while i < 3 { i += 1 }; i",
        ("number", 3),
        None,
        id="while-counts",
    ),
    pytest.param(
        "let i = 0; while i < 3 { i += 1 }",
        ("none", None),
        None,
        id="while-yields-none",
    ),
    pytest.param(
        "let i = 0; while false { i += 1 }; i",
        ("number", 0),
        None,
        id="while-never-runs",
    ),
    pytest.param(
        "let n = 0; while 1 { n += 1 }; n",
        ("number", 0),
        None,
        id="while-non-bool-stops",
    ),
    pytest.param(
        dedent(
            """\
            let total = 0;
            for i in 0..4 {
                total += i
            }
            total
        """
        ),
        ("number", 6),
        None,
        id="for-range-sum",
    ),
    pytest.param("for i in 0..3 { i * 10 }", ("number", 20), None, id="for-last-body-value"),
    pytest.param("for i in 0..3 { i }; i", ("number", 2), None, id="for-leaves-binding"),
    pytest.param("for i in 5..5 { i }", ("none", None), None, id="for-empty-range"),
    pytest.param("for i in 5..5 { 1 }; i", None, VarNotFoundError, id="for-empty-never-binds"),
    pytest.param('for x in [1, "a", true] { x }', ("bool", True), None, id="for-list"),
    pytest.param("for x in [] { x }", ("none", None), None, id="for-empty-list"),
    pytest.param("for x in 5 { x }", None, TypeMismatchError, id="for-over-number"),
    pytest.param(
        "let x = 1; for x in [7, 8] { x }; x",
        ("number", 8),
        None,
        id="for-rebinds-existing-name",
    ),
    pytest.param('if 1 < 2 { "yes" } else { "no" }', ("string", "yes"), None, id="if-then"),
    pytest.param('if 1 > 2 { "yes" } else { "no" }', ("string", "no"), None, id="if-else"),
    pytest.param("if false { 1 }", ("none", None), None, id="if-without-else"),
    pytest.param(
        "let n = 5; if n < 3 { 1 } else if n < 10 { 2 } else { 3 }",
        ("number", 2),
        None,
        id="else-if-chain",
    ),
    pytest.param("if 1 { 2 }", None, TypeMismatchError, id="if-non-bool"),
    pytest.param("let v = if true { 4 } else { 5 }; v", ("number", 4), None, id="if-as-value"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_loops(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_strict_while_rejects_non_bool_condition() -> None:
    config = InterpreterConfig(strict_while=True)
    run_runtime_case("while 1 { 2 }", None, TypeMismatchError, config=config)


def test_strict_while_still_runs_bool_loops() -> None:
    config = InterpreterConfig(strict_while=True)
    run_runtime_case("let i = 0; while i < 2 { i += 1 }; i", ("number", 2), None, config=config)


def test_for_binds_values_in_order() -> None:
    _result, output = run_with_output("for i in 0..3 { println(i) }")
    assert output == "0\n1\n2\n"


def test_for_iterates_a_snapshot_of_the_list() -> None:
    source = "let xs = [1, 2]; for x in xs { xs = [9, 9, 9]; println(x) }"
    _result, output = run_with_output(source)
    assert output == "1\n2\n"
