from __future__ import annotations

import pytest
from lark import Token, Tree

from tests.support.harness import (
    TernRuntimeError,
    TypeMismatchError,
    eval_tree,
    verify_result,
)
from tern import tree as t
from tern.evaluator import eval_expr
from tern.tree import quote_string, unquote_string

TREES = [
    pytest.param(
        t.block(t.assign("x", t.number(2)), t.binop("*", t.ident("x"), t.number(4))),
        ("number", 8),
        None,
        id="assign-and-read",
    ),
    pytest.param(t.binop("and", t.boolean(True), t.boolean(False)), ("bool", False), None, id="word-and"),
    pytest.param(t.binop("or", t.boolean(False), t.boolean(True)), ("bool", True), None, id="word-or"),
    pytest.param(t.empty(), ("none", None), None, id="empty"),
    pytest.param(t.string('say "hi"\n'), ("string", 'say "hi"\n'), None, id="string-escapes"),
    pytest.param(
        t.block(
            t.fun_def("inc", ["n"], t.binop("+", t.ident("n"), t.number(1))),
            t.call("inc", t.number(41)),
        ),
        ("number", 42),
        None,
        id="fundef-call",
    ),
    pytest.param(
        t.block(
            t.struct_def("P", ["a"]),
            t.impl("P", "get", [], t.get_attr("self", "a")),
            t.assign("p", t.call_struct("P", [("a", t.number(5))])),
            t.get_func("p", "get"),
        ),
        ("number", 5),
        None,
        id="struct-method",
    ),
    pytest.param(
        t.block(
            t.assign("xs", t.list_of(t.number(1), t.number(2), t.number(3))),
            t.index("xs", t.range_of(t.number(1), t.number(3))),
        ),
        ("list", [2, 3]),
        None,
        id="slice",
    ),
    pytest.param(
        t.block(
            t.assign("i", t.number(0)),
            t.while_loop(t.binop("<", t.ident("i"), t.number(4)), t.iop("+=", "i", t.number(1))),
            t.ident("i"),
        ),
        ("number", 4),
        None,
        id="while",
    ),
    pytest.param(
        t.for_loop("v", t.list_of(t.number(3), t.number(4)), t.ident("v")),
        ("number", 4),
        None,
        id="for",
    ),
    pytest.param(
        t.if_then(t.boolean(False), t.number(1), t.number(2)),
        ("number", 2),
        None,
        id="if-else",
    ),
    pytest.param(
        t.match(t.number(1), [(t.number(1), t.string("a")), (t.number(2), t.string("b"))]),
        ("string", "b"),
        None,
        id="match-legacy",
    ),
    pytest.param(
        t.block(t.assign("x", t.number(1)), t.set_var("x", t.number(9)), t.ident("x")),
        ("number", 9),
        None,
        id="set-var",
    ),
    pytest.param(Tree("bogus", []), None, TernRuntimeError, id="unknown-node"),
    pytest.param(Token("WEIRD", "?"), None, TernRuntimeError, id="unknown-token"),
    pytest.param(t.binop("^", t.number(1), t.number(2)), None, TernRuntimeError, id="unknown-operator"),
    pytest.param(Tree("assign", [t.number(1), t.number(2)]), None, TypeMismatchError, id="assign-non-ident"),
    pytest.param(
        t.block(t.struct_def("P", ["a"]), Tree("callstruct", [t.ident("P"), t.number(1)])),
        None,
        TypeMismatchError,
        id="callstruct-non-pair",
    ),
    pytest.param(
        Tree("match", [t.number(1), t.number(2)]),
        None,
        TernRuntimeError,
        id="match-malformed-arm",
    ),
]


@pytest.mark.parametrize("node, expectation, expected_exc", TREES)
def test_hand_built_trees(node, expectation, expected_exc) -> None:
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            eval_tree(node)
        return

    result, _env, _sink = eval_tree(node)
    verify_result(result, expectation[0], expectation[1])


def test_errors_without_positions_have_plain_message() -> None:
    with pytest.raises(TernRuntimeError) as exc_info:
        eval_tree(t.ident("nowhere"))

    assert exc_info.value.meta is None
    assert str(exc_info.value) == "Variable 'nowhere' not found"


def test_eval_expr_creates_environment() -> None:
    assert eval_expr(t.binop("+", t.number(1), t.number(1))).value == 2


def test_string_quoting_escapes_specials() -> None:
    text = 'tab\there "q" back\\slash\n'
    quoted = quote_string(text)

    assert quoted == '"tab\\there \\"q\\" back\\\\slash\\n"'
    assert unquote_string(quoted) == text


def test_unknown_escape_kept_verbatim() -> None:
    assert unquote_string('"a\\qb"') == "a\\qb"
