from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, InterpreterConfig, debug_py_trace_enabled, setup_logging
from .evaluator import eval_expr
from .parser import ParseError, parse_source
from .runtime import Environment, TernRuntimeError, TernValue, init_stdlib
from .types import Writer

logger = logging.getLogger(__name__)

USAGE = "usage: tern [FILE | - | SOURCE] [--repl]"

def run(source: str, env: Optional[Environment]=None, *, config: Optional[InterpreterConfig]=None, write: Optional[Writer]=None) -> TernValue:
    """Parse and evaluate a whole program; returns the value of its last statement."""
    init_stdlib()
    ast = parse_source(source)

    if env is None:
        env = Environment(config=config, write=write, source=source)

    logger.info("program start: %d chars", len(source))
    result = eval_expr(ast, env, source=source)
    logger.info("program finished")
    return result

def repl_eval(source: str, env: Environment) -> TernValue:
    """Evaluate one REPL submission; bindings persist in *env* across calls."""
    ast = parse_source(source)
    return eval_expr(ast, env, source=source)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg

def report_error(exc: BaseException, prefix: str="Error") -> None:
    print(f"{prefix}: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), file=sys.stderr, end="")

def main(argv: Optional[List[str]]=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    want_repl = False
    arg = None

    for token in args:
        if token == "--repl":
            want_repl = True
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            return 0

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    try:
        config = InterpreterConfig.from_env()
    except ConfigError as exc:
        report_error(exc, "Config error")
        return 2

    setup_logging(config.log_level)

    if want_repl or (arg is None and sys.stdin.isatty()):
        from .repl import repl  # prompt_toolkit is only needed interactively
        repl(config)
        return 0

    source = _load_source(arg)
    logger.info("loaded source from %s", "stdin" if arg in (None, "-") else "argument")

    try:
        run(source, config=config)
    except ParseError as exc:
        logger.debug("parse failed", exc_info=exc)
        report_error(exc, "Parse error")
        return 2
    except TernRuntimeError as exc:
        logger.debug("runtime error", exc_info=exc)
        report_error(exc)
        return 1
    except (RecursionError, NotImplementedError) as exc:
        logger.debug("host error", exc_info=exc)
        report_error(exc, "Host error")
        return 2

    return 0

if __name__ == "__main__":
    sys.exit(main())
