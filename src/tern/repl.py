"""Interactive REPL for Tern, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from typing import Optional

from lark.exceptions import UnexpectedCharacters
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .config import InterpreterConfig, debug_py_trace_enabled
from .parser import ParseError, lex_source
from .repl_highlight import TernLexer
from .runner import repl_eval, report_error
from .runtime import Environment, TernNone, TernRuntimeError, init_stdlib

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

_OPEN = {"(", "[", "{"}
_CLOSE = {")", "]", "}"}

_TRACE_VAR = "TERN_DEBUG_PY_TRACE"


def open_depth(text: str) -> int:
    """Bracket nesting left open at the end of *text*; an unterminated string counts as one."""
    depth = 0

    try:
        for tok in lex_source(text):
            if tok.value in _OPEN:
                depth += 1
            elif tok.value in _CLOSE:
                depth -= 1
    except UnexpectedCharacters as exc:
        if text[exc.pos_in_stream] == '"':
            return max(depth, 0) + 1
        # anything else is a syntax error the parser should report
        return 0

    return max(depth, 0)


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _fresh_env(config: InterpreterConfig) -> Environment:
    return Environment(config=config, source="")

def handle_slash(line: str, env_box: list[Environment], config: InterpreterConfig) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1].lower() if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg in ("on", "1", "true", "yes"):
            os.environ[_TRACE_VAR] = "1"
        elif arg in ("off", "0", "false", "no"):
            os.environ.pop(_TRACE_VAR, None)
        elif arg == "":
            if debug_py_trace_enabled():
                os.environ.pop(_TRACE_VAR, None)
            else:
                os.environ[_TRACE_VAR] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        env_box[0] = _fresh_env(config)
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl(config: Optional[InterpreterConfig]=None) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    init_stdlib()
    config = config or InterpreterConfig()
    # Use a mutable box so /reset can swap the environment.
    env_box: list[Environment] = [_fresh_env(config)]

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.lstrip().startswith("/"):
            buf.validate_and_handle()
            return

        depth = open_depth(text)
        if depth > 0:
            buf.insert_text("\n" + " " * (4 * depth))
            return

        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=TernLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("tern repl (Ctrl-D to exit, / for commands)")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, env_box, config):
            continue

        try:
            result = repl_eval(text, env_box[0])
        except (ParseError, TernRuntimeError, RecursionError, NotImplementedError) as exc:
            report_error(exc)
            continue

        if not isinstance(result, TernNone):
            print(repr(result))
