"""Interpreter configuration and logging setup.

Every knob defaults to the legacy behaviour of the language. The TERN_*
environment variables below opt into the alternatives.
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

MATCH_MODES = ("legacy", "first")
METHOD_ARG_MODES = ("fields", "params")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigError(ValueError):
    pass


def _env_bool(environ: Mapping[str, str], var: str, default: bool) -> bool:
    raw = environ.get(var)
    if raw is None or not raw.strip():
        return default

    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False

    raise ConfigError(f"{var} must be a boolean, got {raw!r}")

def _env_choice(environ: Mapping[str, str], var: str, choices: tuple[str, ...], default: str) -> str:
    raw = environ.get(var)
    if raw is None or not raw.strip():
        return default

    value = raw.strip().lower()
    if value not in choices:
        raise ConfigError(f"{var} must be one of {', '.join(choices)}; got {raw!r}")

    return value


@dataclass(frozen=True)
class InterpreterConfig:
    lexical_scope: bool = False
    match_mode: str = "legacy"
    method_args: str = "fields"
    strict_while: bool = False
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.match_mode not in MATCH_MODES:
            raise ConfigError(f"match_mode must be one of {', '.join(MATCH_MODES)}")

        if self.method_args not in METHOD_ARG_MODES:
            raise ConfigError(f"method_args must be one of {', '.join(METHOD_ARG_MODES)}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InterpreterConfig":
        env = os.environ if environ is None else environ
        level = (env.get("TERN_LOG_LEVEL") or "WARNING").strip().upper()

        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"TERN_LOG_LEVEL is not a logging level: {level!r}")

        return cls(
            lexical_scope=_env_bool(env, "TERN_LEXICAL_SCOPE", False),
            match_mode=_env_choice(env, "TERN_MATCH_MODE", MATCH_MODES, "legacy"),
            method_args=_env_choice(env, "TERN_METHOD_ARGS", METHOD_ARG_MODES, "fields"),
            strict_while=_env_bool(env, "TERN_STRICT_WHILE", False),
            log_level=level,
        )


def debug_py_trace_enabled() -> bool:
    return os.environ.get("TERN_DEBUG_PY_TRACE", "").strip().lower() in _TRUE

def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger for the CLI and REPL (stderr, one line per record)."""
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("tern").setLevel(numeric_level)
