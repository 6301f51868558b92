"""Evaluator helper modules for the Tern runtime, one per node family."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "expr",
    "fn",
    "loops",
    "match",
    "objects",
    "selector",
]
