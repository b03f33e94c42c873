"""Evaluator helper modules for the Carrion runtime."""

__all__ = [
    "bind",
    "blocks",
    "chains",
    "common",
    "expr",
    "fn",
    "helpers",
    "literals",
    "loops",
]
