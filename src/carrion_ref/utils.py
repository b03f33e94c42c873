from __future__ import annotations

import os as _os
from pathlib import Path

DEBUG_PY_TRACE_ENV = "CARRION_DEBUG_PY_TRACE"
HISTORY_ENV = "CARRION_HISTORY"
DEFAULT_HISTORY_FILE = ".carrion_history"

_TRUTHY_FLAGS = ("1", "true", "yes", "on")


def env_flag(name: str) -> bool:
    """True when the environment variable is set to a truthy flag value."""
    return _os.environ.get(name, "").strip().lower() in _TRUTHY_FLAGS


def debug_py_trace_enabled() -> bool:
    """Print Python tracebacks alongside Carrion runtime errors."""
    return env_flag(DEBUG_PY_TRACE_ENV)


def history_path() -> Path:
    configured = _os.environ.get(HISTORY_ENV)
    if configured:
        return Path(configured).expanduser()

    return Path.home() / DEFAULT_HISTORY_FILE
