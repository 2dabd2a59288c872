from __future__ import annotations

import sys

__all__ = [
    "set_debug_logging",
    "debug_log",
]

_DEBUG_LOG = False


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def debug_log(message: str) -> None:
    """Print ``message`` to stderr when debug logging is on."""
    if _DEBUG_LOG:
        print(f"[autofuri debug] {message}", file=sys.stderr)
