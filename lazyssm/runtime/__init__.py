"""Public runtime orchestration entry points.

Groups the interactive browser bootstrap (``run_interactive_browse``) and the
lower-level loop contracts used by tests and composition code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .loop import RuntimeLoopCallbacks


def run_interactive_browse(*args, **kwargs):
    """Lazily import the browser entrypoint to keep CLI startup light."""
    from .app import run_interactive_browse as _run_interactive_browse

    return _run_interactive_browse(*args, **kwargs)


def run_main_loop(*args, **kwargs):
    """Lazily import loop runner to avoid package-import cycles."""
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


def __getattr__(name: str):
    if name == "RuntimeLoopCallbacks":
        from . import loop as _loop

        return getattr(_loop, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "run_interactive_browse",
    "RuntimeLoopCallbacks",
    "run_main_loop",
]
