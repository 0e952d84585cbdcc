"""Main interactive event loop for the remote browser.

Each iteration applies terminal resizes, feeds finished background work back
into the controller, renders when dirty, and dispatches one key. Remote calls
never run here; they live on the task runner's worker.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass

from ..input import normalize_enter, read_key
from ..render import viewport_rows_for
from .controller import BrowserController
from .state import set_viewport_height
from .terminal import TerminalController

KEY_POLL_TIMEOUT_MS = 120


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    drain_events: Callable[[], list[object]]
    render: Callable[[int], None]


def run_main_loop(
    controller: BrowserController,
    terminal: TerminalController,
    stdin_fd: int,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the browser until a quit key is pressed."""
    state = controller.state
    skip_next_lf = False
    with terminal.raw_mode():
        while True:
            term = shutil.get_terminal_size((80, 24))
            set_viewport_height(state, viewport_rows_for(term.lines, state.show_help))

            for event in callbacks.drain_events():
                controller.handle_event(event)

            if state.dirty:
                callbacks.render(term.columns)
                state.dirty = False

            try:
                key = read_key(stdin_fd, timeout_ms=KEY_POLL_TIMEOUT_MS)
            except KeyboardInterrupt:
                key = "CTRL_C"
            if key == "":
                continue
            # Terminals may send CR LF for one Enter press.
            if skip_next_lf and key == "ENTER_LF":
                skip_next_lf = False
                continue
            skip_next_lf = key == "ENTER_CR"
            if controller.handle_key(normalize_enter(key)):
                break
