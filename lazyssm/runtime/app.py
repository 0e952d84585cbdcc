"""Runtime composition for the interactive remote browser.

Dials the host, fetches the starting listing, wires the controller to the
task runner and renderer, and runs the loop until the user quits.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .. import config
from ..logutil import console_muted
from ..remote.errors import ConnectionFailed, ListingFailed
from ..remote.gateway import DEFAULT_PORT, dial
from ..remote.listing import list_directory
from ..render import render_browser
from ..ui_theme import resolve_theme
from .controller import BrowserController
from .loop import RuntimeLoopCallbacks, run_main_loop
from .state import BrowserState
from .tasks import RemoteTaskRunner
from .terminal import TerminalController

logger = logging.getLogger(__name__)

INITIAL_STATUS = "Select files to download"


def _fail(message: str) -> int:
    logger.error(message)
    print(message, file=sys.stderr)
    return 1


def run_interactive_browse(
    user: str,
    host: str,
    *,
    start_dir: str = ".",
    local_dir: Path | None = None,
    port: int = DEFAULT_PORT,
    key_filename: str | None = None,
    theme_name: str | None = None,
    no_color: bool = False,
) -> int:
    """Browse ``user@host`` interactively; return the process exit code.

    Returns 0 after a normal quit and 1 when the terminal, connection, or
    starting listing cannot be set up. A download still running at quit time
    is allowed to finish before the connection is closed.
    """
    if not sys.stdin.isatty():
        return _fail("The remote browser needs an interactive terminal.")

    target_dir = Path(local_dir or config.load_download_dir() or Path.cwd()).expanduser()
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return _fail(f"Cannot use download directory {target_dir}: {exc}")

    try:
        gateway = dial(user, host, port=port, key_filename=key_filename)
    except ConnectionFailed as exc:
        return _fail(str(exc))

    try:
        show_hidden = config.load_show_hidden()
        try:
            with gateway.open_session() as session:
                entries = list_directory(session, start_dir, show_hidden)
        except (ConnectionFailed, ListingFailed) as exc:
            return _fail(f"Failed to list files: {exc}")

        state = BrowserState(
            host_label=gateway.label,
            directory_stack=[start_dir],
            entries=entries,
            show_hidden=show_hidden,
            status_message=INITIAL_STATUS,
        )
        runner = RemoteTaskRunner()
        controller = BrowserController(
            state,
            runner,
            gateway.open_session,
            target_dir,
            save_show_hidden=config.save_show_hidden,
        )
        theme = resolve_theme(theme_name or config.load_theme_name(), no_color=no_color)
        stdin_fd = sys.stdin.fileno()
        terminal = TerminalController(stdin_fd, sys.stdout.fileno())
        callbacks = RuntimeLoopCallbacks(
            drain_events=runner.drain_events,
            render=lambda columns: render_browser(state, columns, theme),
        )
        with console_muted():
            run_main_loop(controller, terminal, stdin_fd, callbacks)

        batch_in_flight = state.downloading
        if runner.busy:
            print("Waiting for the running transfer to finish ...", file=sys.stderr)
            runner.wait_idle()
        for event in runner.drain_events():
            controller.handle_event(event)
        if batch_in_flight and state.batch_summary:
            print(state.batch_summary)
    finally:
        gateway.close()
    return 0
