"""Terminal mode switching around the browser session."""

from __future__ import annotations

import contextlib
import os
import termios
import tty

# Alternate screen, hidden cursor, no auto-wrap for long remote names.
ENTER_BROWSER_SCREEN = b"\x1b[?1049h\x1b[?25l\x1b[?7l"
LEAVE_BROWSER_SCREEN = b"\x1b[?7h\x1b[?25h\x1b[?1049l"


class TerminalController:
    """Raw-mode lifecycle for one browser session on ``stdin_fd``/``stdout_fd``."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_BROWSER_SCREEN)

    def disable_tui_mode(self) -> None:
        """Give the shell back its screen and the tty settings captured at startup."""
        os.write(self.stdout_fd, LEAVE_BROWSER_SCREEN)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Run the enclosed block in browser mode, restoring the tty on any exit."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
