"""Help footer content for the remote browser.

Presentation-only: callers pick a line set, the renderer clips and styles it.
"""

from __future__ import annotations

from ..ui_theme import UITheme

HELP_SHORT: tuple[tuple[str, str], ...] = (
    ("Space", "select"),
    ("Enter", "open"),
    ("Backspace", "back"),
    ("d", "download"),
    ("?", "help"),
    ("q", "quit"),
)

HELP_FULL: tuple[tuple[tuple[str, str], ...], ...] = (
    (("Up/Down j/k", "move"), ("PgUp/PgDn", "page"), ("g/G", "top/bottom")),
    (("Space", "toggle selection"), ("a", "select all/none")),
    (("Enter/l", "open directory"), ("Backspace/h", "back to previous directory")),
    (("d", "download selected"), ("r", "refresh"), (".", "show/hide dotfiles")),
    (("?", "hide help"), ("q/Ctrl+C", "quit")),
)


def _format_pairs(pairs: tuple[tuple[str, str], ...], theme: UITheme) -> str:
    return "  ".join(f"{theme.help_key}{key}{theme.reset} {theme.help_dim}{label}{theme.reset}" for key, label in pairs)


def help_lines(show_help: bool, theme: UITheme) -> list[str]:
    """Return footer rows: one compact row, or the full key table."""
    if not show_help:
        return [_format_pairs(HELP_SHORT, theme)]
    return [_format_pairs(row, theme) for row in HELP_FULL]


def help_row_count(show_help: bool) -> int:
    return len(HELP_FULL) if show_help else 1
