"""Rendering for the remote browser view.

``build_browser_lines`` maps state to screen rows without touching state;
``render_browser`` writes one composed frame to the terminal.
"""

from __future__ import annotations

import os
import sys

from ..ansi import clip_ansi_line, sanitize_name
from ..remote.types import RemoteEntry
from ..runtime.state import BrowserState
from ..ui_theme import DEFAULT_THEME, UITheme
from .help import help_lines, help_row_count

HEADER_ROWS = 1
STATUS_ROWS = 1


def chrome_rows(show_help: bool) -> int:
    """Rows used by everything except the entry list."""
    return HEADER_ROWS + STATUS_ROWS + help_row_count(show_help)


def viewport_rows_for(term_lines: int, show_help: bool) -> int:
    return max(1, term_lines - chrome_rows(show_help))


def selected_with_ansi(text: str) -> str:
    """Apply cursor-row styling without discarding existing ANSI colors."""
    if not text:
        return text

    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def format_entry_row(entry: RemoteEntry, is_cursor: bool, is_marked: bool, theme: UITheme) -> str:
    cursor = ">" if is_cursor else " "
    if is_marked:
        checkbox = f"[{theme.checkbox_marked}x{theme.reset}]"
    else:
        checkbox = "[ ]"
    name = sanitize_name(entry.name)
    if entry.is_dir:
        label = f"{theme.entry_dir}[DIR] {name}{theme.reset}"
    else:
        label = f"{theme.entry_file}{name}{theme.reset}"
    return f"{cursor} {checkbox} {label}"


def format_header(state: BrowserState, theme: UITheme) -> str:
    flags: list[str] = []
    if state.show_hidden:
        flags.append("hidden shown")
    if state.selected:
        flags.append(f"{len(state.selected)} selected")
    if state.loading:
        flags.append("loading")
    if state.downloading:
        flags.append(f"downloading {state.transfer_total - state.pending_transfers}/{state.transfer_total}")
    flag_text = f"  {theme.header_flag}({', '.join(flags)}){theme.reset}" if flags else ""
    return f"{theme.header}{state.host_label}:{sanitize_name(state.current_dir)}{theme.reset}{flag_text}"


def format_status(status_text: str, theme: UITheme, is_error: bool = False) -> str:
    if not status_text:
        return ""
    color = theme.status_error if is_error else theme.status
    return f"{color}{sanitize_name(status_text)}{theme.reset}"


def build_browser_lines(
    state: BrowserState,
    status_text: str,
    footer_lines: list[str],
    width: int,
    theme: UITheme = DEFAULT_THEME,
) -> list[str]:
    """Compose header, visible entry slice, status, and footer rows."""
    width = max(1, width)
    rows: list[str] = [clip_ansi_line(format_header(state, theme), width)]

    start = max(0, state.scroll_offset)
    visible = state.entries[start : start + max(1, state.viewport_height)]
    for offset, entry in enumerate(visible):
        idx = start + offset
        row = clip_ansi_line(
            format_entry_row(entry, idx == state.cursor, idx in state.selected, theme),
            width,
        )
        if idx == state.cursor and theme.reverse:
            row = selected_with_ansi(row)
        rows.append(row)
    if not state.entries:
        rows.append(f"{theme.help_dim}  (empty directory){theme.reset}")
    while len(rows) < HEADER_ROWS + max(1, state.viewport_height):
        rows.append("")

    rows.append(clip_ansi_line(format_status(status_text, theme, state.status_is_error), width))
    rows.extend(clip_ansi_line(line, width) for line in footer_lines)
    return rows


def render_browser(state: BrowserState, width: int, theme: UITheme = DEFAULT_THEME) -> None:
    """Write one full frame for ``state`` to stdout."""
    lines = build_browser_lines(
        state,
        state.status_message,
        help_lines(state.show_help, theme),
        width,
        theme,
    )
    out = ["\033[H\033[J"]
    for idx, line in enumerate(lines):
        if idx:
            out.append("\r\n")
        out.append(line)
        if "\033" in line:
            out.append("\033[0m")
    os.write(sys.stdout.fileno(), "".join(out).encode("utf-8", errors="replace"))


__all__ = [
    "build_browser_lines",
    "chrome_rows",
    "format_entry_row",
    "help_lines",
    "render_browser",
    "viewport_rows_for",
]
