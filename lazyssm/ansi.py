"""Terminal cell arithmetic for styled browser rows.

Remote file names may contain wide characters, tabs, or raw control bytes;
rows are measured and clipped in terminal cells with escape codes passed
through untouched.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Cells taken by ``ch`` when drawn at column ``col``."""
    if ch == "\t":
        return TAB_STOP - col % TAB_STOP
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1


def _cells(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(chunk, width)`` pairs; escape sequences have width 0."""
    col = 0
    pos = 0
    while pos < len(text):
        match = ANSI_ESCAPE_RE.match(text, pos) if text[pos] == "\x1b" else None
        if match is not None:
            yield match.group(0), 0
            pos = match.end()
            continue
        ch = text[pos]
        width = char_display_width(ch, col)
        yield (" " * width if ch == "\t" else ch), width
        col += width
        pos += 1


def sanitize_name(text: str) -> str:
    """Replace control characters so remote names cannot drive the terminal."""
    return "".join("?" if unicodedata.category(ch) == "Cc" else ch for ch in text)


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim ``text`` to ``max_cols`` cells, keeping escapes met before the cut.

    Tabs come out expanded to spaces; a wide character that would straddle
    the edge is dropped.
    """
    out: list[str] = []
    used = 0
    for chunk, width in _cells(text):
        if used >= max_cols or used + width > max_cols:
            break
        out.append(chunk)
        used += width
    return "".join(out)
