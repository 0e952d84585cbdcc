"""Mutable browser state shared by the controller, loop, and renderer."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..remote.types import RemoteEntry

MODE_BROWSING = "browsing"
MODE_DOWNLOADING = "downloading"


@dataclass
class BrowserState:
    host_label: str
    directory_stack: list[str]
    entries: list[RemoteEntry]
    show_hidden: bool
    cursor: int = 0
    selected: set[int] = field(default_factory=set)
    scroll_offset: int = 0
    viewport_height: int = 20
    mode: str = MODE_BROWSING
    loading: bool = False
    status_message: str = ""
    status_is_error: bool = False
    batch_summary: str = ""
    show_help: bool = False
    pending_transfers: int = 0
    transfer_total: int = 0
    transfer_failures: list[str] = field(default_factory=list)
    dirty: bool = True

    @property
    def current_dir(self) -> str:
        return self.directory_stack[-1]

    @property
    def downloading(self) -> bool:
        return self.mode == MODE_DOWNLOADING

    def current_entry(self) -> RemoteEntry | None:
        if 0 <= self.cursor < len(self.entries):
            return self.entries[self.cursor]
        return None

    def selected_entries(self) -> list[RemoteEntry]:
        """Selected entries in ascending row order."""
        return [self.entries[idx] for idx in sorted(self.selected) if 0 <= idx < len(self.entries)]


def clamp_cursor(state: BrowserState) -> None:
    """Keep ``cursor`` inside ``[0, len(entries) - 1]`` (0 when empty)."""
    state.cursor = max(0, min(state.cursor, len(state.entries) - 1))


def ensure_cursor_visible(state: BrowserState) -> None:
    """Adjust ``scroll_offset`` so the cursor row lies inside the viewport."""
    rows = max(1, state.viewport_height)
    prev = state.scroll_offset
    if state.cursor < state.scroll_offset:
        state.scroll_offset = state.cursor
    elif state.cursor >= state.scroll_offset + rows:
        state.scroll_offset = state.cursor - rows + 1
    state.scroll_offset = max(0, min(state.scroll_offset, max(0, len(state.entries) - rows)))
    if state.scroll_offset != prev:
        state.dirty = True


def replace_entries(state: BrowserState, entries: list[RemoteEntry]) -> None:
    """Swap in a fresh listing; selection never survives the swap."""
    state.entries = list(entries)
    state.cursor = 0
    state.scroll_offset = 0
    state.selected.clear()
    state.dirty = True


def set_viewport_height(state: BrowserState, height: int) -> None:
    height = max(1, height)
    if height == state.viewport_height:
        return
    state.viewport_height = height
    ensure_cursor_visible(state)
    state.dirty = True
