"""Browser state machine: key handling and background-event application.

``BrowserController`` is the single place that turns remote errors into
status text. Blocking remote work is handed to the task runner; its results
come back through ``handle_event`` on the UI thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ..input import KeyComboBinding, KeyComboRegistry
from ..remote.errors import RemoteError
from ..remote.gateway import RemoteSession
from ..remote.listing import list_directory
from ..remote.transfer import download_batch
from ..remote.types import RemoteEntry, TransferOutcome
from .events import (
    ListingLoaded,
    ListingLoadFailed,
    ListingRequest,
    TaskCrashed,
    TransferCompleted,
)
from .state import (
    MODE_BROWSING,
    MODE_DOWNLOADING,
    BrowserState,
    clamp_cursor,
    ensure_cursor_visible,
    replace_entries,
)
from .tasks import PostEvent, RemoteTask

logger = logging.getLogger(__name__)


class TaskRunner(Protocol):
    def submit(self, name: str, task: RemoteTask) -> bool: ...


def _plural(count: int, word: str, plural: str | None = None) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {plural or word + 's'}"


class BrowserController:
    """Applies keys and task events to a ``BrowserState``."""

    def __init__(
        self,
        state: BrowserState,
        runner: TaskRunner,
        open_session: Callable[[], RemoteSession],
        local_dir: Path,
        save_show_hidden: Callable[[bool], None] | None = None,
    ) -> None:
        self.state = state
        self.runner = runner
        self.open_session = open_session
        self.local_dir = Path(local_dir)
        self.save_show_hidden = save_show_hidden
        self._next_request_id = 1
        self._pending_listing: ListingRequest | None = None
        self._quit_requested = False
        self._bindings = self._build_bindings()

    # -- key handling -------------------------------------------------

    def _build_bindings(self) -> KeyComboRegistry:
        bindings = [
            KeyComboBinding(("q", "CTRL_C"), self.request_quit),
            KeyComboBinding(("UP", "k"), lambda: self.move_cursor(-1)),
            KeyComboBinding(("DOWN", "j"), lambda: self.move_cursor(1)),
            KeyComboBinding(("PAGE_UP", "CTRL_U"), lambda: self.move_cursor(-self.state.viewport_height)),
            KeyComboBinding(("PAGE_DOWN", "CTRL_D"), lambda: self.move_cursor(self.state.viewport_height)),
            KeyComboBinding(("g", "HOME"), lambda: self.move_cursor(-len(self.state.entries))),
            KeyComboBinding(("G", "END"), lambda: self.move_cursor(len(self.state.entries))),
            KeyComboBinding(("SPACE",), self.toggle_selection),
            KeyComboBinding(("a",), self.toggle_select_all),
            KeyComboBinding(("ENTER", "l", "RIGHT"), self.enter_selected),
            KeyComboBinding(("BACKSPACE", "h", "LEFT"), self.go_back),
            KeyComboBinding((".",), self.toggle_hidden),
            KeyComboBinding(("r",), self.refresh),
            KeyComboBinding(("d",), self.start_download),
            KeyComboBinding(("?",), self.toggle_help),
        ]
        return KeyComboRegistry(bindings)

    def handle_key(self, key: str) -> bool:
        """Handle one key token; return ``True`` when the browser should quit."""
        self._bindings.dispatch(key)
        return self._quit_requested

    def request_quit(self) -> bool:
        self._quit_requested = True
        return True

    def _set_status(self, message: str, *, error: bool = False) -> None:
        self.state.status_message = message
        self.state.status_is_error = error
        self.state.dirty = True

    def _navigation_blocked(self) -> bool:
        return self.state.loading or self.state.downloading

    def move_cursor(self, delta: int) -> bool:
        state = self.state
        if not state.entries:
            return False
        prev = state.cursor
        state.cursor += delta
        clamp_cursor(state)
        ensure_cursor_visible(state)
        if state.cursor != prev:
            state.dirty = True
        return state.cursor != prev

    def toggle_selection(self) -> bool:
        state = self.state
        if state.downloading or state.current_entry() is None:
            return False
        if state.cursor in state.selected:
            state.selected.discard(state.cursor)
        else:
            state.selected.add(state.cursor)
        state.dirty = True
        return True

    def toggle_select_all(self) -> bool:
        state = self.state
        if state.downloading or not state.entries:
            return False
        if len(state.selected) == len(state.entries):
            state.selected.clear()
        else:
            state.selected = set(range(len(state.entries)))
        state.dirty = True
        return True

    def toggle_help(self) -> bool:
        self.state.show_help = not self.state.show_help
        self.state.dirty = True
        return True

    def enter_selected(self) -> bool:
        entry = self.state.current_entry()
        if entry is None or self._navigation_blocked():
            return False
        if not entry.is_dir:
            return self.toggle_selection()
        return self._request_listing((*self.state.directory_stack, entry.path))

    def go_back(self) -> bool:
        stack = self.state.directory_stack
        if len(stack) <= 1 or self._navigation_blocked():
            return False
        return self._request_listing(tuple(stack[:-1]))

    def refresh(self) -> bool:
        if self._navigation_blocked():
            return False
        return self._request_listing(tuple(self.state.directory_stack))

    def toggle_hidden(self) -> bool:
        if self._navigation_blocked():
            return False
        previous = self.state.show_hidden
        self.state.show_hidden = not previous
        return self._request_listing(
            tuple(self.state.directory_stack),
            previous_show_hidden=previous,
        )

    # -- listing ------------------------------------------------------

    def _request_listing(
        self,
        directory_stack: tuple[str, ...],
        *,
        previous_show_hidden: bool | None = None,
    ) -> bool:
        state = self.state
        request = ListingRequest(
            request_id=self._next_request_id,
            directory_stack=directory_stack,
            show_hidden=state.show_hidden,
            previous_show_hidden=state.show_hidden if previous_show_hidden is None else previous_show_hidden,
        )
        self._next_request_id += 1
        self._pending_listing = request
        state.loading = True
        self._set_status(f"Listing {request.remote_dir} ...")
        if not self.runner.submit("listing", self._listing_task(request)):
            self._pending_listing = None
            state.loading = False
            state.show_hidden = request.previous_show_hidden
            self._set_status("Busy: another remote command is still running")
            return False
        return True

    def _listing_task(self, request: ListingRequest) -> RemoteTask:
        open_session = self.open_session

        def task(post: PostEvent) -> None:
            try:
                with open_session() as session:
                    entries = list_directory(session, request.remote_dir, request.show_hidden)
            except RemoteError as exc:
                post(ListingLoadFailed(request=request, reason=str(exc)))
                return
            post(ListingLoaded(request=request, entries=tuple(entries)))

        return task

    def _apply_listing_loaded(self, event: ListingLoaded) -> None:
        if event.request != self._pending_listing:
            logger.debug("ignoring superseded listing of %s", event.request.remote_dir)
            return
        self._pending_listing = None
        state = self.state
        state.loading = False
        state.directory_stack = list(event.request.directory_stack)
        state.show_hidden = event.request.show_hidden
        replace_entries(state, list(event.entries))
        self._set_status(f"{state.current_dir}: {_plural(len(state.entries), 'entry', 'entries')}")
        if event.request.show_hidden != event.request.previous_show_hidden and self.save_show_hidden is not None:
            self.save_show_hidden(state.show_hidden)

    def _apply_listing_failed(self, event: ListingLoadFailed) -> None:
        if event.request != self._pending_listing:
            return
        self._pending_listing = None
        state = self.state
        state.loading = False
        state.show_hidden = event.request.previous_show_hidden
        logger.warning("listing of %s failed: %s", event.request.remote_dir, event.reason)
        self._set_status(f"Error: {event.reason}", error=True)

    # -- downloads ----------------------------------------------------

    def start_download(self) -> bool:
        state = self.state
        if state.downloading or state.loading:
            return False
        entries = state.selected_entries()
        if not entries:
            self._set_status("Nothing selected: press Space to mark entries")
            return False
        state.mode = MODE_DOWNLOADING
        state.pending_transfers = len(entries)
        state.transfer_total = len(entries)
        state.transfer_failures = []
        state.batch_summary = ""
        self._set_status(f"Downloading {_plural(len(entries), 'item')} to {self.local_dir} ...")
        if not self.runner.submit("download", self._download_task(entries)):
            state.mode = MODE_BROWSING
            state.pending_transfers = 0
            self._set_status("Busy: another remote command is still running")
            return False
        return True

    def _download_task(self, entries: list[RemoteEntry]) -> RemoteTask:
        open_session = self.open_session
        local_dir = self.local_dir

        def task(post: PostEvent) -> None:
            reported = 0

            def report(outcome: TransferOutcome) -> None:
                nonlocal reported
                reported += 1
                post(TransferCompleted(outcome=outcome))

            try:
                with open_session() as session:
                    download_batch(session, entries, local_dir, on_outcome=report)
            except RemoteError as exc:
                for entry in entries[reported:]:
                    report(TransferOutcome.failure(entry.name, str(exc)))

        return task

    def _apply_transfer_completed(self, event: TransferCompleted) -> None:
        state = self.state
        if not state.downloading:
            return
        outcome = event.outcome
        state.pending_transfers -= 1
        done = state.transfer_total - state.pending_transfers
        progress = f"[{done}/{state.transfer_total}]"
        if outcome.succeeded:
            self._set_status(f"{progress} Downloaded {outcome.source_name} -> {outcome.local_path}")
        else:
            state.transfer_failures.append(f"{outcome.source_name} ({outcome.failure_reason})")
            self._set_status(
                f"{progress} Failed to download {outcome.source_name}: {outcome.failure_reason}",
                error=True,
            )
        if state.pending_transfers <= 0:
            self._finish_batch()

    def _finish_batch(self) -> None:
        state = self.state
        total = state.transfer_total
        failures = list(state.transfer_failures)
        state.mode = MODE_BROWSING
        state.pending_transfers = 0
        state.cursor = 0
        state.scroll_offset = 0
        state.selected.clear()
        if failures:
            ok = total - len(failures)
            self._set_status(f"Downloaded {ok}/{total}; failed: " + "; ".join(failures), error=True)
        else:
            self._set_status(f"Downloaded {_plural(total, 'item')} to {self.local_dir}")
        state.batch_summary = state.status_message

    # -- events -------------------------------------------------------

    def handle_event(self, event: object) -> None:
        if isinstance(event, ListingLoaded):
            self._apply_listing_loaded(event)
        elif isinstance(event, ListingLoadFailed):
            self._apply_listing_failed(event)
        elif isinstance(event, TransferCompleted):
            self._apply_transfer_completed(event)
        elif isinstance(event, TaskCrashed):
            self._apply_task_crashed(event)
        else:
            logger.debug("ignoring unknown event %r", event)

    def _apply_task_crashed(self, event: TaskCrashed) -> None:
        state = self.state
        if self._pending_listing is not None:
            state.show_hidden = self._pending_listing.previous_show_hidden
            self._pending_listing = None
        state.loading = False
        was_downloading = state.downloading
        if was_downloading:
            state.mode = MODE_BROWSING
            state.pending_transfers = 0
            state.selected.clear()
        self._set_status(f"Error: {event.task_name} failed: {event.reason}", error=True)
        if was_downloading:
            state.batch_summary = state.status_message
