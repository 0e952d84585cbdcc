"""Completion events posted by background remote tasks."""

from __future__ import annotations

from dataclasses import dataclass

from ..remote.types import RemoteEntry, TransferOutcome


@dataclass(frozen=True)
class ListingRequest:
    """One directory listing the browser is waiting for."""

    request_id: int
    directory_stack: tuple[str, ...]
    show_hidden: bool
    previous_show_hidden: bool

    @property
    def remote_dir(self) -> str:
        return self.directory_stack[-1]


@dataclass(frozen=True)
class ListingLoaded:
    request: ListingRequest
    entries: tuple[RemoteEntry, ...]


@dataclass(frozen=True)
class ListingLoadFailed:
    request: ListingRequest
    reason: str


@dataclass(frozen=True)
class TransferCompleted:
    outcome: TransferOutcome


@dataclass(frozen=True)
class TaskCrashed:
    """A background task raised something it was not expected to."""

    task_name: str
    reason: str
