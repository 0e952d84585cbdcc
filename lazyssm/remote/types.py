"""Value types shared by the lister, transfer executor, and browser."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RemoteEntry:
    """One file or directory reported by a remote listing.

    ``path`` is the listed directory joined with ``name`` at listing time.
    """

    name: str
    is_dir: bool
    path: str

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".")


@dataclass(frozen=True)
class TransferOutcome:
    """Result of downloading one remote entry."""

    succeeded: bool
    source_name: str
    local_path: Path | None = None
    failure_reason: str | None = None

    @classmethod
    def success(cls, source_name: str, local_path: Path) -> TransferOutcome:
        return cls(succeeded=True, source_name=source_name, local_path=local_path)

    @classmethod
    def failure(cls, source_name: str, reason: str) -> TransferOutcome:
        return cls(succeeded=False, source_name=source_name, failure_reason=reason or "unknown error")
