"""Error types raised by the remote gateway, lister, and transfer code."""

from __future__ import annotations


class RemoteError(Exception):
    """Base class for all remote-side failures."""


class ConnectionFailed(RemoteError):
    """Transport or channel could not be opened."""


class RemoteCommandFailed(RemoteError):
    """Remote command exited with a non-zero status."""

    def __init__(self, command: str, exit_status: int, stderr: str = "") -> None:
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"remote command exited with status {exit_status}{detail}")


class ListingFailed(RemoteError):
    """Directory listing could not be produced or parsed."""


class TransferFailed(RemoteError):
    """One entry of a download batch failed."""


class PartialLocalFile(TransferFailed):
    """Bytes were written locally before the transfer failed."""
