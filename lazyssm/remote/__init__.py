"""Remote-host access: SSH gateway, directory listing, and downloads."""

from .errors import (
    ConnectionFailed,
    ListingFailed,
    PartialLocalFile,
    RemoteCommandFailed,
    RemoteError,
    TransferFailed,
)
from .gateway import RemoteGateway, RemoteSession, RemoteStream, dial
from .listing import list_directory, parse_listing
from .transfer import download, download_batch, local_name_for
from .types import RemoteEntry, TransferOutcome

__all__ = [
    "ConnectionFailed",
    "ListingFailed",
    "PartialLocalFile",
    "RemoteCommandFailed",
    "RemoteEntry",
    "RemoteError",
    "RemoteGateway",
    "RemoteSession",
    "RemoteStream",
    "TransferFailed",
    "TransferOutcome",
    "dial",
    "download",
    "download_batch",
    "list_directory",
    "local_name_for",
    "parse_listing",
]
