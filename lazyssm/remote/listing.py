"""Remote directory listing and ``ls -l`` output parsing."""

from __future__ import annotations

import logging
import posixpath
import re
import shlex

from .errors import ListingFailed, RemoteError
from .gateway import RemoteSession
from .types import RemoteEntry

logger = logging.getLogger(__name__)

# permissions, links, owner, group, size, month, day, time/year
_METADATA_FIELDS = 8
# Metadata columns, then the single space ls puts before the name.
_METADATA_PREFIX_RE = {
    count: re.compile(rf"\s*(?:\S+\s+){{{count - 1}}}\S+ ") for count in (_METADATA_FIELDS, _METADATA_FIELDS + 1)
}
_SYMLINK_ARROW = " -> "


def listing_command(remote_dir: str) -> str:
    """Build the remote command that long-lists ``remote_dir``.

    Hidden entries are always requested; filtering happens client-side.
    The trailing slash makes symlinked directories list their contents.
    """
    target = remote_dir.rstrip("/") + "/"
    return f"LC_ALL=C ls -lA -- {shlex.quote(target)}"


def _parse_line(line: str) -> tuple[str, bool]:
    fields = line.split(None, _METADATA_FIELDS)
    field_count = _METADATA_FIELDS
    if len(fields) > 4 and fields[4].endswith(","):
        # Device nodes report "major, minor" in place of a size.
        field_count += 1
    match = _METADATA_PREFIX_RE[field_count].match(line)
    if match is None or match.end() == len(line):
        raise ListingFailed(f"malformed listing line: {line!r}")
    indicator = line.lstrip()[0]
    name = line[match.end() :]
    if indicator == "l" and _SYMLINK_ARROW in name:
        name = name.split(_SYMLINK_ARROW, 1)[0]
    return name, indicator == "d"


def parse_listing(output: str, remote_dir: str, show_hidden: bool) -> list[RemoteEntry]:
    """Turn ``ls -l`` output into entries, in the order the remote emitted them."""
    entries: list[RemoteEntry] = []
    for raw_line in output.splitlines():
        line = raw_line.rstrip("\r")
        if not line.strip():
            continue
        if line.startswith("total "):
            continue
        name, is_dir = _parse_line(line)
        if name in {".", ".."}:
            continue
        entry = RemoteEntry(name=name, is_dir=is_dir, path=posixpath.join(remote_dir, name))
        if entry.is_hidden and not show_hidden:
            continue
        entries.append(entry)
    return entries


def list_directory(session: RemoteSession, remote_dir: str, show_hidden: bool) -> list[RemoteEntry]:
    """List ``remote_dir`` on the remote host.

    Any remote, channel, or parse failure surfaces as ``ListingFailed``.
    """
    try:
        output = session.run_capturing_output(listing_command(remote_dir))
    except (RemoteError, OSError) as exc:
        raise ListingFailed(f"cannot list {remote_dir}: {exc}") from exc
    entries = parse_listing(output.decode("utf-8", errors="replace"), remote_dir, show_hidden)
    logger.debug("listed %s: %d entries", remote_dir, len(entries))
    return entries
