"""Download remote files and directories to the local machine.

Files are streamed with ``cat`` into a sibling ``.part`` file that is renamed
onto the final name only after the remote command exits cleanly. Directories
are archived remotely with ``tar`` into a per-call temporary path, streamed
the same way, and the remote archive is removed afterwards.
"""

from __future__ import annotations

import logging
import os
import posixpath
import secrets
import shlex
from collections.abc import Callable, Iterable
from pathlib import Path

from .errors import PartialLocalFile, RemoteError, TransferFailed
from .gateway import STREAM_CHUNK_SIZE, RemoteSession
from .types import RemoteEntry, TransferOutcome

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".tar.gz"
PARTIAL_SUFFIX = ".part"
REMOTE_TMP_DIR = "/tmp"
LOCAL_FILE_MODE = 0o644


def local_name_for(entry: RemoteEntry) -> str:
    """Local file name for ``entry``: leading ``/`` stripped, archives suffixed."""
    name = entry.name.lstrip("/")
    if entry.is_dir:
        name += ARCHIVE_SUFFIX
    return name


def remote_archive_path(entry: RemoteEntry, token: str | None = None) -> str:
    """Unique remote temp path for archiving ``entry``."""
    base = posixpath.basename(entry.path.rstrip("/")) or "root"
    token = token if token is not None else secrets.token_hex(6)
    return posixpath.join(REMOTE_TMP_DIR, f"lazyssm-{token}-{base}{ARCHIVE_SUFFIX}")


def archive_command(remote_dir: str, archive_path: str) -> str:
    """Command that archives ``remote_dir`` with its base name as top-level entry."""
    stripped = remote_dir.rstrip("/") or "/"
    parent, base = posixpath.split(stripped)
    if not base:
        raise TransferFailed(f"cannot archive {remote_dir!r}")
    if base.startswith("-"):
        base = "./" + base
    return f"tar -czf {shlex.quote(archive_path)} -C {shlex.quote(parent or '.')} {shlex.quote(base)}"


def _partial_path_for(local_path: Path) -> Path:
    return local_path.with_name(f".{local_path.name}{PARTIAL_SUFFIX}")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("could not remove partial file %s: %s", path, exc)


def stream_to_local(session: RemoteSession, remote_path: str, local_path: Path) -> int:
    """Copy ``remote_path`` byte-for-byte to ``local_path``; return bytes written."""
    partial_path = _partial_path_for(local_path)
    written = 0
    try:
        with session.run_streaming_stdout(f"cat -- {shlex.quote(remote_path)}") as stream:
            fd = os.open(partial_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, LOCAL_FILE_MODE)
            with os.fdopen(fd, "wb") as handle:
                while True:
                    chunk = stream.read(STREAM_CHUNK_SIZE)
                    if not chunk:
                        break
                    handle.write(chunk)
                    written += len(chunk)
            stream.wait()
    except (RemoteError, OSError) as exc:
        _discard(partial_path)
        if written:
            raise PartialLocalFile(f"transfer of {remote_path} stopped after {written} bytes: {exc}") from exc
        raise TransferFailed(f"cannot download {remote_path}: {exc}") from exc
    try:
        os.replace(partial_path, local_path)
    except OSError as exc:
        _discard(partial_path)
        raise TransferFailed(f"cannot move download into place at {local_path}: {exc}") from exc
    return written


def _remove_remote(session: RemoteSession, remote_path: str) -> None:
    try:
        session.run_capturing_output(f"rm -f -- {shlex.quote(remote_path)}")
    except RemoteError as exc:
        logger.warning("could not remove remote archive %s: %s", remote_path, exc)


def _download_directory(session: RemoteSession, entry: RemoteEntry, local_path: Path) -> int:
    archive_path = remote_archive_path(entry)
    try:
        try:
            session.run_capturing_output(archive_command(entry.path, archive_path))
        except RemoteError as exc:
            raise TransferFailed(f"cannot archive {entry.path}: {exc}") from exc
        return stream_to_local(session, archive_path, local_path)
    finally:
        _remove_remote(session, archive_path)


def download(session: RemoteSession, entry: RemoteEntry, local_dir: Path) -> TransferOutcome:
    """Download one entry into ``local_dir``; failures become outcomes."""
    local_path = Path(local_dir) / local_name_for(entry)
    logger.info("downloading %s -> %s", entry.path, local_path)
    try:
        if entry.is_dir:
            size = _download_directory(session, entry, local_path)
        else:
            size = stream_to_local(session, entry.path, local_path)
    except (RemoteError, OSError) as exc:
        logger.warning("download of %s failed: %s", entry.path, exc)
        return TransferOutcome.failure(entry.name, str(exc))
    logger.info("downloaded %s (%d bytes)", entry.path, size)
    return TransferOutcome.success(entry.name, local_path)


def download_batch(
    session: RemoteSession,
    entries: Iterable[RemoteEntry],
    local_dir: Path,
    on_outcome: Callable[[TransferOutcome], None] | None = None,
) -> list[TransferOutcome]:
    """Download ``entries`` one after another, reporting each outcome in order."""
    outcomes: list[TransferOutcome] = []
    for entry in entries:
        outcome = download(session, entry, local_dir)
        outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)
    return outcomes
