"""SSH connection gateway and per-command channel sessions.

One ``RemoteGateway`` owns a single authenticated paramiko transport.
Every command run through a ``RemoteSession`` opens its own channel on that
transport, so listing and transfer calls never share channel state.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import paramiko

from .errors import ConnectionFailed, RemoteCommandFailed

logger = logging.getLogger(__name__)

DEFAULT_PORT = 22
DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_PRIVATE_KEY = Path.home() / ".ssh" / "id_ed25519"
STREAM_CHUNK_SIZE = 32 * 1024


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class RemoteStream:
    """Stdout of one running remote command, read incrementally."""

    def __init__(self, session: RemoteSession, channel: paramiko.Channel, command: str) -> None:
        self._session = session
        self._channel = channel
        self._stdout = channel.makefile("rb")
        self.command = command

    def read(self, size: int = STREAM_CHUNK_SIZE) -> bytes:
        return self._stdout.read(size)

    def wait(self) -> int:
        """Block until the command exits; raise on non-zero status."""
        status = self._channel.recv_exit_status()
        if status != 0:
            stderr = _decode(self._channel.makefile_stderr("rb").read())
            raise RemoteCommandFailed(self.command, status, stderr)
        return status

    def close(self) -> None:
        self._session._release(self._channel)

    def __enter__(self) -> RemoteStream:
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()


class RemoteSession:
    """Command-execution context multiplexed over the gateway transport."""

    def __init__(self, transport: paramiko.Transport, label: str) -> None:
        self._transport = transport
        self._label = label
        self._lock = threading.Lock()
        self._open_channels: set[paramiko.Channel] = set()
        self._closed = False

    def _open_channel(self, command: str) -> paramiko.Channel:
        if self._closed:
            raise ConnectionFailed(f"session to {self._label} is closed")
        try:
            channel = self._transport.open_session()
        except (paramiko.SSHException, OSError, EOFError) as exc:
            raise ConnectionFailed(f"failed to open channel to {self._label}: {exc}") from exc
        with self._lock:
            self._open_channels.add(channel)
        logger.debug("exec on %s: %s", self._label, command)
        try:
            channel.exec_command(command)
        except (paramiko.SSHException, OSError) as exc:
            self._release(channel)
            raise ConnectionFailed(f"failed to start remote command: {exc}") from exc
        return channel

    def _release(self, channel: paramiko.Channel) -> None:
        with self._lock:
            self._open_channels.discard(channel)
        channel.close()

    def run_capturing_output(self, command: str) -> bytes:
        """Run ``command`` to completion and return its stdout."""
        channel = self._open_channel(command)
        try:
            stdout = channel.makefile("rb").read()
            status = channel.recv_exit_status()
            if status != 0:
                stderr = _decode(channel.makefile_stderr("rb").read())
                raise RemoteCommandFailed(command, status, stderr)
            return stdout
        except (paramiko.SSHException, OSError) as exc:
            raise ConnectionFailed(f"lost channel while running remote command: {exc}") from exc
        finally:
            self._release(channel)

    def run_streaming_stdout(self, command: str) -> RemoteStream:
        """Start ``command`` and return a stream over its stdout.

        The caller owns the stream and must close it.
        """
        return RemoteStream(self, self._open_channel(command), command)

    def close(self) -> None:
        with self._lock:
            channels = list(self._open_channels)
            self._open_channels.clear()
            self._closed = True
        for channel in channels:
            channel.close()

    def __enter__(self) -> RemoteSession:
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()


class RemoteGateway:
    """One authenticated SSH connection to ``user@host``."""

    def __init__(self, client: paramiko.SSHClient, user: str, host: str) -> None:
        self._client = client
        self.user = user
        self.host = host

    @property
    def label(self) -> str:
        return f"{self.user}@{self.host}"

    def open_session(self) -> RemoteSession:
        transport = self._client.get_transport()
        if transport is None or not transport.is_active():
            raise ConnectionFailed(f"connection to {self.label} is not active")
        return RemoteSession(transport, self.label)

    def close(self) -> None:
        logger.debug("closing connection to %s", self.label)
        self._client.close()

    def __enter__(self) -> RemoteGateway:
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()


def dial(
    user: str,
    host: str,
    *,
    port: int = DEFAULT_PORT,
    key_filename: str | Path | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> RemoteGateway:
    """Open an SSH connection and return its gateway.

    Uses ``key_filename`` when given, else ``~/.ssh/id_ed25519`` when it
    exists, else paramiko's agent and default key discovery.
    """
    if key_filename is None and DEFAULT_PRIVATE_KEY.exists():
        key_filename = DEFAULT_PRIVATE_KEY

    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    logger.info("connecting to %s@%s:%d", user, host, port)
    try:
        client.connect(
            hostname=host,
            port=port,
            username=user,
            key_filename=str(key_filename) if key_filename is not None else None,
            timeout=timeout,
        )
    except (paramiko.SSHException, OSError) as exc:
        client.close()
        raise ConnectionFailed(f"cannot connect to {user}@{host}:{port}: {exc}") from exc
    return RemoteGateway(client, user, host)
