"""Persistent JSON config helpers.

Stores the server inventory (groups → environments → servers), the
hidden-file preference, the default download directory, and the UI theme.
Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "lazyssm"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerRecord:
    """One configured server, flattened with its group and environment."""

    group: str
    environment: str
    alias: str
    hostname: str
    ip: str
    user: str
    port: int = 22

    @property
    def address(self) -> str:
        """Address used to dial: the IP when set, else the host name."""
        return self.ip or self.hostname

    @property
    def label(self) -> str:
        return f"{self.alias or self.hostname} ({self.environment})"


def use_config_path(path: Path) -> None:
    """Point all subsequent loads and saves at ``path``."""
    global CONFIG_PATH
    CONFIG_PATH = Path(path)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Write failures are logged and otherwise ignored so a read-only config
    location never breaks a browsing session.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _as_list(value: object) -> list[dict[str, object]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_str(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_port(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 < value < 65536:
        return 22
    return value


def load_servers() -> list[ServerRecord]:
    """Flatten every valid server entry in config order.

    Entries without a user or without both ``ip`` and ``hostname`` are skipped.
    """
    servers: list[ServerRecord] = []
    for group in _as_list(load_config().get("groups")):
        group_name = _as_str(group.get("name"))
        for env in _as_list(group.get("environments")):
            env_name = _as_str(env.get("name"))
            for raw in _as_list(env.get("servers")):
                record = ServerRecord(
                    group=group_name,
                    environment=env_name,
                    alias=_as_str(raw.get("alias")),
                    hostname=_as_str(raw.get("hostname")),
                    ip=_as_str(raw.get("ip")),
                    user=_as_str(raw.get("user")),
                    port=_as_port(raw.get("port", 22)),
                )
                if not record.user or not record.address:
                    continue
                servers.append(record)
    return servers


def servers_for_group(group: str, environment: str | None = None) -> list[ServerRecord]:
    """Servers in ``group``, optionally narrowed to one environment."""
    return [
        server
        for server in load_servers()
        if server.group == group and (not environment or server.environment == environment)
    ]


def load_show_hidden() -> bool:
    """Return persisted hidden-file visibility preference.

    Only explicit boolean values are accepted; any other type falls back to
    ``False``.
    """
    value = load_config().get("show_hidden")
    return bool(value) if isinstance(value, bool) else False


def save_show_hidden(show_hidden: bool) -> None:
    """Persist hidden-file visibility preference as a boolean."""
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def load_download_dir() -> Path | None:
    """Configured default download directory, ``~`` expanded."""
    value = _as_str(load_config().get("download_dir"))
    return Path(value).expanduser() if value else None


def load_theme_name() -> str | None:
    """Load persisted UI theme name, returning ``None`` when unset/invalid."""
    value = _as_str(load_config().get("theme"))
    return value or None
