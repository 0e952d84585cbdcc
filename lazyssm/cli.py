"""Command-line front door for lazyssm.

Parses CLI options, configures logging and the config location, resolves
which server to talk to, then dispatches to the browser or the ssh client.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import subprocess
import sys
from pathlib import Path

from . import config
from .logutil import configure_logging
from .runtime import run_interactive_browse
from .ui_theme import available_theme_names

logger = logging.getLogger(__name__)


def _positive_port(value: str) -> int:
    """argparse type for TCP port numbers."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from exc
    if not 0 < parsed < 65536:
        raise argparse.ArgumentTypeError("port must be between 1 and 65535")
    return parsed


def parse_target(target: str) -> tuple[str, str]:
    """Split ``user@host`` into its parts."""
    user, sep, host = target.rpartition("@")
    if not sep or not user or not host:
        raise SystemExit(f"Expected USER@HOST, got {target!r}")
    return user, host


def choose_server(
    servers: list[config.ServerRecord],
    alias: str | None = None,
    prompt=input,
) -> config.ServerRecord:
    """Pick one server: by alias, the only match, or a numbered prompt."""
    if alias:
        for server in servers:
            if alias in {server.alias, server.hostname, server.ip}:
                return server
        raise SystemExit(f"Server {alias!r} was not found in configuration")
    if not servers:
        raise SystemExit("No servers match; add them to " + str(config.CONFIG_PATH))
    if len(servers) == 1:
        return servers[0]

    for idx, server in enumerate(servers, start=1):
        print(f"{idx:>3}. {server.label}  {server.user}@{server.address}")
    answer = prompt("Select server: ").strip()
    try:
        choice = int(answer)
    except ValueError:
        raise SystemExit("Aborted! Bad Request") from None
    if not 1 <= choice <= len(servers):
        raise SystemExit("Aborted! Bad Request")
    return servers[choice - 1]


def _server_from_args(args: argparse.Namespace) -> config.ServerRecord:
    server = choose_server(
        config.servers_for_group(args.group, args.environment),
        alias=args.server,
    )
    print(f"{'Host':<12}: {server.hostname or server.address}")
    print(f"{'IP Address':<12}: {server.ip or '-'}")
    print(f"{'User':<12}: {server.user}")
    print(f"{'Environment':<12}: {server.environment}")
    return server


def _browse_kwargs(args: argparse.Namespace) -> dict[str, object]:
    return {
        "start_dir": args.path,
        "local_dir": Path(args.dest) if args.dest else None,
        "key_filename": args.key,
        "theme_name": args.theme,
        "no_color": args.no_color,
    }


def cmd_browse(args: argparse.Namespace) -> int:
    user, host = parse_target(args.target)
    return run_interactive_browse(user, host, port=args.port, **_browse_kwargs(args))


def cmd_reverse_copy(args: argparse.Namespace) -> int:
    server = _server_from_args(args)
    return run_interactive_browse(server.user, server.address, port=server.port, **_browse_kwargs(args))


def ssh_command(server: config.ServerRecord) -> list[str]:
    cmd = ["ssh"]
    if server.port != 22:
        cmd.extend(["-p", str(server.port)])
    cmd.append(f"{server.user}@{server.address}")
    return cmd


def cmd_connect(args: argparse.Namespace) -> int:
    server = _server_from_args(args)
    if shutil.which("ssh") is None:
        raise SystemExit("Cannot connect: no ssh client found on PATH.")
    cmd = ssh_command(server)
    logger.info("running %s", " ".join(cmd))
    return subprocess.run(cmd, check=False).returncode


def cmd_list(args: argparse.Namespace) -> int:
    servers = config.load_servers()
    if args.group:
        servers = [server for server in servers if server.group == args.group]
    if not servers:
        print(f"No servers configured in {config.CONFIG_PATH}")
        return 0
    current_group = None
    for server in servers:
        if server.group != current_group:
            current_group = server.group
            print(current_group)
        print(f"  {server.label:<32} {server.user}@{server.address}")
    return 0


def _add_group_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("group", help="Server group name from the config.")
    parser.add_argument("-e", "--environment", default=None, help="Only list servers in this environment.")
    parser.add_argument("-s", "--server", default=None, help="Alias, host name, or IP of the server to use.")


def _add_browse_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--path", default=".", help="Remote directory to start in (default: login directory).")
    parser.add_argument("--dest", default=None, help="Local download directory (default: config or cwd).")
    parser.add_argument("--key", default=None, help="Private key file (default: ~/.ssh/id_ed25519).")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyssm",
        description="Simple SSH manager with an interactive remote file browser.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    parser.add_argument("--config", default=None, help=f"Config file (default: {config.DEFAULT_CONFIG_PATH}).")
    sub = parser.add_subparsers(dest="command", required=True)

    browse = sub.add_parser("browse", help="Browse and download from USER@HOST.")
    browse.add_argument("target", help="USER@HOST")
    browse.add_argument("-p", "--port", type=_positive_port, default=22, help="SSH port.")
    _add_browse_arguments(browse)
    browse.set_defaults(handler=cmd_browse)

    rcp = sub.add_parser(
        "reverse-copy",
        aliases=["rcp"],
        help="Download files from a configured server.",
    )
    _add_group_arguments(rcp)
    _add_browse_arguments(rcp)
    rcp.set_defaults(handler=cmd_reverse_copy)

    connect = sub.add_parser("connect", aliases=["c"], help="Open an ssh shell on a configured server.")
    _add_group_arguments(connect)
    connect.set_defaults(handler=cmd_connect)

    list_cmd = sub.add_parser("list", aliases=["ls"], help="Show configured servers.")
    list_cmd.add_argument("group", nargs="?", default=None, help="Only show this group.")
    list_cmd.set_defaults(handler=cmd_list)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run the selected command, and exit with its status."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    if args.config:
        config.use_config_path(Path(args.config).expanduser())
    logger.debug("running command %s", args.command)
    raise SystemExit(args.handler(args))


if __name__ == "__main__":
    main(sys.argv[1:])
