"""CLI entry point for jarvisctl."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from .config import JarvisConfig
from .config import load_config
from .errors import JarvisError
from .namespaces.discovery import status_json
from .namespaces.service import NamespaceService
from .process import enter_shell
from .process import find_by_name
from .process import find_by_pid
from .process import format_record

logger = logging.getLogger("jarvisctl")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jarvisctl", description="Orchestrate CLI/TUI workers with tmux")
    parser.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    parser.add_argument("--log-level", type=str, default=os.getenv("LOG_LEVEL"), help="Logging level (default: config or WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    inspect_cmd = sub.add_parser("inspect", help="Inspect running processes by name or PID")
    target = inspect_cmd.add_mutually_exclusive_group()
    target.add_argument("-n", "--name", help="Filter by process name")
    target.add_argument("-p", "--pid", type=int, help="Filter by PID")
    inspect_cmd.add_argument("--exec-shell", action="store_true", help="Enter the process namespaces via nsenter")

    run_cmd = sub.add_parser("run", help="Run a worker in a new namespace")
    run_cmd.add_argument("--namespace", required=True, help="Namespace (tmux session) name")
    run_cmd.add_argument("--agents", type=int, default=1, help="Number of agents (windows)")
    run_cmd.add_argument("--working-directory", default=None, help="Working directory for each agent")
    run_cmd.add_argument("argv", nargs=argparse.REMAINDER, metavar="-- COMMAND", help="Command and args to run per agent")

    attach_cmd = sub.add_parser("attach", help="Attach to a running namespace")
    attach_cmd.add_argument("--namespace", required=True)

    delete_cmd = sub.add_parser("delete", help="Kill a namespace and all of its agents")
    delete_cmd.add_argument("--namespace", required=True)

    list_cmd = sub.add_parser("list", help="List namespaces and agents")
    list_cmd.add_argument("--namespace", default=None, help="Only list this namespace's windows")

    exec_cmd = sub.add_parser("exec", help="Attach to a specific agent in a namespace")
    exec_cmd.add_argument("--namespace", required=True)
    exec_cmd.add_argument("--agent", required=True)

    tell_cmd = sub.add_parser("tell", help="Type a file into a running agent")
    tell_cmd.add_argument("--namespace", required=True)
    tell_cmd.add_argument("--agent", required=True)
    tell_cmd.add_argument("--file", required=True, type=Path)

    sub.add_parser("status", help="Print namespace/agent counts as status bar JSON")

    return parser


def cmd_inspect(args: argparse.Namespace) -> None:
    if args.name is not None:
        records = find_by_name(args.name)
    elif args.pid is not None:
        records = [find_by_pid(args.pid)]
    else:
        print("Provide either --name or --pid (see --help).")
        return
    for record in records:
        print(format_record(record))
        if args.exec_shell:
            enter_shell(record.pid)


def cmd_run(service: NamespaceService, args: argparse.Namespace) -> None:
    argv = list(args.argv)
    if argv[:1] == ["--"]:
        argv = argv[1:]
    result = service.run(
        args.namespace,
        argv,
        agents=args.agents,
        working_directory=args.working_directory,
    )
    print(result.summary())


def cmd_list(service: NamespaceService, args: argparse.Namespace) -> None:
    if args.namespace:
        output = service.list_scoped(args.namespace)
        print(f"Windows in '{args.namespace}':\n{output}")
        return
    print(service.list_owned().render(), end="")


def cmd_tell(service: NamespaceService, args: argparse.Namespace) -> None:
    result = service.tell(args.namespace, args.agent, args.file)
    print(result.summary())


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def dispatch(args: argparse.Namespace, config: JarvisConfig) -> None:
    if args.command == "inspect":
        cmd_inspect(args)
        return

    service = NamespaceService(config, log=logger)
    if args.command == "run":
        cmd_run(service, args)
    elif args.command == "attach":
        service.attach(args.namespace)
    elif args.command == "delete":
        service.delete(args.namespace)
        print(f"Deleted namespace '{args.namespace}'")
    elif args.command == "list":
        cmd_list(service, args)
    elif args.command == "exec":
        service.exec_agent(args.namespace, args.agent)
    elif args.command == "tell":
        cmd_tell(service, args)
    elif args.command == "status":
        print(status_json(service.status()))
    else:  # pragma: no cover - argparse restricts choices
        raise ValueError(f"unknown command {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as exc:
        _configure_logging(args.log_level or "WARNING")
        print(f"error: {exc}", file=sys.stderr)
        return 1
    _configure_logging(args.log_level or config.log_level)

    try:
        dispatch(args, config)
    except (JarvisError, ValueError) as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
