"""Adapter around the tmux CLI, the only place jarvisctl touches the host."""
from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from dataclasses import field
from typing import Iterable
from typing import Sequence

from .errors import NonZeroExit
from .errors import TransportError

logger = logging.getLogger(__name__)

SESSION_NAME_FORMAT = "#{session_name}"


class TmuxAdapter:
    """Synchronous wrapper around tmux commands.

    Every public call spawns exactly one tmux process and blocks until it
    exits. Nothing is retried.
    """

    def __init__(self, tmux_bin: str = "tmux", socket: str | None = None) -> None:
        self.tmux_bin = tmux_bin
        self.socket = socket

    def _tmux_command(self, args: Sequence[str]) -> list[str]:
        cmd = [self.tmux_bin]
        if self.socket and self.socket != "default":
            cmd += ["-L", self.socket]
        cmd.extend(args)
        return cmd

    def _run(self, args: Sequence[str], *, capture: bool) -> str:
        cmd = self._tmux_command(args)
        logger.debug("exec %s", cmd)
        try:
            if capture:
                proc = subprocess.run(
                    cmd,
                    check=True,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                )
            else:
                # attach needs the caller's terminal, so nothing is captured here
                proc = subprocess.run(cmd, check=True)
        except subprocess.CalledProcessError as exc:
            raise NonZeroExit(exc.returncode, cmd, exc.stderr or "") from exc
        except OSError as exc:
            raise TransportError(cmd, exc) from exc
        return proc.stdout if capture else ""

    # Primitive calls ---------------------------------------------------
    def execute(self, args: Sequence[str]) -> None:
        self._run(args, capture=False)

    def execute_capture(self, args: Sequence[str]) -> str:
        return self._run(args, capture=True)

    # Session helpers ---------------------------------------------------
    def new_session(self, session_name: str, window_name: str, command: str) -> None:
        self.execute(["new-session", "-d", "-s", session_name, "-n", window_name, command])

    def new_window(self, session_name: str, window_name: str, command: str) -> None:
        self.execute(["new-window", "-t", session_name, "-n", window_name, command])

    def set_option(self, session_name: str, key: str, value: str) -> None:
        self.execute(["set-option", "-t", session_name, key, value])

    def show_option(self, session_name: str, key: str) -> str:
        """Return the option value, or an empty string when it is unset."""
        return self.execute_capture(["show-option", "-qv", "-t", session_name, key])

    def list_sessions(self) -> list[str]:
        output = self.execute_capture(["list-sessions", "-F", SESSION_NAME_FORMAT])
        return [line.strip() for line in output.splitlines() if line.strip()]

    def list_windows(self, session_name: str, fmt: str | None = None) -> str:
        args = ["list-windows", "-t", session_name]
        if fmt:
            args += ["-F", fmt]
        return self.execute_capture(args)

    def display_message(self, target: str, fmt: str) -> str:
        return self.execute_capture(["display-message", "-p", "-t", target, fmt])

    def select_window(self, target: str) -> None:
        self.execute(["select-window", "-t", target])

    def attach(self, session_name: str) -> None:
        self.execute(["attach", "-t", session_name])

    def kill_session(self, session_name: str) -> None:
        self.execute(["kill-session", "-t", session_name])

    def send_keys(self, target: str, *keys: str) -> None:
        """Send literal text and named keys as one ordered argument list."""
        # "--" keeps text that starts with a dash from being read as a flag
        self.execute(["send-keys", "-t", target, "--", *keys])


@dataclass
class FakeWindow:
    name: str
    command: str
    keys: list[str] = field(default_factory=list)


@dataclass
class FakeSession:
    name: str
    created: int
    windows: list[FakeWindow] = field(default_factory=list)
    options: dict[str, str] = field(default_factory=dict)
    active_window: int = 0


_FORMAT_VAR = re.compile(r"#\{(\w+)\}")


class FakeTmuxAdapter(TmuxAdapter):
    """Testing double that keeps sessions in memory and records every call."""

    def __init__(
        self,
        *,
        fail_at: int | None = None,
        fail_on: Iterable[str] = (),
        fail_code: int = 1,
    ) -> None:
        super().__init__(tmux_bin="tmux")
        self.calls: list[list[str]] = []
        self.sessions: dict[str, FakeSession] = {}
        self.attached: list[str] = []
        self.fail_at = fail_at
        self.fail_on = set(fail_on)
        self.fail_code = fail_code
        self._clock = 1_700_000_000

    # Test setup helpers ------------------------------------------------
    def add_session(self, name: str, *windows: str, options: dict[str, str] | None = None) -> FakeSession:
        session = FakeSession(name=name, created=self._tick())
        for window in windows or ("bash",):
            session.windows.append(FakeWindow(name=window, command="bash"))
        session.options.update(options or {})
        self.sessions[name] = session
        return session

    def subcommands(self) -> list[str]:
        return [call[0] for call in self.calls]

    def calls_for(self, subcommand: str) -> list[list[str]]:
        return [call for call in self.calls if call[0] == subcommand]

    def keys_sent(self, target: str) -> list[list[str]]:
        return [_strip_dashes(call[3:]) for call in self.calls_for("send-keys") if call[2] == target]

    # Dispatcher ---------------------------------------------------------
    def _run(self, args: Sequence[str], *, capture: bool) -> str:  # noqa: ARG002
        argv = list(args)
        self.calls.append(argv)
        subcommand = argv[0]
        if len(self.calls) == self.fail_at or subcommand in self.fail_on:
            raise NonZeroExit(self.fail_code, self._tmux_command(argv), "injected failure")
        handler = getattr(self, "_cmd_" + subcommand.replace("-", "_"), None)
        if handler is None:
            raise NonZeroExit(1, self._tmux_command(argv), f"unknown command: {subcommand}")
        return handler(argv[1:]) or ""

    def _cmd_new_session(self, argv: list[str]) -> None:
        opts, rest = _parse_flags(argv, with_value={"-s", "-n"})
        name = opts["-s"]
        if name in self.sessions:
            raise NonZeroExit(1, argv, f"duplicate session: {name}")
        session = FakeSession(name=name, created=self._tick())
        session.windows.append(FakeWindow(name=opts.get("-n", "bash"), command=" ".join(rest)))
        self.sessions[name] = session

    def _cmd_new_window(self, argv: list[str]) -> None:
        opts, rest = _parse_flags(argv, with_value={"-t", "-n"})
        session = self._session(opts["-t"])
        session.windows.append(FakeWindow(name=opts.get("-n", "bash"), command=" ".join(rest)))
        session.active_window = len(session.windows) - 1

    def _cmd_set_option(self, argv: list[str]) -> None:
        opts, rest = _parse_flags(argv, with_value={"-t"})
        key, value = rest
        self._session(opts["-t"]).options[key] = value

    def _cmd_show_option(self, argv: list[str]) -> str:
        opts, rest = _parse_flags(argv, with_value={"-t"})
        session = self.sessions.get(opts["-t"])
        if session is None:
            if "-q" in opts or "-qv" in opts:
                return ""
            raise NonZeroExit(1, argv, f"can't find session: {opts['-t']}")
        value = session.options.get(rest[0])
        return "" if value is None else value + "\n"

    def _cmd_list_sessions(self, argv: list[str]) -> str:
        if not self.sessions:
            raise NonZeroExit(1, argv, "no server running")
        opts, _ = _parse_flags(argv, with_value={"-F"})
        fmt = opts.get("-F", "#{session_name}: #{session_windows} windows")
        return "".join(_expand(fmt, self._session_vars(s)) + "\n" for s in self.sessions.values())

    def _cmd_list_windows(self, argv: list[str]) -> str:
        opts, _ = _parse_flags(argv, with_value={"-t", "-F"})
        session = self._session(opts["-t"])
        fmt = opts.get("-F")
        lines = []
        for index, window in enumerate(session.windows):
            if fmt:
                variables = dict(self._session_vars(session))
                variables.update(
                    window_index=str(index),
                    window_name=window.name,
                    pane_start_command=window.command,
                )
                lines.append(_expand(fmt, variables))
            else:
                marker = "*" if index == session.active_window else "-"
                lines.append(f"{index}: {window.name}{marker} (1 panes) [80x24]")
        return "".join(line + "\n" for line in lines)

    def _cmd_display_message(self, argv: list[str]) -> str:
        opts, rest = _parse_flags(argv, with_value={"-t"})
        session = self._session(opts["-t"].split(":", 1)[0])
        return _expand(rest[0], self._session_vars(session)) + "\n"

    def _cmd_select_window(self, argv: list[str]) -> None:
        opts, _ = _parse_flags(argv, with_value={"-t"})
        session, index = self._window(opts["-t"])
        session.active_window = index

    def _cmd_attach(self, argv: list[str]) -> None:
        opts, _ = _parse_flags(argv, with_value={"-t"})
        self.attached.append(self._session(opts["-t"]).name)

    def _cmd_kill_session(self, argv: list[str]) -> None:
        opts, _ = _parse_flags(argv, with_value={"-t"})
        self._session(opts["-t"])
        del self.sessions[opts["-t"]]

    def _cmd_send_keys(self, argv: list[str]) -> None:
        session, index = self._window(argv[1])
        session.windows[index].keys.extend(_strip_dashes(argv[2:]))

    # Internals ----------------------------------------------------------
    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def _session(self, name: str) -> FakeSession:
        session = self.sessions.get(name)
        if session is None:
            raise NonZeroExit(1, [name], f"can't find session: {name}")
        return session

    def _window(self, target: str) -> tuple[FakeSession, int]:
        name, _, window = target.partition(":")
        session = self._session(name)
        if not window:
            return session, session.active_window
        for index, candidate in enumerate(session.windows):
            if window in (str(index), candidate.name):
                return session, index
        raise NonZeroExit(1, [target], f"can't find window: {window}")

    @staticmethod
    def _session_vars(session: FakeSession) -> dict[str, str]:
        return {
            "session_name": session.name,
            "session_windows": str(len(session.windows)),
            "session_created": str(session.created),
        }


def _parse_flags(argv: list[str], with_value: set[str]) -> tuple[dict[str, str], list[str]]:
    opts: dict[str, str] = {}
    rest: list[str] = []
    iterator = iter(argv)
    for item in iterator:
        if rest or not item.startswith("-"):
            rest.append(item)
        elif item in with_value:
            opts[item] = next(iterator)
        else:
            opts[item] = ""
    return opts, rest


def _expand(fmt: str, variables: dict[str, str]) -> str:
    return _FORMAT_VAR.sub(lambda match: variables.get(match.group(1), ""), fmt)


def _strip_dashes(keys: list[str]) -> list[str]:
    return keys[1:] if keys[:1] == ["--"] else keys
