"""Namespaces, agents and the typed wrappers around tmux's untyped strings."""

from __future__ import annotations

import enum
import os
import re
import shlex
from dataclasses import dataclass
from dataclasses import field
from typing import Sequence

AGENT_PREFIX = "agent"
MARKER_KEY = "@jarvisctl"
MARKER_VALUE = "1"

_AGENT_RE = re.compile(rf"^{AGENT_PREFIX}(\d+)$")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


class NamespaceName(str):
    """A tmux session name accepted by jarvisctl.

    tmux uses ``:`` and ``.`` to separate session, window and pane in a
    target, so neither may appear in a namespace name.
    """

    def __new__(cls, value: str) -> "NamespaceName":
        if isinstance(value, NamespaceName):
            return value
        if not value or not value.strip():
            raise ValueError("namespace name must not be empty")
        if value != value.strip():
            raise ValueError(f"namespace name {value!r} has surrounding whitespace")
        if ":" in value or "." in value:
            raise ValueError(f"namespace name {value!r} must not contain ':' or '.'")
        if _CONTROL_RE.search(value):
            raise ValueError(f"namespace name {value!r} contains control characters")
        return super().__new__(cls, value)


class Ownership(enum.Enum):
    OWNED = "owned"
    NOT_OWNED = "not-owned"

    @classmethod
    def from_marker(cls, raw: str, expected: str = MARKER_VALUE) -> "Ownership":
        return cls.OWNED if raw.strip() == expected else cls.NOT_OWNED

    def __bool__(self) -> bool:
        return self is Ownership.OWNED


def agent_window(index: int) -> str:
    return f"{AGENT_PREFIX}{index}"


def parse_agent_index(window_name: str) -> int | None:
    match = _AGENT_RE.match(window_name)
    return int(match.group(1)) if match else None


def agent_target(namespace: str, agent: str | int) -> str:
    """Build the ``session:window`` target tmux expects."""
    agent_text = str(agent).strip()
    if not agent_text:
        raise ValueError("agent must not be empty")
    return f"{namespace}:{agent_text}"


@dataclass(frozen=True)
class Agent:
    index: int
    namespace: str
    command: str
    working_directory: str | None = None

    @property
    def window_name(self) -> str:
        return agent_window(self.index)

    @property
    def target(self) -> str:
        return agent_target(self.namespace, self.index)


@dataclass(frozen=True)
class Namespace:
    name: NamespaceName
    owned: bool
    agents: tuple[Agent, ...] = field(default_factory=tuple)


# Command wrapping ------------------------------------------------------
def join_command(argv: Sequence[str]) -> str:
    """Quote each argument so the joined string re-splits into ``argv``."""
    return " ".join(shlex.quote(arg) for arg in argv)


def wrap_command(joined: str, working_directory: str | None = None, shell: str = "bash") -> str:
    """Wrap ``joined`` in a login shell, optionally changing directory first.

    The inner script is passed to ``-lc`` as a single quoted argument.
    ``~`` in ``working_directory`` is expanded here since quoting hides it
    from the shell.
    """
    script = joined
    if working_directory:
        directory = os.path.expanduser(working_directory)
        script = f"cd {shlex.quote(directory)} && {joined}"
    return f"{shell} -lc {shlex.quote(script)}"


def unwrap_command(wrapped: str) -> tuple[str, str | None]:
    """Inverse of :func:`wrap_command`; unknown shapes come back untouched."""
    try:
        outer = shlex.split(wrapped)
    except ValueError:
        return wrapped, None
    if len(outer) != 3 or outer[1] != "-lc":
        return wrapped, None
    script = outer[2]
    try:
        inner = shlex.split(script)
    except ValueError:
        return script, None
    if len(inner) >= 4 and inner[0] == "cd" and inner[2] == "&&":
        return join_command(inner[3:]), inner[1]
    return script, None
