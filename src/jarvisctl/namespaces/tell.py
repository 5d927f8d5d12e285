"""Type a file into a running agent, one line at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..errors import FileReadError
from ..tmux import TmuxAdapter
from .model import agent_target

logger = logging.getLogger(__name__)

NEWLINE_KEY = "C-j"
SUBMIT_KEY = "Enter"


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``, dropping a trailing ``\\r`` and the empty tail after a final newline."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass(frozen=True)
class TellResult:
    path: Path
    target: str
    lines: int

    def summary(self) -> str:
        return f"Sent '{self.path}' to '{self.target}' ({self.lines} line(s))"


class TextInjector:
    """Deliver multi-line text as if typed.

    Each line goes out with ``C-j`` (newline inside the input); ``Enter`` is
    sent once at the end to submit.
    """

    def __init__(
        self,
        adapter: TmuxAdapter,
        *,
        newline_key: str = NEWLINE_KEY,
        submit_key: str = SUBMIT_KEY,
        log: logging.Logger | None = None,
    ) -> None:
        self._adapter = adapter
        self.newline_key = newline_key
        self.submit_key = submit_key
        self._log = log or logger

    def tell(self, namespace: str, agent: str | int, path: Path | str) -> TellResult:
        source = Path(path)
        try:
            # newline="" keeps a lone "\r" inside its line
            with source.open("r", encoding="utf-8", newline="") as handle:
                contents = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadError(source, exc) from exc
        target = agent_target(namespace, agent)
        count = self.send_text(target, contents)
        return TellResult(path=source, target=target, lines=count)

    def send_text(self, target: str, text: str) -> int:
        lines = split_lines(text)
        for line in lines:
            self._adapter.send_keys(target, line, self.newline_key)
        self._adapter.send_keys(target, self.submit_key)
        self._log.info("Sent %d line(s) to %s", len(lines), target)
        return len(lines)
