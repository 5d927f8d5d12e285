"""Enumerate jarvisctl namespaces and their agents."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from ..errors import NonZeroExit
from ..tmux import TmuxAdapter
from .marker import OwnershipMarker
from .model import Agent
from .model import Namespace
from .model import NamespaceName
from .model import parse_agent_index
from .model import unwrap_command

logger = logging.getLogger(__name__)

NONE_MARKER = "(none)"
SUMMARY_FORMAT = "#{session_name}: #{session_windows} windows (created #{session_created})"
WINDOW_FORMAT = "#{window_index}\t#{window_name}\t#{pane_start_command}"


@dataclass
class DiscoveryReport:
    namespaces: list[NamespaceName] = field(default_factory=list)
    summaries: list[str] = field(default_factory=list)
    listings: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.namespaces

    def agent_lines(self) -> list[str]:
        lines: list[str] = []
        for listing in self.listings:
            lines.extend(line for line in listing.splitlines() if line and not line[0].isspace())
        return lines

    def render(self) -> str:
        if self.empty:
            return f"NAMESPACES:\n{NONE_MARKER}\nAGENTS:\n{NONE_MARKER}\n"
        parts = ["NAMESPACES:\n"]
        parts.extend(summary + "\n" for summary in self.summaries)
        parts.append("\nAGENTS:\n")
        parts.extend(self.listings)
        return "".join(parts)


class NamespaceDiscovery:
    """Linear scan over the live tmux server; nothing is cached."""

    def __init__(
        self,
        adapter: TmuxAdapter,
        marker: OwnershipMarker,
        *,
        log: logging.Logger | None = None,
    ) -> None:
        self._adapter = adapter
        self._marker = marker
        self._log = log or logger

    def scoped(self, namespace: str) -> str:
        """Raw ``list-windows`` output; no ownership check."""
        return self._adapter.list_windows(namespace)

    def owned_names(self, *, allow_no_server: bool = False) -> list[NamespaceName]:
        try:
            sessions = self._adapter.list_sessions()
        except NonZeroExit as exc:
            if not allow_no_server:
                raise
            # tmux exits 1 from list-sessions when no server is running
            self._log.debug("No tmux sessions to scan: %s", exc)
            return []
        owned: list[NamespaceName] = []
        for session in sessions:
            if self._marker.is_owned(session):
                owned.append(NamespaceName(session))
            else:
                self._log.debug("Skipping unmarked session %s", session)
        return owned

    def unscoped(self, *, allow_no_server: bool = False) -> DiscoveryReport:
        report = DiscoveryReport(namespaces=self.owned_names(allow_no_server=allow_no_server))
        if report.empty:
            return report
        for name in report.namespaces:
            report.summaries.append(self._adapter.display_message(name, SUMMARY_FORMAT).strip())
        for name in report.namespaces:
            listing = self._adapter.list_windows(name)
            if listing and not listing.endswith("\n"):
                listing += "\n"
            report.listings.append(listing)
        self._log.info("Found %d namespace(s)", len(report.namespaces))
        return report

    def describe(self, namespace: str) -> Namespace:
        """Parse a namespace's windows into :class:`Agent` records."""
        name = NamespaceName(namespace)
        owned = self._marker.is_owned(name)
        output = self._adapter.list_windows(name, WINDOW_FORMAT)
        agents: list[Agent] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            parts = line.split("\t", 2)
            if len(parts) < 3:
                parts += [""] * (3 - len(parts))
            _, window_name, start_command = parts
            index = parse_agent_index(window_name)
            if index is None:
                continue
            command, working_directory = unwrap_command(start_command)
            agents.append(
                Agent(
                    index=index,
                    namespace=name,
                    command=command,
                    working_directory=working_directory,
                )
            )
        agents.sort(key=lambda agent: agent.index)
        return Namespace(name=name, owned=owned, agents=tuple(agents))


def status_payload(report: DiscoveryReport) -> dict[str, Any]:
    """Status bar JSON: counts as ``text``, full listing as ``tooltip``."""
    agent_lines = report.agent_lines()
    tooltip = "NAMESPACES:\n"
    tooltip += "\n".join(report.summaries) if report.summaries else NONE_MARKER
    tooltip += "\n\nAGENTS:\n"
    tooltip += "\n".join(agent_lines) if agent_lines else NONE_MARKER
    return {
        "text": f"ns {len(report.namespaces)}  agents {len(agent_lines)}",
        "tooltip": tooltip,
        "class": "active" if report.namespaces else "idle",
    }


def status_json(report: DiscoveryReport) -> str:
    return json.dumps(status_payload(report), ensure_ascii=False)
