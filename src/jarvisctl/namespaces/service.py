"""High-level service wiring tmux, the marker and the namespace protocols."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..config import JarvisConfig
from ..tmux import TmuxAdapter
from .discovery import DiscoveryReport
from .discovery import NamespaceDiscovery
from .marker import OwnershipMarker
from .model import Namespace
from .model import NamespaceName
from .model import agent_target
from .spawn import NamespaceSpawner
from .spawn import SpawnResult
from .tell import TellResult
from .tell import TextInjector

logger = logging.getLogger(__name__)


class NamespaceService:
    """Facade used by the CLI; one instance per invocation."""

    def __init__(
        self,
        config: JarvisConfig | None = None,
        *,
        adapter: TmuxAdapter | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.config = config or JarvisConfig()
        self._log = log or logger
        self._adapter = adapter or TmuxAdapter(
            tmux_bin=self.config.tmux_bin,
            socket=self.config.tmux_socket,
        )
        self.marker = OwnershipMarker(self._adapter, key=self.config.marker_key)
        self.spawner = NamespaceSpawner(
            self._adapter,
            self.marker,
            shell=self.config.shell,
            log=self._log.getChild("spawn"),
        )
        self.discovery = NamespaceDiscovery(self._adapter, self.marker, log=self._log.getChild("discovery"))
        self.injector = TextInjector(
            self._adapter,
            newline_key=self.config.newline_key,
            submit_key=self.config.submit_key,
            log=self._log.getChild("tell"),
        )

    # Spawn ------------------------------------------------------------
    def run(
        self,
        namespace: str,
        command: Sequence[str],
        *,
        agents: int = 1,
        working_directory: str | None = None,
    ) -> SpawnResult:
        return self.spawner.spawn(namespace, agents, command, working_directory=working_directory)

    # Terminal hand-off ------------------------------------------------
    def attach(self, namespace: str) -> None:
        self._adapter.attach(NamespaceName(namespace))

    def exec_agent(self, namespace: str, agent: str) -> None:
        name = NamespaceName(namespace)
        self._adapter.select_window(agent_target(name, agent))
        self._adapter.attach(name)

    def delete(self, namespace: str) -> None:
        name = NamespaceName(namespace)
        self._adapter.kill_session(name)
        self._log.info("Deleted namespace %s", name)

    # Discovery --------------------------------------------------------
    def list_scoped(self, namespace: str) -> str:
        return self.discovery.scoped(NamespaceName(namespace))

    def list_owned(self) -> DiscoveryReport:
        return self.discovery.unscoped()

    def status(self) -> DiscoveryReport:
        """Like :meth:`list_owned`, but a host without a tmux server reads as idle."""
        return self.discovery.unscoped(allow_no_server=True)

    def describe(self, namespace: str) -> Namespace:
        return self.discovery.describe(namespace)

    # Injection --------------------------------------------------------
    def tell(self, namespace: str, agent: str, path: Path | str) -> TellResult:
        return self.injector.tell(NamespaceName(namespace), agent, path)
