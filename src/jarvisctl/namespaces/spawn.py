"""Create a namespace (tmux session) holding N agent windows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..errors import JarvisError
from ..errors import PartialSpawnError
from ..tmux import TmuxAdapter
from .marker import OwnershipMarker
from .model import Agent
from .model import Namespace
from .model import NamespaceName
from .model import agent_window
from .model import join_command
from .model import wrap_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpawnResult:
    namespace: Namespace

    @property
    def agents(self) -> tuple[Agent, ...]:
        return self.namespace.agents

    def summary(self) -> str:
        name = self.namespace.name
        return (
            f"Started {len(self.agents)} agent(s) in '{name}'. "
            f"Attach: jarvisctl attach --namespace {name}"
        )


class NamespaceSpawner:
    """Run the same command in ``agent0..agentN-1`` of a fresh tmux session.

    Calls are strictly sequential: ``new-session`` for agent0, the ownership
    marker, then one ``new-window`` per further agent. The first failure stops
    the loop and whatever already exists on the host stays there.
    """

    def __init__(
        self,
        adapter: TmuxAdapter,
        marker: OwnershipMarker,
        *,
        shell: str = "bash",
        log: logging.Logger | None = None,
    ) -> None:
        self._adapter = adapter
        self._marker = marker
        self._shell = shell
        self._log = log or logger

    def spawn(
        self,
        namespace: str,
        agents: int,
        command: Sequence[str],
        *,
        working_directory: str | None = None,
    ) -> SpawnResult:
        name = NamespaceName(namespace)
        if agents < 1:
            raise ValueError(f"agent count must be at least 1, got {agents}")
        argv = list(command)
        if not argv:
            raise ValueError("command must not be empty")

        joined = join_command(argv)
        wrapped = wrap_command(joined, working_directory, shell=self._shell)

        created: list[Agent] = []
        marked = False
        for index in range(agents):
            window = agent_window(index)
            try:
                if index == 0:
                    self._adapter.new_session(name, window, wrapped)
                else:
                    self._adapter.new_window(name, window, wrapped)
                created.append(
                    Agent(
                        index=index,
                        namespace=name,
                        command=joined,
                        working_directory=working_directory,
                    )
                )
                if index == 0:
                    self._marker.mark(name)
                    marked = True
            except JarvisError as exc:
                if not created:
                    raise
                self._log.error("Spawn of %s aborted at %s: %s", name, window, exc)
                raise PartialSpawnError(
                    name,
                    [agent.window_name for agent in created],
                    marked=marked,
                    cause=exc,
                ) from exc
            self._log.info("Started window %s in %s", window, name)

        return SpawnResult(namespace=Namespace(name=name, owned=True, agents=tuple(created)))
