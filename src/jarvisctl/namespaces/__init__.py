"""Namespace/agent orchestration on top of tmux sessions and windows."""

from .model import Agent, Namespace, NamespaceName, Ownership
from .marker import OwnershipMarker
from .spawn import NamespaceSpawner, SpawnResult
from .discovery import DiscoveryReport, NamespaceDiscovery
from .tell import TellResult, TextInjector
from .service import NamespaceService

__all__ = [
    "Agent",
    "Namespace",
    "NamespaceName",
    "Ownership",
    "OwnershipMarker",
    "NamespaceSpawner",
    "SpawnResult",
    "DiscoveryReport",
    "NamespaceDiscovery",
    "TellResult",
    "TextInjector",
    "NamespaceService",
]
