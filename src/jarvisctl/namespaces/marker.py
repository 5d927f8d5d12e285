"""Session tagging that separates jarvisctl namespaces from other tmux sessions."""

from __future__ import annotations

from ..tmux import TmuxAdapter
from .model import MARKER_KEY
from .model import MARKER_VALUE
from .model import Ownership


class OwnershipMarker:
    """Set and read the ``@jarvisctl`` user option on a tmux session."""

    def __init__(self, adapter: TmuxAdapter, key: str = MARKER_KEY, value: str = MARKER_VALUE) -> None:
        if not key.startswith("@"):
            raise ValueError(f"marker key {key!r} must be a tmux user option (start with '@')")
        self._adapter = adapter
        self.key = key
        self.value = value

    def mark(self, namespace: str) -> None:
        self._adapter.set_option(namespace, self.key, self.value)

    def ownership(self, namespace: str) -> Ownership:
        # unset key and missing session both read back as ""
        raw = self._adapter.show_option(namespace, self.key)
        return Ownership.from_marker(raw, self.value)

    def is_owned(self, namespace: str) -> bool:
        return self.ownership(namespace) is Ownership.OWNED
