"""Exception hierarchy shared by the jarvisctl protocols."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence


class JarvisError(Exception):
    """Base class for every error jarvisctl reports to the operator."""


class TransportError(JarvisError):
    """The tmux binary could not be launched or its I/O failed."""

    def __init__(self, args: Sequence[str], cause: BaseException) -> None:
        self.command = list(args)
        self.cause = cause
        super().__init__(f"failed to run {' '.join(self.command)}: {cause}")


class NonZeroExit(JarvisError):
    """tmux ran but reported failure."""

    def __init__(self, code: int, args: Sequence[str] = (), stderr: str = "") -> None:
        self.code = code
        self.command = list(args)
        self.stderr = stderr
        message = f"tmux returned non-zero exit status: {code}"
        if stderr.strip():
            message += f" ({stderr.strip()})"
        super().__init__(message)


class EntityNotFound(JarvisError):
    """A requested process, namespace or agent does not exist."""


class FileReadError(JarvisError):
    def __init__(self, path: Path | str, cause: BaseException) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"cannot read {self.path}: {cause}")


class PartialSpawnError(JarvisError):
    """Spawn aborted after the namespace already existed on the host.

    Nothing is rolled back; the namespace stays behind and must be removed
    with ``jarvisctl delete``. When ``marked`` is false the namespace is also
    invisible to an unscoped ``jarvisctl list``.
    """

    def __init__(
        self,
        namespace: str,
        created: Sequence[str],
        *,
        marked: bool,
        cause: JarvisError,
    ) -> None:
        self.namespace = namespace
        self.created = list(created)
        self.marked = marked
        self.cause = cause
        windows = ", ".join(self.created) or "none"
        state = "marked" if marked else "NOT marked, hidden from `jarvisctl list`"
        super().__init__(
            f"namespace '{namespace}' partially created (windows: {windows}; {state}): {cause}. "
            f"Clean up with: jarvisctl delete --namespace {namespace}"
        )
