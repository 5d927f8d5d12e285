from pathlib import Path

import pytest

from jarvisctl.namespaces.marker import OwnershipMarker
from jarvisctl.tmux import FakeTmuxAdapter


@pytest.fixture()
def adapter() -> FakeTmuxAdapter:
    return FakeTmuxAdapter()


@pytest.fixture()
def marker(adapter: FakeTmuxAdapter) -> OwnershipMarker:
    return OwnershipMarker(adapter)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("JARVISCTL_CONFIG", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
