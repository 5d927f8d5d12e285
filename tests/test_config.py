import re
from pathlib import Path

import pytest

from jarvisctl.config import JarvisConfig
from jarvisctl.config import load_config


def test_defaults_without_file() -> None:
    config = load_config()

    assert config == JarvisConfig()
    assert config.tmux_bin == "tmux"
    assert config.marker_key == "@jarvisctl"
    assert config.newline_key == "C-j"
    assert config.submit_key == "Enter"


def test_load_from_path(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("tmux_bin: /opt/tmux\nsocket: work\nlog_level: debug\nshell: zsh\n", encoding="utf-8")

    config = load_config(path)

    assert config.tmux_bin == "/opt/tmux"
    assert config.tmux_socket == "work"
    assert config.log_level == "DEBUG"
    assert config.shell == "zsh"


def test_env_and_default_locations(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    default = tmp_path / "home" / ".config" / "jarvisctl" / "config.yaml"
    default.parent.mkdir(parents=True)
    default.write_text("shell: fish\n", encoding="utf-8")
    assert load_config().shell == "fish"

    override = tmp_path / "other.yaml"
    override.write_text("shell: sh\n", encoding="utf-8")
    monkeypatch.setenv("JARVISCTL_CONFIG", str(override))
    assert load_config().shell == "sh"


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == JarvisConfig()


@pytest.mark.parametrize("content", ["marker_key: jarvisctl\n", "tmux_bin: [1, 2\n", "agents: {\n"])
def test_invalid_config(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError, match=re.escape(str(path))):
        load_config(path)


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Cannot read config"):
        load_config(tmp_path / "nope.yaml")
