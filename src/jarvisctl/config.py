"""Configuration loading for jarvisctl."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

CONFIG_ENV = "JARVISCTL_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/jarvisctl/config.yaml")


class JarvisConfig(BaseModel):
    """Top-level jarvisctl configuration."""

    tmux_bin: str = "tmux"
    tmux_socket: str | None = Field(default=None, alias="socket")
    marker_key: str = "@jarvisctl"
    shell: str = "bash"
    newline_key: str = "C-j"
    submit_key: str = "Enter"
    log_level: str = "WARNING"

    model_config = {"populate_by_name": True}

    @field_validator("marker_key")
    @classmethod
    def _user_option(cls, value: str) -> str:
        if not value.startswith("@"):
            raise ValueError("marker_key must start with '@'")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def resolve_config_path(path: Path | None = None) -> Path | None:
    if path is not None:
        return path.expanduser()
    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    default = DEFAULT_CONFIG_PATH.expanduser()
    return default if default.exists() else None


def load_config(path: Path | None = None) -> JarvisConfig:
    resolved = resolve_config_path(path)
    if resolved is None:
        return JarvisConfig()
    try:
        raw = load_yaml(resolved)
    except OSError as exc:
        raise ValueError(f"Cannot read config at {resolved}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in config at {resolved}: {exc}") from exc
    try:
        return JarvisConfig.model_validate(raw or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid jarvisctl config at {resolved}: {exc}") from exc
