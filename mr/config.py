"""
config.py

Responsibility: Load the optional YAML configuration into a typed model.

Lookup order for the file: explicit path (`--config`), `$MR_CONFIG`, then
`~/.config/mr/config.yaml`. A missing default file is not an error; every
key has a default. CLI flags are applied on top by `cli.py`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mr.token_prompt import DEFAULT_MAX_ATTEMPTS
from mr.token_store import DEFAULT_TOKEN_PATH

DEFAULT_CONFIG_PATH = Path("~/.config/mr/config.yaml")
CONFIG_ENV_VAR = "MR_CONFIG"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class PromptConfig:
    """Token prompt behaviour."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    mask_input: bool = False


@dataclass(frozen=True)
class Config:
    """Settings used to create, populate and push a new repository."""

    token_file: Path = DEFAULT_TOKEN_PATH
    gh_path: str = "gh"
    git_path: str = "git"
    branch: str = "main"
    private: bool = True
    template: str = "default"
    prompt: PromptConfig = field(default_factory=PromptConfig)


def _mapping(data: Any, key: str) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"`{key}` must be an object/mapping when provided.")
    return data


def _string(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    if value is None:
        return default
    value = str(value).strip()
    if not value:
        raise ConfigError(f"`{key}` must not be empty.")
    return value


def _boolean(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"`{key}` must be true or false.")
    return value


def parse_config(data: dict[str, Any]) -> Config:
    prompt_raw = _mapping(data.get("prompt"), "prompt")

    max_attempts = prompt_raw.get("max_attempts", DEFAULT_MAX_ATTEMPTS)
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
        raise ConfigError("`prompt.max_attempts` must be a positive integer.")

    return Config(
        token_file=Path(_string(data, "token_file", str(DEFAULT_TOKEN_PATH))),
        gh_path=_string(data, "gh_path", "gh"),
        git_path=_string(data, "git_path", "git"),
        branch=_string(data, "branch", "main"),
        private=_boolean(data, "private", True),
        template=_string(data, "template", "default"),
        prompt=PromptConfig(
            max_attempts=max_attempts,
            mask_input=_boolean(prompt_raw, "mask_input", False),
        ),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load configuration from YAML.

    An explicitly requested file (argument or $MR_CONFIG) must exist; the
    default location is optional.
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    path = Path(explicit or DEFAULT_CONFIG_PATH).expanduser()

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file does not exist: {path}")
        return Config()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e

    return parse_config(_mapping(data, "top level"))
