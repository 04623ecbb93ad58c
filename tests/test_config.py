from __future__ import annotations

from pathlib import Path

import pytest

from mr.config import Config, ConfigError, PromptConfig, load_config, parse_config


def test_missing_default_config_gives_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("MR_CONFIG", raising=False)
    assert load_config() == Config()


def test_explicit_missing_config_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path / "nope.yaml")


def test_load_from_env_var(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    cfg = tmp_path / "mr.yaml"
    cfg.write_text("branch: trunk\nprivate: false\n", encoding="utf-8")
    monkeypatch.setenv("MR_CONFIG", str(cfg))

    config = load_config()
    assert config.branch == "trunk"
    assert config.private is False


def test_full_config(tmp_path: Path) -> None:
    cfg = tmp_path / "mr.yaml"
    cfg.write_text(
        "\n".join(
            [
                f"token_file: {tmp_path / 'tok'}",
                "gh_path: /opt/homebrew/bin/gh",
                "git_path: /usr/bin/git",
                "template: /srv/templates/python",
                "prompt:",
                "  max_attempts: 5",
                "  mask_input: true",
            ]
        ),
        encoding="utf-8",
    )
    config = load_config(cfg)
    assert config.token_file == tmp_path / "tok"
    assert config.gh_path == "/opt/homebrew/bin/gh"
    assert config.git_path == "/usr/bin/git"
    assert config.template == "/srv/templates/python"
    assert config.prompt == PromptConfig(max_attempts=5, mask_input=True)


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    cfg = tmp_path / "mr.yaml"
    cfg.write_text("", encoding="utf-8")
    assert load_config(cfg) == Config()


def test_invalid_yaml(tmp_path: Path) -> None:
    cfg = tmp_path / "mr.yaml"
    cfg.write_text("branch: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid YAML"):
        load_config(cfg)


@pytest.mark.parametrize(
    "data",
    [
        {"prompt": ["max_attempts"]},
        {"prompt": {"max_attempts": 0}},
        {"prompt": {"max_attempts": True}},
        {"prompt": {"mask_input": "yes"}},
        {"private": "no"},
        {"branch": ""},
    ],
)
def test_invalid_values(data: dict) -> None:
    with pytest.raises(ConfigError):
        parse_config(data)


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    cfg = tmp_path / "mr.yaml"
    cfg.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(cfg)
