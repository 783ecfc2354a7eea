from __future__ import annotations

import os
from pathlib import Path

import pytest

from gitbridge.config import GitBridgeConfig, get_user_config_path, load_config
from gitbridge.exceptions import ConfigError


@pytest.fixture
def isolated(clean_env: None, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run with cwd and HOME pointing at an empty temporary directory."""
    monkeypatch.chdir(temp_dir)
    monkeypatch.setenv("HOME", str(temp_dir))
    return temp_dir


def write_user_config(home: Path, text: str) -> Path:
    path = home / ".config" / "gitbridge" / "config.yaml"
    path.parent.mkdir(parents=True)
    path.write_text(text)
    return path


def test_load_defaults_when_no_config(isolated: Path) -> None:
    """Test that defaults are used when no config file exists."""
    config = load_config()

    assert isinstance(config, GitBridgeConfig)
    assert config.github.api_url == "https://api.github.com"
    assert config.github.rate_limit is None
    assert config.gitlab.api_url == "https://gitlab.com/api/v4"
    assert config.sync.workdir == "/home/project"
    assert config.sync.default_ref == "main"
    assert config.sync.clone_depth == 1
    assert config.sync.max_push_retries == 1
    assert config.sync.cors_proxy == "https://cors.isomorphic-git.org"
    assert config.file_server.url is None


def test_load_project_config(isolated: Path) -> None:
    """Test loading configuration from gitbridge.yaml."""
    (isolated / "gitbridge.yaml").write_text(
        """
gitlab:
  api_url: https://git.example.com/api/v4/
sync:
  author_name: Octo Cat
  max_push_retries: 3
"""
    )

    config = load_config()

    assert config.gitlab.api_url == "https://git.example.com/api/v4"
    assert config.sync.author_name == "Octo Cat"
    assert config.sync.max_push_retries == 3


def test_env_var_overrides(isolated: Path) -> None:
    """Test that GITBRIDGE_* environment variables override config."""
    (isolated / "gitbridge.yaml").write_text("sync:\n  default_ref: develop\n")
    os.environ["GITBRIDGE_SYNC__DEFAULT_REF"] = "release"
    os.environ["GITBRIDGE_GITHUB__RATE_LIMIT"] = "100"

    config = load_config()

    assert config.sync.default_ref == "release"
    assert config.github.rate_limit == 100


def test_project_config_overrides_user_config(isolated: Path) -> None:
    """Test that ./gitbridge.yaml wins over the user config file."""
    write_user_config(isolated, "sync:\n  author_name: User\n  clone_depth: 5\n")
    (isolated / "gitbridge.yaml").write_text("sync:\n  author_name: Project\n")

    config = load_config()

    assert config.sync.author_name == "Project"


def test_load_user_config(isolated: Path) -> None:
    """Test loading the user config file from ~/.config/gitbridge."""
    path = write_user_config(isolated, "file_server:\n  url: http://localhost:8080\n")

    config = load_config()

    assert get_user_config_path() == path
    assert config.file_server.url == "http://localhost:8080"


def test_invalid_value_raises_config_error(isolated: Path) -> None:
    """Test that a value outside its bounds raises ConfigError."""
    (isolated / "gitbridge.yaml").write_text("sync:\n  max_push_retries: 9\n")

    with pytest.raises(ConfigError) as exc_info:
        load_config()

    assert exc_info.value.field == "sync.max_push_retries"
    assert exc_info.value.value == 9


def test_relative_workdir_rejected(isolated: Path) -> None:
    (isolated / "gitbridge.yaml").write_text("sync:\n  workdir: project\n")

    with pytest.raises(ConfigError, match="absolute"):
        load_config()


def test_invalid_yaml_raises_config_error(isolated: Path) -> None:
    (isolated / "gitbridge.yaml").write_text("sync: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config()


def test_non_mapping_yaml_raises_config_error(isolated: Path) -> None:
    (isolated / "gitbridge.yaml").write_text("- just\n- a list\n")

    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config()


def test_empty_config_file_uses_defaults(isolated: Path) -> None:
    (isolated / "gitbridge.yaml").write_text("# nothing here\n")

    assert load_config().sync.default_ref == "main"


def test_unknown_keys_ignored(isolated: Path) -> None:
    (isolated / "gitbridge.yaml").write_text("telemetry:\n  enabled: true\n")

    config = load_config()

    assert not hasattr(config, "telemetry")
