from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gitbridge.constants import (
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_CLONE_DEPTH,
    DEFAULT_CORS_PROXY,
    DEFAULT_GITHUB_RATE_PERIOD,
    DEFAULT_GITLAB_API_URL,
    DEFAULT_GITLAB_TIMEOUT,
    DEFAULT_MAX_PUSH_RETRIES,
    DEFAULT_REF,
    DEFAULT_WORKDIR,
)
from gitbridge.exceptions import ConfigError
from gitbridge.logging import get_logger

__all__ = [
    "GitBridgeConfig",
    "GitHubConfig",
    "GitLabConfig",
    "SyncConfig",
    "VaultConfig",
    "FileServerConfig",
    "load_config",
    "get_user_config_path",
]

logger = get_logger(__name__)


class GitHubConfig(BaseModel):
    """Settings for the GitHub provider.

    Attributes:
        api_url: REST API base URL (override for GitHub Enterprise).
        rate_limit: Optional request budget per ``rate_period``. Disabled when None.
        rate_period: Rate limiting window in seconds.
    """

    api_url: str = "https://api.github.com"
    rate_limit: int | None = Field(default=None, gt=0)
    rate_period: float = Field(default=DEFAULT_GITHUB_RATE_PERIOD, gt=0.0)


class GitLabConfig(BaseModel):
    """Settings for the GitLab provider."""

    api_url: str = DEFAULT_GITLAB_API_URL
    timeout_seconds: float = Field(default=DEFAULT_GITLAB_TIMEOUT, gt=0.0, le=300.0)

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class SyncConfig(BaseModel):
    """Settings for the sync orchestrator.

    Attributes:
        workdir: Project root inside the sandbox.
        cors_proxy: Proxy the engine routes HTTP traffic through, or None.
        default_ref: Branch cloned when the caller does not name one.
        clone_depth: History depth for clones.
        author_name: Commit author name.
        author_email: Commit author email.
        max_push_retries: Pull-and-retry attempts after a non-fast-forward push.
    """

    workdir: str = DEFAULT_WORKDIR
    cors_proxy: str | None = DEFAULT_CORS_PROXY
    default_ref: str = DEFAULT_REF
    clone_depth: int = Field(default=DEFAULT_CLONE_DEPTH, ge=1)
    author_name: str = DEFAULT_AUTHOR_NAME
    author_email: str = DEFAULT_AUTHOR_EMAIL
    max_push_retries: int = Field(default=DEFAULT_MAX_PUSH_RETRIES, ge=0, le=5)

    @field_validator("workdir")
    @classmethod
    def check_workdir_absolute(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("workdir must be an absolute POSIX path")
        return v.rstrip("/") or "/"


class VaultConfig(BaseModel):
    """Settings for credential storage."""

    store_path: Path = Field(
        default_factory=lambda: Path.home() / ".config" / "gitbridge" / "credentials.json"
    )


class FileServerConfig(BaseModel):
    """Settings for the HTTP sandbox file server."""

    url: str | None = None
    api_key: str | None = None


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source that loads from a YAML file."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e
            if loaded is None:
                logger.warning("config_file_empty", path=str(yaml_file))
            elif isinstance(loaded, dict):
                self._config_data = loaded
            else:
                raise ConfigError(
                    message=f"Config file {yaml_file} must contain a mapping",
                    field=None,
                    value=type(loaded).__name__,
                )

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._config_data


class GitBridgeConfig(BaseSettings):
    """Root configuration object containing all gitbridge settings."""

    model_config = SettingsConfigDict(
        env_prefix="GITBRIDGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    vault: VaultConfig = Field(default_factory=VaultConfig)
    file_server: FileServerConfig = Field(default_factory=FileServerConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order settings sources from highest to lowest priority.

        1. Init arguments
        2. Environment variables (GITBRIDGE_*)
        3. Project YAML config (./gitbridge.yaml)
        4. User YAML config (~/.config/gitbridge/config.yaml)
        """
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, Path.cwd() / "gitbridge.yaml"),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/gitbridge/config.yaml
    """
    return Path.home() / ".config" / "gitbridge" / "config.yaml"


def load_config() -> GitBridgeConfig:
    """Load configuration with hierarchy: defaults -> user -> project -> env.

    Returns:
        GitBridgeConfig instance with merged configuration.

    Raises:
        ConfigError: If configuration is invalid.
    """
    try:
        return GitBridgeConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
