"""Pydantic configuration model for the Actions monitor.

Values may come from a YAML file, the command line, or both (command line
wins). String values support environment variable substitution using
``${VAR_NAME}`` or ``${VAR_NAME:default}``, which keeps tokens out of shell
history and config files.
"""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import RepositoryRef

DEFAULT_STATE_DIR_NAME = ".gha-monitor"

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def default_state_dir() -> Path:
    """Per-user directory holding one state file per repository."""
    return Path.home() / DEFAULT_STATE_DIR_NAME


class MonitorConfig(BaseModel):
    """Settings for monitoring one repository."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    repo: str = Field(description="Repository to monitor, as owner/repo")

    token: str = Field(repr=False, description="GitHub token sent as bearer credential")

    interval_seconds: int = Field(
        default=15, ge=1, description="Sleep between poll cycles in seconds"
    )

    state_dir: Path = Field(
        default_factory=default_state_dir,
        description="Directory for persisted repository state",
    )

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="Diagnostic logging level"
    )

    api_base_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )

    request_timeout: int = Field(
        default=30, ge=1, le=300, description="HTTP request timeout in seconds"
    )

    runs_per_page: int = Field(default=50, ge=1, le=100)

    jobs_per_page: int = Field(default=50, ge=1, le=100)

    max_run_pages: int = Field(
        default=5, ge=1, description="Cap on workflow run pages fetched per cycle"
    )

    @model_validator(mode="before")
    @classmethod
    def substitute_env_vars(cls, values: Any) -> Any:
        """Substitute environment variables in string values.

        Raises:
            ValueError: If a referenced variable without default is not set
        """
        if not isinstance(values, dict):
            return values

        def replacer(match: re.Match[str]) -> str:
            var_name, default_value = match.group(1), match.group(2)
            env_value = os.getenv(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            raise ValueError(f"Required environment variable '{var_name}' not found")

        return {
            key: _ENV_PATTERN.sub(replacer, value) if isinstance(value, str) else value
            for key, value in values.items()
        }

    @field_validator("repo")
    @classmethod
    def validate_repo(cls, v: str) -> str:
        """Require exactly one ``/`` separating non-blank owner and name."""
        return RepositoryRef.parse(v).full_name

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Reject blank tokens."""
        if not v.strip():
            raise ValueError("token must not be blank")
        return v.strip()

    @field_validator("state_dir")
    @classmethod
    def expand_state_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL")
        return v.rstrip("/")

    @property
    def repository(self) -> RepositoryRef:
        return RepositoryRef.parse(self.repo)
