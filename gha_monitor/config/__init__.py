"""Configuration management for the Actions monitor.

Example usage:
    from gha_monitor.config import load_config

    config = load_config(["--repo", "octo/hello", "--token", "${GITHUB_TOKEN}"])
    print(config.repository.full_name, config.interval_seconds)
"""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .loader import ConfigurationLoader, build_arg_parser, load_config
from .models import LogLevel, MonitorConfig

__all__ = [
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationValidationError",
    "LogLevel",
    "MonitorConfig",
    "build_arg_parser",
    "load_config",
]
