"""Configuration loading from the command line and an optional YAML file.

The loading hierarchy is:
1. Default values from the Pydantic model
2. Configuration file (YAML), when ``--config`` is given
3. Command line flags
"""

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigurationFileError, ConfigurationValidationError
from .models import LogLevel, MonitorConfig

# CLI destination -> MonitorConfig field
_CLI_FIELDS = {
    "repo": "repo",
    "token": "token",
    "interval": "interval_seconds",
    "state_dir": "state_dir",
    "log_level": "log_level",
}


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        parsed = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from e
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return parsed


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="gha-monitor",
        description=(
            "Watch a GitHub repository's Actions runs, jobs and steps and print "
            "one line per state transition."
        ),
    )
    parser.add_argument("--repo", metavar="OWNER/REPO", help="repository (required)")
    parser.add_argument(
        "--token",
        help="GitHub token (required); ${ENV_VAR} references are expanded",
    )
    parser.add_argument(
        "--interval",
        type=positive_int,
        metavar="SECONDS",
        help="poll interval in seconds (default: 15)",
    )
    parser.add_argument("--config", metavar="PATH", help="YAML configuration file")
    parser.add_argument(
        "--state-dir", metavar="PATH", help="state directory (default: ~/.gha-monitor)"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=[level.value for level in LogLevel],
        help="diagnostic log level (default: INFO)",
    )
    return parser


class ConfigurationLoader:
    """Builds a validated ``MonitorConfig`` from its sources."""

    def __init__(self, parser: argparse.ArgumentParser | None = None) -> None:
        self.parser = parser or build_arg_parser()
        self._config_file_path: Path | None = None

    @property
    def config_file_path(self) -> Path | None:
        return self._config_file_path

    def load_file_data(self, config_path: str | Path) -> dict[str, Any]:
        """Read a YAML configuration file into a mapping.

        Raises:
            ConfigurationFileError: If file cannot be read or parsed
        """
        config_path = Path(config_path).expanduser()

        if not config_path.exists():
            raise ConfigurationFileError("Configuration file not found", config_path)

        if not config_path.is_file():
            raise ConfigurationFileError(
                "Configuration path is not a file", config_path
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationFileError(
                f"Failed to parse YAML configuration: {e}", config_path
            ) from e
        except OSError as e:
            raise ConfigurationFileError(
                f"Failed to read configuration file: {e}", config_path
            ) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationFileError(
                "Configuration file must contain a mapping", config_path
            )

        self._config_file_path = config_path.resolve()
        return config_data

    def load_from_dict(self, config_data: dict[str, Any]) -> MonitorConfig:
        """Validate a configuration mapping.

        Raises:
            ConfigurationValidationError: If configuration validation fails
        """
        try:
            return MonitorConfig.model_validate(config_data)
        except ValidationError as e:
            raise ConfigurationValidationError(e.errors()) from e

    def load_from_args(self, argv: Sequence[str] | None = None) -> MonitorConfig:
        """Parse command line arguments, merging in the YAML file if given.

        argparse itself exits with status 2 on unknown flags or malformed
        values; missing or invalid settings raise instead.

        Raises:
            ConfigurationFileError: If the configuration file is unusable
            ConfigurationValidationError: If the merged settings are invalid
        """
        args = self.parser.parse_args(argv)

        config_data: dict[str, Any] = {}
        if args.config:
            config_data.update(self.load_file_data(args.config))

        for dest, field_name in _CLI_FIELDS.items():
            value = getattr(args, dest)
            if value is not None:
                config_data[field_name] = value

        return self.load_from_dict(config_data)


def load_config(argv: Sequence[str] | None = None) -> MonitorConfig:
    """Convenience wrapper around ``ConfigurationLoader().load_from_args``."""
    return ConfigurationLoader().load_from_args(argv)
