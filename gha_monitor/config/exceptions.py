"""Configuration-related exceptions.

Any of these is fatal: the command prints the message with the usage line
and exits with status 2 before monitoring starts.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any


class ConfigurationError(Exception):
    """Base exception for all configuration-related errors."""


class ConfigurationFileError(ConfigurationError):
    """The ``--config`` file is missing, unreadable, or not a YAML mapping."""

    def __init__(self, message: str, file_path: Path):
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """The merged settings failed ``MonitorConfig`` validation.

    Attributes:
        validation_errors: Pydantic error dicts, one per failed field
    """

    def __init__(self, validation_errors: Sequence[Mapping[str, Any]]):
        self.validation_errors = list(validation_errors)
        super().__init__(f"Invalid configuration: {self.describe(validation_errors)}")

    @classmethod
    def describe(cls, validation_errors: Sequence[Mapping[str, Any]]) -> str:
        """One ``field: problem`` clause per error, joined with ``; ``."""
        return "; ".join(
            f"{cls._location(err)}: {err.get('msg', 'invalid value')}"
            for err in validation_errors
        )

    @staticmethod
    def _location(error: Mapping[str, Any]) -> str:
        return ".".join(str(part) for part in error.get("loc", ())) or "config"
