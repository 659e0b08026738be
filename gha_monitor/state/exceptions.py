"""State persistence exceptions."""

from pathlib import Path


class StateStoreError(Exception):
    """Raised when repository state cannot be written."""

    def __init__(self, message: str, path: Path | None = None):
        """Initialize state store error.

        Args:
            message: Error message
            path: State file involved, if known
        """
        super().__init__(message)
        self.path = path
