"""JSON file store for repository state.

Files are stored under ``<state_dir>/<owner>_<repo>.json``.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from ..config.models import default_state_dir
from .exceptions import StateStoreError
from .models import RepositoryState

logger = logging.getLogger(__name__)


class RepositoryStateStore:
    """Loads and stores ``RepositoryState`` records, one file per repository."""

    def __init__(self, base_dir: Path | None = None) -> None:
        """Initialize state store.

        Args:
            base_dir: Directory for state files, defaults to ``~/.gha-monitor``
        """
        self.base_dir = Path(base_dir) if base_dir else default_state_dir()

    def state_file(self, repo: str) -> Path:
        """Path of the state file for ``owner/repo``."""
        return self.base_dir / f"{repo.replace('/', '_')}.json"

    def load(self, repo: str) -> RepositoryState:
        """Load state for a repository, or create a fresh one.

        A missing file means the repository has never been observed. A file
        that cannot be read or parsed is treated the same way, so a damaged
        record never floods the output with historical events.

        Args:
            repo: Repository name (owner/repo)

        Returns:
            Stored state, or a new uninitialized state with watermark = now
        """
        path = self.state_file(repo)
        if not path.exists():
            logger.info(f"No saved state for {repo}, starting fresh")
            return RepositoryState.create_new(repo)

        try:
            state = RepositoryState.model_validate_json(
                path.read_text(encoding="utf-8")
            )
        except (OSError, ValidationError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {path}: {e}")
            return RepositoryState.create_new(repo)

        logger.debug(
            f"Loaded state for {repo}: watermark={state.last_completion_time}, "
            f"initialized={state.initialized}"
        )
        return state

    def store(self, state: RepositoryState) -> None:
        """Write state atomically.

        Args:
            state: Repository state

        Raises:
            StateStoreError: If the directory or file cannot be written
        """
        path = self.state_file(state.repo)
        payload = state.model_dump_json(by_alias=True, indent=2)

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.base_dir, prefix=f".{path.stem}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.write("\n")
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StateStoreError(f"Failed to store state to {path}: {e}", path) from e

        logger.debug(f"Stored state for {state.repo} to {path}")
