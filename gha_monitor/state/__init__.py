"""Persistence of the per-repository watermark."""

from .exceptions import StateStoreError
from .models import RepositoryState
from .store import RepositoryStateStore

__all__ = ["RepositoryState", "RepositoryStateStore", "StateStoreError"]
