"""Persisted per-repository monitoring state."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..models import ensure_utc, format_instant, parse_timestamp, utc_now

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class RepositoryState(BaseModel):
    """Watermark and initialization flag for one monitored repository.

    Serialized as ``{"repo", "lastCompletionTime", "initialized"}``. The
    watermark only ever moves forward through ``advance_watermark``.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    repo: str
    last_completion_time: datetime = Field(alias="lastCompletionTime")
    initialized: bool = False

    @field_validator("last_completion_time", mode="before")
    @classmethod
    def _parse_watermark(cls, value: Any) -> datetime:
        # An unreadable watermark means "report everything still visible".
        return parse_timestamp(value) or EPOCH

    @field_serializer("last_completion_time")
    def _serialize_watermark(self, value: datetime) -> str:
        return format_instant(value)

    @classmethod
    def create_new(cls, repo: str, now: datetime | None = None) -> "RepositoryState":
        """State for a repository seen for the first time."""
        return cls(
            repo=repo,
            last_completion_time=now or utc_now(),
            initialized=False,
        )

    def advance_watermark(self, candidate: datetime) -> bool:
        """Move the watermark to ``candidate`` if it is later.

        Returns:
            True when the watermark moved
        """
        candidate = ensure_utc(candidate)
        if candidate > self.last_completion_time:
            self.last_completion_time = candidate
            return True
        return False
