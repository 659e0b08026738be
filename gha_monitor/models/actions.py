"""Typed models for GitHub Actions API payloads.

Only the fields the monitor reads are declared; everything else in the
payload is ignored. Free-text and timestamp fields are optional because the
API returns ``null`` for them at various points of an entity's lifetime.
Timestamps that are missing or cannot be parsed never fail validation:
``created_at``/``updated_at`` fall back to the current time, while
``started_at``/``completed_at`` become ``None``.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import RunStatus


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 instant, returning None when absent or invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


class GitHubModel(BaseModel):
    """Base for API payload models."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    status: str | None = None
    conclusion: str | None = None

    def has_status(self, status: RunStatus) -> bool:
        """Case-insensitive status comparison."""
        return self.status is not None and self.status.lower() == status.value


class _TimedModel(GitHubModel):
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("started_at", "completed_at", mode="before")
    @classmethod
    def _parse_optional_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)


class Step(_TimedModel):
    """A single step embedded in a job payload."""

    name: str | None = None
    number: int = 0

    @field_validator("number", mode="before")
    @classmethod
    def _null_number(cls, value: Any) -> Any:
        return 0 if value is None else value


class Job(_TimedModel):
    """A job belonging to a workflow run, with its steps."""

    id: int
    name: str | None = None
    steps: list[Step] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def _null_steps(cls, value: Any) -> Any:
        return [] if value is None else value


class WorkflowRun(GitHubModel):
    """A workflow run as listed by ``/actions/runs``."""

    id: int
    name: str | None = None
    run_number: int = 0
    head_branch: str | None = None
    head_sha: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_timestamp_or_now(cls, value: Any) -> datetime:
        return parse_timestamp(value) or utc_now()

    @field_validator("run_number", mode="before")
    @classmethod
    def _null_run_number(cls, value: Any) -> Any:
        return 0 if value is None else value


class WorkflowRunsPage(BaseModel):
    """One page of ``GET /repos/{owner}/{repo}/actions/runs``."""

    model_config = ConfigDict(extra="ignore")

    total_count: int | None = None
    workflow_runs: list[WorkflowRun] = Field(default_factory=list)


class JobsPage(BaseModel):
    """One page of ``GET /repos/{owner}/{repo}/actions/runs/{run_id}/jobs``."""

    model_config = ConfigDict(extra="ignore")

    total_count: int | None = None
    jobs: list[Job] = Field(default_factory=list)


@dataclass(frozen=True)
class RepositoryRef:
    """Owner/name pair identifying the monitored repository."""

    owner: str
    name: str

    @classmethod
    def parse(cls, full_name: str) -> "RepositoryRef":
        """Parse ``owner/repo``.

        Raises:
            ValueError: If the value does not contain exactly one ``/`` or
                either half is blank
        """
        parts = full_name.strip().split("/")
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise ValueError(
                f"repository must be in format owner/repo, got {full_name!r}"
            )
        return cls(owner=parts[0].strip(), name=parts[1].strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def state_key(self) -> str:
        """File-system friendly key used for the persisted state record."""
        return self.full_name.replace("/", "_")

    def __str__(self) -> str:
        return self.full_name


def format_instant(value: datetime, milliseconds: bool = False) -> str:
    """Render an instant as ISO-8601 UTC with a ``Z`` suffix."""
    value = ensure_utc(value)
    if milliseconds:
        text = value.isoformat(timespec="milliseconds")
    else:
        text = value.isoformat()
    return text.replace("+00:00", "Z")
