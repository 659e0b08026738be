"""Domain models for workflow runs, jobs and steps."""

from .actions import (
    Job,
    JobsPage,
    RepositoryRef,
    Step,
    WorkflowRun,
    WorkflowRunsPage,
    ensure_utc,
    format_instant,
    parse_timestamp,
    utc_now,
)
from .enums import EventKind, RunStatus, WalkMode

__all__ = [
    "EventKind",
    "Job",
    "JobsPage",
    "RepositoryRef",
    "RunStatus",
    "Step",
    "WalkMode",
    "WorkflowRun",
    "WorkflowRunsPage",
    "ensure_utc",
    "format_instant",
    "parse_timestamp",
    "utc_now",
]
