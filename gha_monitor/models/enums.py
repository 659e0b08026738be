"""Enums for GitHub Actions entities."""

import enum


class RunStatus(str, enum.Enum):
    """Status shared by workflow runs, jobs and steps."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAITING = "waiting"
    REQUESTED = "requested"
    PENDING = "pending"


class EventKind(str, enum.Enum):
    """Kinds of transitions reported by the monitor."""

    RUN_QUEUED = "RUN_QUEUED"
    RUN_COMPLETED = "RUN_COMPLETED"
    JOB_STARTED = "JOB_STARTED"
    JOB_COMPLETED = "JOB_COMPLETED"
    STEP_STARTED = "STEP_STARTED"
    STEP_COMPLETED = "STEP_COMPLETED"

    @property
    def is_completion(self) -> bool:
        """Whether this kind reports a finished entity."""
        return self in (
            EventKind.RUN_COMPLETED,
            EventKind.JOB_COMPLETED,
            EventKind.STEP_COMPLETED,
        )


class WalkMode(str, enum.Enum):
    """How a hierarchy walk is classified."""

    CATCH_UP = "catch_up"
    LIVE = "live"
