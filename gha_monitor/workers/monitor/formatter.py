"""Single-line rendering of monitor events.

Line layout::

    <observed> event=<KIND> repo=<repo> workflow="<name>" run_id=<id>
    run_number=<n> branch=<branch> sha=<sha> [job_id=<id> job="<name>"]
    [step="<name>"] status=<status> [conclusion=<c>] [started_at=<t>]
    [completed_at=<t>]

The bracketed groups depend only on the event kind, so every line of a given
kind has the same fields in the same order. Missing values are written as
``null``.
"""

from collections.abc import Callable
from datetime import datetime

from ...models import EventKind, format_instant, utc_now
from .models import MonitorEvent

NULL = "null"


def safe(value: object | None) -> str:
    """Render a possibly missing value so it cannot break the line apart."""
    if value is None:
        return NULL
    text = str(value)
    return (
        text.replace('"', "'")
        .replace("\r\n", " ")
        .replace("\n", " ")
        .replace("\r", " ")
    )


def instant(value: datetime | None) -> str:
    return NULL if value is None else format_instant(value)


class EventFormatter:
    """Renders ``MonitorEvent`` objects as log lines."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        """Initialize formatter.

        Args:
            clock: Source of the observation timestamp
        """
        self.clock = clock

    def format(self, event: MonitorEvent, observed_at: datetime | None = None) -> str:
        """Render one event.

        Args:
            event: Event to render
            observed_at: Observation time, defaults to the clock's now

        Returns:
            The event line without trailing newline
        """
        observed = observed_at or self.clock()
        run = event.run

        fields = [
            format_instant(observed, milliseconds=True),
            f"event={event.kind.value}",
            f"repo={safe(event.repo)}",
            f'workflow="{safe(run.name)}"',
            f"run_id={run.id}",
            f"run_number={run.run_number}",
            f"branch={safe(run.head_branch)}",
            f"sha={safe(run.head_sha)}",
        ]

        if event.job is not None:
            fields.append(f"job_id={event.job.id}")
            fields.append(f'job="{safe(event.job.name)}"')

        if event.step is not None:
            fields.append(f'step="{safe(event.step.name)}"')

        fields.append(f"status={safe(event.status)}")

        if event.kind.is_completion:
            fields.append(f"conclusion={safe(event.conclusion)}")

        if event.kind is not EventKind.RUN_COMPLETED:
            fields.append(f"started_at={instant(event.started_at)}")

        if event.kind.is_completion:
            fields.append(f"completed_at={instant(event.completed_at)}")

        return " ".join(fields)
