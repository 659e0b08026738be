"""Data models and interfaces for the Actions monitor.

A walk over the repository produces ``WalkEntry`` items (run, job or step);
the classifier turns the interesting ones into ``MonitorEvent`` objects which
are rendered to text and handed to an ``EventSink``.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import TextIO

from ...models import EventKind, Job, Step, WorkflowRun


@dataclass(frozen=True)
class WalkEntry:
    """One entity visited by the hierarchy walker, with its ancestors."""

    run: WorkflowRun
    job: Job | None = None
    step: Step | None = None

    @property
    def level(self) -> str:
        """``run``, ``job`` or ``step``."""
        if self.step is not None:
            return "step"
        if self.job is not None:
            return "job"
        return "run"


@dataclass(frozen=True)
class MonitorEvent:
    """A single reportable transition."""

    kind: EventKind
    repo: str
    run: WorkflowRun
    job: Job | None = None
    step: Step | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def subject(self) -> WorkflowRun | Job | Step:
        """The entity whose transition this event reports."""
        if self.step is not None:
            return self.step
        if self.job is not None:
            return self.job
        return self.run

    @property
    def status(self) -> str | None:
        return self.subject.status

    @property
    def conclusion(self) -> str | None:
        return self.subject.conclusion


@dataclass
class WalkSummary:
    """Counts gathered during one walk."""

    runs: int = 0
    jobs: int = 0
    steps: int = 0
    events: int = 0

    def record(self, entry: WalkEntry) -> None:
        level = entry.level
        if level == "step":
            self.steps += 1
        elif level == "job":
            self.jobs += 1
        else:
            self.runs += 1

    def __str__(self) -> str:
        return (
            f"runs={self.runs} jobs={self.jobs} steps={self.steps} "
            f"events={self.events}"
        )


class EventSink(ABC):
    """Destination for rendered event lines."""

    @abstractmethod
    def emit(self, line: str) -> None:
        """Write one event line."""
        pass


class StreamEventSink(EventSink):
    """Writes each event line to a text stream, flushing immediately."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def emit(self, line: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()
