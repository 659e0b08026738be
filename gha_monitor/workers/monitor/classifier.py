"""Transition classification for runs, jobs and steps.

The API only exposes the current state of each entity, so transitions have
to be inferred. Two modes exist:

Catch-up (once, after a restart of an already initialized repository)
    Only completions are reported: any run, job or step whose completion
    time is later than the floor finished while nobody was watching.
    Queued and started states are not reconstructed.

Live (every later cycle)
    Runs are reported as queued while they are queued and were created after
    the floor, and as completed once updated after the floor. Jobs and steps
    are edge-triggered: the previous status of each job id and each
    ``(job id, step number)`` is remembered, and an event is emitted only when
    the status changes into ``in_progress`` or ``completed``. Without that
    memory every cycle would report the same running job again.

A job or step that starts and finishes between two cycles is never seen
``in_progress`` and so only its completion is reported.

Every reported completion raises the watermark. The floor passed to
``classify`` stays fixed for a whole walk, so entities later in the walk are
compared against the same floor as earlier ones.
"""

import logging
from datetime import datetime

from ...models import EventKind, Job, RunStatus, Step, WalkMode, WorkflowRun
from .formatter import EventFormatter
from .models import EventSink, MonitorEvent, StreamEventSink, WalkEntry
from .watermark import WatermarkTracker

logger = logging.getLogger(__name__)


def _is_after(value: datetime | None, floor: datetime) -> bool:
    return value is not None and value > floor


def _same_status(status: str | None, target: RunStatus) -> bool:
    return status is not None and status.lower() == target.value


class TransitionClassifier:
    """Decides which observed entities represent a new transition.

    One instance belongs to one monitor; its status caches live only as long
    as the process.
    """

    def __init__(
        self,
        repository: str,
        watermark: WatermarkTracker,
        formatter: EventFormatter | None = None,
        sink: EventSink | None = None,
    ):
        """Initialize classifier.

        Args:
            repository: Repository full name printed in every event
            watermark: Tracker advanced on every reported completion
            formatter: Event renderer
            sink: Destination for rendered lines, stdout by default
        """
        self.repository = repository
        self.watermark = watermark
        self.formatter = formatter or EventFormatter()
        self.sink = sink or StreamEventSink()

        self._job_status: dict[int, str | None] = {}
        self._step_status: dict[tuple[int, int], str | None] = {}

    def classify(
        self, entry: WalkEntry, floor: datetime, mode: WalkMode
    ) -> MonitorEvent | None:
        """Classify one walked entity and emit its event, if any.

        Args:
            entry: Entity from the hierarchy walk
            floor: Watermark captured at the start of the walk
            mode: Catch-up or live

        Returns:
            The emitted event, or None
        """
        catch_up = mode is WalkMode.CATCH_UP

        if entry.step is not None and entry.job is not None:
            event = (
                self._catch_up_step(entry.run, entry.job, entry.step, floor)
                if catch_up
                else self._live_step(entry.run, entry.job, entry.step, floor)
            )
        elif entry.job is not None:
            event = (
                self._catch_up_job(entry.run, entry.job, floor)
                if catch_up
                else self._live_job(entry.run, entry.job, floor)
            )
        else:
            event = (
                self._catch_up_run(entry.run, floor)
                if catch_up
                else self._live_run(entry.run, floor)
            )

        if event is not None:
            self._emit(event)
        return event

    def previous_job_status(self, job_id: int) -> str | None:
        return self._job_status.get(job_id)

    def previous_step_status(self, job_id: int, step_number: int) -> str | None:
        return self._step_status.get((job_id, step_number))

    def _emit(self, event: MonitorEvent) -> None:
        self.sink.emit(self.formatter.format(event))
        if event.kind.is_completion and event.completed_at is not None:
            self.watermark.advance(event.completed_at)

    def _event(
        self,
        kind: EventKind,
        run: WorkflowRun,
        job: Job | None = None,
        step: Step | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
    ) -> MonitorEvent:
        return MonitorEvent(
            kind=kind,
            repo=self.repository,
            run=run,
            job=job,
            step=step,
            started_at=started_at,
            completed_at=completed_at,
        )

    # Catch-up mode

    def _catch_up_run(self, run: WorkflowRun, floor: datetime) -> MonitorEvent | None:
        if run.has_status(RunStatus.COMPLETED) and run.updated_at > floor:
            return self._event(
                EventKind.RUN_COMPLETED, run, completed_at=run.updated_at
            )
        return None

    def _catch_up_job(
        self, run: WorkflowRun, job: Job, floor: datetime
    ) -> MonitorEvent | None:
        if _is_after(job.completed_at, floor):
            return self._event(
                EventKind.JOB_COMPLETED,
                run,
                job,
                started_at=job.started_at,
                completed_at=job.completed_at,
            )
        return None

    def _catch_up_step(
        self, run: WorkflowRun, job: Job, step: Step, floor: datetime
    ) -> MonitorEvent | None:
        if _is_after(step.completed_at, floor):
            return self._event(
                EventKind.STEP_COMPLETED,
                run,
                job,
                step,
                started_at=step.started_at,
                completed_at=step.completed_at,
            )
        return None

    # Live mode

    def _live_run(self, run: WorkflowRun, floor: datetime) -> MonitorEvent | None:
        if run.has_status(RunStatus.QUEUED) and run.created_at > floor:
            return self._event(EventKind.RUN_QUEUED, run, started_at=run.created_at)
        if run.has_status(RunStatus.COMPLETED) and run.updated_at > floor:
            return self._event(
                EventKind.RUN_COMPLETED, run, completed_at=run.updated_at
            )
        return None

    def _live_job(
        self, run: WorkflowRun, job: Job, floor: datetime
    ) -> MonitorEvent | None:
        previous = self._job_status.get(job.id)
        self._job_status[job.id] = job.status

        kind = self._edge(
            job, previous, floor, EventKind.JOB_STARTED, EventKind.JOB_COMPLETED
        )
        if kind is None:
            return None
        return self._event(
            kind, run, job, started_at=job.started_at, completed_at=job.completed_at
        )

    def _live_step(
        self, run: WorkflowRun, job: Job, step: Step, floor: datetime
    ) -> MonitorEvent | None:
        key = (job.id, step.number)
        previous = self._step_status.get(key)
        self._step_status[key] = step.status

        kind = self._edge(
            step, previous, floor, EventKind.STEP_STARTED, EventKind.STEP_COMPLETED
        )
        if kind is None:
            return None
        return self._event(
            kind,
            run,
            job,
            step,
            started_at=step.started_at,
            completed_at=step.completed_at,
        )

    @staticmethod
    def _edge(
        entity: Job | Step,
        previous: str | None,
        floor: datetime,
        started: EventKind,
        completed: EventKind,
    ) -> EventKind | None:
        """Event kind for a status edge since the previous cycle, if any."""
        if (
            entity.has_status(RunStatus.IN_PROGRESS)
            and not _same_status(previous, RunStatus.IN_PROGRESS)
            and _is_after(entity.started_at, floor)
        ):
            return started
        if (
            entity.has_status(RunStatus.COMPLETED)
            and not _same_status(previous, RunStatus.COMPLETED)
            and _is_after(entity.completed_at, floor)
        ):
            return completed
        return None
