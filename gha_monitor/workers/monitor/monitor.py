"""Poll loop for one repository.

Lifecycle:
1. Catch-up: on the first ever observation of a repository the state is just
   marked initialized (history is never replayed); on later starts one walk
   reports the completions missed while the process was down.
2. Live polling every ``interval_seconds`` until cancelled, persisting the
   watermark whenever a cycle advanced it.
3. A final best-effort persist on the way out.

Failed cycles are logged and skipped; the next one runs on schedule.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from ...github.client import GitHubClient
from ...github.exceptions import GitHubAuthenticationError, GitHubError
from ...models import RepositoryRef, WalkMode
from ...state import RepositoryState, RepositoryStateStore, StateStoreError
from .cancellation import CancellationToken
from .classifier import TransitionClassifier
from .formatter import EventFormatter
from .models import EventSink, WalkSummary
from .walker import JOBS_PER_PAGE, MAX_RUN_PAGES, RUNS_PER_PAGE, HierarchyWalker
from .watermark import WatermarkTracker

logger = logging.getLogger(__name__)


class ActionsMonitor:
    """Watches one repository and reports run, job and step transitions."""

    def __init__(
        self,
        client: GitHubClient,
        store: RepositoryStateStore,
        state: RepositoryState,
        repository: RepositoryRef,
        interval_seconds: int = 15,
        *,
        runs_per_page: int = RUNS_PER_PAGE,
        jobs_per_page: int = JOBS_PER_PAGE,
        max_run_pages: int = MAX_RUN_PAGES,
        sink: EventSink | None = None,
        formatter: EventFormatter | None = None,
        cancellation: CancellationToken | None = None,
    ):
        """Initialize monitor.

        Args:
            client: GitHub API client
            store: Persistence for ``state``
            state: Loaded state for ``repository``
            repository: Repository to watch
            interval_seconds: Sleep between live cycles
            runs_per_page: Workflow runs per page
            jobs_per_page: Jobs per page
            max_run_pages: Cap on run pages per walk
            sink: Destination for event lines, stdout by default
            formatter: Event renderer
            cancellation: Stop token, a new one when omitted
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self.client = client
        self.store = store
        self.state = state
        self.repository = repository
        self.interval_seconds = interval_seconds
        self.cancellation = cancellation or CancellationToken()

        self.watermark = WatermarkTracker(state.last_completion_time)
        self.walker = HierarchyWalker(
            client,
            repository,
            runs_per_page=runs_per_page,
            jobs_per_page=jobs_per_page,
            max_run_pages=max_run_pages,
        )
        self.classifier = TransitionClassifier(
            repository.full_name, self.watermark, formatter, sink
        )

        self.stats: dict[str, Any] = {
            "started_at": None,
            "total_cycles": 0,
            "successful_cycles": 0,
            "failed_cycles": 0,
            "events_emitted": 0,
            "last_cycle_at": None,
            "last_error": None,
        }

    def request_stop(self) -> None:
        """Ask the loop to stop at the next checkpoint."""
        self.cancellation.cancel()

    async def run(self) -> None:
        """Run catch-up, then poll until stopped."""
        self.stats["started_at"] = datetime.now(UTC)

        try:
            await self.catch_up_if_needed()
        except GitHubError as e:
            logger.warning(f"Catch-up failed: {e}")
            self._record_error(e)
        except Exception as e:
            logger.error(f"Catch-up failed unexpectedly: {e}", exc_info=True)
            self._record_error(e)

        logger.info(
            f"Polling {self.repository} every {self.interval_seconds}s "
            f"(watermark {self.watermark.current().isoformat()})"
        )

        while not self.cancellation.cancelled:
            before = self.watermark.current()
            await self._run_cycle()

            if self.watermark.current() > before:
                self.persist()

            if await self.cancellation.sleep(self.interval_seconds):
                break

        if self.persist():
            logger.info(f"Stopped monitoring {self.repository}, state saved")
        else:
            logger.info(f"Stopped monitoring {self.repository}")

    async def catch_up_if_needed(self) -> int:
        """Report completions missed since the previous process lifetime.

        The first time a repository is seen nothing is reported; the state is
        only marked initialized so that later restarts do catch up.

        The watermark is left where the last reported completion put it, not
        moved to now. Runs still queued and jobs or steps still running that
        began after that completion are therefore announced again
        (``RUN_QUEUED``, ``*_STARTED``) by the first live cycle, even if the
        previous process already reported them.

        Returns:
            Number of events emitted
        """
        if not self.state.initialized:
            self.state.initialized = True
            self.persist()
            logger.info(
                f"First run for {self.repository}: existing history is not replayed"
            )
            return 0

        logger.info(
            f"Catching up on {self.repository} since "
            f"{self.watermark.current().isoformat()}"
        )
        summary = await self._walk(WalkMode.CATCH_UP)
        self.persist()
        logger.info(f"Catch-up finished: {summary}")
        return summary.events

    async def poll_once(self) -> int:
        """Run one live cycle.

        Returns:
            Number of events emitted
        """
        summary = await self._walk(WalkMode.LIVE)
        logger.debug(f"Poll finished: {summary}")
        return summary.events

    async def _run_cycle(self) -> None:
        self.stats["total_cycles"] += 1
        self.stats["last_cycle_at"] = datetime.now(UTC)
        try:
            await self.poll_once()
            self.stats["successful_cycles"] += 1
        except GitHubAuthenticationError as e:
            logger.error(f"Poll rejected, check the token and its access: {e}")
            self.stats["failed_cycles"] += 1
            self._record_error(e)
        except GitHubError as e:
            logger.warning(f"Poll failed: {e}")
            self.stats["failed_cycles"] += 1
            self._record_error(e)
        except Exception as e:
            logger.error(f"Poll failed unexpectedly: {e}", exc_info=True)
            self.stats["failed_cycles"] += 1
            self._record_error(e)

    async def _walk(self, mode: WalkMode) -> WalkSummary:
        floor = self.watermark.current()
        summary = WalkSummary()

        async for entry in self.walker.walk(self.cancellation):
            summary.record(entry)
            if self.classifier.classify(entry, floor, mode) is not None:
                summary.events += 1
                self.stats["events_emitted"] += 1

        return summary

    def persist(self) -> bool:
        """Copy the watermark into the state and store it.

        Returns:
            True if the state was written
        """
        self.state.advance_watermark(self.watermark.current())
        try:
            self.store.store(self.state)
        except StateStoreError as e:
            logger.warning(f"Failed to store state: {e}")
            return False
        return True

    def _record_error(self, error: Exception) -> None:
        last_error: dict[str, Any] = {
            "message": str(error),
            "timestamp": datetime.now(UTC),
        }
        if isinstance(error, GitHubError):
            last_error["status_code"] = error.status_code
            last_error["url"] = error.url
        self.stats["last_error"] = last_error
