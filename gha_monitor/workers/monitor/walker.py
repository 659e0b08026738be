"""Walks workflow runs, their jobs and each job's steps in API order."""

import logging
from collections.abc import AsyncIterator

from ...github.client import GitHubClient
from ...models import RepositoryRef
from .cancellation import CancellationToken
from .models import WalkEntry

logger = logging.getLogger(__name__)

RUNS_PER_PAGE = 50
JOBS_PER_PAGE = 50
MAX_RUN_PAGES = 5


class HierarchyWalker:
    """Streams the current run → job → step hierarchy of one repository.

    Runs are read newest first, at most ``max_run_pages`` pages per walk so a
    long history does not make each cycle more expensive. Jobs of a run are
    read to the last page; steps come embedded in each job.
    """

    def __init__(
        self,
        client: GitHubClient,
        repository: RepositoryRef,
        runs_per_page: int = RUNS_PER_PAGE,
        jobs_per_page: int = JOBS_PER_PAGE,
        max_run_pages: int = MAX_RUN_PAGES,
    ):
        self.client = client
        self.repository = repository
        self.runs_per_page = runs_per_page
        self.jobs_per_page = jobs_per_page
        self.max_run_pages = max_run_pages

    async def walk(
        self, cancellation: CancellationToken | None = None
    ) -> AsyncIterator[WalkEntry]:
        """Yield every run, job and step in walk order.

        Each run is followed by its jobs, and each job by its steps. When
        ``cancellation`` is set the walk ends at the next entity or page
        boundary without fetching anything further.
        """

        def should_stop() -> bool:
            return cancellation is not None and cancellation.cancelled

        owner, name = self.repository.owner, self.repository.name
        runs = self.client.paginate_workflow_runs(
            owner,
            name,
            per_page=self.runs_per_page,
            max_pages=self.max_run_pages,
            should_stop=should_stop,
        )

        async for run in runs:
            if should_stop():
                logger.debug("Walk cancelled")
                return
            yield WalkEntry(run)

            jobs = self.client.paginate_jobs(
                owner,
                name,
                run.id,
                per_page=self.jobs_per_page,
                should_stop=should_stop,
            )
            async for job in jobs:
                if should_stop():
                    logger.debug("Walk cancelled")
                    return
                yield WalkEntry(run, job)

                for step in job.steps:
                    if should_stop():
                        logger.debug("Walk cancelled")
                        return
                    yield WalkEntry(run, job, step)

        logger.debug(f"Walked {runs.pages_fetched} run page(s) of {self.repository}")
