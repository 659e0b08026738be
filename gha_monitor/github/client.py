"""GitHub API client for workflow runs and jobs."""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urljoin

import aiohttp
from pydantic import ValidationError

from ..models import Job, JobsPage, WorkflowRun, WorkflowRunsPage
from .auth import AuthProvider
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubMalformedResponseError,
    GitHubNotFoundError,
    GitHubServerError,
    GitHubTimeoutError,
)
from .pagination import GITHUB_MAX_PER_PAGE, PageNumberPaginator

logger = logging.getLogger(__name__)


@dataclass
class GitHubClientConfig:
    """Configuration for GitHub client."""

    base_url: str = "https://api.github.com"
    timeout: int = 30
    user_agent: str = "gha-monitor/0.1"


class GitHubClient:
    """Async GitHub API client for the Actions endpoints.

    Requests are not retried: a failed request raises a ``GitHubError``
    subclass and the caller decides what to do with the current cycle.
    """

    def __init__(
        self,
        auth: AuthProvider,
        config: GitHubClientConfig | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            auth: Authentication provider
            config: Client configuration
        """
        self.auth = auth
        self.config = config or GitHubClientConfig()

        # HTTP session will be initialized on first use
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure HTTP session is initialized."""
        if self._session is None or self._session.closed:
            async with self._session_lock:
                if self._session is None or self._session.closed:
                    timeout = aiohttp.ClientTimeout(total=self.config.timeout)
                    self._session = aiohttp.ClientSession(
                        timeout=timeout,
                        headers={
                            "User-Agent": self.config.user_agent,
                            "Accept": "application/vnd.github+json",
                        },
                    )

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _generate_correlation_id(self) -> str:
        """Generate correlation ID for request tracking."""
        return str(uuid.uuid4())[:8]

    def _url(self, path: str) -> str:
        return urljoin(self.config.base_url.rstrip("/") + "/", path.lstrip("/"))

    async def _request_json(
        self, method: str, url: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Make an HTTP request and decode the JSON object it returns.

        Args:
            method: HTTP method
            url: Request URL
            params: Query parameters

        Returns:
            Decoded JSON object

        Raises:
            GitHubError: Various GitHub API errors
        """
        correlation_id = self._generate_correlation_id()

        auth_token = await self.auth.get_token()
        request_headers = auth_token.to_header()

        await self._ensure_session()
        if not self._session:
            raise GitHubConnectionError(url, "failed to initialize HTTP session")

        try:
            start_time = time.time()
            logger.debug(
                f"GitHub API request [{correlation_id}] {method} {url} {params or ''}"
            )

            async with self._session.request(
                method, url, params=params, headers=request_headers
            ) as response:
                request_time = time.time() - start_time
                logger.debug(
                    f"GitHub API response [{correlation_id}] "
                    f"{response.status} in {request_time:.2f}s"
                )

                if response.status >= 400:
                    await self._handle_error_response(response, url, correlation_id)

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise GitHubMalformedResponseError(
                        url, f"invalid JSON: {e}", response.status
                    ) from e

        except TimeoutError as e:
            raise GitHubTimeoutError(url, self.config.timeout) from e
        except aiohttp.ClientError as e:
            raise GitHubConnectionError(url, str(e)) from e

        if not isinstance(data, dict):
            raise GitHubMalformedResponseError(
                url, f"expected a JSON object, got {type(data).__name__}"
            )
        return data

    async def _handle_error_response(
        self, response: aiohttp.ClientResponse, url: str, correlation_id: str
    ) -> None:
        """Handle error responses from GitHub API.

        Args:
            response: HTTP response
            url: Request URL
            correlation_id: Request correlation ID

        Raises:
            GitHubError: Appropriate error based on status code
        """
        try:
            error_data = await response.json(content_type=None)
        except ValueError:
            error_data = None
        if isinstance(error_data, dict) and error_data.get("message"):
            error_message = str(error_data["message"])
        else:
            error_message = (await response.text()).strip() or f"HTTP {response.status}"

        logger.debug(
            f"GitHub API error [{correlation_id}] {response.status}: {error_message}"
        )

        if response.status in (401, 403):
            raise GitHubAuthenticationError(error_message, response.status, url)
        elif response.status == 404:
            raise GitHubNotFoundError(url, error_message)
        elif 500 <= response.status < 600:
            raise GitHubServerError(response.status, url, error_message)
        else:
            raise GitHubError(
                f"GitHub API error (HTTP {response.status}) for {url}: "
                f"{error_message}",
                response.status,
                url,
            )

    async def get(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Make GET request to GitHub API.

        Args:
            path: API path (e.g., '/repos/owner/repo/actions/runs')
            params: Query parameters

        Returns:
            JSON response data
        """
        return await self._request_json("GET", self._url(path), params)

    @staticmethod
    def _check_page_args(page: int, per_page: int) -> None:
        if page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= per_page <= GITHUB_MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {GITHUB_MAX_PER_PAGE}")

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def list_workflow_runs(
        self, owner: str, repo: str, page: int = 1, per_page: int = 50
    ) -> list[WorkflowRun]:
        """List one page of workflow runs, newest first.

        Args:
            owner: Repository owner
            repo: Repository name
            page: Page number, starting from 1
            per_page: Page size (max 100)

        Returns:
            Workflow runs on that page
        """
        self._check_page_args(page, per_page)
        path = f"{self._repo_path(owner, repo)}/actions/runs"
        data = await self.get(path, params={"page": page, "per_page": per_page})
        try:
            return WorkflowRunsPage.model_validate(data).workflow_runs
        except ValidationError as e:
            raise GitHubMalformedResponseError(self._url(path), str(e)) from e

    async def list_jobs_for_run(
        self, owner: str, repo: str, run_id: int, page: int = 1, per_page: int = 50
    ) -> list[Job]:
        """List one page of jobs (with embedded steps) for a workflow run.

        Args:
            owner: Repository owner
            repo: Repository name
            run_id: Workflow run identifier
            page: Page number, starting from 1
            per_page: Page size (max 100)

        Returns:
            Jobs on that page
        """
        if run_id <= 0:
            raise ValueError("run_id must be > 0")
        self._check_page_args(page, per_page)
        path = f"{self._repo_path(owner, repo)}/actions/runs/{run_id}/jobs"
        data = await self.get(path, params={"page": page, "per_page": per_page})
        try:
            return JobsPage.model_validate(data).jobs
        except ValidationError as e:
            raise GitHubMalformedResponseError(
                self._url(path), str(e), run_id=run_id
            ) from e

    def paginate_workflow_runs(
        self,
        owner: str,
        repo: str,
        per_page: int = 50,
        max_pages: int | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> PageNumberPaginator[WorkflowRun]:
        """Create paginator over the repository's workflow runs."""

        async def fetch(page: int, size: int) -> list[WorkflowRun]:
            return await self.list_workflow_runs(owner, repo, page, size)

        return PageNumberPaginator(
            fetch, per_page=per_page, max_pages=max_pages, should_stop=should_stop
        )

    def paginate_jobs(
        self,
        owner: str,
        repo: str,
        run_id: int,
        per_page: int = 50,
        should_stop: Callable[[], bool] | None = None,
    ) -> PageNumberPaginator[Job]:
        """Create paginator over all jobs of a workflow run."""

        async def fetch(page: int, size: int) -> list[Job]:
            return await self.list_jobs_for_run(owner, repo, run_id, page, size)

        return PageNumberPaginator(fetch, per_page=per_page, should_stop=should_stop)
