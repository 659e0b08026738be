"""
Unit tests for GitHub API client.

Why: Ensure the client builds the Actions endpoint requests correctly,
     authenticates with the bearer token and maps failures onto the
     GitHubError hierarchy the monitor loop relies on.

What: Tests GitHubClient list methods, argument validation, error mapping
      and payload decoding.

How: Uses aioresponses to mock aiohttp responses without making real
     GitHub API calls.
"""

import asyncio
import re

import aiohttp
import pytest
from aioresponses import aioresponses

from gha_monitor.github.auth import TokenAuth
from gha_monitor.github.client import GitHubClient, GitHubClientConfig
from gha_monitor.github.exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubMalformedResponseError,
    GitHubNotFoundError,
    GitHubServerError,
    GitHubTimeoutError,
)
from tests.fixtures.actions import job_payload, run_payload, step_payload

RUNS_URL = re.compile(r"^https://api\.github\.com/repos/octo/hello/actions/runs\?.*$")
JOBS_URL = re.compile(
    r"^https://api\.github\.com/repos/octo/hello/actions/runs/1001/jobs\?.*$"
)


@pytest.fixture
def client_config() -> GitHubClientConfig:
    return GitHubClientConfig(base_url="https://api.github.com", timeout=5)


class TestGitHubClientConfig:
    """Test GitHubClientConfig data class."""

    def test_github_client_config_defaults(self) -> None:
        config = GitHubClientConfig()

        assert config.base_url == "https://api.github.com"
        assert config.timeout == 30
        assert config.user_agent.startswith("gha-monitor/")


class TestGitHubClient:
    """Test GitHubClient class."""

    def test_github_client_creation(self, client_config: GitHubClientConfig) -> None:
        auth = TokenAuth("secret")
        client = GitHubClient(auth=auth, config=client_config)

        assert client.auth is auth
        assert client.config is client_config
        assert client._session is None

    def test_url_joining_keeps_base_path(self) -> None:
        """
        Why: GitHub Enterprise serves the API under a path prefix which must
             survive URL joining.
        What: Tests _url with a base URL that has a path component.
        How: Builds a client for https://ghe.example.com/api/v3.
        """
        client = GitHubClient(
            TokenAuth("secret"),
            GitHubClientConfig(base_url="https://ghe.example.com/api/v3"),
        )

        assert (
            client._url("/repos/octo/hello/actions/runs")
            == "https://ghe.example.com/api/v3/repos/octo/hello/actions/runs"
        )

    @pytest.mark.asyncio
    async def test_context_manager(self, client_config: GitHubClientConfig) -> None:
        async with GitHubClient(TokenAuth("secret"), client_config) as client:
            assert client._session is not None
            assert not client._session.closed

        assert client._session is None

    @pytest.mark.asyncio
    async def test_list_workflow_runs(self, client_config: GitHubClientConfig) -> None:
        """
        Why: The walker depends on runs being decoded into typed models.
        What: Tests list_workflow_runs request parameters, auth header and
              decoding.
        How: Mocks one page with two runs and inspects the recorded request.
        """
        payload = {
            "total_count": 2,
            "workflow_runs": [run_payload(1001), run_payload(1002, status="queued")],
        }

        with aioresponses() as mocked:
            mocked.get(RUNS_URL, payload=payload)
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                runs = await client.list_workflow_runs("octo", "hello", 2, 25)

            assert [run.id for run in runs] == [1001, 1002]
            assert runs[1].status == "queued"

            (request_key, calls), = mocked.requests.items()
            assert request_key[0] == "GET"
            assert request_key[1].query["page"] == "2"
            assert request_key[1].query["per_page"] == "25"
            assert calls[0].kwargs["headers"]["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_list_jobs_for_run_with_steps(
        self, client_config: GitHubClientConfig
    ) -> None:
        payload = {
            "total_count": 1,
            "jobs": [job_payload(5001, steps=[step_payload(1), step_payload(2)])],
        }

        with aioresponses() as mocked:
            mocked.get(JOBS_URL, payload=payload)
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                jobs = await client.list_jobs_for_run("octo", "hello", 1001)

        assert len(jobs) == 1
        assert [step.number for step in jobs[0].steps] == [1, 2]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page": 0},
            {"per_page": 0},
            {"per_page": 101},
        ],
    )
    async def test_page_argument_validation(
        self, client_config: GitHubClientConfig, kwargs: dict[str, int]
    ) -> None:
        client = GitHubClient(TokenAuth("secret"), client_config)

        with pytest.raises(ValueError):
            await client.list_workflow_runs("octo", "hello", **kwargs)

    @pytest.mark.asyncio
    async def test_run_id_validation(self, client_config: GitHubClientConfig) -> None:
        client = GitHubClient(TokenAuth("secret"), client_config)

        with pytest.raises(ValueError, match="run_id"):
            await client.list_jobs_for_run("octo", "hello", 0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (401, GitHubAuthenticationError),
            (403, GitHubAuthenticationError),
            (404, GitHubNotFoundError),
            (422, GitHubError),
            (500, GitHubServerError),
            (503, GitHubServerError),
        ],
    )
    async def test_error_status_mapping(
        self,
        client_config: GitHubClientConfig,
        status: int,
        expected: type[GitHubError],
    ) -> None:
        """
        Why: The monitor treats every GitHubError as a skipped cycle, but
             authentication failures must be distinguishable in logs.
        What: Tests the status code to exception mapping.
        How: Mocks error responses with a GitHub style message body.
        """
        with aioresponses() as mocked:
            mocked.get(RUNS_URL, status=status, payload={"message": "nope"})
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(expected) as exc_info:
                    await client.list_workflow_runs("octo", "hello")

        assert exc_info.value.status_code == status
        assert "nope" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_with_plain_text_body(
        self, client_config: GitHubClientConfig
    ) -> None:
        with aioresponses() as mocked:
            mocked.get(RUNS_URL, status=502, body="Bad Gateway")
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubServerError, match="Bad Gateway"):
                    await client.list_workflow_runs("octo", "hello")

    @pytest.mark.asyncio
    async def test_invalid_json_is_malformed(
        self, client_config: GitHubClientConfig
    ) -> None:
        with aioresponses() as mocked:
            mocked.get(RUNS_URL, status=200, body="<html>not json</html>")
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubMalformedResponseError):
                    await client.list_workflow_runs("octo", "hello")

    @pytest.mark.asyncio
    async def test_payload_shape_errors_are_malformed(
        self, client_config: GitHubClientConfig
    ) -> None:
        """A run without an id cannot be tracked and fails the page."""
        with aioresponses() as mocked:
            mocked.get(RUNS_URL, payload={"workflow_runs": [{"name": "CI"}]})
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubMalformedResponseError):
                    await client.list_workflow_runs("octo", "hello")

    @pytest.mark.asyncio
    async def test_non_object_json_is_malformed(
        self, client_config: GitHubClientConfig
    ) -> None:
        with aioresponses() as mocked:
            mocked.get(RUNS_URL, payload=[1, 2, 3])
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubMalformedResponseError):
                    await client.list_workflow_runs("octo", "hello")

    @pytest.mark.asyncio
    async def test_connection_error(self, client_config: GitHubClientConfig) -> None:
        with aioresponses() as mocked:
            mocked.get(RUNS_URL, exception=aiohttp.ClientConnectionError("refused"))
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubConnectionError, match="refused"):
                    await client.list_workflow_runs("octo", "hello")

    @pytest.mark.asyncio
    async def test_timeout_error(self, client_config: GitHubClientConfig) -> None:
        with aioresponses() as mocked:
            mocked.get(RUNS_URL, exception=asyncio.TimeoutError())
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubTimeoutError):
                    await client.list_workflow_runs("octo", "hello")

    @pytest.mark.asyncio
    async def test_errors_carry_request_url(
        self, client_config: GitHubClientConfig
    ) -> None:
        """
        Why: A failed cycle is only diagnosable if the log names the endpoint.
        What: Tests that HTTP and transport errors record status and URL.
        How: Fails a jobs request with 403 and a runs request with a timeout.
        """
        with aioresponses() as mocked:
            mocked.get(JOBS_URL, status=403, payload={"message": "Resource denied"})
            mocked.get(RUNS_URL, exception=asyncio.TimeoutError())
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubAuthenticationError) as auth_info:
                    await client.list_jobs_for_run("octo", "hello", 1001)
                with pytest.raises(GitHubTimeoutError) as timeout_info:
                    await client.list_workflow_runs("octo", "hello")

        auth_error = auth_info.value
        assert auth_error.forbidden
        assert auth_error.api_message == "Resource denied"
        assert auth_error.url == (
            "https://api.github.com/repos/octo/hello/actions/runs/1001/jobs"
        )
        assert timeout_info.value.timeout == 5
        assert timeout_info.value.status_code is None
        assert timeout_info.value.url is not None
        assert timeout_info.value.url.endswith("/repos/octo/hello/actions/runs")

    @pytest.mark.asyncio
    async def test_malformed_jobs_payload_names_the_run(
        self, client_config: GitHubClientConfig
    ) -> None:
        with aioresponses() as mocked:
            mocked.get(JOBS_URL, payload={"jobs": [{"name": "build"}]})
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                with pytest.raises(GitHubMalformedResponseError) as exc_info:
                    await client.list_jobs_for_run("octo", "hello", 1001)

        assert exc_info.value.run_id == 1001
        assert "jobs of run 1001" in str(exc_info.value)
        assert exc_info.value.url is not None
        assert exc_info.value.url.endswith("/actions/runs/1001/jobs")

    @pytest.mark.asyncio
    async def test_null_numbers_do_not_fail_the_page(
        self, client_config: GitHubClientConfig
    ) -> None:
        """An explicit null run or step number must not abort the cycle."""
        step = {**step_payload(1), "number": None}
        jobs = {"jobs": [job_payload(5001, steps=[step])]}
        runs = {"workflow_runs": [run_payload(1001, run_number=None)]}

        with aioresponses() as mocked:
            mocked.get(RUNS_URL, payload=runs)
            mocked.get(JOBS_URL, payload=jobs)
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                [run] = await client.list_workflow_runs("octo", "hello")
                [job] = await client.list_jobs_for_run("octo", "hello", 1001)

        assert run.run_number == 0
        assert job.steps[0].number == 0

    @pytest.mark.asyncio
    async def test_paginate_workflow_runs_follows_pages(
        self, client_config: GitHubClientConfig
    ) -> None:
        """
        Why: Runs are walked by page number until a short page.
        What: Tests paginate_workflow_runs over a full and a short page.
        How: Mocks page 1 with two runs (per_page=2) and page 2 with one.
        """
        with aioresponses() as mocked:
            mocked.get(
                RUNS_URL,
                payload={"workflow_runs": [run_payload(1001), run_payload(1002)]},
            )
            mocked.get(RUNS_URL, payload={"workflow_runs": [run_payload(1003)]})
            async with GitHubClient(TokenAuth("secret"), client_config) as client:
                paginator = client.paginate_workflow_runs("octo", "hello", per_page=2)
                runs = [run async for run in paginator]

        assert [run.id for run in runs] == [1001, 1002, 1003]
        assert paginator.pages_fetched == 2


class TestTokenAuth:
    """Test bearer token authentication."""

    @pytest.mark.asyncio
    async def test_header(self) -> None:
        token = await TokenAuth("  secret  ").get_token()

        assert token.to_header() == {"Authorization": "Bearer secret"}
        assert "secret" not in repr(token)

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_token_rejected(self, value: str) -> None:
        with pytest.raises(GitHubAuthenticationError):
            TokenAuth(value)
