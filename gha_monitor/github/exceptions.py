"""GitHub API client exceptions.

Every failure of an Actions list request maps onto one of these. The monitor
abandons the current cycle on any of them; the attributes let it log which
endpoint failed and how.
"""


class GitHubError(Exception):
    """Base exception for GitHub API errors.

    Attributes:
        status_code: HTTP status, None when no response was received
        url: Request URL, None when the failure is not tied to a request
    """

    def __init__(
        self, message: str, status_code: int | None = None, url: str | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class GitHubAuthenticationError(GitHubError):
    """The token is missing or was rejected (HTTP 401 or 403).

    Unlike other API errors this does not go away on the next cycle.
    """

    def __init__(
        self,
        api_message: str,
        status_code: int | None = None,
        url: str | None = None,
    ):
        if status_code is None:
            message = api_message
        else:
            message = (
                f"GitHub API authentication failed (HTTP {status_code}): "
                f"{api_message}"
            )
        super().__init__(message, status_code, url)
        self.api_message = api_message

    @property
    def forbidden(self) -> bool:
        """True for 403: the token is valid but lacks access."""
        return self.status_code == 403


class GitHubNotFoundError(GitHubError):
    """The repository or run does not exist or is invisible to the token."""

    def __init__(self, url: str, api_message: str = "Not Found"):
        super().__init__(f"{api_message}: {url}", 404, url)
        self.api_message = api_message


class GitHubServerError(GitHubError):
    """GitHub answered with a 5xx status."""

    def __init__(self, status_code: int, url: str, api_message: str):
        super().__init__(
            f"GitHub API error (HTTP {status_code}) for {url}: {api_message}",
            status_code,
            url,
        )
        self.api_message = api_message


class GitHubConnectionError(GitHubError):
    """No response was received."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Connection error for {url}: {reason}", url=url)
        self.reason = reason


class GitHubTimeoutError(GitHubError):
    """The request did not finish within the client timeout."""

    def __init__(self, url: str, timeout: float):
        super().__init__(f"Request timeout after {timeout}s for {url}", url=url)
        self.timeout = timeout


class GitHubMalformedResponseError(GitHubError):
    """A response body could not be decoded into the expected shape.

    ``run_id`` is set when the body was the job listing of a run.
    """

    def __init__(
        self,
        url: str,
        reason: str,
        status_code: int | None = None,
        run_id: int | None = None,
    ):
        what = f"jobs of run {run_id}" if run_id is not None else "response"
        super().__init__(f"Malformed {what} from {url}: {reason}", status_code, url)
        self.reason = reason
        self.run_id = run_id
