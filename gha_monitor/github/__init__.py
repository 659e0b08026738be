"""GitHub API client package."""

from .auth import AuthProvider, AuthToken, TokenAuth
from .client import GitHubClient, GitHubClientConfig
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubMalformedResponseError,
    GitHubNotFoundError,
    GitHubServerError,
    GitHubTimeoutError,
)
from .pagination import PageNumberPaginator

__all__ = [
    "AuthProvider",
    "AuthToken",
    "GitHubAuthenticationError",
    "GitHubClient",
    "GitHubClientConfig",
    "GitHubConnectionError",
    "GitHubError",
    "GitHubMalformedResponseError",
    "GitHubNotFoundError",
    "GitHubServerError",
    "GitHubTimeoutError",
    "PageNumberPaginator",
    "TokenAuth",
]
