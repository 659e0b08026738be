"""GitHub authentication handlers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .exceptions import GitHubAuthenticationError


@dataclass
class AuthToken:
    """Authentication token with its header scheme."""

    token: str
    token_type: str = "Bearer"

    def to_header(self) -> dict[str, str]:
        """Convert to authorization header."""
        return {"Authorization": f"{self.token_type} {self.token}"}

    def __repr__(self) -> str:
        return f"AuthToken(token='***', token_type={self.token_type!r})"


class AuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @abstractmethod
    async def get_token(self) -> AuthToken:
        """Get authentication token."""
        pass


class TokenAuth(AuthProvider):
    """Static bearer token authentication (personal access or workflow token)."""

    def __init__(self, token: str):
        """Initialize token authentication.

        Args:
            token: Authentication token, surrounding whitespace is dropped

        Raises:
            GitHubAuthenticationError: If the token is empty or blank
        """
        if not token or not token.strip():
            raise GitHubAuthenticationError("GitHub token is required")
        self._token = AuthToken(token=token.strip())

    async def get_token(self) -> AuthToken:
        """Get authentication token."""
        return self._token
