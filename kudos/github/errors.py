"""GitHub API errors."""

from __future__ import annotations

from kudos.errors import UpstreamError


class GitHubAPIError(UpstreamError):
    """Raised when GitHub returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, slug: str) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(
            f"GitHub REST HTTP {status_code} listing issues for {slug}",
            status_code=status_code,
        )

    @classmethod
    def transport_error(cls, slug: str, cause: BaseException) -> GitHubAPIError:
        """Return an error for connection and timeout failures."""
        return cls(f"GitHub REST request for {slug} failed: {cause}")


class GitHubResponseShapeError(UpstreamError):
    """Raised when GitHub responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing or mistyped response field."""
        return cls(f"GitHub REST response missing expected field: {field}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
