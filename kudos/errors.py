"""Error hierarchy for reconciliation runs.

Every failure that ends a reconciliation is a :class:`KudosError`. The API
layer maps each subclass to an HTTP status; the CLI maps all of them to exit
code 1. None of them are retried.
"""

from __future__ import annotations


class KudosError(Exception):
    """Base class for reconciliation failures."""


class AuthError(KudosError):
    """Raised when the payload secret does not match the configured secret."""

    def __init__(self) -> None:
        """Initialise with a fixed message that never echoes the secret."""
        super().__init__("Payload secret does not match")


class MalformedPayloadError(KudosError):
    """Raised when a request body is not a valid reconciliation payload."""

    def __init__(self, reason: str) -> None:
        """Initialise with the decoding failure reason."""
        self.reason = reason
        super().__init__(f"Malformed payload: {reason}")

    @classmethod
    def not_text(cls) -> MalformedPayloadError:
        """Return an error for empty or non UTF-8 request bodies."""
        return cls("request body must be non-empty UTF-8 text")


class NotFoundError(KudosError):
    """Raised when a referenced entity does not exist."""


class ProjectNotFoundError(NotFoundError):
    """Raised when no project matches the payload's name and slug."""

    def __init__(self, name: str, slug: str) -> None:
        """Initialise with the missing project's natural key."""
        self.name = name
        self.slug = slug
        super().__init__(f"Project not found: name={name!r} slug={slug!r}")


class ProjectIntegrityError(KudosError):
    """Raised when a project name and slug resolve to more than one row."""

    def __init__(self, name: str, slug: str, matches: int) -> None:
        """Initialise with the ambiguous natural key and match count."""
        self.name = name
        self.slug = slug
        self.matches = matches
        super().__init__(
            f"Project name={name!r} slug={slug!r} matched {matches} rows"
        )


class ParseError(KudosError):
    """Raised when payload content cannot be interpreted."""


class RepositoryUrlError(ParseError):
    """Raised when an owner and name cannot be extracted from a URL."""

    def __init__(self, url: str) -> None:
        """Initialise with the offending URL."""
        self.url = url
        super().__init__(f"Couldn't extract repository owner/name from url: {url!r}")


class UpstreamError(KudosError):
    """Raised when the code-hosting API call fails."""


class StorageError(KudosError):
    """Raised when a database operation fails."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        """Initialise with the failed operation and underlying exception."""
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage operation {operation!r} failed: {cause}")


__all__ = [
    "AuthError",
    "KudosError",
    "MalformedPayloadError",
    "NotFoundError",
    "ParseError",
    "ProjectIntegrityError",
    "ProjectNotFoundError",
    "RepositoryUrlError",
    "StorageError",
    "UpstreamError",
]
