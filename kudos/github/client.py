"""GitHub REST client used to import open issues."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import RemoteIssue

if typ.TYPE_CHECKING:
    import types

    from kudos.common.slug import RepositoryLocation
    from kudos.config import KudosConfig

# The importer reads a single page; larger backlogs are undercounted.
ISSUES_PAGE_SIZE = 100

_ISSUE_LIST_DECODER = msgspec.json.Decoder(list[RemoteIssue])


class GitHubIssueSource(typ.Protocol):
    """Interface for listing open issues of a repository."""

    async def list_open_issues(
        self, location: RepositoryLocation
    ) -> list[RemoteIssue]:
        """Return the first page of open issues and pull requests."""
        ...

    async def aclose(self) -> None:
        """Release any held HTTP resources."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str = dataclasses.field(repr=False)
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "kudos-importer/0.1"
    api_version: str = "2022-11-28"
    per_page: int = ISSUES_PAGE_SIZE

    @classmethod
    def from_config(cls, config: KudosConfig) -> GitHubRestConfig:
        """Build client configuration from the process configuration."""
        return cls(
            token=config.github_token,
            api_url=config.github_api_url,
            timeout_s=config.github_timeout_s,
        )


def _decode_issue_list(content: bytes) -> list[RemoteIssue]:
    try:
        return _ISSUE_LIST_DECODER.decode(content)
    except msgspec.ValidationError as exc:
        raise GitHubResponseShapeError.missing(str(exc)) from exc
    except msgspec.DecodeError as exc:
        raise GitHubResponseShapeError.missing("issues (body is not JSON)") from exc


class GitHubIssuesClient:
    """GitHub REST implementation of :class:`GitHubIssueSource`.

    Usable as an async context manager; an injected ``http_client`` is left
    open for its owner to close.
    """

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)
        self._headers = {
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": config.user_agent,
            "X-GitHub-Api-Version": config.api_version,
        }

    async def __aenter__(self) -> GitHubIssuesClient:
        """Return the client for use in ``async with`` blocks."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Close owned HTTP resources."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def list_open_issues(
        self, location: RepositoryLocation
    ) -> list[RemoteIssue]:
        """Fetch the first page of open issues for ``location``.

        Pull requests are included in the listing; callers filter them.

        Raises
        ------
        GitHubAPIError
            If the request fails or GitHub answers with a non-2xx status.
        GitHubResponseShapeError
            If the body is not a list of issue objects.

        """
        url = f"{self._config.api_url}/repos/{location.owner}/{location.name}/issues"
        try:
            response = await self._client.get(
                url,
                params={"state": "open", "per_page": self._config.per_page},
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(location.slug, exc) from exc

        if not response.is_success:
            raise GitHubAPIError.http_error(response.status_code, location.slug)
        return _decode_issue_list(response.content)


__all__ = [
    "ISSUES_PAGE_SIZE",
    "GitHubIssueSource",
    "GitHubIssuesClient",
    "GitHubRestConfig",
]
