"""GitHub REST client and issue normalization."""

from __future__ import annotations

from .client import (
    ISSUES_PAGE_SIZE,
    GitHubIssuesClient,
    GitHubIssueSource,
    GitHubRestConfig,
)
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import NormalizedIssue, RemoteIssue, RemoteLabel, RemoteUser
from .normalize import filter_issues, normalize_issue

__all__ = [
    "ISSUES_PAGE_SIZE",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubIssueSource",
    "GitHubIssuesClient",
    "GitHubResponseShapeError",
    "GitHubRestConfig",
    "NormalizedIssue",
    "RemoteIssue",
    "RemoteLabel",
    "RemoteUser",
    "filter_issues",
    "normalize_issue",
]
