"""Normalization of GitHub issue listings into importable records."""

from __future__ import annotations

import typing as typ

from kudos.common.time import ensure_utc

from .models import NormalizedIssue, RemoteIssue

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def normalize_issue(issue: RemoteIssue) -> NormalizedIssue | None:
    """Map a remote issue to an importable record.

    Returns ``None`` for pull requests, which the REST issues endpoint lists
    alongside issues but which are never imported.
    """
    if issue.is_pull_request:
        return None
    return NormalizedIssue(
        number=issue.number,
        title=issue.title,
        html_url=issue.html_url,
        issue_created_at=ensure_utc(issue.created_at, field="created_at"),
        issue_updated_at=ensure_utc(issue.updated_at, field="updated_at"),
        user=issue.user.login if issue.user is not None else None,
        labels=tuple(label.name for label in issue.labels),
    )


def filter_issues(issues: cabc.Iterable[RemoteIssue]) -> list[NormalizedIssue]:
    """Normalize ``issues``, dropping pull requests and keeping order."""
    normalized = (normalize_issue(issue) for issue in issues)
    return [issue for issue in normalized if issue is not None]


__all__ = ["filter_issues", "normalize_issue"]
