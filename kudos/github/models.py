"""Typed models for GitHub REST issue listings.

``RemoteIssue`` mirrors the subset of the REST ``issues`` payload the
importer reads; unknown fields are ignored on decode. ``NormalizedIssue`` is
the importer's own record shape, produced by
:func:`kudos.github.normalize.normalize_issue`.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import typing as typ

import msgspec

# GitHub timestamps always carry a zone designator; naive values are rejected.
AwareDatetime = typ.Annotated[dt.datetime, msgspec.Meta(tz=True)]


class RemoteLabel(msgspec.Struct, kw_only=True):
    """Label attached to an issue."""

    name: str


class RemoteUser(msgspec.Struct, kw_only=True):
    """Account that opened an issue."""

    login: str


class RemoteIssue(msgspec.Struct, kw_only=True):
    """Issue or pull request entry from ``GET /repos/{owner}/{name}/issues``.

    Attributes
    ----------
    pull_request : dict, optional
        Present only when the entry is a pull request. The REST issues
        endpoint lists both kinds.

    """

    number: int
    title: str
    html_url: str
    created_at: AwareDatetime
    updated_at: AwareDatetime
    user: RemoteUser | None = None
    labels: list[RemoteLabel] = msgspec.field(default_factory=list)
    pull_request: dict[str, typ.Any] | None = None

    @property
    def is_pull_request(self) -> bool:
        """Return whether the entry carries a pull request association."""
        return self.pull_request is not None


@dataclasses.dataclass(frozen=True, slots=True)
class NormalizedIssue:
    """Issue ready for import.

    Only ``number``, ``title``, ``labels`` and ``issue_created_at`` are
    persisted; the remaining fields are kept for callers that log or display
    them.
    """

    number: int
    title: str
    html_url: str
    issue_created_at: dt.datetime
    issue_updated_at: dt.datetime
    user: str | None
    labels: tuple[str, ...]


__all__ = ["NormalizedIssue", "RemoteIssue", "RemoteLabel", "RemoteUser"]
