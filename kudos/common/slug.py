"""Repository URL and slug utilities.

Tracked repositories arrive as opaque URLs such as
``https://github.com/owner/name``. The GitHub API addresses them by
``owner`` and ``name``, so these helpers recover that pair syntactically.
They are not URL validators: a malformed URL that still has two path
segments is accepted here and surfaces later as an API error.
"""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryLocation:
    """Owner and name pair used to address a repository on GitHub."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        """Return the ``owner/name`` slug."""
        return repo_slug(self.owner, self.name)


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug from owner and name.

    Examples
    --------
    >>> repo_slug("octo", "reef")
    'octo/reef'

    """
    return f"{owner}/{name}"


def locate_repository(url: str) -> RepositoryLocation | None:
    """Extract the owner and name from a repository URL.

    One trailing slash is trimmed before the URL is split on ``/``. The last
    two non-empty segments become ``owner`` and ``name``.

    Parameters
    ----------
    url:
        Repository URL, for example ``https://github.com/octo/reef``.

    Returns
    -------
    RepositoryLocation | None
        The located repository, or ``None`` when fewer than two segments
        are present.

    Examples
    --------
    >>> locate_repository("https://github.com/octo/reef/")
    RepositoryLocation(owner='octo', name='reef')
    >>> locate_repository("reef") is None
    True

    """
    trimmed = url.removesuffix("/")
    segments = [segment for segment in trimmed.split("/") if segment]
    if len(segments) < 2:  # noqa: PLR2004 - owner and name
        return None
    owner, name = segments[-2:]
    return RepositoryLocation(owner=owner, name=name)
