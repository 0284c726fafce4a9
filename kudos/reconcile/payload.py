"""Typed reconciliation payload.

The payload arrives as camelCase JSON::

    {
      "secret": "...",
      "projectName": "Kudos",
      "projectSlug": "kudos",
      "reposToAdd": [{"label": "web", "url": "https://github.com/octo/web"}],
      "reposToRemove": [{"url": "https://github.com/octo/legacy"}],
      "attributes": {"purposes": [], "stackLevels": [], "technologies": [],
                     "types": []}
    }

``attributes`` may be omitted or ``null``. Removal entries are matched on
``url`` alone, so their ``label`` is optional; additions require one.
"""

from __future__ import annotations

import msgspec

from kudos.errors import MalformedPayloadError


class RepositoryEntry(msgspec.Struct, kw_only=True, frozen=True):
    """Repository reference carried by the payload.

    Attributes
    ----------
    url : str
        Repository URL, e.g. ``https://github.com/octo/reef``.
    label : str, optional
        Display label stored as the repository slug on addition.

    """

    url: str
    label: str | None = None


class ProjectAttributes(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Attribute lists that replace the project's current values."""

    purposes: list[str]
    stack_levels: list[str]
    technologies: list[str]
    types: list[str]


class Payload(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """One reconciliation request for a single project."""

    secret: str
    project_name: str
    project_slug: str
    repos_to_add: list[RepositoryEntry]
    repos_to_remove: list[RepositoryEntry]
    attributes: ProjectAttributes | None = None


_PAYLOAD_DECODER = msgspec.json.Decoder(Payload)


def _require_add_labels(payload: Payload) -> None:
    for index, entry in enumerate(payload.repos_to_add):
        if entry.label is None:
            msg = f"`label` is required - at `$.reposToAdd[{index}]`"
            raise MalformedPayloadError(msg)


def decode_payload(body: bytes | str) -> Payload:
    """Decode and validate a JSON request body.

    Raises
    ------
    MalformedPayloadError
        If the body is empty, is not JSON, or does not match the schema.

    """
    if not body or not body.strip():
        raise MalformedPayloadError.not_text()
    try:
        payload = _PAYLOAD_DECODER.decode(body)
    except (msgspec.ValidationError, msgspec.DecodeError) as exc:
        raise MalformedPayloadError(str(exc)) from exc
    _require_add_labels(payload)
    return payload


__all__ = ["Payload", "ProjectAttributes", "RepositoryEntry", "decode_payload"]
