"""Falcon error handling for reconciliation failures.

Every :class:`~kudos.errors.KudosError` is rendered as a JSON body with
``title`` and ``description``; the HTTP status depends on the error kind.

Usage
-----
Register the handler on the Falcon app::

    from kudos.api.errors import handle_kudos_error
    from kudos.errors import KudosError

    app.add_error_handler(KudosError, handle_kudos_error)

"""

from __future__ import annotations

import typing as typ

import falcon

from kudos.errors import (
    AuthError,
    KudosError,
    MalformedPayloadError,
    NotFoundError,
    ParseError,
    ProjectIntegrityError,
    StorageError,
    UpstreamError,
)

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["error_status", "handle_kudos_error"]

# Ordered most specific first; the first isinstance match wins.
_ERROR_STATUS: tuple[tuple[type[KudosError], str, str], ...] = (
    (MalformedPayloadError, falcon.HTTP_400, "Malformed payload"),
    (AuthError, falcon.HTTP_401, "Unauthorized"),
    (NotFoundError, falcon.HTTP_404, "Not found"),
    (ProjectIntegrityError, falcon.HTTP_409, "Ambiguous project"),
    (ParseError, falcon.HTTP_422, "Unprocessable repository"),
    (UpstreamError, falcon.HTTP_502, "Upstream API failure"),
    (StorageError, falcon.HTTP_503, "Storage failure"),
)


def error_status(ex: KudosError) -> tuple[str, str]:
    """Return the HTTP status line and title for ``ex``."""
    for error_type, status, title in _ERROR_STATUS:
        if isinstance(ex, error_type):
            return status, title
    return falcon.HTTP_500, "Reconciliation failed"


def _describe(ex: KudosError) -> str:
    if isinstance(ex, StorageError):
        # Driver messages can carry SQL and connection details.
        return f"Storage operation {ex.operation!r} failed"
    return str(ex)


async def handle_kudos_error(
    _req: Request,
    resp: Response,
    ex: KudosError,
    _params: dict[str, typ.Any],
) -> None:
    """Map a ``KudosError`` to a JSON error response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The reconciliation failure.
    _params
        URI template parameters (unused).

    """
    status, title = error_status(ex)
    resp.status = status
    resp.media = {"title": title, "description": _describe(ex)}
