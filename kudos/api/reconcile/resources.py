"""Reconciliation webhook resource.

``POST /reconcile`` (also mounted at ``/``) accepts a JSON reconciliation
payload and answers ``Total issues imported: <N>`` as plain text.

Usage
-----
Register the resource on the Falcon app::

    resource = ReconcileResource(reconcile_service)
    app.add_route("/reconcile", resource)

"""

from __future__ import annotations

import typing as typ

import falcon

from kudos.errors import MalformedPayloadError
from kudos.reconcile.payload import decode_payload

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from kudos.reconcile.service import ReconcileService

__all__ = ["ReconcileResource", "format_import_summary"]


def format_import_summary(imported_count: int) -> str:
    """Return the plain-text success body."""
    return f"Total issues imported: {imported_count}"


class ReconcileResource:
    """Resource applying reconciliation payloads.

    Request bodies must be UTF-8 JSON text; other bodies are rejected before
    the payload secret is checked.
    """

    def __init__(self, reconcile_service: ReconcileService) -> None:
        """Configure the resource with the reconciliation service."""
        self._reconcile_service = reconcile_service

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST request carrying a reconciliation payload.

        Parameters
        ----------
        req
            Falcon request whose body is the JSON payload.
        resp
            Falcon response receiving the plain-text summary.

        """
        raw = await req.stream.read()
        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError.not_text() from exc

        payload = decode_payload(body)
        result = await self._reconcile_service.reconcile(payload)

        resp.content_type = falcon.MEDIA_TEXT
        resp.text = format_import_summary(result.imported_count)
        resp.status = falcon.HTTP_200
