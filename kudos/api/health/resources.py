"""Health probe resources for liveness and readiness checks.

``/health`` never touches the database. ``/ready`` runs ``SELECT 1`` when a
session factory is configured, so a deployment without database access is
reported as unavailable instead of accepting payloads it cannot apply.

Usage
-----
Register health endpoints on the Falcon app::

    from kudos.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(session_factory))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from kudos.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

__all__ = ["HealthResource", "ReadyResource"]

logger = get_logger(__name__)


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Responds ``{"status": "ready"}`` with HTTP 200, or
    ``{"status": "unavailable"}`` with HTTP 503 when the configured database
    cannot answer a trivial query.

    Parameters
    ----------
    session_factory
        Optional async session factory. Without one the probe always
        reports ready.

    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """Configure the probe with an optional session factory."""
        self._session_factory = session_factory

    async def _database_ready(self) -> bool:
        if self._session_factory is None:
            return True
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            log_warning(logger, "Readiness check failed: %s", exc)
            return False
        return True

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        if await self._database_ready():
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
            return
        resp.media = {"status": "unavailable"}
        resp.status = HTTPStatus.SERVICE_UNAVAILABLE
