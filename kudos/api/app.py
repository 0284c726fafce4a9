"""Application factory for the kudos Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when a reconciliation service is
available, the reconciliation webhook.

Usage
-----
Create a health-only app (no database)::

    app = create_app()

Create a full app::

    from kudos.api.app import AppDependencies, create_app

    deps = AppDependencies(
        session_factory=session_factory,
        reconcile_service=reconcile_service,
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from kudos.api.errors import handle_kudos_error
from kudos.api.health.resources import HealthResource, ReadyResource
from kudos.errors import KudosError

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from kudos.reconcile.service import ReconcileService

__all__ = ["RECONCILE_ROUTES", "AppDependencies", "create_app"]

# ``/`` keeps webhook senders configured against the bare function URL working.
RECONCILE_ROUTES: tuple[str, ...] = ("/reconcile", "/")


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    session_factory
        Async session factory, used by the readiness probe.
    reconcile_service
        Service applying reconciliation payloads. The webhook routes are
        only registered when it is provided.

    """

    session_factory: async_sessionmaker[AsyncSession] | None = None
    reconcile_service: ReconcileService | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only health
        endpoints are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    app = falcon.asgi.App()

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(deps.session_factory))

    if deps.reconcile_service is not None:
        from kudos.api.reconcile.resources import ReconcileResource

        resource = ReconcileResource(deps.reconcile_service)
        for route in RECONCILE_ROUTES:
            app.add_route(route, resource)

    app.add_error_handler(KudosError, handle_kudos_error)

    return app
