"""Kudos runtime entrypoint for container deployments.

This module provides the ASGI application factory used by Granian. It
delegates to :func:`kudos.api.app.create_app` for application construction
while keeping the ``kudos.runtime:create_app`` entrypoint stable.

When ``KUDOS_DATABASE_URL`` is set, the runtime loads the full
:class:`~kudos.config.KudosConfig` (secret and GitHub token become required)
and mounts the reconciliation webhook. Otherwise it starts in health-only
mode.

Server settings are driven by environment variables:

- ``KUDOS_HOST``: Bind address (default ``0.0.0.0``)
- ``KUDOS_PORT``: Listen port (default ``8080``)
- ``KUDOS_LOG_LEVEL``: Log level (default ``INFO``)

Run the service directly with ``python -m kudos.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from kudos.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid KUDOS_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    Raises
    ------
    ConfigError
        If ``KUDOS_DATABASE_URL`` is set but other required settings are
        missing.

    """
    from kudos.api.app import create_app as _create_api_app

    if not os.environ.get("KUDOS_DATABASE_URL", "").strip():
        return _create_api_app()

    from sqlalchemy.ext.asyncio import async_sessionmaker

    from kudos.api.app import AppDependencies
    from kudos.config import KudosConfig
    from kudos.reconcile.factory import build_reconcile_service
    from kudos.storage.models import create_engine

    config = KudosConfig.from_env()
    engine = create_engine(config.database_url, pool_pre_ping=True)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    deps = AppDependencies(
        session_factory=session_factory,
        reconcile_service=build_reconcile_service(session_factory, config),
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the kudos runtime server using Granian."""
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("KUDOS_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("KUDOS_PORT", "8080"))
    log_level_str = os.environ.get("KUDOS_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid KUDOS_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting kudos runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "kudos.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
