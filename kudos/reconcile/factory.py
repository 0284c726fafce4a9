"""Factory for building a ReconcileService from process configuration.

Usage
-----
Build a service for the API layer or the CLI::

    from kudos.reconcile.factory import build_reconcile_service

    service = build_reconcile_service(session_factory, config)

"""

from __future__ import annotations

import typing as typ

from kudos.github.client import GitHubIssuesClient, GitHubRestConfig

from .service import ReconcileService, ReconcileServiceDependencies

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from kudos.config import KudosConfig

__all__ = ["build_reconcile_service"]


def build_reconcile_service(
    session_factory: async_sessionmaker[AsyncSession],
    config: KudosConfig,
) -> ReconcileService:
    """Build a ``ReconcileService`` backed by the GitHub REST API.

    Each run that adds repositories gets its own HTTP client, closed when the
    run ends.
    """
    github_config = GitHubRestConfig.from_config(config)

    def _issue_source() -> GitHubIssuesClient:
        return GitHubIssuesClient(github_config)

    dependencies = ReconcileServiceDependencies(
        session_factory=session_factory,
        issue_source_factory=_issue_source,
    )
    return ReconcileService(dependencies, config=config)
