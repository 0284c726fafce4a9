"""Unit-test fixtures for reconciliation services."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio

from kudos.config import KudosConfig
from kudos.reconcile import ReconcileService, ReconcileServiceDependencies
from tests.helpers.github_issues import FakeIssueSourceFactory
from tests.helpers.storage import create_project

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

TEST_SECRET = "s3cret"  # noqa: S105 - test-only shared secret


def make_config(*, atomic: bool = False) -> KudosConfig:
    """Return a configuration suitable for service tests."""
    return KudosConfig(
        secret=TEST_SECRET,
        database_url="sqlite+aiosqlite://",
        github_token="ghp_test",  # noqa: S106 - test-only token
        atomic=atomic,
    )


def make_service(
    session_factory: async_sessionmaker[AsyncSession],
    issue_source_factory: FakeIssueSourceFactory,
    *,
    atomic: bool = False,
) -> ReconcileService:
    """Build a service wired to the fake issue source."""
    return ReconcileService(
        ReconcileServiceDependencies(
            session_factory=session_factory,
            issue_source_factory=issue_source_factory,
        ),
        config=make_config(atomic=atomic),
    )


@pytest.fixture
def issue_source_factory() -> FakeIssueSourceFactory:
    """Return a fresh fake issue source factory."""
    return FakeIssueSourceFactory()


@pytest.fixture
def reconcile_service(
    session_factory: async_sessionmaker[AsyncSession],
    issue_source_factory: FakeIssueSourceFactory,
) -> ReconcileService:
    """Return a lenient-mode service backed by the test database."""
    return make_service(session_factory, issue_source_factory)


@pytest_asyncio.fixture
async def project_id(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Seed the ``Kudos``/``kudos`` project and return its id."""
    return await create_project(
        session_factory,
        name="Kudos",
        slug="kudos",
        purposes=["community"],
        stack_levels=["backend"],
        technologies=["python"],
        types=["library"],
    )
