"""Persistence models for projects, tracked repositories and issues.

Models keep to portable SQLAlchemy types so the same code runs against SQLite
in tests and PostgreSQL in production. Issue removal relies on the
``ON DELETE CASCADE`` foreign key from ``issues`` to ``repositories``;
:func:`create_engine` turns on SQLite's foreign key enforcement so the
cascade behaves the same on both backends.
"""

from __future__ import annotations

import datetime as dt
import typing as typ

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.ext.asyncio import AsyncEngine


class Base(DeclarativeBase):
    """Base declarative class for kudos persistence."""


class UTCDateTime(TypeDecorator[dt.datetime]):
    """DateTime wrapper that round-trips UTC tzinfo even on SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Force bound datetime values to UTC with tzinfo."""
        if value is None:
            return None
        if value.tzinfo is None:
            msg = "issue timestamps must be timezone aware"
            raise ValueError(msg)
        return value.astimezone(dt.UTC)

    def process_result_value(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Ensure result datetimes are UTC and timezone aware."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


class Project(Base):
    """Project whose repositories are tracked.

    Projects are managed elsewhere; reconciliation only reads them and
    overwrites their attribute lists. ``(name, slug)`` is expected to be
    unique but is deliberately not constrained here, so ambiguous rows can
    be detected and reported.
    """

    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_name_slug", "name", "slug"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255))
    purposes: Mapped[list[str]] = mapped_column(JSON, default=list)
    stack_levels: Mapped[list[str]] = mapped_column(JSON, default=list)
    technologies: Mapped[list[str]] = mapped_column(JSON, default=list)
    types: Mapped[list[str]] = mapped_column(JSON, default=list)

    repositories: Mapped[list[Repository]] = relationship(
        back_populates="project", passive_deletes=True
    )


class Repository(Base):
    """Source repository tracked for a project."""

    __tablename__ = "repositories"
    __table_args__ = (Index("ix_repositories_url", "url"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(255))
    url: Mapped[str | None] = mapped_column(Text(), default=None)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )

    project: Mapped[Project] = relationship(back_populates="repositories")
    issues: Mapped[list[Issue]] = relationship(
        back_populates="repository", passive_deletes=True
    )


class Issue(Base):
    """Open issue imported from a tracked repository."""

    __tablename__ = "issues"
    __table_args__ = (
        UniqueConstraint("repository_id", "number", name="uq_issues_repo_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    number: Mapped[int]
    title: Mapped[str] = mapped_column(Text())
    labels: Mapped[list[str]] = mapped_column(JSON, default=list)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False
    )
    issue_created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime())

    repository: Mapped[Repository] = relationship(back_populates="issues")


def _enable_sqlite_foreign_keys(
    dbapi_connection: typ.Any,  # noqa: ANN401 - DBAPI connections are untyped
    _connection_record: object,
) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str, **kwargs: typ.Any) -> AsyncEngine:  # noqa: ANN401
    """Create an async engine, enforcing foreign keys on SQLite."""
    engine = create_async_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


async def init_storage(engine: AsyncEngine) -> None:
    """Create all tables registered with Base if they are absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "Issue",
    "Project",
    "Repository",
    "UTCDateTime",
    "create_engine",
    "init_storage",
]
