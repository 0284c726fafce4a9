"""Data access for reconciliation runs.

:class:`ReconcileStore` wraps the single ``AsyncSession`` a reconciliation
run owns. In the default mode every mutating call commits before returning,
so work completed before a failure stays in place. In atomic mode nothing is
committed until :meth:`ReconcileStore.commit` runs, and closing the session
without it discards the whole run.
"""

from __future__ import annotations

import contextlib
import typing as typ

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from kudos.errors import ProjectIntegrityError, ProjectNotFoundError, StorageError

from .models import Project, Repository

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession

    from kudos.reconcile.payload import ProjectAttributes

    from .batch import IssueBatchInsert


@contextlib.contextmanager
def _storage_operation(operation: str) -> cabc.Iterator[None]:
    """Translate SQLAlchemy and connection failures into :class:`StorageError`.

    Drivers such as asyncpg raise refused or dropped connections as
    ``OSError``, which SQLAlchemy does not wrap.
    """
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        raise StorageError(operation, exc) from exc


class ReconcileStore:
    """Project, repository and issue statements used by reconciliation."""

    def __init__(self, session: AsyncSession, *, atomic: bool = False) -> None:
        """Bind the store to a session and choose the commit mode."""
        self._session = session
        self._atomic = atomic

    async def _checkpoint(self) -> None:
        if not self._atomic:
            await self._session.commit()

    async def commit(self) -> None:
        """Commit outstanding work (the whole run, in atomic mode)."""
        with _storage_operation("commit"):
            await self._session.commit()

    async def resolve_project_id(self, name: str, slug: str) -> int:
        """Return the id of the single project matching ``name`` and ``slug``.

        Raises
        ------
        ProjectNotFoundError
            If no project matches.
        ProjectIntegrityError
            If more than one project matches.

        """
        with _storage_operation("resolve_project"):
            result = await self._session.scalars(
                select(Project.id).where(Project.name == name, Project.slug == slug)
            )
            project_ids = list(result)

        if not project_ids:
            raise ProjectNotFoundError(name, slug)
        if len(project_ids) > 1:
            raise ProjectIntegrityError(name, slug, len(project_ids))
        return project_ids[0]

    async def update_attributes(
        self, project_id: int, attributes: ProjectAttributes
    ) -> None:
        """Overwrite all four attribute lists of a project in one statement."""
        with _storage_operation("update_attributes"):
            await self._session.execute(
                update(Project)
                .where(Project.id == project_id)
                .values(
                    purposes=list(attributes.purposes),
                    stack_levels=list(attributes.stack_levels),
                    technologies=list(attributes.technologies),
                    types=list(attributes.types),
                )
                .execution_options(synchronize_session=False)
            )
            await self._checkpoint()

    async def delete_repository_by_url(self, url: str) -> int:
        """Delete repositories tracked at ``url`` and return how many matched.

        Their issues are removed by the ``ON DELETE CASCADE`` foreign key.
        Matching nothing is not an error.
        """
        with _storage_operation("delete_repository"):
            result = await self._session.execute(
                delete(Repository)
                .where(Repository.url == url)
                .execution_options(synchronize_session=False)
            )
            await self._checkpoint()
        return result.rowcount or 0

    async def insert_repository(self, label: str, url: str, project_id: int) -> int:
        """Insert a tracked repository and return its generated id."""
        with _storage_operation("insert_repository"):
            repository = Repository(slug=label, url=url, project_id=project_id)
            self._session.add(repository)
            await self._session.flush()
            repository_id = repository.id
            await self._checkpoint()
        return repository_id

    async def insert_issues(self, batch: IssueBatchInsert) -> int:
        """Execute a batch issue insert and return the affected row count.

        Drivers that cannot report a row count return ``-1``; the batch size
        is used instead.
        """
        with _storage_operation("insert_issues"):
            result = await self._session.execute(batch.statement())
            await self._checkpoint()
        if result.rowcount < 0:
            return batch.row_count
        return result.rowcount


__all__ = ["ReconcileStore"]
