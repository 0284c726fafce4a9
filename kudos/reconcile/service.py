"""Reconciliation of a project's tracked repositories and imported issues.

A reconciliation applies one payload to the store in a fixed order:

1. the payload secret is checked before any storage access;
2. the project is resolved by name and slug;
3. attribute lists are overwritten when the payload carries them;
4. repositories listed for removal are deleted (their issues cascade);
5. repositories listed for addition are created and their open issues
   imported from GitHub.

Each stage either completes or raises a :class:`~kudos.errors.KudosError`,
which ends the run. Removals always precede additions, so a repository listed
in both is re-created with a fresh issue set.
"""

from __future__ import annotations

import contextlib
import dataclasses
import hmac
import typing as typ

from kudos.common.slug import locate_repository
from kudos.common.time import utcnow
from kudos.errors import AuthError, RepositoryUrlError
from kudos.github.client import ISSUES_PAGE_SIZE
from kudos.github.normalize import filter_issues
from kudos.storage.batch import build_issue_insert
from kudos.storage.store import ReconcileStore

from .models import ReconcileResult, RepositoryImport
from .observability import ReconcileEventLogger, ReconcileRunContext

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from kudos.config import KudosConfig
    from kudos.github.client import GitHubIssueSource

    from .payload import Payload, RepositoryEntry

type SessionFactory = async_sessionmaker[AsyncSession]
type IssueSourceFactory = cabc.Callable[[], GitHubIssueSource]


@dataclasses.dataclass(frozen=True, slots=True)
class ReconcileServiceDependencies:
    """Collaborators for :class:`ReconcileService`.

    Attributes
    ----------
    session_factory
        Async session factory; one session is opened per run.
    issue_source_factory
        Builds a GitHub issue source. It is called at most once per run, and
        only when the payload adds repositories.

    """

    session_factory: SessionFactory
    issue_source_factory: IssueSourceFactory


@dataclasses.dataclass(slots=True)
class _ReconcileRun:
    """State threaded through the stages of one run."""

    payload: Payload
    context: ReconcileRunContext
    store: ReconcileStore
    result: ReconcileResult = dataclasses.field(default_factory=ReconcileResult)

    @property
    def project_id(self) -> int:
        if self.result.project_id is None:
            msg = "project must be resolved before it is used"
            raise RuntimeError(msg)
        return self.result.project_id


type _Stage = cabc.Callable[[_ReconcileRun], cabc.Awaitable[None]]


class ReconcileService:
    """Apply reconciliation payloads to the relational store.

    Parameters
    ----------
    dependencies
        Session factory and GitHub issue source factory.
    config
        Process configuration; supplies the shared secret and commit mode.
    event_logger
        Structured event logger; a default instance is used when omitted.

    """

    def __init__(
        self,
        dependencies: ReconcileServiceDependencies,
        *,
        config: KudosConfig,
        event_logger: ReconcileEventLogger | None = None,
    ) -> None:
        """Configure the service with its collaborators."""
        self._session_factory = dependencies.session_factory
        self._issue_source_factory = dependencies.issue_source_factory
        self._secret = config.secret
        self._atomic = config.atomic
        self._event_logger = event_logger or ReconcileEventLogger()
        self._stages: tuple[_Stage, ...] = (
            self._resolve_project,
            self._update_attributes,
            self._remove_repositories,
            self._add_repositories,
        )

    async def reconcile(self, payload: Payload) -> ReconcileResult:
        """Apply ``payload`` and return a summary of the run.

        Raises
        ------
        KudosError
            The first failure of any stage; later stages do not run. Unless
            the service is configured as atomic, work committed before the
            failure is kept.

        """
        started_at = utcnow()
        context = ReconcileRunContext(
            project_name=payload.project_name,
            project_slug=payload.project_slug,
            started_at=started_at,
        )
        self._event_logger.log_run_started(
            context,
            repos_to_add=len(payload.repos_to_add),
            repos_to_remove=len(payload.repos_to_remove),
            has_attributes=payload.attributes is not None,
        )

        try:
            result = await self._reconcile_inner(payload, context)
        except BaseException as exc:
            self._event_logger.log_run_failed(context, exc, utcnow() - started_at)
            raise

        self._event_logger.log_run_completed(context, result, utcnow() - started_at)
        return result

    async def _reconcile_inner(
        self, payload: Payload, context: ReconcileRunContext
    ) -> ReconcileResult:
        self._check_secret(payload)
        async with self._session_factory() as session:
            run = _ReconcileRun(
                payload=payload,
                context=context,
                store=ReconcileStore(session, atomic=self._atomic),
            )
            for stage in self._stages:
                await stage(run)
            await run.store.commit()
        return run.result

    def _check_secret(self, payload: Payload) -> None:
        if not hmac.compare_digest(
            payload.secret.encode("utf-8"), self._secret.encode("utf-8")
        ):
            raise AuthError

    async def _resolve_project(self, run: _ReconcileRun) -> None:
        run.result.project_id = await run.store.resolve_project_id(
            run.payload.project_name, run.payload.project_slug
        )

    async def _update_attributes(self, run: _ReconcileRun) -> None:
        attributes = run.payload.attributes
        if attributes is None:
            return
        await run.store.update_attributes(run.project_id, attributes)
        run.result.attributes_updated = True

    async def _remove_repositories(self, run: _ReconcileRun) -> None:
        for entry in run.payload.repos_to_remove:
            deleted = await run.store.delete_repository_by_url(entry.url)
            run.result.repositories_removed += deleted
            self._event_logger.log_repository_removed(run.context, entry.url, deleted)

    async def _add_repositories(self, run: _ReconcileRun) -> None:
        if not run.payload.repos_to_add:
            return
        async with contextlib.aclosing(self._issue_source_factory()) as source:
            for entry in run.payload.repos_to_add:
                outcome = await self._add_and_import(run, source, entry)
                run.result.imports.append(outcome)
                self._event_logger.log_repository_imported(run.context, outcome)

    async def _add_and_import(
        self,
        run: _ReconcileRun,
        source: GitHubIssueSource,
        entry: RepositoryEntry,
    ) -> RepositoryImport:
        location = locate_repository(entry.url)
        if location is None:
            raise RepositoryUrlError(entry.url)

        label = entry.label or ""
        repository_id = await run.store.insert_repository(
            label, entry.url, run.project_id
        )

        remote_issues = await source.list_open_issues(location)
        if len(remote_issues) >= ISSUES_PAGE_SIZE:
            self._event_logger.log_import_truncated(
                run.context, location.slug, ISSUES_PAGE_SIZE
            )

        issues = filter_issues(remote_issues)
        imported = 0
        if issues:
            batch = build_issue_insert(issues, repository_id)
            imported = await run.store.insert_issues(batch)

        return RepositoryImport(
            label=label,
            slug=location.slug,
            fetched=len(remote_issues),
            imported=imported,
        )


__all__ = [
    "IssueSourceFactory",
    "ReconcileService",
    "ReconcileServiceDependencies",
    "SessionFactory",
]
