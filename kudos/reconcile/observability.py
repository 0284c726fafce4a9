"""Structured log events for reconciliation runs.

Events are emitted through femtologging as ``[event.type] key=value`` lines
so log aggregators can parse them. Failures carry an error category used for
alert routing.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from kudos.errors import (
    AuthError,
    MalformedPayloadError,
    NotFoundError,
    ParseError,
    ProjectIntegrityError,
    StorageError,
)
from kudos.github.errors import GitHubAPIError, GitHubResponseShapeError
from kudos.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

    from .models import ReconcileResult, RepositoryImport

logger = get_logger(__name__)

# HTTP status code threshold for server errors (5xx)
_HTTP_SERVER_ERROR_THRESHOLD = 500


class ReconcileEventType(enum.StrEnum):
    """Structured log event types for reconciliation."""

    RUN_STARTED = "reconcile.run.started"
    RUN_COMPLETED = "reconcile.run.completed"
    RUN_FAILED = "reconcile.run.failed"
    REPOSITORY_REMOVED = "reconcile.repository.removed"
    REPOSITORY_IMPORTED = "reconcile.repository.imported"
    IMPORT_TRUNCATED = "reconcile.import.truncated"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    AUTH = "auth"
    CLIENT_ERROR = "client_error"
    NOT_FOUND = "not_found"
    DATA_INTEGRITY = "data_integrity"
    TRANSIENT = "transient"
    SCHEMA_DRIFT = "schema_drift"
    DATABASE_CONNECTIVITY = "database_connectivity"
    DATABASE_ERROR = "database_error"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class ReconcileRunContext:
    """Shared context for a single reconciliation run."""

    project_name: str
    project_slug: str
    started_at: dt.datetime


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (AuthError, ErrorCategory.AUTH),
    (MalformedPayloadError, ErrorCategory.CLIENT_ERROR),
    (ParseError, ErrorCategory.CLIENT_ERROR),
    (NotFoundError, ErrorCategory.NOT_FOUND),
    (ProjectIntegrityError, ErrorCategory.DATA_INTEGRITY),
    (GitHubResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
)

_STORAGE_CAUSE_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (OperationalError, ErrorCategory.DATABASE_CONNECTIVITY),
    (InterfaceError, ErrorCategory.DATABASE_CONNECTIVITY),
    (OSError, ErrorCategory.DATABASE_CONNECTIVITY),
    (IntegrityError, ErrorCategory.DATA_INTEGRITY),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes."""
    # GitHub failures without a status code are transport errors
    if isinstance(exc, GitHubAPIError):
        if exc.status_code is None or exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    if isinstance(exc, StorageError):
        for cause_type, category in _STORAGE_CAUSE_MAP:
            if isinstance(exc.cause, cause_type):
                return category
        return ErrorCategory.DATABASE_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class ReconcileEventLogger:
    """Emit structured reconciliation events.

    Success events are logged at INFO, a full (possibly truncated) issue page
    at WARNING, and failures at ERROR.
    """

    def log_run_started(
        self,
        context: ReconcileRunContext,
        *,
        repos_to_add: int,
        repos_to_remove: int,
        has_attributes: bool,
    ) -> None:
        """Log the start of a run."""
        log_info(
            logger,
            "[%s] project_name=%s project_slug=%s repos_to_add=%d "
            "repos_to_remove=%d has_attributes=%s started_at=%s",
            ReconcileEventType.RUN_STARTED,
            context.project_name,
            context.project_slug,
            repos_to_add,
            repos_to_remove,
            has_attributes,
            context.started_at.isoformat(),
        )

    def log_repository_removed(
        self, context: ReconcileRunContext, url: str, deleted: int
    ) -> None:
        """Log a repository removal, including removals that matched nothing."""
        log_info(
            logger,
            "[%s] project_slug=%s url=%s deleted=%d",
            ReconcileEventType.REPOSITORY_REMOVED,
            context.project_slug,
            url,
            deleted,
        )

    def log_repository_imported(
        self, context: ReconcileRunContext, outcome: RepositoryImport
    ) -> None:
        """Log the issue import for one added repository."""
        log_info(
            logger,
            "[%s] project_slug=%s label=%s repo_slug=%s fetched=%d imported=%d",
            ReconcileEventType.REPOSITORY_IMPORTED,
            context.project_slug,
            outcome.label,
            outcome.slug,
            outcome.fetched,
            outcome.imported,
        )

    def log_import_truncated(
        self, context: ReconcileRunContext, repo_slug: str, page_size: int
    ) -> None:
        """Log that a full page was returned and later issues were not read."""
        log_warning(
            logger,
            "[%s] project_slug=%s repo_slug=%s page_size=%d "
            "only the first page of open issues is imported",
            ReconcileEventType.IMPORT_TRUNCATED,
            context.project_slug,
            repo_slug,
            page_size,
        )

    def log_run_completed(
        self,
        context: ReconcileRunContext,
        result: ReconcileResult,
        duration: dt.timedelta,
    ) -> None:
        """Log successful completion with counts."""
        log_info(
            logger,
            "[%s] project_slug=%s duration_seconds=%.3f attributes_updated=%s "
            "repositories_removed=%d repositories_added=%d issues_imported=%d",
            ReconcileEventType.RUN_COMPLETED,
            context.project_slug,
            duration.total_seconds(),
            result.attributes_updated,
            result.repositories_removed,
            result.repositories_added,
            result.imported_count,
        )

    def log_run_failed(
        self,
        context: ReconcileRunContext,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a failed run with its error category."""
        log_error(
            logger,
            "[%s] project_slug=%s duration_seconds=%.3f error_type=%s "
            "error_category=%s error=%s",
            ReconcileEventType.RUN_FAILED,
            context.project_slug,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            error,
        )


__all__ = [
    "ErrorCategory",
    "ReconcileEventLogger",
    "ReconcileEventType",
    "ReconcileRunContext",
    "categorize_error",
]
