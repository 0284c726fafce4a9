"""Unit tests for reconciliation observability."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from kudos.errors import (
    AuthError,
    KudosError,
    MalformedPayloadError,
    ProjectIntegrityError,
    ProjectNotFoundError,
    RepositoryUrlError,
    StorageError,
)
from kudos.github.client import ISSUES_PAGE_SIZE
from kudos.github.errors import GitHubAPIError, GitHubResponseShapeError
from kudos.reconcile import Payload, RepositoryEntry
from kudos.reconcile.models import ReconcileResult, RepositoryImport
from kudos.reconcile.observability import (
    ErrorCategory,
    ReconcileEventLogger,
    ReconcileEventType,
    ReconcileRunContext,
    categorize_error,
)
from tests.helpers.github_issues import issue_json
from tests.unit.conftest import TEST_SECRET, make_service

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from tests.helpers.github_issues import FakeIssueSourceFactory

_CONTEXT = ReconcileRunContext(
    project_name="Kudos",
    project_slug="kudos",
    started_at=dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC),
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        del exc_info, stack_info
        self.calls.append((level, message))
        return message


@pytest.fixture
def fake_logger(monkeypatch: pytest.MonkeyPatch) -> _FakeLogger:
    """Replace the observability module logger with a recorder."""
    logger = _FakeLogger()
    monkeypatch.setattr("kudos.reconcile.observability.logger", logger)
    return logger


def _db_error(error_type: type[Exception]) -> Exception:
    return error_type("INSERT", {}, Exception("driver failure"))


class TestCategorizeError:
    """Tests for categorize_error."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (AuthError(), ErrorCategory.AUTH),
            (MalformedPayloadError("bad"), ErrorCategory.CLIENT_ERROR),
            (RepositoryUrlError("reef"), ErrorCategory.CLIENT_ERROR),
            (ProjectNotFoundError("Kudos", "kudos"), ErrorCategory.NOT_FOUND),
            (
                ProjectIntegrityError("Kudos", "kudos", 2),
                ErrorCategory.DATA_INTEGRITY,
            ),
            (GitHubResponseShapeError.missing("number"), ErrorCategory.SCHEMA_DRIFT),
            (GitHubAPIError.http_error(404, "o/r"), ErrorCategory.CLIENT_ERROR),
            (GitHubAPIError.http_error(502, "o/r"), ErrorCategory.TRANSIENT),
            (
                GitHubAPIError.transport_error("o/r", TimeoutError("slow")),
                ErrorCategory.TRANSIENT,
            ),
            (KudosError("other"), ErrorCategory.UNKNOWN),
            (RuntimeError("boom"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categorizes_domain_errors(
        self, exc: BaseException, expected: ErrorCategory
    ) -> None:
        """Domain errors map to alert categories."""
        assert categorize_error(exc) is expected

    @pytest.mark.parametrize(
        ("cause_type", "expected"),
        [
            (OperationalError, ErrorCategory.DATABASE_CONNECTIVITY),
            (InterfaceError, ErrorCategory.DATABASE_CONNECTIVITY),
            (IntegrityError, ErrorCategory.DATA_INTEGRITY),
        ],
    )
    def test_categorizes_storage_errors_by_cause(
        self, cause_type: type[Exception], expected: ErrorCategory
    ) -> None:
        """Storage errors are categorized by the underlying driver error."""
        error = StorageError("insert_issues", _db_error(cause_type))

        assert categorize_error(error) is expected

    def test_other_storage_errors_are_database_errors(self) -> None:
        """Unrecognized storage causes fall back to DATABASE_ERROR."""
        error = StorageError("commit", ValueError("odd"))

        assert categorize_error(error) is ErrorCategory.DATABASE_ERROR


class TestReconcileEventLogger:
    """Tests for the structured event logger."""

    def test_run_started_event(self, fake_logger: _FakeLogger) -> None:
        """Start events record the payload shape."""
        ReconcileEventLogger().log_run_started(
            _CONTEXT, repos_to_add=2, repos_to_remove=1, has_attributes=True
        )

        ((level, message),) = fake_logger.calls
        assert level == "INFO"
        assert message.startswith(f"[{ReconcileEventType.RUN_STARTED}]")
        assert "repos_to_add=2" in message
        assert "repos_to_remove=1" in message
        assert "has_attributes=True" in message

    def test_repository_events(self, fake_logger: _FakeLogger) -> None:
        """Removal and import events carry their counts."""
        event_logger = ReconcileEventLogger()

        event_logger.log_repository_removed(_CONTEXT, "https://github.com/o/r", 0)
        event_logger.log_repository_imported(
            _CONTEXT,
            RepositoryImport(label="reef", slug="octo/reef", fetched=3, imported=2),
        )

        removed, imported = (message for _, message in fake_logger.calls)
        assert "[reconcile.repository.removed]" in removed
        assert "deleted=0" in removed
        assert "[reconcile.repository.imported]" in imported
        assert "repo_slug=octo/reef fetched=3 imported=2" in imported

    def test_truncation_is_a_warning(self, fake_logger: _FakeLogger) -> None:
        """A full first page is reported at WARNING."""
        ReconcileEventLogger().log_import_truncated(_CONTEXT, "octo/reef", 100)

        ((level, message),) = fake_logger.calls
        assert level == "WARNING"
        assert "[reconcile.import.truncated]" in message
        assert "page_size=100" in message

    def test_run_completed_reports_totals(self, fake_logger: _FakeLogger) -> None:
        """Completion events include duration and import totals."""
        result = ReconcileResult(
            project_id=1,
            attributes_updated=True,
            repositories_removed=1,
            imports=[
                RepositoryImport(label="a", slug="o/a", fetched=2, imported=2),
                RepositoryImport(label="b", slug="o/b", fetched=4, imported=3),
            ],
        )

        ReconcileEventLogger().log_run_completed(
            _CONTEXT, result, dt.timedelta(milliseconds=1500)
        )

        ((level, message),) = fake_logger.calls
        assert level == "INFO"
        assert "duration_seconds=1.500" in message
        assert "repositories_added=2" in message
        assert "issues_imported=5" in message

    def test_run_failed_includes_category(self, fake_logger: _FakeLogger) -> None:
        """Failure events carry the error type and category."""
        ReconcileEventLogger().log_run_failed(
            _CONTEXT, ProjectNotFoundError("Kudos", "kudos"), dt.timedelta(seconds=1)
        )

        ((level, message),) = fake_logger.calls
        assert level == "ERROR"
        assert "error_type=ProjectNotFoundError" in message
        assert "error_category=not_found" in message


def test_event_type_values_are_stable() -> None:
    """Event type values are stable identifiers for log parsers."""
    assert {event.value for event in ReconcileEventType} == {
        "reconcile.run.started",
        "reconcile.run.completed",
        "reconcile.run.failed",
        "reconcile.repository.removed",
        "reconcile.repository.imported",
        "reconcile.import.truncated",
    }


@pytest.mark.asyncio
async def test_service_warns_when_a_full_page_is_returned(
    fake_logger: _FakeLogger,
    session_factory: async_sessionmaker[AsyncSession],
    issue_source_factory: FakeIssueSourceFactory,
    project_id: int,
) -> None:
    """A first page of exactly one hundred entries logs a truncation warning."""
    del project_id
    issue_source_factory.source.issues_by_slug["octo/reef"] = [
        issue_json(number) for number in range(1, ISSUES_PAGE_SIZE + 1)
    ]
    service = make_service(session_factory, issue_source_factory)

    result = await service.reconcile(
        Payload(
            secret=TEST_SECRET,
            project_name="Kudos",
            project_slug="kudos",
            repos_to_add=[
                RepositoryEntry(label="reef", url="https://github.com/octo/reef")
            ],
            repos_to_remove=[],
        )
    )

    assert result.imported_count == ISSUES_PAGE_SIZE
    warnings = [message for level, message in fake_logger.calls if level == "WARNING"]
    assert len(warnings) == 1
    assert "repo_slug=octo/reef" in warnings[0]
    assert fake_logger.calls[-1][1].startswith("[reconcile.run.completed]")


@pytest.mark.asyncio
async def test_service_logs_failed_runs(
    fake_logger: _FakeLogger,
    session_factory: async_sessionmaker[AsyncSession],
    issue_source_factory: FakeIssueSourceFactory,
) -> None:
    """Failures are logged at ERROR with their category and re-raised."""
    service = make_service(session_factory, issue_source_factory)

    with pytest.raises(AuthError):
        await service.reconcile(
            Payload(
                secret="wrong",  # noqa: S106
                project_name="Kudos",
                project_slug="kudos",
                repos_to_add=[],
                repos_to_remove=[],
            )
        )

    levels = [level for level, _ in fake_logger.calls]
    assert levels == ["INFO", "ERROR"]
    assert "error_category=auth" in fake_logger.calls[-1][1]
