"""Reconciliation of tracked repositories and imported issues.

Usage
-----
Apply a decoded payload::

    from kudos.reconcile import (
        ReconcileService,
        ReconcileServiceDependencies,
        decode_payload,
    )

    service = ReconcileService(
        ReconcileServiceDependencies(
            session_factory=session_factory,
            issue_source_factory=lambda: GitHubIssuesClient(github_config),
        ),
        config=config,
    )
    result = await service.reconcile(decode_payload(body))
    print(f"Total issues imported: {result.imported_count}")

"""

from kudos.reconcile.models import ReconcileResult, RepositoryImport
from kudos.reconcile.observability import (
    ErrorCategory,
    ReconcileEventLogger,
    ReconcileEventType,
    categorize_error,
)
from kudos.reconcile.payload import (
    Payload,
    ProjectAttributes,
    RepositoryEntry,
    decode_payload,
)
from kudos.reconcile.service import ReconcileService, ReconcileServiceDependencies

__all__ = [
    "ErrorCategory",
    "Payload",
    "ProjectAttributes",
    "ReconcileEventLogger",
    "ReconcileEventType",
    "ReconcileResult",
    "ReconcileService",
    "ReconcileServiceDependencies",
    "RepositoryEntry",
    "RepositoryImport",
    "categorize_error",
    "decode_payload",
]
