"""Relational storage for projects, tracked repositories and issues."""

from __future__ import annotations

from .batch import (
    ISSUE_INSERT_COLUMNS,
    IssueBatchInsert,
    build_issue_insert,
    row_placeholders,
)
from .models import (
    Base,
    Issue,
    Project,
    Repository,
    UTCDateTime,
    create_engine,
    init_storage,
)
from .store import ReconcileStore

__all__ = [
    "ISSUE_INSERT_COLUMNS",
    "Base",
    "Issue",
    "IssueBatchInsert",
    "Project",
    "ReconcileStore",
    "Repository",
    "UTCDateTime",
    "build_issue_insert",
    "create_engine",
    "init_storage",
    "row_placeholders",
]
