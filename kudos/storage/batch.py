"""Multi-row insert construction for imported issues.

All filtered issues of one repository are written with a single ``INSERT``
so the import costs one round trip and a constraint violation fails the
whole batch instead of leaving a partial import.

Example:
>>> row_placeholders(2, 3)
'(:p1, :p2, :p3), (:p4, :p5, :p6)'

"""

from __future__ import annotations

import dataclasses
import typing as typ

from sqlalchemy import bindparam, text

from .models import Issue

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.sql.elements import TextClause
    from sqlalchemy.types import TypeEngine

    from kudos.github.models import NormalizedIssue

ISSUE_INSERT_COLUMNS: tuple[str, ...] = (
    "number",
    "title",
    "labels",
    "repository_id",
    "issue_created_at",
)

_PARAM_PREFIX = "p"


def _param_name(index: int) -> str:
    return f"{_PARAM_PREFIX}{index}"


def row_placeholders(row_count: int, column_count: int, *, start: int = 1) -> str:
    """Return the ``VALUES`` placeholder text for a multi-row insert.

    Each row receives a ``column_count``-wide block of consecutive,
    1-indexed named parameters, so row ``r`` (0-based) uses parameters
    ``start + r * column_count`` through ``start + (r + 1) * column_count - 1``.

    Raises
    ------
    ValueError
        If ``row_count``, ``column_count`` or ``start`` is less than one.

    """
    if row_count < 1 or column_count < 1 or start < 1:
        msg = (
            "row_count, column_count and start must be positive, got "
            f"{row_count}, {column_count}, {start}"
        )
        raise ValueError(msg)
    rows = []
    for row in range(row_count):
        first = start + row * column_count
        names = ", ".join(
            f":{_param_name(index)}" for index in range(first, first + column_count)
        )
        rows.append(f"({names})")
    return ", ".join(rows)


@dataclasses.dataclass(frozen=True, slots=True)
class IssueBatchInsert:
    """SQL text and bound values inserting one repository's issues."""

    sql: str
    params: dict[str, typ.Any]
    row_count: int

    def statement(self) -> TextClause:
        """Return an executable statement with every value bound.

        Values are bound with the ``issues`` column types so list and
        datetime values serialise the same way on every dialect.
        """
        column_types = _column_types()
        width = len(ISSUE_INSERT_COLUMNS)
        params = [
            bindparam(
                name,
                value,
                type_=column_types[ISSUE_INSERT_COLUMNS[position % width]],
            )
            for position, (name, value) in enumerate(self.params.items())
        ]
        return text(self.sql).bindparams(*params)


def _column_types() -> dict[str, TypeEngine[typ.Any]]:
    columns = Issue.__table__.columns
    return {name: columns[name].type for name in ISSUE_INSERT_COLUMNS}


def build_issue_insert(
    issues: cabc.Sequence[NormalizedIssue], repository_id: int
) -> IssueBatchInsert:
    """Build a single insert covering ``issues`` for ``repository_id``.

    Raises
    ------
    ValueError
        If ``issues`` is empty; an insert with no rows is never issued.

    """
    if not issues:
        msg = "cannot build an issue insert with no issues"
        raise ValueError(msg)

    width = len(ISSUE_INSERT_COLUMNS)
    placeholders = row_placeholders(len(issues), width)
    sql = (
        f"INSERT INTO {Issue.__tablename__} ({', '.join(ISSUE_INSERT_COLUMNS)}) "
        f"VALUES {placeholders}"
    )

    params: dict[str, typ.Any] = {}
    for row, issue in enumerate(issues):
        values = (
            issue.number,
            issue.title,
            list(issue.labels),
            repository_id,
            issue.issue_created_at,
        )
        for offset, value in enumerate(values, start=row * width + 1):
            params[_param_name(offset)] = value

    return IssueBatchInsert(sql=sql, params=params, row_count=len(issues))


__all__ = [
    "ISSUE_INSERT_COLUMNS",
    "IssueBatchInsert",
    "build_issue_insert",
    "row_placeholders",
]
