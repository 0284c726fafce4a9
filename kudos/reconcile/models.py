"""Result objects for reconciliation runs."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryImport:
    """Outcome of importing issues for one added repository."""

    label: str
    slug: str
    fetched: int
    imported: int


@dataclasses.dataclass(slots=True)
class ReconcileResult:
    """Summary of one reconciliation run.

    ``imported_count`` is the figure reported to callers; the other fields
    exist for logging and tests.
    """

    project_id: int | None = None
    attributes_updated: bool = False
    repositories_removed: int = 0
    imports: list[RepositoryImport] = dataclasses.field(default_factory=list)

    @property
    def imported_count(self) -> int:
        """Return the total number of issues imported across repositories."""
        return sum(item.imported for item in self.imports)

    @property
    def repositories_added(self) -> int:
        """Return how many repositories were created."""
        return len(self.imports)


__all__ = ["ReconcileResult", "RepositoryImport"]
