from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Project]:
        raise NotImplementedError

    def create(self, *, name: str, hourly_rate: Decimal, location: str) -> int:
        raise NotImplementedError

    def update(self, project_id: int, *, name: str, hourly_rate: Decimal, location: str) -> bool:
        raise NotImplementedError

    def delete(self, project_id: int) -> bool:
        """False if the project does not exist; ``ConflictError`` while timesheets reference it.

        The check and the delete run in one transaction.
        """

        raise NotImplementedError

    def recompute_total_hours(self, project_id: int) -> Decimal:
        """Recompute from scratch and persist; returns the new total."""

        raise NotImplementedError
