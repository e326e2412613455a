from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Sequence

from ..common.validators import require_non_empty, require_positive_decimal
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import Project
from .repository import ProjectRepository

log = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, projects: ProjectRepository):
        self._projects = projects

    def list_projects(self) -> Sequence[Project]:
        return self._projects.list_all()

    def get_project(self, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project

    def create_project(self, *, current_role: Role, data: Mapping[str, Any]) -> Project:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create projects")

        project_id = self._projects.create(
            name=require_non_empty(data.get("name"), "Project name"),
            hourly_rate=require_positive_decimal(data.get("hourlyRate"), "Hourly rate"),
            location=require_non_empty(data.get("location"), "Location"),
        )
        log.info("Project %s created", project_id)
        return self.get_project(project_id)

    def update_project(self, *, current_role: Role, project_id: int, data: Mapping[str, Any]) -> Project:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can update projects")

        current = self.get_project(project_id)
        name = current.name
        hourly_rate = current.hourly_rate
        location = current.location
        if "name" in data:
            name = require_non_empty(data.get("name"), "Project name")
        if "hourlyRate" in data:
            hourly_rate = require_positive_decimal(data.get("hourlyRate"), "Hourly rate")
        if "location" in data:
            location = require_non_empty(data.get("location"), "Location")

        if not self._projects.update(int(project_id), name=name, hourly_rate=hourly_rate, location=location):
            raise NotFoundError("Project not found")
        return self.get_project(project_id)

    def delete_project(self, *, current_role: Role, project_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete projects")

        self.get_project(project_id)
        if not self._projects.delete(int(project_id)):
            raise NotFoundError("Project not found")
        log.info("Project %s deleted", project_id)

    def recompute_hours(self, *, current_role: Role, project_id: int) -> Decimal:
        """Idempotent rollup: always recomputed from the timesheets, never incremented."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can recompute project hours")
        self.get_project(project_id)
        return self._projects.recompute_total_hours(int(project_id))
