from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .database.connection import DBConfig, DatabaseConnection
from .documents.mysql_document_repository import MySQLDocumentRepository
from .documents.repository import DocumentRepository
from .documents.service import DocumentService
from .invoices.mysql_invoice_repository import MySQLInvoiceRepository
from .invoices.repository import InvoiceRepository
from .invoices.service import InvoiceService
from .payroll.service import PayrollService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .projects.service import ProjectService
from .settings.model import WorkSettings
from .settings.service import WorkSettingsService
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    projects_repo: ProjectRepository
    timesheets_repo: TimesheetRepository
    invoices_repo: InvoiceRepository
    documents_repo: DocumentRepository

    payroll_service: PayrollService
    settings_service: WorkSettingsService
    auth_service: AuthService
    user_service: UserService
    project_service: ProjectService
    timesheet_service: TimesheetService
    invoice_service: InvoiceService
    document_service: DocumentService


def wire_container(
    *,
    users_repo: UserRepository,
    projects_repo: ProjectRepository,
    timesheets_repo: TimesheetRepository,
    invoices_repo: InvoiceRepository,
    documents_repo: DocumentRepository,
    work_settings: Optional[WorkSettings] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services over any set of repositories (MySQL in production, fakes in tests)."""
    payroll_service = PayrollService()
    return Container(
        conn=conn,
        users_repo=users_repo,
        projects_repo=projects_repo,
        timesheets_repo=timesheets_repo,
        invoices_repo=invoices_repo,
        documents_repo=documents_repo,
        payroll_service=payroll_service,
        settings_service=WorkSettingsService(work_settings),
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        project_service=ProjectService(projects_repo),
        timesheet_service=TimesheetService(timesheets_repo, users_repo, projects_repo, payroll=payroll_service),
        invoice_service=InvoiceService(invoices_repo, timesheets_repo, users_repo, payroll=payroll_service),
        document_service=DocumentService(documents_repo),
    )


def build_container(*, db_config: dict, work_policy_defaults: Optional[Mapping[str, Any]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        invoices_repo=MySQLInvoiceRepository(conn),
        documents_repo=MySQLDocumentRepository(conn),
        work_settings=WorkSettings.from_mapping(work_policy_defaults or {}),
        conn=conn,
    )
