from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest
from werkzeug.security import generate_password_hash

from src.labour_portal.labour_portal.common.reference import format_reference
from src.labour_portal.labour_portal.container import wire_container
from src.labour_portal.labour_portal.core.constants import INVOICE_PREFIX, TIMESHEET_PREFIX
from src.labour_portal.labour_portal.core.enums import Role, TimesheetStatus
from src.labour_portal.labour_portal.core.exceptions import ConflictError, DuplicateTimesheetError
from src.labour_portal.labour_portal.documents.model import Document
from src.labour_portal.labour_portal.invoices.eligibility import check_invoice_batch
from src.labour_portal.labour_portal.invoices.model import Invoice
from src.labour_portal.labour_portal.projects.model import Project
from src.labour_portal.labour_portal.timesheets.model import Timesheet
from src.labour_portal.labour_portal.users.model import NewUser, User


class FakeStore:
    """Shared in-memory tables; every fake repository reads and writes these dicts."""

    def __init__(self):
        self.users: dict[int, User] = {}
        self.projects: dict[int, Project] = {}
        self.timesheets: dict[int, Timesheet] = {}
        self.invoices: dict[int, Invoice] = {}
        self.invoice_links: dict[int, list[int]] = {}
        self.documents: dict[int, Document] = {}
        self._ids = {"users": 0, "projects": 0, "timesheets": 0, "invoices": 0, "documents": 0}

    def next_id(self, table: str) -> int:
        self._ids[table] += 1
        return self._ids[table]

    def recompute(self, project_id) -> Decimal:
        if project_id is None or project_id not in self.projects:
            return Decimal("0.00")
        total = sum(
            (ts.total_hours for ts in self.timesheets.values() if ts.project_id == project_id),
            Decimal("0.00"),
        )
        self.projects[project_id] = replace(self.projects[project_id], total_hours=total)
        return total


class FakeUserRepo:
    def __init__(self, store: FakeStore):
        self._s = store

    def get_by_id(self, user_id):
        return self._s.users.get(int(user_id))

    def get_by_username(self, username):
        return next((u for u in self._s.users.values() if u.username == username), None)

    def create_user(self, user: NewUser) -> int:
        user_id = self._s.next_id("users")
        self._s.users[user_id] = User(
            user_id=user_id,
            username=user.username,
            password_hash=user.password_hash,
            role=user.role,
            normal_rate=user.normal_rate,
            overtime_rate=user.overtime_rate,
            active=user.active,
            email=user.email,
            user_type=user.user_type,
        )
        return user_id

    def list_all(self):
        return list(self._s.users.values())

    def count_admins(self):
        return sum(1 for u in self._s.users.values() if u.role == Role.ADMIN)

    def set_active(self, user_id, *, active):
        user = self._s.users.get(int(user_id))
        if not user:
            return False
        self._s.users[user.user_id] = replace(user, active=active)
        return True

    def update_rates(self, user_id, *, normal_rate, overtime_rate):
        user = self._s.users.get(int(user_id))
        if not user:
            return False
        self._s.users[user.user_id] = replace(user, normal_rate=normal_rate, overtime_rate=overtime_rate)
        return True

    def delete_by_id(self, user_id):
        user_id = int(user_id)
        if user_id not in self._s.users:
            return False
        owns = any(ts.user_id == user_id for ts in self._s.timesheets.values()) or any(
            inv.user_id == user_id for inv in self._s.invoices.values()
        )
        if owns:
            raise ConflictError("User still has timesheets or invoices and cannot be deleted")
        del self._s.users[user_id]
        self._s.documents = {k: d for k, d in self._s.documents.items() if d.user_id != user_id}
        return True


class FakeProjectRepo:
    def __init__(self, store: FakeStore):
        self._s = store

    def get_by_id(self, project_id):
        return self._s.projects.get(int(project_id))

    def list_all(self):
        return list(self._s.projects.values())

    def create(self, *, name, hourly_rate, location):
        project_id = self._s.next_id("projects")
        self._s.projects[project_id] = Project(
            project_id=project_id,
            name=name,
            hourly_rate=hourly_rate,
            total_hours=Decimal("0.00"),
            location=location,
        )
        return project_id

    def update(self, project_id, *, name, hourly_rate, location):
        project = self._s.projects.get(int(project_id))
        if not project:
            return False
        self._s.projects[project.project_id] = replace(project, name=name, hourly_rate=hourly_rate, location=location)
        return True

    def delete(self, project_id):
        if int(project_id) not in self._s.projects:
            return False
        if any(ts.project_id == int(project_id) for ts in self._s.timesheets.values()):
            raise ConflictError("Project still has timesheets and cannot be deleted")
        del self._s.projects[int(project_id)]
        return True

    def recompute_total_hours(self, project_id):
        return self._s.recompute(int(project_id))


class FakeTimesheetRepo:
    def __init__(self, store: FakeStore):
        self._s = store
        self.writes = 0

    def get_by_id(self, timesheet_id):
        return self._s.timesheets.get(int(timesheet_id))

    def get_many(self, timesheet_ids):
        return [self._s.timesheets[i] for i in timesheet_ids if i in self._s.timesheets]

    def find_for_user_week(self, *, user_id, week_starting):
        return next(
            (
                ts
                for ts in self._s.timesheets.values()
                if ts.user_id == user_id and ts.week_starting == week_starting
            ),
            None,
        )

    def list_for_user(self, user_id):
        return [ts for ts in self._s.timesheets.values() if ts.user_id == int(user_id)]

    def list_all(self):
        return list(self._s.timesheets.values())

    def _store(self, timesheet_id, reference, values):
        self._s.timesheets[timesheet_id] = Timesheet(
            timesheet_id=timesheet_id,
            reference_number=reference,
            user_id=values.user_id,
            week_starting=values.week_starting,
            daily_hours=dict(values.daily_hours),
            total_hours=values.total_hours,
            normal_hours=values.normal_hours,
            normal_rate=values.normal_rate,
            overtime_hours=values.overtime_hours,
            overtime_rate=values.overtime_rate,
            total_cost=values.total_cost,
            status=values.status,
            project_id=values.project_id,
            notes=values.notes,
        )
        self.writes += 1
        return self._s.timesheets[timesheet_id]

    def _writable(self, timesheet_id):
        ts = self._s.timesheets.get(int(timesheet_id))
        if ts is not None and ts.status == TimesheetStatus.INVOICED:
            raise ConflictError(f"Timesheet {ts.reference_number} is invoiced and changes only through its invoice")
        return ts

    def create(self, values):
        # Mirrors the UNIQUE (user_id, week_starting) key.
        if any(
            ts.user_id == values.user_id and ts.week_starting == values.week_starting
            for ts in self._s.timesheets.values()
        ):
            raise DuplicateTimesheetError("You have already submitted a timesheet for this week")
        timesheet_id = self._s.next_id("timesheets")
        created = self._store(timesheet_id, format_reference(TIMESHEET_PREFIX, timesheet_id), values)
        self._s.recompute(values.project_id)
        return created

    def update(self, timesheet_id, values):
        old = self._writable(timesheet_id)
        updated = self._store(old.timesheet_id, old.reference_number, values)
        for project_id in {old.project_id, values.project_id}:
            self._s.recompute(project_id)
        return updated

    def set_status(self, timesheet_id, status):
        ts = self._writable(timesheet_id)
        if not ts:
            return False
        self._s.timesheets[ts.timesheet_id] = replace(ts, status=status)
        return True

    def delete(self, timesheet_id):
        if not self._writable(timesheet_id):
            return False
        ts = self._s.timesheets.pop(int(timesheet_id))
        self._s.recompute(ts.project_id)
        return True


class FakeInvoiceRepo:
    def __init__(self, store: FakeStore):
        self._s = store

    def get_by_id(self, invoice_id):
        return self._s.invoices.get(int(invoice_id))

    def list_all(self):
        return list(self._s.invoices.values())

    def list_timesheets(self, invoice_id):
        return [self._s.timesheets[i] for i in self._s.invoice_links.get(int(invoice_id), [])]

    def create_with_timesheets(self, timesheet_ids, build):
        # Eligibility and amounts come from one read, like the locked read in MySQL.
        found = [self._s.timesheets[i] for i in timesheet_ids if i in self._s.timesheets]
        check_invoice_batch(timesheet_ids, found)
        invoice = build(found)

        invoice_id = self._s.next_id("invoices")
        self._s.invoices[invoice_id] = Invoice(
            invoice_id=invoice_id,
            reference_number=format_reference(INVOICE_PREFIX, invoice_id),
            user_id=invoice.user_id,
            subtotal=invoice.subtotal,
            vat_rate=invoice.vat_rate,
            cis_rate=invoice.cis_rate,
            total_amount=invoice.total_amount,
            normal_hours=invoice.normal_hours,
            overtime_hours=invoice.overtime_hours,
            status=invoice.status,
            created_at=datetime(2026, 3, 2, 9, 0, 0),
            normal_rate=invoice.normal_rate,
            overtime_rate=invoice.overtime_rate,
            notes=invoice.notes,
        )
        self._s.invoice_links[invoice_id] = list(timesheet_ids)
        for timesheet_id in timesheet_ids:
            ts = self._s.timesheets[timesheet_id]
            self._s.timesheets[timesheet_id] = replace(ts, status=TimesheetStatus.INVOICED)
        return self._s.invoices[invoice_id]

    def update(self, invoice_id, *, status, notes):
        inv = self._s.invoices.get(int(invoice_id))
        if not inv:
            return False
        self._s.invoices[inv.invoice_id] = replace(inv, status=status, notes=notes)
        return True

    def delete_and_revert(self, invoice_id):
        linked = self._s.invoice_links.pop(int(invoice_id), [])
        for timesheet_id in linked:
            ts = self._s.timesheets[timesheet_id]
            self._s.timesheets[timesheet_id] = replace(ts, status=TimesheetStatus.APPROVED)
        self._s.invoices.pop(int(invoice_id), None)
        return linked


class FakeDocumentRepo:
    def __init__(self, store: FakeStore):
        self._s = store

    def _with_username(self, doc):
        user = self._s.users.get(doc.user_id)
        return replace(doc, username=user.username if user else "Unknown User")

    def get_by_id(self, document_id):
        return self._s.documents.get(int(document_id))

    def list_for_user(self, user_id):
        return [d for d in self._s.documents.values() if d.user_id == int(user_id)]

    def list_all(self):
        return [self._with_username(d) for d in self._s.documents.values()]

    def create(self, *, user_id, name, path):
        document_id = self._s.next_id("documents")
        self._s.documents[document_id] = Document(
            document_id=document_id,
            user_id=int(user_id),
            name=name,
            path=path,
            uploaded_at=datetime(2026, 3, 2, 9, 0, 0),
        )
        return document_id

    def set_approved(self, document_id, *, approved):
        doc = self._s.documents.get(int(document_id))
        if not doc:
            return False
        self._s.documents[doc.document_id] = replace(doc, approved=approved)
        return True

    def delete(self, document_id):
        return self._s.documents.pop(int(document_id), None) is not None


def add_user(store: FakeStore, username: str, *, role=Role.CANDIDATE, normal_rate="20.00", overtime_rate="30.00",
             password="secret", active=True) -> User:
    user_id = FakeUserRepo(store).create_user(
        NewUser(
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            normal_rate=Decimal(normal_rate),
            overtime_rate=Decimal(overtime_rate),
            email=f"{username}@example.com",
            active=active,
        )
    )
    return store.users[user_id]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def container(store):
    return wire_container(
        users_repo=FakeUserRepo(store),
        projects_repo=FakeProjectRepo(store),
        timesheets_repo=FakeTimesheetRepo(store),
        invoices_repo=FakeInvoiceRepo(store),
        documents_repo=FakeDocumentRepo(store),
    )


@pytest.fixture
def admin(store):
    return add_user(store, "admin", role=Role.ADMIN)


@pytest.fixture
def worker(store):
    return add_user(store, "worker")


@pytest.fixture
def project(store):
    project_id = FakeProjectRepo(store).create(name="Bridge", hourly_rate=Decimal("25.00"), location="Leeds")
    return store.projects[project_id]


@pytest.fixture
def make_user(store):
    def _make(username, **kwargs):
        return add_user(store, username, **kwargs)

    return _make
