from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization checks."""

    ADMIN = "admin"
    CLIENT = "client"
    CANDIDATE = "candidate"


class UserType(str, Enum):
    SOLE_TRADER = "sole_trader"
    BUSINESS = "business"


class TimesheetStatus(str, Enum):
    """Timesheet lifecycle: draft -> pending -> approved -> invoiced, with rejected as a side branch."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    INVOICED = "invoiced"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
