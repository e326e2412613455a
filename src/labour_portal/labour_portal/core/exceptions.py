from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConflictError(DomainError):
    """Raised when the request conflicts with the current state of a record."""


class DuplicateTimesheetError(ConflictError):
    """Raised when a user already has a live timesheet for the same week."""


class InvoiceEligibilityError(ConflictError):
    """Raised when any timesheet in an invoice batch cannot be invoiced.

    Carries every offending id / reference number so the caller can fix the
    whole batch at once.
    """

    def __init__(
        self,
        *,
        missing_ids: Sequence[int] = (),
        not_approved: Sequence[str] = (),
        already_invoiced: Sequence[str] = (),
    ):
        self.missing_ids = list(missing_ids)
        self.not_approved = list(not_approved)
        self.already_invoiced = list(already_invoiced)

        parts = []
        if self.missing_ids:
            parts.append("timesheets not found: " + ", ".join(str(i) for i in self.missing_ids))
        if self.not_approved:
            parts.append("must be approved before invoicing: " + ", ".join(self.not_approved))
        if self.already_invoiced:
            parts.append("already invoiced: " + ", ".join(self.already_invoiced))
        super().__init__("Cannot create invoice; " + "; ".join(parts))

    def to_dict(self) -> dict:
        return {
            "missingIds": self.missing_ids,
            "notApproved": self.not_approved,
            "alreadyInvoiced": self.already_invoiced,
        }


class ReferenceExhaustedError(DomainError):
    """Raised when no free reference number was found within the attempt limit."""
