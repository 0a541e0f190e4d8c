from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    ISSUED = "issued"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    VOID = "void"


class InvoiceType(str, Enum):
    RENT = "rent"
    WATER = "water"
    ELECTRICITY = "electricity"
    SERVICE_CHARGE = "service_charge"
    PENALTY = "penalty"
    OTHER = "other"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


# Statuses that accept allocations.
OPEN_INVOICE_STATUSES = (
    InvoiceStatus.ISSUED.value,
    InvoiceStatus.PARTIAL.value,
    InvoiceStatus.OVERDUE.value,
)
TERMINAL_INVOICE_STATUSES = (InvoiceStatus.PAID.value, InvoiceStatus.VOID.value)


@dataclass(frozen=True, slots=True)
class InvoiceStatusPolicy:
    """Resolves an invoice's status "as of" a given date.

    Status is a pure function of (amount_paid, amount, due date, draft flag,
    void flag):
    - void wins over everything
    - amount_paid == amount -> paid (due date irrelevant)
    - past due (due_on < as_of) with an outstanding balance -> overdue
    - 0 < amount_paid < amount -> partial
    - amount_paid == 0 -> issued, or draft if never issued

    Note: due_on is inclusive. An invoice due "today" is not overdue yet.
    """

    as_of: date

    def resolve(
        self,
        *,
        amount_cents: int,
        amount_paid_cents: int,
        due_on: date,
        is_draft: bool = False,
        is_void: bool = False,
    ) -> InvoiceStatus:
        if is_void:
            return InvoiceStatus.VOID
        if amount_paid_cents >= amount_cents:
            return InvoiceStatus.PAID
        if amount_paid_cents == 0 and is_draft:
            return InvoiceStatus.DRAFT
        if self.is_past_due(due_on):
            return InvoiceStatus.OVERDUE
        if amount_paid_cents > 0:
            return InvoiceStatus.PARTIAL
        return InvoiceStatus.ISSUED

    def resolve_installment(
        self,
        *,
        amount_cents: int,
        amount_paid_cents: int,
        due_date: date,
    ) -> InstallmentStatus:
        if amount_paid_cents >= amount_cents:
            return InstallmentStatus.PAID
        if self.is_past_due(due_date):
            return InstallmentStatus.OVERDUE
        if amount_paid_cents > 0:
            return InstallmentStatus.PARTIAL
        return InstallmentStatus.PENDING

    def is_past_due(self, due_on: date) -> bool:
        return due_on < self.as_of
