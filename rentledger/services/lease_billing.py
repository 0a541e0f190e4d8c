"""Lease billing coordinator: keeps Lease.paid_through_date in step with rent settlement."""

import logging
from datetime import date

from sqlalchemy.orm import Session

import rentledger.repositories.invoice as invoice_repo
import rentledger.repositories.lease as lease_repo
from rentledger.db.models.invoice import Invoice as InvoiceModel
from rentledger.db.models.lease import Lease as LeaseModel
from rentledger.domain.invoice_status import (
    InstallmentStatus,
    InvoiceStatus,
    InvoiceType,
)
from rentledger.domain.lease_term import LeaseStatus, PaidThroughPolicy
from rentledger.errors import InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)


def _settlement_schedule(db: Session, lease: LeaseModel) -> list[tuple[date, bool]]:
    """(due_date, is_paid) for each billing obligation of the lease."""
    if lease.installments:
        return [
            (installment.due_date, installment.status == InstallmentStatus.PAID.value)
            for installment in lease.installments
            # A voided month is waived; it no longer holds back the months after it.
            if installment.invoice is None
            or installment.invoice.status != InvoiceStatus.VOID.value
        ]
    # Leases billed by plain rent invoices, without installment rows.
    return [
        (invoice.due_on, invoice.status == InvoiceStatus.PAID.value)
        for invoice in invoice_repo.get_invoices_by_lease_id(db, lease.id)
        if invoice.invoice_type == InvoiceType.RENT.value
        and invoice.status != InvoiceStatus.VOID.value
    ]


def handle_invoice_settled(db: Session, invoice: InvoiceModel) -> date | None:
    """
    React to a lease invoice becoming paid by advancing the lease's paid_through_date.

    Does not commit: runs inside the payment's unit of work. Checks happen
    before any mutation, so a raised error leaves the lease untouched.

    Returns:
        The lease's paid_through_date after the update.

    Raises:
        NotFoundError: If the invoice's lease no longer exists.
        InvalidStateError: If the lease is terminated.
    """
    if invoice.lease_id is None:
        return None

    lease = lease_repo.get_lease_by_id(db, invoice.lease_id)
    if not lease:
        raise NotFoundError(f"Lease with id {invoice.lease_id} not found")

    if lease.status == LeaseStatus.TERMINATED.value:
        raise InvalidStateError(
            f"Lease {lease.id} is terminated; paid-through date left at {lease.paid_through_date}"
        )

    return _advance_paid_through(db, lease)


def handle_invoice_voided(db: Session, invoice: InvoiceModel) -> date | None:
    """
    Re-evaluate the lease's paid_through_date after one of its rent invoices is voided.

    Waiving the oldest unpaid month can complete the paid prefix. Terminated
    leases keep their date. Does not commit.
    """
    if invoice.lease_id is None or invoice.invoice_type != InvoiceType.RENT.value:
        return None

    lease = lease_repo.get_lease_by_id(db, invoice.lease_id)
    if lease is None or lease.status == LeaseStatus.TERMINATED.value:
        return None
    return _advance_paid_through(db, lease)


def _advance_paid_through(db: Session, lease: LeaseModel) -> date | None:
    policy = PaidThroughPolicy(end_date=lease.end_date)
    advanced = policy.advance(
        current=lease.paid_through_date,
        schedule=_settlement_schedule(db, lease),
    )
    if advanced != lease.paid_through_date:
        logger.info(
            "Lease %s paid through %s (was %s)",
            lease.id,
            advanced,
            lease.paid_through_date,
        )
        lease.paid_through_date = advanced
    return lease.paid_through_date
