"""
Allocation engine: distributes a payment over the tenant's open invoices.

Policy (oldest first, exact fit then partial):
1. Candidates are the tenant's issued, partial and overdue invoices with a
   positive balance, scoped to the payment's property.
2. They are walked in (due_on, issued_on, id) order.
3. Each invoice takes min(balance, remaining); a take of zero is skipped.
4. The walk stops when the payment is exhausted or the list runs out.
5. Whatever remains is the payment's unallocated amount.

The engine never commits. It runs inside the payment's unit of work, so a
failure at any step discards the payment together with its allocations.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

import rentledger.repositories.invoice as invoice_repo
import rentledger.repositories.payment as payment_repo
from rentledger.db.models.invoice import Invoice as InvoiceModel
from rentledger.db.models.payment import Payment as PaymentModel
from rentledger.db.models.payment import PaymentAllocation as AllocationModel
from rentledger.domain.invoice_status import InvoiceStatus
from rentledger.errors import ConcurrencyConflictError
from rentledger.services.invoice import apply_payment

logger = logging.getLogger(__name__)


@dataclass
class AllocationOutcome:
    allocations: list[AllocationModel] = field(default_factory=list)
    # Invoices that transitioned to paid during this walk.
    settled_invoices: list[InvoiceModel] = field(default_factory=list)
    remaining_cents: int = 0


def allocate_payment(
    db: Session,
    payment: PaymentModel,
    as_of: date,
    scope_to_property: bool = True,
) -> AllocationOutcome:
    """
    Allocate a staged payment oldest-first and flush the result.

    Raises:
        ConcurrencyConflictError: If one of the candidate invoices was updated
            by another transaction since it was read.
    """
    candidates = invoice_repo.get_open_invoices_for_tenant(
        db,
        payment.tenant_id,
        property_id=payment.property_id if scope_to_property else None,
    )

    outcome = AllocationOutcome(remaining_cents=payment.amount_cents)
    for invoice in candidates:
        if outcome.remaining_cents == 0:
            break
        if invoice.status == InvoiceStatus.VOID.value:
            continue

        take = min(invoice.balance_cents, outcome.remaining_cents)
        if take <= 0:
            continue

        allocation = payment_repo.add_allocation(
            db,
            payment,
            invoice_id=invoice.id,
            amount_cents=take,
            sequence=len(outcome.allocations) + 1,
        )
        apply_payment(db, invoice, take, as_of=as_of)
        outcome.allocations.append(allocation)
        outcome.remaining_cents -= take

        if invoice.status == InvoiceStatus.PAID.value:
            outcome.settled_invoices.append(invoice)

    payment.unallocated_cents = outcome.remaining_cents

    try:
        db.flush()
    except StaleDataError as exc:
        raise ConcurrencyConflictError(
            f"Invoices of tenant {payment.tenant_id} changed during allocation"
        ) from exc

    logger.info(
        "Payment %s (%s cents) allocated to %s invoice(s), %s cents unallocated",
        payment.reference,
        payment.amount_cents,
        len(outcome.allocations),
        outcome.remaining_cents,
    )
    return outcome
