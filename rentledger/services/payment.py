"""Payment ledger: records payments and drives their allocation."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

import rentledger.repositories.payment as payment_repo
import rentledger.repositories.property as property_repo
import rentledger.repositories.tenant as tenant_repo
from rentledger.core.config import settings
from rentledger.db.models.payment import Payment as PaymentModel
from rentledger.db.models.payment import PaymentAllocation as AllocationModel
from rentledger.domain.enums import PaymentMethod
from rentledger.errors import (
    ConcurrencyConflictError,
    DomainValidationError,
    DuplicateResourceError,
    InvalidStateError,
    NotFoundError,
)
from rentledger.services.allocation import allocate_payment
from rentledger.services.lease_billing import handle_invoice_settled

logger = logging.getLogger(__name__)

DUPLICATE_REFERENCE_CONSTRAINT = "uq_payments_property_reference"


@dataclass
class PaymentRecordResult:
    payment: PaymentModel
    allocations: list[AllocationModel] = field(default_factory=list)
    # Lease bookkeeping problems that did not block the payment.
    warnings: list[str] = field(default_factory=list)
    # Informational outcomes, e.g. a fully unallocated payment.
    messages: list[str] = field(default_factory=list)


def get_payment(db: Session, payment_id: uuid.UUID) -> PaymentModel:
    payment = payment_repo.get_payment_by_id(db, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


def get_unallocated(db: Session, payment_id: uuid.UUID) -> int:
    """Unallocated remainder of a payment, derived from its allocation entries."""
    payment = get_payment(db, payment_id)
    return payment.amount_cents - payment_repo.sum_allocations_for_payment(db, payment.id)


def _validate_payment_input(amount_cents: int, reference: str, payment_method: str) -> str:
    if amount_cents <= 0:
        raise DomainValidationError("Payment amount must be greater than zero")

    reference = (reference or "").strip()
    if not reference:
        raise DomainValidationError("Payment reference is required")

    if payment_method not in {m.value for m in PaymentMethod}:
        raise DomainValidationError(f"Unknown payment method: {payment_method}")

    return reference


def _is_duplicate_reference(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    # PostgreSQL names the violated constraint, SQLite lists its columns.
    return (
        DUPLICATE_REFERENCE_CONSTRAINT in message
        or "payments.property_id, payments.reference" in message
    )


def _record_payment_once(
    db: Session,
    property_id: uuid.UUID,
    tenant_id: uuid.UUID,
    reference: str,
    payment_method: str,
    amount_cents: int,
    paid_at: datetime,
    notes: str | None,
    as_of: date,
) -> PaymentRecordResult:
    # Serializes concurrent payments of the same tenant.
    tenant = tenant_repo.lock_tenant(db, tenant_id)
    if not tenant:
        raise NotFoundError(f"Tenant with id {tenant_id} not found")

    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")

    if tenant.property_id != property_id:
        raise DomainValidationError(
            f"Tenant {tenant_id} does not belong to property {property_id}"
        )

    if payment_repo.get_payment_by_reference(db, property_id, reference):
        raise DuplicateResourceError(
            f"Payment with reference {reference!r} already exists for this property"
        )

    payment = payment_repo.add_payment(
        db,
        property_id=property_id,
        tenant_id=tenant_id,
        reference=reference,
        payment_method=payment_method,
        amount_cents=amount_cents,
        paid_at=paid_at,
        notes=notes,
    )
    outcome = allocate_payment(db, payment, as_of=as_of)
    result = PaymentRecordResult(payment=payment, allocations=outcome.allocations)

    for invoice in outcome.settled_invoices:
        if invoice.lease_id is None:
            continue
        try:
            handle_invoice_settled(db, invoice)
        except (InvalidStateError, NotFoundError) as exc:
            logger.warning(
                "Payment %s settled invoice %s but the lease was not updated: %s",
                reference,
                invoice.invoice_number,
                exc,
            )
            result.warnings.append(str(exc))

    if not outcome.allocations:
        result.messages.append(
            "No open invoices found for this tenant; payment remains fully unallocated"
        )
    elif outcome.remaining_cents > 0:
        result.messages.append(
            f"{outcome.remaining_cents} cents exceed the tenant's outstanding balance and remain unallocated"
        )
    return result


def record_payment(
    db: Session,
    property_id: uuid.UUID,
    tenant_id: uuid.UUID,
    reference: str,
    payment_method: str,
    amount_cents: int,
    paid_at: datetime,
    notes: str | None = None,
    as_of: date | None = None,
) -> PaymentRecordResult:
    """
    Record a payment and allocate it to the tenant's oldest open invoices.

    Payment creation, every allocation, every invoice update and the lease
    paid-through updates commit together or not at all. A concurrent change
    to the tenant's invoices rolls the attempt back and retries it, up to
    settings.allocation_max_retries attempts.

    Raises:
        DomainValidationError: Non-positive amount, empty reference, unknown method,
            or a tenant from another property.
        DuplicateResourceError: Reference already used in this property.
        NotFoundError: Unknown tenant or property.
        ConcurrencyConflictError: Conflicts persisted through every retry.
    """
    reference = _validate_payment_input(amount_cents, reference, payment_method)
    as_of = as_of or date.today()
    attempts = settings.allocation_max_retries

    for attempt in range(1, attempts + 1):
        try:
            result = _record_payment_once(
                db,
                property_id=property_id,
                tenant_id=tenant_id,
                reference=reference,
                payment_method=payment_method,
                amount_cents=amount_cents,
                paid_at=paid_at,
                notes=notes,
                as_of=as_of,
            )
            db.commit()
        except (ConcurrencyConflictError, StaleDataError) as exc:
            db.rollback()
            if attempt == attempts:
                logger.error(
                    "Payment %s for tenant %s gave up after %s attempt(s): %s",
                    reference,
                    tenant_id,
                    attempt,
                    exc,
                )
                if isinstance(exc, ConcurrencyConflictError):
                    raise
                raise ConcurrencyConflictError(str(exc)) from exc
            logger.warning(
                "Concurrent update while recording payment %s (attempt %s/%s), retrying",
                reference,
                attempt,
                attempts,
            )
            continue
        except IntegrityError as exc:
            db.rollback()
            if not _is_duplicate_reference(exc):
                raise
            raise DuplicateResourceError(
                f"Payment with reference {reference!r} already exists for this property"
            ) from exc
        except Exception:
            db.rollback()
            raise

        db.refresh(result.payment)
        return result

    # Unreachable: the loop either returns or raises on its last attempt.
    raise ConcurrencyConflictError("Payment could not be recorded")
