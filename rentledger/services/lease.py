import logging
import uuid
from datetime import date

from sqlalchemy.orm import Session

import rentledger.repositories.invoice as invoice_repo
import rentledger.repositories.lease as lease_repo
import rentledger.repositories.payment as payment_repo
import rentledger.repositories.property as property_repo
import rentledger.repositories.tenant as tenant_repo
import rentledger.repositories.unit as unit_repo
from rentledger.db.base import utcnow
from rentledger.db.models.lease import Lease as LeaseModel
from rentledger.domain.enums import UnitStatus
from rentledger.domain.invoice_status import InvoiceStatusPolicy, InvoiceType
from rentledger.domain.lease_term import (
    ALLOWED_PLAN_MONTHS,
    BillingMode,
    LeaseStatus,
    LeaseTermPlan,
)
from rentledger.errors import (
    DomainValidationError,
    DuplicateResourceError,
    InvalidStateError,
    NotFoundError,
)
from rentledger.services.invoice import stage_invoice

logger = logging.getLogger(__name__)


def get_lease(db: Session, lease_id: uuid.UUID) -> LeaseModel:
    lease = lease_repo.get_lease_by_id(db, lease_id)
    if not lease:
        raise NotFoundError("Lease not found")
    return lease


def create_lease(
    db: Session,
    property_id: uuid.UUID,
    unit_id: uuid.UUID,
    tenant_id: uuid.UUID,
    start_date: date,
    plan_months: int,
    rent_cents: int,
    security_deposit_cents: int = 0,
    status: str = LeaseStatus.PENDING.value,
    billing_mode: str = BillingMode.TERM.value,
    end_date: date | None = None,
    as_of: date | None = None,
) -> LeaseModel:
    """
    Create a lease together with its term billing.

    - Plan must be 3, 6 or 12 months; end_date is start_date + plan_months
    - Term billing creates one installment (rent * plan_months) due on start_date;
      monthly billing creates one installment per month
    - Every installment is billed by its own issued rent invoice
    - Validates property, unit and tenant exist and belong together
    - Validates no pending or active lease overlaps on the same unit
    """
    if plan_months not in ALLOWED_PLAN_MONTHS:
        raise DomainValidationError("Plan must be 3, 6, or 12 months")
    if rent_cents <= 0:
        raise DomainValidationError("Rent must be greater than zero")
    if security_deposit_cents < 0:
        raise DomainValidationError("Security deposit cannot be negative")
    if status not in (LeaseStatus.PENDING.value, LeaseStatus.ACTIVE.value):
        raise DomainValidationError("A new lease must be 'pending' or 'active'")
    if billing_mode not in {m.value for m in BillingMode}:
        raise DomainValidationError(f"Unknown billing mode: {billing_mode}")

    plan = LeaseTermPlan(
        start_date=start_date,
        plan_months=plan_months,
        rent_cents=rent_cents,
        billing_mode=BillingMode(billing_mode),
    )
    if end_date is not None and end_date != plan.end_date:
        raise DomainValidationError(
            f"End date for a {plan_months}-month plan starting {start_date} must be {plan.end_date}"
        )

    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")

    unit = unit_repo.get_unit_by_id(db, unit_id)
    if not unit:
        raise NotFoundError(f"Unit with id {unit_id} not found")
    if unit.property_id != property_id:
        raise DomainValidationError(f"Unit {unit_id} does not belong to property {property_id}")

    tenant = tenant_repo.get_tenant_by_id(db, tenant_id)
    if not tenant:
        raise NotFoundError(f"Tenant with id {tenant_id} not found")
    if tenant.property_id != property_id:
        raise DomainValidationError(
            f"Tenant {tenant_id} does not belong to property {property_id}"
        )

    if lease_repo.get_overlapping_leases(db, unit_id, start_date, plan.end_date):
        raise DuplicateResourceError(
            f"Unit {unit.unit_number} already has a lease overlapping {start_date} - {plan.end_date}"
        )

    as_of = as_of or date.today()
    policy = InvoiceStatusPolicy(as_of=as_of)

    lease = lease_repo.add_lease(
        db,
        property_id=property_id,
        unit_id=unit_id,
        tenant_id=tenant_id,
        start_date=start_date,
        end_date=plan.end_date,
        plan_months=plan_months,
        billing_mode=billing_mode,
        status=status,
        rent_cents=rent_cents,
        security_deposit_cents=security_deposit_cents,
    )

    for scheduled in plan.installments():
        if plan.billing_mode == BillingMode.TERM:
            notes = f"Rent {start_date} to {plan.end_date} ({plan_months} months)"
        else:
            notes = f"Rent installment {scheduled.sequence}/{plan_months} due {scheduled.due_date}"
        invoice = stage_invoice(
            db,
            property_id=property_id,
            invoice_type=InvoiceType.RENT.value,
            issued_on=start_date,
            due_on=scheduled.due_date,
            amount_cents=scheduled.amount_cents,
            tenant_id=tenant_id,
            unit_id=unit_id,
            lease_id=lease.id,
            notes=notes,
            as_of=as_of,
        )
        lease_repo.add_installment(
            db,
            lease,
            sequence=scheduled.sequence,
            due_date=scheduled.due_date,
            amount_cents=scheduled.amount_cents,
            status=policy.resolve_installment(
                amount_cents=scheduled.amount_cents,
                amount_paid_cents=0,
                due_date=scheduled.due_date,
            ).value,
            invoice_id=invoice.id,
        )

    if status == LeaseStatus.ACTIVE.value:
        lease.activated_at = utcnow()
        unit.status = UnitStatus.OCCUPIED.value

    db.commit()
    db.refresh(lease)
    logger.info(
        "Created %s lease %s for unit %s (%s-month plan, %s installment(s))",
        billing_mode,
        lease.id,
        unit.unit_number,
        plan_months,
        len(lease.installments),
    )
    return lease


def update_lease(db: Session, lease_id: uuid.UUID, **update_fields) -> LeaseModel:
    """
    Update a lease's security deposit.

    Rent and term are fixed once the lease is billed; create a new lease to
    change them.
    """
    lease = get_lease(db, lease_id)
    if lease.status in (LeaseStatus.TERMINATED.value, LeaseStatus.EXPIRED.value):
        raise InvalidStateError(f"Cannot update a {lease.status} lease")

    update_dict = {}
    if update_fields.get("security_deposit_cents") is not None:
        if update_fields["security_deposit_cents"] < 0:
            raise DomainValidationError("Security deposit cannot be negative")
        update_dict["security_deposit_cents"] = update_fields["security_deposit_cents"]

    return lease_repo.update_lease(db, lease_id=lease_id, **update_dict)


def activate_lease(db: Session, lease_id: uuid.UUID) -> LeaseModel:
    """Move a pending lease to active and mark its unit occupied."""
    lease = get_lease(db, lease_id)
    if lease.status != LeaseStatus.PENDING.value:
        raise InvalidStateError(f"Only pending leases can be activated; lease is {lease.status}")

    lease.status = LeaseStatus.ACTIVE.value
    lease.activated_at = utcnow()
    lease.unit.status = UnitStatus.OCCUPIED.value
    db.commit()
    db.refresh(lease)
    return lease


def terminate_lease(db: Session, lease_id: uuid.UUID) -> LeaseModel:
    """
    Terminate a pending or active lease.

    paid_through_date is left untouched: settled rent is never rolled back.
    """
    lease = get_lease(db, lease_id)
    if lease.status not in (LeaseStatus.PENDING.value, LeaseStatus.ACTIVE.value):
        raise InvalidStateError(f"Cannot terminate a {lease.status} lease")

    lease.status = LeaseStatus.TERMINATED.value
    lease.terminated_at = utcnow()
    lease.unit.status = UnitStatus.AVAILABLE.value
    db.commit()
    db.refresh(lease)
    logger.info("Terminated lease %s (paid through %s)", lease.id, lease.paid_through_date)
    return lease


def expire_leases(db: Session, as_of: date | None = None) -> int:
    """Mark active leases whose end date has passed as expired. Returns the count."""
    as_of = as_of or date.today()
    leases = lease_repo.get_expired_active_leases(db, as_of)
    for lease in leases:
        lease.status = LeaseStatus.EXPIRED.value
    db.commit()
    return len(leases)


def delete_lease(db: Session, lease_id: uuid.UUID) -> None:
    """
    Delete a lease with its installments and the invoices generated for it.

    Raises:
        InvalidStateError: If any of the lease's invoices already received
            allocations; those are audit records and must stay.
    """
    lease = get_lease(db, lease_id)
    invoices = invoice_repo.get_invoices_by_lease_id(db, lease.id)
    if payment_repo.count_allocations_for_invoices(db, [i.id for i in invoices]):
        raise InvalidStateError(
            "Cannot delete lease: payments have been allocated to its invoices"
        )

    lease_repo.delete_lease(db, lease, invoices)
    logger.info("Deleted lease %s with %s invoice(s)", lease_id, len(invoices))
