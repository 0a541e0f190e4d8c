import uuid
from datetime import date

from sqlalchemy.orm import Session, selectinload

from rentledger.db.models.lease import Lease as LeaseModel
from rentledger.db.models.rent_installment import RentInstallment as InstallmentModel
from rentledger.domain.lease_term import LeaseStatus
from rentledger.errors import NotFoundError


def get_lease_by_id(db: Session, lease_id: uuid.UUID) -> LeaseModel | None:
    """Get a lease by ID with its installments loaded."""
    return (
        db.query(LeaseModel)
        .options(selectinload(LeaseModel.installments))
        .filter(LeaseModel.id == lease_id)
        .first()
    )


def get_overlapping_leases(
    db: Session,
    unit_id: uuid.UUID,
    start_date: date,
    end_date: date,
    exclude_lease_id: uuid.UUID | None = None,
) -> list[LeaseModel]:
    """Get pending or active leases on a unit whose term overlaps [start_date, end_date)."""
    query = db.query(LeaseModel).filter(
        LeaseModel.unit_id == unit_id,
        LeaseModel.status.in_((LeaseStatus.PENDING.value, LeaseStatus.ACTIVE.value)),
        LeaseModel.start_date < end_date,
        LeaseModel.end_date > start_date,
    )
    if exclude_lease_id is not None:
        query = query.filter(LeaseModel.id != exclude_lease_id)
    return query.all()


def get_occupying_leases_for_period(
    db: Session,
    property_id: uuid.UUID,
    period_start: date,
    period_end: date,
) -> list[LeaseModel]:
    """
    Get leases of a property that occupied their unit during the inclusive period.

    Covers leases active now and those that were active and have since expired
    or been terminated; a terminated lease counts up to its termination day.
    """
    leases = (
        db.query(LeaseModel)
        .filter(
            LeaseModel.property_id == property_id,
            LeaseModel.status.in_(
                (
                    LeaseStatus.ACTIVE.value,
                    LeaseStatus.EXPIRED.value,
                    LeaseStatus.TERMINATED.value,
                )
            ),
            LeaseModel.activated_at.is_not(None),
            LeaseModel.start_date <= period_end,
            # end_date is exclusive: a lease ending on the 1st does not reach that month
            LeaseModel.end_date > period_start,
        )
        .order_by(LeaseModel.unit_id, LeaseModel.start_date)
        .all()
    )
    return [
        lease
        for lease in leases
        if lease.status != LeaseStatus.TERMINATED.value
        or (lease.terminated_at is not None and lease.terminated_at.date() >= period_start)
    ]


def get_expired_active_leases(db: Session, as_of: date) -> list[LeaseModel]:
    """Get active leases whose end date precedes as_of."""
    return (
        db.query(LeaseModel)
        .filter(
            LeaseModel.status == LeaseStatus.ACTIVE.value,
            LeaseModel.end_date < as_of,
        )
        .all()
    )


def get_all_leases_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
    tenant_id: uuid.UUID | None = None,
    unit_id: uuid.UUID | None = None,
    status: str | None = None,
) -> tuple[list[LeaseModel], int]:
    """Get all leases with pagination and optional filters, newest start first."""
    query = db.query(LeaseModel)
    if property_id is not None:
        query = query.filter(LeaseModel.property_id == property_id)
    if tenant_id is not None:
        query = query.filter(LeaseModel.tenant_id == tenant_id)
    if unit_id is not None:
        query = query.filter(LeaseModel.unit_id == unit_id)
    if status is not None:
        query = query.filter(LeaseModel.status == status)

    total = query.count()
    skip = (page - 1) * page_size
    leases = (
        query.order_by(LeaseModel.start_date.desc(), LeaseModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return leases, total


def add_lease(db: Session, **fields) -> LeaseModel:
    """Stage a new lease. Flushes but does not commit."""
    db_lease = LeaseModel(**fields)
    db.add(db_lease)
    db.flush()
    return db_lease


def add_installment(
    db: Session,
    lease: LeaseModel,
    sequence: int,
    due_date: date,
    amount_cents: int,
    status: str,
    invoice_id: uuid.UUID | None = None,
) -> InstallmentModel:
    """Stage a rent installment under a lease. Flushes but does not commit."""
    installment = InstallmentModel(
        sequence=sequence,
        due_date=due_date,
        amount_cents=amount_cents,
        amount_paid_cents=0,
        status=status,
        invoice_id=invoice_id,
    )
    lease.installments.append(installment)
    db.flush()
    return installment


def update_lease(db: Session, lease_id: uuid.UUID, **kwargs) -> LeaseModel:
    """
    Update a lease. Only updates fields that are explicitly provided.

    Fields not provided are not updated.
    """
    lease = get_lease_by_id(db, lease_id)
    if not lease:
        raise NotFoundError("Lease not found")

    # Rent and term are fixed once billed.
    if "security_deposit_cents" in kwargs:
        lease.security_deposit_cents = kwargs["security_deposit_cents"]

    db.commit()
    db.refresh(lease)
    return lease


def get_installment_by_id(db: Session, installment_id: uuid.UUID) -> InstallmentModel | None:
    """Get a rent installment by ID."""
    return db.query(InstallmentModel).filter(InstallmentModel.id == installment_id).first()


def get_all_installments_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    lease_id: uuid.UUID | None = None,
    status: str | None = None,
) -> tuple[list[InstallmentModel], int]:
    """Get rent installments with pagination and optional filters, in due-date order."""
    query = db.query(InstallmentModel)
    if lease_id is not None:
        query = query.filter(InstallmentModel.lease_id == lease_id)
    if status is not None:
        query = query.filter(InstallmentModel.status == status)

    total = query.count()
    skip = (page - 1) * page_size
    installments = (
        query.order_by(
            InstallmentModel.due_date,
            InstallmentModel.lease_id,
            InstallmentModel.sequence,
        )
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return installments, total


def delete_lease(db: Session, lease: LeaseModel, invoices: list) -> None:
    """Delete a lease together with its installments and generated invoices. Commits."""
    for invoice in invoices:
        db.delete(invoice)
    db.flush()
    db.delete(lease)
    db.commit()
