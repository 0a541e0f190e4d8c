import uuid
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from rentledger.db.models.payment import Payment as PaymentModel
from rentledger.db.models.payment import PaymentAllocation as AllocationModel


def get_payment_by_id(db: Session, payment_id: uuid.UUID) -> PaymentModel | None:
    """Get a payment by ID with its allocations loaded."""
    return (
        db.query(PaymentModel)
        .options(selectinload(PaymentModel.allocations))
        .filter(PaymentModel.id == payment_id)
        .first()
    )


def get_payment_by_reference(
    db: Session, property_id: uuid.UUID, reference: str
) -> PaymentModel | None:
    """Get a payment by property and reference. Used to check for duplicates."""
    return (
        db.query(PaymentModel)
        .filter(
            PaymentModel.property_id == property_id,
            PaymentModel.reference == reference,
        )
        .first()
    )


def get_all_payments_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
    tenant_id: uuid.UUID | None = None,
) -> tuple[list[PaymentModel], int]:
    """Get all payments with pagination and optional filters, newest first."""
    query = db.query(PaymentModel)
    if property_id is not None:
        query = query.filter(PaymentModel.property_id == property_id)
    if tenant_id is not None:
        query = query.filter(PaymentModel.tenant_id == tenant_id)

    total = query.count()
    skip = (page - 1) * page_size
    payments = (
        query.options(selectinload(PaymentModel.allocations))
        .order_by(PaymentModel.paid_at.desc(), PaymentModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return payments, total


def add_payment(
    db: Session,
    property_id: uuid.UUID,
    tenant_id: uuid.UUID,
    reference: str,
    payment_method: str,
    amount_cents: int,
    paid_at: datetime,
    notes: str | None = None,
) -> PaymentModel:
    """Stage a new payment with its full amount unallocated. Does not flush or commit."""
    db_payment = PaymentModel(
        property_id=property_id,
        tenant_id=tenant_id,
        reference=reference,
        payment_method=payment_method,
        amount_cents=amount_cents,
        unallocated_cents=amount_cents,
        paid_at=paid_at,
        notes=notes,
    )
    db.add(db_payment)
    return db_payment


def add_allocation(
    db: Session,
    payment: PaymentModel,
    invoice_id: uuid.UUID,
    amount_cents: int,
    sequence: int,
) -> AllocationModel:
    """Stage an append-only allocation entry. Does not flush or commit."""
    allocation = AllocationModel(
        invoice_id=invoice_id,
        amount_cents=amount_cents,
        sequence=sequence,
    )
    payment.allocations.append(allocation)
    db.add(allocation)
    return allocation


def sum_allocations_for_payment(db: Session, payment_id: uuid.UUID) -> int:
    total = (
        db.query(func.coalesce(func.sum(AllocationModel.amount_cents), 0))
        .filter(AllocationModel.payment_id == payment_id)
        .scalar()
    )
    return int(total)


def sum_allocations_for_invoice(db: Session, invoice_id: uuid.UUID) -> int:
    total = (
        db.query(func.coalesce(func.sum(AllocationModel.amount_cents), 0))
        .filter(AllocationModel.invoice_id == invoice_id)
        .scalar()
    )
    return int(total)


def count_allocations_for_invoices(db: Session, invoice_ids: list[uuid.UUID]) -> int:
    if not invoice_ids:
        return 0
    return (
        db.query(AllocationModel)
        .filter(AllocationModel.invoice_id.in_(invoice_ids))
        .count()
    )


def get_allocation_by_id(db: Session, allocation_id: uuid.UUID) -> AllocationModel | None:
    """Get an allocation by ID."""
    return db.query(AllocationModel).filter(AllocationModel.id == allocation_id).first()


def get_all_allocations_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    payment_id: uuid.UUID | None = None,
    invoice_id: uuid.UUID | None = None,
) -> tuple[list[AllocationModel], int]:
    """Get allocations with pagination and optional filters, in allocation order."""
    query = db.query(AllocationModel)
    if payment_id is not None:
        query = query.filter(AllocationModel.payment_id == payment_id)
    if invoice_id is not None:
        query = query.filter(AllocationModel.invoice_id == invoice_id)

    total = query.count()
    skip = (page - 1) * page_size
    allocations = (
        query.order_by(
            AllocationModel.allocated_at,
            AllocationModel.payment_id,
            AllocationModel.sequence,
        )
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return allocations, total
