import uuid
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from rentledger.db.models.invoice import Invoice as InvoiceModel
from rentledger.db.models.invoice import InvoiceItem as InvoiceItemModel
from rentledger.domain.invoice_status import (
    OPEN_INVOICE_STATUSES,
    InvoiceStatus,
    InvoiceType,
)


def get_invoice_by_id(db: Session, invoice_id: uuid.UUID) -> InvoiceModel | None:
    """Get an invoice by ID with its line items loaded."""
    return (
        db.query(InvoiceModel)
        .options(selectinload(InvoiceModel.items))
        .filter(InvoiceModel.id == invoice_id)
        .first()
    )


def get_open_invoices_for_tenant(
    db: Session,
    tenant_id: uuid.UUID,
    property_id: uuid.UUID | None = None,
) -> list[InvoiceModel]:
    """
    Get a tenant's invoices that can receive allocations, oldest first.

    Open means status issued, partial or overdue with a positive balance.
    The ordering (due_on, issued_on, id) is total, so the same ledger state
    always yields the same sequence.
    """
    query = db.query(InvoiceModel).filter(
        InvoiceModel.tenant_id == tenant_id,
        InvoiceModel.status.in_(OPEN_INVOICE_STATUSES),
        InvoiceModel.balance_cents > 0,
    )
    if property_id is not None:
        query = query.filter(InvoiceModel.property_id == property_id)

    return query.order_by(
        InvoiceModel.due_on.asc(),
        InvoiceModel.issued_on.asc(),
        InvoiceModel.id.asc(),
    ).all()


def get_outstanding_cents_for_tenant(db: Session, tenant_id: uuid.UUID) -> int:
    """Sum of balances over the tenant's open invoices."""
    total = (
        db.query(func.coalesce(func.sum(InvoiceModel.balance_cents), 0))
        .filter(
            InvoiceModel.tenant_id == tenant_id,
            InvoiceModel.status.in_(OPEN_INVOICE_STATUSES),
        )
        .scalar()
    )
    return int(total)


def get_invoices_by_lease_id(db: Session, lease_id: uuid.UUID) -> list[InvoiceModel]:
    """Get all invoices generated for a lease."""
    return (
        db.query(InvoiceModel)
        .filter(InvoiceModel.lease_id == lease_id)
        .order_by(InvoiceModel.due_on, InvoiceModel.id)
        .all()
    )


def get_past_due_candidates(db: Session, as_of: date) -> list[InvoiceModel]:
    """Get issued or partial invoices whose due date precedes as_of."""
    return (
        db.query(InvoiceModel)
        .filter(
            InvoiceModel.status.in_(
                (InvoiceStatus.ISSUED.value, InvoiceStatus.PARTIAL.value)
            ),
            InvoiceModel.due_on < as_of,
        )
        .order_by(InvoiceModel.due_on, InvoiceModel.id)
        .all()
    )


def get_billed_water_invoice(
    db: Session,
    property_id: uuid.UUID,
    unit_id: uuid.UUID,
    billing_period: date,
) -> InvoiceModel | None:
    """Get the non-void water invoice of a unit for a billing period, if any."""
    return (
        db.query(InvoiceModel)
        .filter(
            InvoiceModel.property_id == property_id,
            InvoiceModel.unit_id == unit_id,
            InvoiceModel.billing_period == billing_period,
            InvoiceModel.invoice_type == InvoiceType.WATER.value,
            InvoiceModel.status != InvoiceStatus.VOID.value,
        )
        .first()
    )


def get_all_invoices_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
    tenant_id: uuid.UUID | None = None,
    lease_id: uuid.UUID | None = None,
    status: str | None = None,
    invoice_type: str | None = None,
) -> tuple[list[InvoiceModel], int]:
    """
    Get all invoices with pagination and optional filters.

    Returns:
        Tuple of (list of invoices, total count), newest due date first.
    """
    query = db.query(InvoiceModel)

    if property_id is not None:
        query = query.filter(InvoiceModel.property_id == property_id)
    if tenant_id is not None:
        query = query.filter(InvoiceModel.tenant_id == tenant_id)
    if lease_id is not None:
        query = query.filter(InvoiceModel.lease_id == lease_id)
    if status is not None:
        query = query.filter(InvoiceModel.status == status)
    if invoice_type is not None:
        query = query.filter(InvoiceModel.invoice_type == invoice_type)

    total = query.count()
    skip = (page - 1) * page_size
    invoices = (
        query.options(selectinload(InvoiceModel.items))
        .order_by(InvoiceModel.due_on.desc(), InvoiceModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return invoices, total


def generate_invoice_number(issued_on: date) -> str:
    return f"INV-{issued_on:%Y%m}-{uuid.uuid4().hex[:8].upper()}"


def add_invoice(
    db: Session,
    property_id: uuid.UUID,
    invoice_type: str,
    status: str,
    amount_cents: int,
    issued_on: date,
    due_on: date,
    tenant_id: uuid.UUID | None = None,
    unit_id: uuid.UUID | None = None,
    lease_id: uuid.UUID | None = None,
    billing_period: date | None = None,
    notes: str | None = None,
    items: list[dict] | None = None,
) -> InvoiceModel:
    """
    Stage a new invoice (and its line items) in the session.

    Flushes but does not commit: the caller owns the unit of work.
    """
    db_invoice = InvoiceModel(
        property_id=property_id,
        tenant_id=tenant_id,
        unit_id=unit_id,
        lease_id=lease_id,
        invoice_number=generate_invoice_number(issued_on),
        invoice_type=invoice_type,
        status=status,
        amount_cents=amount_cents,
        amount_paid_cents=0,
        issued_on=issued_on,
        due_on=due_on,
        billing_period=billing_period,
        notes=notes,
    )
    for item in items or []:
        db_invoice.items.append(
            InvoiceItemModel(
                description=item["description"],
                quantity=item["quantity"],
                unit_price_cents=item["unit_price_cents"],
                amount_cents=item["quantity"] * item["unit_price_cents"],
            )
        )
    db.add(db_invoice)
    db.flush()
    return db_invoice


def add_invoice_item(
    db: Session,
    invoice: InvoiceModel,
    description: str,
    quantity: int,
    unit_price_cents: int,
) -> InvoiceItemModel:
    """Stage a line item on an invoice. Flushes but does not commit."""
    item = InvoiceItemModel(
        description=description,
        quantity=quantity,
        unit_price_cents=unit_price_cents,
        amount_cents=quantity * unit_price_cents,
    )
    invoice.items.append(item)
    db.flush()
    return item
