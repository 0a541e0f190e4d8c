import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.invoice as invoice_repo
from rentledger.api.deps import get_db, require_roles, require_staff
from rentledger.db.models.user import User
from rentledger.schemas.invoice import (
    Invoice,
    InvoiceCreate,
    InvoiceItemCreate,
    InvoiceUpdate,
    OverdueRefreshResult,
)
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.services.invoice import (
    add_invoice_item,
    create_invoice,
    get_invoice,
    refresh_overdue_invoices,
    update_invoice,
    void_invoice,
)

router = APIRouter(prefix="/invoices", tags=["invoices"])

INVOICE_WRITERS = ("owner", "admin", "property_manager", "accountant")
INVOICE_EDITORS = ("owner", "admin", "accountant")


@router.post("", response_model=Invoice, status_code=status.HTTP_201_CREATED)
def create_new_invoice(
    invoice_data: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*INVOICE_WRITERS)),
):
    """
    Create an invoice, issued immediately unless `issue` is false.

    The amount is either given directly or computed from the line items.
    """
    invoice = create_invoice(
        db,
        property_id=invoice_data.property_id,
        invoice_type=invoice_data.invoice_type.value,
        issued_on=invoice_data.issued_on,
        due_on=invoice_data.due_on,
        amount_cents=invoice_data.amount_cents,
        items=[item.model_dump() for item in invoice_data.items] if invoice_data.items else None,
        tenant_id=invoice_data.tenant_id,
        unit_id=invoice_data.unit_id,
        lease_id=invoice_data.lease_id,
        notes=invoice_data.notes,
        issue=invoice_data.issue,
    )
    return Invoice.model_validate(invoice)


@router.get("", response_model=PaginatedResponse[Invoice])
def get_all_invoices(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    tenant_id: uuid.UUID | None = Query(None, description="Filter by tenant"),
    lease_id: uuid.UUID | None = Query(None, description="Filter by lease"),
    status_filter: str | None = Query(None, alias="status", description="Filter by invoice status"),
    invoice_type: str | None = Query(None, description="Filter by invoice type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    invoices, total = invoice_repo.get_all_invoices_paginated(
        db,
        page=page,
        page_size=page_size,
        property_id=property_id,
        tenant_id=tenant_id,
        lease_id=lease_id,
        status=status_filter,
        invoice_type=invoice_type,
    )
    return PaginatedResponse(
        items=[Invoice.model_validate(invoice) for invoice in invoices],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/refresh-overdue", response_model=OverdueRefreshResult)
def refresh_overdue(
    as_of: date | None = Query(None, description="Reference date (defaults to today)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*INVOICE_EDITORS)),
):
    """Mark issued and partial invoices past their due date as overdue."""
    as_of = as_of or date.today()
    updated = refresh_overdue_invoices(db, as_of=as_of)
    return OverdueRefreshResult(as_of=as_of, updated=updated)


@router.get("/{invoice_id}", response_model=Invoice)
def get_invoice_by_id(
    invoice_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return Invoice.model_validate(get_invoice(db, invoice_id))


@router.patch("/{invoice_id}", response_model=Invoice)
def update_invoice_by_id(
    invoice_id: uuid.UUID,
    invoice_data: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*INVOICE_EDITORS)),
):
    """
    Update an invoice.

    Fields not included in the request are not updated. Dates can only change
    while the invoice is a draft; status accepts 'issued' and 'void'.
    """
    update_data = invoice_data.model_dump(exclude_unset=True)
    invoice = update_invoice(db, invoice_id=invoice_id, **update_data)
    return Invoice.model_validate(invoice)


@router.patch("/{invoice_id}/void", response_model=Invoice)
def void_invoice_by_id(
    invoice_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*INVOICE_EDITORS)),
):
    """Void an invoice. Existing allocations are kept."""
    return Invoice.model_validate(void_invoice(db, invoice_id))


@router.post("/{invoice_id}/items", response_model=Invoice, status_code=status.HTTP_201_CREATED)
def add_item_to_invoice(
    invoice_id: uuid.UUID,
    item_data: InvoiceItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*INVOICE_EDITORS)),
):
    """Add a line item to a draft invoice."""
    invoice = add_invoice_item(
        db,
        invoice_id=invoice_id,
        description=item_data.description,
        quantity=item_data.quantity,
        unit_price_cents=item_data.unit_price_cents,
    )
    return Invoice.model_validate(invoice)
