import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.payment as payment_repo
from rentledger.api.deps import get_db, require_roles, require_staff
from rentledger.db.base import utcnow
from rentledger.db.models.user import User
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.schemas.payment import (
    Payment,
    PaymentAllocation,
    PaymentCreate,
    PaymentRecordResponse,
)
from rentledger.services.payment import get_payment, record_payment

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", response_model=PaymentRecordResponse, status_code=status.HTTP_201_CREATED)
def create_new_payment(
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(
        require_roles("owner", "admin", "property_manager", "accountant")
    ),
):
    """
    Record a payment and allocate it to the tenant's oldest open invoices.

    The response lists the allocations made, the unallocated remainder, lease
    warnings that did not block the payment and informational messages.
    """
    result = record_payment(
        db,
        property_id=payment_data.property_id,
        tenant_id=payment_data.tenant_id,
        reference=payment_data.reference,
        payment_method=payment_data.payment_method.value,
        amount_cents=payment_data.amount_cents,
        paid_at=payment_data.paid_at or utcnow(),
        notes=payment_data.notes,
    )
    return PaymentRecordResponse(
        payment=Payment.model_validate(result.payment),
        allocations=[PaymentAllocation.model_validate(a) for a in result.allocations],
        unallocated_cents=result.payment.unallocated_cents,
        warnings=result.warnings,
        messages=result.messages,
    )


@router.get("", response_model=PaginatedResponse[Payment])
def get_all_payments(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    tenant_id: uuid.UUID | None = Query(None, description="Filter by tenant"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    payments, total = payment_repo.get_all_payments_paginated(
        db, page=page, page_size=page_size, property_id=property_id, tenant_id=tenant_id
    )
    return PaginatedResponse(
        items=[Payment.model_validate(p) for p in payments],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{payment_id}", response_model=Payment)
def get_payment_by_id(
    payment_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return Payment.model_validate(get_payment(db, payment_id))
