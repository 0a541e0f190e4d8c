import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import rentledger.repositories.payment as payment_repo
from rentledger.api.deps import get_db, require_roles
from rentledger.db.models.user import User
from rentledger.errors import NotFoundError
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.schemas.payment import PaymentAllocation

router = APIRouter(prefix="/payment_allocations", tags=["payment_allocations"])

ALLOCATION_READERS = ("owner", "admin", "accountant")


@router.get("", response_model=PaginatedResponse[PaymentAllocation])
def get_all_allocations(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    payment_id: uuid.UUID | None = Query(None, description="Filter by payment"),
    invoice_id: uuid.UUID | None = Query(None, description="Filter by invoice"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ALLOCATION_READERS)),
):
    allocations, total = payment_repo.get_all_allocations_paginated(
        db, page=page, page_size=page_size, payment_id=payment_id, invoice_id=invoice_id
    )
    return PaginatedResponse(
        items=[PaymentAllocation.model_validate(a) for a in allocations],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{allocation_id}", response_model=PaymentAllocation)
def get_allocation_by_id(
    allocation_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ALLOCATION_READERS)),
):
    allocation = payment_repo.get_allocation_by_id(db, allocation_id)
    if not allocation:
        raise NotFoundError("Payment allocation not found")
    return PaymentAllocation.model_validate(allocation)
