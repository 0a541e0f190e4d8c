import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import rentledger.repositories.lease as lease_repo
from rentledger.api.deps import get_db, require_roles
from rentledger.db.models.user import User
from rentledger.errors import NotFoundError
from rentledger.schemas.lease import RentInstallment
from rentledger.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/rent_installments", tags=["rent_installments"])

INSTALLMENT_READERS = ("owner", "admin", "property_manager", "accountant")


@router.get("", response_model=PaginatedResponse[RentInstallment])
def get_all_installments(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    lease_id: uuid.UUID | None = Query(None, description="Filter by lease"),
    status_filter: str | None = Query(None, alias="status", description="Filter by installment status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*INSTALLMENT_READERS)),
):
    installments, total = lease_repo.get_all_installments_paginated(
        db, page=page, page_size=page_size, lease_id=lease_id, status=status_filter
    )
    return PaginatedResponse(
        items=[RentInstallment.model_validate(i) for i in installments],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{installment_id}", response_model=RentInstallment)
def get_installment_by_id(
    installment_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*INSTALLMENT_READERS)),
):
    installment = lease_repo.get_installment_by_id(db, installment_id)
    if not installment:
        raise NotFoundError("Rent installment not found")
    return RentInstallment.model_validate(installment)
