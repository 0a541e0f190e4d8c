import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.lease as lease_repo
from rentledger.api.deps import get_db, require_roles, require_staff
from rentledger.db.models.user import User
from rentledger.schemas.lease import Lease, LeaseCreate, LeaseUpdate
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.services.lease import (
    activate_lease,
    create_lease,
    delete_lease,
    get_lease,
    terminate_lease,
    update_lease,
)

router = APIRouter(prefix="/leases", tags=["leases"])

LEASE_WRITERS = ("owner", "admin", "property_manager")


@router.post("", response_model=Lease, status_code=status.HTTP_201_CREATED)
def create_new_lease(
    lease_data: LeaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*LEASE_WRITERS)),
):
    """
    Create a lease and bill its term.

    Term billing issues one rent invoice for rent * plan_months due on the
    start date; monthly billing issues one rent invoice per month.
    """
    lease = create_lease(
        db,
        property_id=lease_data.property_id,
        unit_id=lease_data.unit_id,
        tenant_id=lease_data.tenant_id,
        start_date=lease_data.start_date,
        end_date=lease_data.end_date,
        plan_months=lease_data.plan_months,
        rent_cents=lease_data.rent_cents,
        security_deposit_cents=lease_data.security_deposit_cents,
        billing_mode=lease_data.billing_mode.value,
        status=lease_data.status.value,
    )
    return Lease.model_validate(lease)


@router.get("", response_model=PaginatedResponse[Lease])
def get_all_leases(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    tenant_id: uuid.UUID | None = Query(None, description="Filter by tenant"),
    unit_id: uuid.UUID | None = Query(None, description="Filter by unit"),
    status_filter: str | None = Query(None, alias="status", description="Filter by lease status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    leases, total = lease_repo.get_all_leases_paginated(
        db,
        page=page,
        page_size=page_size,
        property_id=property_id,
        tenant_id=tenant_id,
        unit_id=unit_id,
        status=status_filter,
    )
    return PaginatedResponse(
        items=[Lease.model_validate(lease) for lease in leases],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{lease_id}", response_model=Lease)
def get_lease_by_id(
    lease_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return Lease.model_validate(get_lease(db, lease_id))


@router.patch("/{lease_id}", response_model=Lease)
def update_lease_by_id(
    lease_id: uuid.UUID,
    lease_data: LeaseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*LEASE_WRITERS)),
):
    """Update a lease. Only the security deposit can change once the term is billed."""
    update_data = lease_data.model_dump(exclude_unset=True)
    return Lease.model_validate(update_lease(db, lease_id=lease_id, **update_data))


@router.patch("/{lease_id}/activate", response_model=Lease)
def activate_lease_by_id(
    lease_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*LEASE_WRITERS)),
):
    return Lease.model_validate(activate_lease(db, lease_id))


@router.patch("/{lease_id}/terminate", response_model=Lease)
def terminate_lease_by_id(
    lease_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*LEASE_WRITERS)),
):
    """Terminate a lease. Its paid-through date is kept as is."""
    return Lease.model_validate(terminate_lease(db, lease_id))


@router.delete("/{lease_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lease_by_id(
    lease_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("owner", "admin")),
):
    """Delete a lease with its installments and invoices, unless payments touched them."""
    delete_lease(db, lease_id)
