import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.tenant as tenant_repo
from rentledger.api.deps import get_db, require_roles, require_staff
from rentledger.db.models.user import User
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.schemas.tenant import Tenant, TenantCreate, TenantDetail
from rentledger.services.tenant import create_tenant, get_outstanding_cents, get_tenant

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.post("", response_model=Tenant, status_code=status.HTTP_201_CREATED)
def create_new_tenant(
    tenant_data: TenantCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("owner", "admin", "property_manager")),
):
    tenant = create_tenant(
        db,
        property_id=tenant_data.property_id,
        full_name=tenant_data.full_name,
        email=tenant_data.email,
        phone=tenant_data.phone,
        status=tenant_data.status.value,
    )
    return Tenant.model_validate(tenant)


@router.get("", response_model=PaginatedResponse[Tenant])
def get_all_tenants(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    status_filter: str | None = Query(None, alias="status", description="Filter by tenant status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    tenants, total = tenant_repo.get_all_tenants_paginated(
        db, page=page, page_size=page_size, property_id=property_id, status=status_filter
    )
    return PaginatedResponse(
        items=[Tenant.model_validate(t) for t in tenants],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{tenant_id}", response_model=TenantDetail)
def get_tenant_by_id(
    tenant_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Get a tenant with the outstanding balance of their open invoices."""
    tenant = get_tenant(db, tenant_id)
    return TenantDetail(
        **Tenant.model_validate(tenant).model_dump(),
        outstanding_cents=get_outstanding_cents(db, tenant_id),
    )
