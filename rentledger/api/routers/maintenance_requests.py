import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.maintenance_request as maintenance_repo
from rentledger.api.deps import get_db, require_roles, require_staff
from rentledger.db.models.user import User
from rentledger.schemas.maintenance_request import (
    MaintenanceRequest,
    MaintenanceRequestCreate,
    MaintenanceRequestUpdate,
)
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.services.maintenance import (
    create_maintenance_request,
    get_maintenance_request,
    update_maintenance_request,
)

router = APIRouter(prefix="/maintenance_requests", tags=["maintenance_requests"])

MAINTENANCE_WRITERS = ("owner", "admin", "property_manager", "caretaker")


@router.post("", response_model=MaintenanceRequest, status_code=status.HTTP_201_CREATED)
def create_new_maintenance_request(
    request_data: MaintenanceRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*MAINTENANCE_WRITERS)),
):
    request = create_maintenance_request(
        db,
        property_id=request_data.property_id,
        unit_id=request_data.unit_id,
        tenant_id=request_data.tenant_id,
        title=request_data.title,
        description=request_data.description,
        priority=request_data.priority.value,
        category=request_data.category.value,
        estimated_cost_cents=request_data.estimated_cost_cents,
        requested_at=request_data.requested_at,
        notes=request_data.notes,
    )
    return MaintenanceRequest.model_validate(request)


@router.get("", response_model=PaginatedResponse[MaintenanceRequest])
def get_all_maintenance_requests(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    unit_id: uuid.UUID | None = Query(None, description="Filter by unit"),
    status_filter: str | None = Query(None, alias="status", description="Filter by status"),
    priority: str | None = Query(None, description="Filter by priority"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    requests, total = maintenance_repo.get_all_maintenance_requests_paginated(
        db,
        page=page,
        page_size=page_size,
        property_id=property_id,
        unit_id=unit_id,
        status=status_filter,
        priority=priority,
    )
    return PaginatedResponse(
        items=[MaintenanceRequest.model_validate(r) for r in requests],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{request_id}", response_model=MaintenanceRequest)
def get_maintenance_request_by_id(
    request_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return MaintenanceRequest.model_validate(get_maintenance_request(db, request_id))


@router.patch("/{request_id}", response_model=MaintenanceRequest)
def update_maintenance_request_by_id(
    request_id: uuid.UUID,
    request_data: MaintenanceRequestUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*MAINTENANCE_WRITERS)),
):
    """Update a maintenance request's details or move it through its workflow."""
    update_data = request_data.model_dump(exclude_unset=True, mode="json")
    request = update_maintenance_request(db, request_id=request_id, **update_data)
    return MaintenanceRequest.model_validate(request)
