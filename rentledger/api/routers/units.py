import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.unit as unit_repo
from rentledger.api.deps import get_db, require_roles, require_staff
from rentledger.db.models.user import User
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.schemas.unit import Unit, UnitCreate
from rentledger.services.property import create_unit, get_unit

router = APIRouter(prefix="/units", tags=["units"])


@router.post("", response_model=Unit, status_code=status.HTTP_201_CREATED)
def create_new_unit(
    unit_data: UnitCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("owner", "admin", "property_manager")),
):
    unit = create_unit(
        db,
        property_id=unit_data.property_id,
        unit_number=unit_data.unit_number,
        status=unit_data.status.value,
        monthly_rent_cents=unit_data.monthly_rent_cents,
    )
    return Unit.model_validate(unit)


@router.get("", response_model=PaginatedResponse[Unit])
def get_all_units(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    status_filter: str | None = Query(None, alias="status", description="Filter by unit status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    units, total = unit_repo.get_all_units_paginated(
        db, page=page, page_size=page_size, property_id=property_id, status=status_filter
    )
    return PaginatedResponse(
        items=[Unit.model_validate(u) for u in units],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{unit_id}", response_model=Unit)
def get_unit_by_id(
    unit_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return Unit.model_validate(get_unit(db, unit_id))
