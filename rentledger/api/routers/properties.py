import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.property as property_repo
from rentledger.api.deps import get_db, require_roles, require_staff
from rentledger.db.models.user import User
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.schemas.property import Property, PropertyCreate
from rentledger.services.property import create_property, get_property

router = APIRouter(prefix="/properties", tags=["properties"])


@router.post("", response_model=Property, status_code=status.HTTP_201_CREATED)
def create_new_property(
    property_data: PropertyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("owner", "admin")),
):
    """Create a new property. Only owners and admins can create properties."""
    property_ = create_property(db, **property_data.model_dump())
    return Property.model_validate(property_)


@router.get("", response_model=PaginatedResponse[Property])
def get_all_properties(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    properties, total = property_repo.get_all_properties_paginated(
        db, page=page, page_size=page_size
    )
    return PaginatedResponse(
        items=[Property.model_validate(p) for p in properties],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{property_id}", response_model=Property)
def get_property_by_id(
    property_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return Property.model_validate(get_property(db, property_id))
