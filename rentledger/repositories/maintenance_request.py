import uuid

from sqlalchemy.orm import Session

from rentledger.db.models.maintenance_request import MaintenanceRequest as MaintenanceRequestModel


def get_maintenance_request_by_id(
    db: Session, request_id: uuid.UUID
) -> MaintenanceRequestModel | None:
    """Get a maintenance request by ID."""
    return (
        db.query(MaintenanceRequestModel)
        .filter(MaintenanceRequestModel.id == request_id)
        .first()
    )


def get_all_maintenance_requests_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
    unit_id: uuid.UUID | None = None,
    status: str | None = None,
    priority: str | None = None,
) -> tuple[list[MaintenanceRequestModel], int]:
    """Get maintenance requests with pagination and optional filters, newest first."""
    query = db.query(MaintenanceRequestModel)
    if property_id is not None:
        query = query.filter(MaintenanceRequestModel.property_id == property_id)
    if unit_id is not None:
        query = query.filter(MaintenanceRequestModel.unit_id == unit_id)
    if status is not None:
        query = query.filter(MaintenanceRequestModel.status == status)
    if priority is not None:
        query = query.filter(MaintenanceRequestModel.priority == priority)

    total = query.count()
    skip = (page - 1) * page_size
    requests = (
        query.order_by(MaintenanceRequestModel.requested_at.desc(), MaintenanceRequestModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return requests, total


def create_maintenance_request(db: Session, **fields) -> MaintenanceRequestModel:
    """Create a new maintenance request in the database. Pure data access - no business logic."""
    request = MaintenanceRequestModel(**fields)
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


def update_maintenance_request(
    db: Session, request: MaintenanceRequestModel, **fields
) -> MaintenanceRequestModel:
    """Apply already-validated field changes and commit."""
    for field, value in fields.items():
        setattr(request, field, value)
    db.commit()
    db.refresh(request)
    return request
