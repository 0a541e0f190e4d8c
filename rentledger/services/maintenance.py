"""Maintenance requests raised against units, and their status workflow."""

import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session

import rentledger.repositories.maintenance_request as maintenance_repo
import rentledger.repositories.property as property_repo
import rentledger.repositories.tenant as tenant_repo
import rentledger.repositories.unit as unit_repo
from rentledger.db.base import utcnow
from rentledger.db.models.maintenance_request import MaintenanceRequest as MaintenanceRequestModel
from rentledger.domain.maintenance import (
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
    MaintenanceWorkflow,
)
from rentledger.errors import DomainValidationError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10

EDITABLE_FIELDS = (
    "title",
    "description",
    "priority",
    "category",
    "assigned_to",
    "estimated_cost_cents",
    "actual_cost_cents",
    "notes",
)


def get_maintenance_request(db: Session, request_id: uuid.UUID) -> MaintenanceRequestModel:
    request = maintenance_repo.get_maintenance_request_by_id(db, request_id)
    if not request:
        raise NotFoundError("Maintenance request not found")
    return request


def _validate_details(fields: dict) -> dict:
    """Normalize and check the descriptive fields present in ``fields``."""
    cleaned = dict(fields)

    if "title" in cleaned:
        cleaned["title"] = (cleaned["title"] or "").strip()
        if len(cleaned["title"]) < MIN_TITLE_LENGTH:
            raise DomainValidationError(
                f"Title must be at least {MIN_TITLE_LENGTH} characters"
            )

    if "description" in cleaned:
        cleaned["description"] = (cleaned["description"] or "").strip()
        if len(cleaned["description"]) < MIN_DESCRIPTION_LENGTH:
            raise DomainValidationError(
                f"Please provide more details (min {MIN_DESCRIPTION_LENGTH} characters)"
            )

    if "priority" in cleaned and cleaned["priority"] not in {p.value for p in MaintenancePriority}:
        raise DomainValidationError(f"Unknown priority: {cleaned['priority']}")

    if "category" in cleaned and cleaned["category"] not in {c.value for c in MaintenanceCategory}:
        raise DomainValidationError(f"Unknown category: {cleaned['category']}")

    for cost_field in ("estimated_cost_cents", "actual_cost_cents"):
        if cleaned.get(cost_field) is not None and cleaned[cost_field] < 0:
            raise DomainValidationError("Costs cannot be negative")

    return cleaned


def create_maintenance_request(
    db: Session,
    property_id: uuid.UUID,
    unit_id: uuid.UUID,
    title: str,
    description: str,
    priority: str = MaintenancePriority.MEDIUM.value,
    category: str = MaintenanceCategory.OTHER.value,
    tenant_id: uuid.UUID | None = None,
    estimated_cost_cents: int | None = None,
    requested_at: datetime | None = None,
    notes: str | None = None,
) -> MaintenanceRequestModel:
    """
    Open a maintenance request for a unit.

    - The unit, and the tenant when given, must belong to the property
    - Title needs 3 characters and description 10
    """
    details = _validate_details(
        {
            "title": title,
            "description": description,
            "priority": priority,
            "category": category,
            "estimated_cost_cents": estimated_cost_cents,
        }
    )

    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")

    unit = unit_repo.get_unit_by_id(db, unit_id)
    if not unit:
        raise NotFoundError(f"Unit with id {unit_id} not found")
    if unit.property_id != property_id:
        raise DomainValidationError(f"Unit {unit_id} does not belong to property {property_id}")

    if tenant_id is not None:
        tenant = tenant_repo.get_tenant_by_id(db, tenant_id)
        if not tenant:
            raise NotFoundError(f"Tenant with id {tenant_id} not found")
        if tenant.property_id != property_id:
            raise DomainValidationError(
                f"Tenant {tenant_id} does not belong to property {property_id}"
            )

    request = maintenance_repo.create_maintenance_request(
        db,
        property_id=property_id,
        unit_id=unit_id,
        tenant_id=tenant_id,
        status=MaintenanceStatus.OPEN.value,
        requested_at=requested_at or utcnow(),
        notes=notes,
        **details,
    )
    logger.info(
        "Opened %s maintenance request %s for unit %s",
        request.priority,
        request.id,
        unit.unit_number,
    )
    return request


def update_maintenance_request(
    db: Session,
    request_id: uuid.UUID,
    **update_fields,
) -> MaintenanceRequestModel:
    """
    Update a maintenance request with business logic validation.

    - status moves follow MaintenanceWorkflow; resolving stamps resolved_at and
      sending the request back to work clears it
    - closed and cancelled requests only accept notes

    Only fields explicitly provided in update_fields will be updated.
    """
    request = get_maintenance_request(db, request_id)
    workflow = MaintenanceWorkflow(current=MaintenanceStatus(request.status))

    changes = _validate_details(
        {name: value for name, value in update_fields.items() if name in EDITABLE_FIELDS}
    )
    if workflow.is_final and set(changes) - {"notes"}:
        raise InvalidStateError(f"A {request.status} maintenance request can only take notes")

    target = update_fields.get("status")
    if target is not None and target != request.status:
        if target not in {s.value for s in MaintenanceStatus}:
            raise DomainValidationError(f"Unknown maintenance status: {target}")
        if not workflow.allows(MaintenanceStatus(target)):
            raise InvalidStateError(
                f"Cannot move a maintenance request from {request.status} to {target}"
            )
        changes["status"] = target
        if target == MaintenanceStatus.RESOLVED.value:
            changes["resolved_at"] = utcnow()
        elif target in (MaintenanceStatus.OPEN.value, MaintenanceStatus.IN_PROGRESS.value):
            changes["resolved_at"] = None
        logger.info("Maintenance request %s moved %s -> %s", request.id, request.status, target)

    return maintenance_repo.update_maintenance_request(db, request, **changes)
