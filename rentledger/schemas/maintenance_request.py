import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from rentledger.domain.maintenance import (
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
)


class MaintenanceRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    unit_id: uuid.UUID
    tenant_id: uuid.UUID | None = None
    title: str
    description: str
    priority: str
    category: str
    status: str
    requested_at: datetime
    resolved_at: datetime | None = None
    assigned_to: str | None = None
    estimated_cost_cents: int | None = None
    actual_cost_cents: int | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class MaintenanceRequestCreate(BaseModel):
    property_id: uuid.UUID
    unit_id: uuid.UUID
    tenant_id: uuid.UUID | None = None
    title: str = Field(..., max_length=255)
    description: str
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    category: MaintenanceCategory = MaintenanceCategory.OTHER
    estimated_cost_cents: int | None = Field(None, ge=0)
    requested_at: datetime | None = None
    notes: str | None = None


class MaintenanceRequestUpdate(BaseModel):
    title: str | None = Field(None, max_length=255)
    description: str | None = None
    priority: MaintenancePriority | None = None
    category: MaintenanceCategory | None = None
    status: MaintenanceStatus | None = None
    assigned_to: str | None = Field(None, max_length=255)
    estimated_cost_cents: int | None = Field(None, ge=0)
    actual_cost_cents: int | None = Field(None, ge=0)
    notes: str | None = None
