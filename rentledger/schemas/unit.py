import uuid

from pydantic import BaseModel, ConfigDict, Field

from rentledger.domain.enums import UnitStatus


class Unit(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    unit_number: str
    status: str
    monthly_rent_cents: int | None = None


class UnitCreate(BaseModel):
    property_id: uuid.UUID
    unit_number: str = Field(..., min_length=1, max_length=32)
    status: UnitStatus = UnitStatus.AVAILABLE
    monthly_rent_cents: int | None = Field(None, gt=0, description="Default monthly rent in cents")
