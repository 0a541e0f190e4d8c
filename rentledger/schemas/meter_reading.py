import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from rentledger.domain.enums import MeterType


class MeterReading(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    unit_id: uuid.UUID | None = None
    meter_type: str
    reading_value: int
    reading_on: date
    notes: str | None = None


class MeterReadingCreate(BaseModel):
    property_id: uuid.UUID
    unit_id: uuid.UUID | None = None
    meter_type: MeterType = MeterType.WATER
    reading_value: int = Field(..., ge=0, description="Cumulative meter value (liters for water)")
    reading_on: date
    notes: str | None = None


class PumpTopup(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    topup_on: date
    volume_liters: int
    amount_cents: int
    vendor_name: str | None = None
    notes: str | None = None


class PumpTopupCreate(BaseModel):
    property_id: uuid.UUID
    topup_on: date
    volume_liters: int = Field(..., gt=0)
    amount_cents: int = Field(..., gt=0)
    vendor_name: str | None = Field(None, max_length=255)
    notes: str | None = None
