import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class WaterBillingRunRequest(BaseModel):
    property_id: uuid.UUID
    billing_month: date | None = Field(None, description="Any day of the month to bill; defaults to the current month")


class UnitBillingFailure(BaseModel):
    unit_id: uuid.UUID
    reason: str


class WaterBillingRunResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    property_id: uuid.UUID
    billing_month: date
    invoices_created: int
    invoice_ids: list[uuid.UUID]
    skipped_unit_ids: list[uuid.UUID]
    failures: list[UnitBillingFailure]
