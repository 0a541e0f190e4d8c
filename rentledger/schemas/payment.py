import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from rentledger.domain.enums import PaymentMethod


class PaymentAllocation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    payment_id: uuid.UUID
    invoice_id: uuid.UUID
    sequence: int
    amount_cents: int
    allocated_at: datetime


class Payment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    tenant_id: uuid.UUID
    reference: str
    payment_method: str
    amount_cents: int
    unallocated_cents: int
    paid_at: datetime
    notes: str | None = None
    allocations: list[PaymentAllocation] = []


class PaymentCreate(BaseModel):
    property_id: uuid.UUID
    tenant_id: uuid.UUID
    reference: str = Field(..., max_length=120)
    payment_method: PaymentMethod
    # Positivity is enforced by the payment ledger.
    amount_cents: int
    paid_at: datetime | None = Field(None, description="Defaults to now")
    notes: str | None = None


class PaymentRecordResponse(BaseModel):
    payment: Payment
    allocations: list[PaymentAllocation]
    unallocated_cents: int
    warnings: list[str] = []
    messages: list[str] = []
