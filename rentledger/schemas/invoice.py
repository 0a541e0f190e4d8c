import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rentledger.domain.invoice_status import InvoiceType


class InvoiceItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    description: str
    quantity: int
    unit_price_cents: int
    amount_cents: int


class InvoiceItemCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., gt=0)
    unit_price_cents: int = Field(..., gt=0)


class Invoice(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    tenant_id: uuid.UUID | None = None
    unit_id: uuid.UUID | None = None
    lease_id: uuid.UUID | None = None
    invoice_number: str
    invoice_type: str
    status: str
    amount_cents: int
    amount_paid_cents: int
    balance_cents: int
    issued_on: date
    due_on: date
    billing_period: date | None = None
    notes: str | None = None
    voided_at: datetime | None = None
    items: list[InvoiceItem] = []


class InvoiceCreate(BaseModel):
    property_id: uuid.UUID
    invoice_type: InvoiceType
    issued_on: date
    due_on: date
    # Amount rules (positive, matching the items) are enforced by the invoice ledger.
    amount_cents: int | None = None
    items: list[InvoiceItemCreate] | None = None
    tenant_id: uuid.UUID | None = None
    unit_id: uuid.UUID | None = None
    lease_id: uuid.UUID | None = None
    notes: str | None = None
    issue: bool = Field(default=True, description="Issue immediately instead of keeping a draft")

    @model_validator(mode="after")
    def validate_amount_or_items(self):
        """Either an amount or at least one line item is required."""
        if self.amount_cents is None and not self.items:
            raise ValueError("Provide amount_cents or at least one line item")
        return self


class InvoiceUpdate(BaseModel):
    issued_on: date | None = None
    due_on: date | None = None
    notes: str | None = None
    status: str | None = Field(None, description="'issued' or 'void'")


class OverdueRefreshResult(BaseModel):
    as_of: date
    updated: int
