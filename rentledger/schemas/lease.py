import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from rentledger.domain.lease_term import BillingMode, LeaseStatus


class RentInstallment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    lease_id: uuid.UUID
    invoice_id: uuid.UUID | None = None
    sequence: int
    due_date: date
    amount_cents: int
    amount_paid_cents: int
    balance_cents: int
    status: str
    paid_at: datetime | None = None


class Lease(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    unit_id: uuid.UUID
    tenant_id: uuid.UUID
    start_date: date
    end_date: date
    plan_months: int
    billing_mode: str
    status: str
    rent_cents: int
    security_deposit_cents: int
    paid_through_date: date | None = None
    activated_at: datetime | None = None
    terminated_at: datetime | None = None
    installments: list[RentInstallment] = []


class LeaseCreate(BaseModel):
    property_id: uuid.UUID
    unit_id: uuid.UUID
    tenant_id: uuid.UUID
    start_date: date
    end_date: date | None = Field(None, description="Derived from start_date and plan_months when omitted")
    plan_months: int = Field(..., description="3, 6 or 12")
    rent_cents: int = Field(..., gt=0, description="Monthly rent in cents")
    security_deposit_cents: int = Field(default=0, ge=0)
    billing_mode: BillingMode = BillingMode.TERM
    status: LeaseStatus = LeaseStatus.PENDING


class LeaseUpdate(BaseModel):
    security_deposit_cents: int | None = Field(None, ge=0)
