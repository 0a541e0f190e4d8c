import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from rentledger.domain.enums import TenantStatus


class Tenant(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    full_name: str
    email: str
    phone: str
    status: str


class TenantDetail(Tenant):
    outstanding_cents: int = Field(..., description="Sum of open invoice balances")


class TenantCreate(BaseModel):
    property_id: uuid.UUID
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=40)
    status: TenantStatus = TenantStatus.ACTIVE
