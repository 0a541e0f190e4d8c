import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from rentledger.domain.enums import UserRole


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str
    role: str
    is_active: bool


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.TENANT


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
