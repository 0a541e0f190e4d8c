from enum import Enum


class UserRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    PROPERTY_MANAGER = "property_manager"
    CARETAKER = "caretaker"
    ACCOUNTANT = "accountant"
    TENANT = "tenant"


STAFF_ROLES = (
    UserRole.OWNER.value,
    UserRole.ADMIN.value,
    UserRole.PROPERTY_MANAGER.value,
    UserRole.CARETAKER.value,
    UserRole.ACCOUNTANT.value,
)


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    MOBILE_MONEY = "mobile_money"
    CHEQUE = "cheque"
    CARD = "card"


class UnitStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class TenantStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class MeterType(str, Enum):
    WATER = "water"
    ELECTRICITY = "electricity"
    GAS = "gas"
    OTHER = "other"
