import uuid

from sqlalchemy.orm import Session

import rentledger.repositories.property as property_repo
import rentledger.repositories.unit as unit_repo
from rentledger.db.models.property import Property as PropertyModel
from rentledger.db.models.unit import Unit as UnitModel
from rentledger.errors import DuplicateResourceError, NotFoundError


def get_property(db: Session, property_id: uuid.UUID) -> PropertyModel:
    property_ = property_repo.get_property_by_id(db, property_id)
    if not property_:
        raise NotFoundError("Property not found")
    return property_


def create_property(db: Session, name: str, code: str, city: str, country: str) -> PropertyModel:
    """
    Create a property.

    Raises:
        DuplicateResourceError: If the property code is already taken.
    """
    if property_repo.get_property_by_code(db, code):
        raise DuplicateResourceError(f"A property with code {code} already exists")
    return property_repo.create_property(db, name=name, code=code, city=city, country=country)


def get_unit(db: Session, unit_id: uuid.UUID) -> UnitModel:
    unit = unit_repo.get_unit_by_id(db, unit_id)
    if not unit:
        raise NotFoundError("Unit not found")
    return unit


def create_unit(
    db: Session,
    property_id: uuid.UUID,
    unit_number: str,
    status: str,
    monthly_rent_cents: int | None = None,
) -> UnitModel:
    """
    Create a unit under a property.

    - Validates the property exists
    - Enforces uniqueness of unit_number within the property

    Raises:
        NotFoundError: If the property does not exist.
        DuplicateResourceError: If the unit number is already used in the property.
    """
    get_property(db, property_id)
    if unit_repo.get_unit_by_number(db, property_id, unit_number):
        raise DuplicateResourceError(
            f"Unit {unit_number} already exists in this property"
        )
    return unit_repo.create_unit(
        db,
        property_id=property_id,
        unit_number=unit_number,
        status=status,
        monthly_rent_cents=monthly_rent_cents,
    )
