import uuid

from sqlalchemy.orm import Session

from rentledger.db.models.unit import Unit as UnitModel


def get_unit_by_id(db: Session, unit_id: uuid.UUID) -> UnitModel | None:
    """Get a unit by ID."""
    return db.query(UnitModel).filter(UnitModel.id == unit_id).first()


def get_unit_by_number(
    db: Session, property_id: uuid.UUID, unit_number: str
) -> UnitModel | None:
    """Get a unit by property and unit number. Used to check for duplicates."""
    return (
        db.query(UnitModel)
        .filter(
            UnitModel.property_id == property_id,
            UnitModel.unit_number == unit_number,
        )
        .first()
    )


def get_all_units_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
    status: str | None = None,
) -> tuple[list[UnitModel], int]:
    """Get all units with pagination and optional filters."""
    query = db.query(UnitModel)
    if property_id is not None:
        query = query.filter(UnitModel.property_id == property_id)
    if status is not None:
        query = query.filter(UnitModel.status == status)

    total = query.count()
    skip = (page - 1) * page_size
    units = (
        query.order_by(UnitModel.unit_number, UnitModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return units, total


def create_unit(
    db: Session,
    property_id: uuid.UUID,
    unit_number: str,
    status: str,
    monthly_rent_cents: int | None = None,
) -> UnitModel:
    """Create a new unit in the database. Pure data access - no business logic."""
    db_unit = UnitModel(
        property_id=property_id,
        unit_number=unit_number,
        status=status,
        monthly_rent_cents=monthly_rent_cents,
    )
    db.add(db_unit)
    db.commit()
    db.refresh(db_unit)
    return db_unit
