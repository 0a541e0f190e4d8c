import uuid

from sqlalchemy.orm import Session

from rentledger.db.models.property import Property as PropertyModel


def get_property_by_id(db: Session, property_id: uuid.UUID) -> PropertyModel | None:
    """Get a property by ID."""
    return db.query(PropertyModel).filter(PropertyModel.id == property_id).first()


def get_property_by_code(db: Session, code: str) -> PropertyModel | None:
    """Get a property by its business code. Used to check for duplicates."""
    return db.query(PropertyModel).filter(PropertyModel.code == code).first()


def get_all_properties_paginated(
    db: Session, page: int = 1, page_size: int = 100
) -> tuple[list[PropertyModel], int]:
    """Get all properties with pagination, sorted by name."""
    query = db.query(PropertyModel)
    total = query.count()
    skip = (page - 1) * page_size
    properties = (
        query.order_by(PropertyModel.name, PropertyModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return properties, total


def create_property(
    db: Session,
    name: str,
    code: str,
    city: str,
    country: str,
) -> PropertyModel:
    """Create a new property in the database. Pure data access - no business logic."""
    db_property = PropertyModel(name=name, code=code, city=city, country=country)
    db.add(db_property)
    db.commit()
    db.refresh(db_property)
    return db_property
