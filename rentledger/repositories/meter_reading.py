import uuid
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from rentledger.db.models.meter_reading import MeterReading as MeterReadingModel
from rentledger.db.models.meter_reading import PumpTopup as PumpTopupModel
from rentledger.domain.enums import MeterType


def get_latest_water_reading(
    db: Session,
    unit_id: uuid.UUID,
    on_or_after: date | None = None,
    on_or_before: date | None = None,
) -> MeterReadingModel | None:
    """Get the most recent water reading of a unit inside an optional date window."""
    query = db.query(MeterReadingModel).filter(
        MeterReadingModel.unit_id == unit_id,
        MeterReadingModel.meter_type == MeterType.WATER.value,
    )
    if on_or_after is not None:
        query = query.filter(MeterReadingModel.reading_on >= on_or_after)
    if on_or_before is not None:
        query = query.filter(MeterReadingModel.reading_on <= on_or_before)
    return query.order_by(
        MeterReadingModel.reading_on.desc(),
        MeterReadingModel.created_at.desc(),
    ).first()


def get_earliest_water_reading(
    db: Session,
    unit_id: uuid.UUID,
    on_or_after: date,
    on_or_before: date,
) -> MeterReadingModel | None:
    """Get the first water reading of a unit inside an inclusive date window."""
    return (
        db.query(MeterReadingModel)
        .filter(
            MeterReadingModel.unit_id == unit_id,
            MeterReadingModel.meter_type == MeterType.WATER.value,
            MeterReadingModel.reading_on >= on_or_after,
            MeterReadingModel.reading_on <= on_or_before,
        )
        .order_by(MeterReadingModel.reading_on.asc(), MeterReadingModel.created_at.asc())
        .first()
    )


def get_all_meter_readings_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
    unit_id: uuid.UUID | None = None,
    meter_type: str | None = None,
) -> tuple[list[MeterReadingModel], int]:
    """Get meter readings with pagination and optional filters, newest first."""
    query = db.query(MeterReadingModel)
    if property_id is not None:
        query = query.filter(MeterReadingModel.property_id == property_id)
    if unit_id is not None:
        query = query.filter(MeterReadingModel.unit_id == unit_id)
    if meter_type is not None:
        query = query.filter(MeterReadingModel.meter_type == meter_type)

    total = query.count()
    skip = (page - 1) * page_size
    readings = (
        query.order_by(MeterReadingModel.reading_on.desc(), MeterReadingModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return readings, total


def create_meter_reading(
    db: Session,
    property_id: uuid.UUID,
    meter_type: str,
    reading_value: int,
    reading_on: date,
    unit_id: uuid.UUID | None = None,
    notes: str | None = None,
) -> MeterReadingModel:
    """Create a new meter reading in the database. Pure data access - no business logic."""
    reading = MeterReadingModel(
        property_id=property_id,
        unit_id=unit_id,
        meter_type=meter_type,
        reading_value=reading_value,
        reading_on=reading_on,
        notes=notes,
    )
    db.add(reading)
    db.commit()
    db.refresh(reading)
    return reading


def get_topup_totals(
    db: Session,
    property_id: uuid.UUID,
    period_start: date,
    period_end: date,
) -> tuple[int, int]:
    """Return (total volume in liters, total cost in cents) of pump top-ups in the inclusive period."""
    volume, cost = (
        db.query(
            func.coalesce(func.sum(PumpTopupModel.volume_liters), 0),
            func.coalesce(func.sum(PumpTopupModel.amount_cents), 0),
        )
        .filter(
            PumpTopupModel.property_id == property_id,
            PumpTopupModel.topup_on >= period_start,
            PumpTopupModel.topup_on <= period_end,
        )
        .one()
    )
    return int(volume), int(cost)


def get_all_pump_topups_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
) -> tuple[list[PumpTopupModel], int]:
    """Get pump top-ups with pagination, newest first."""
    query = db.query(PumpTopupModel)
    if property_id is not None:
        query = query.filter(PumpTopupModel.property_id == property_id)

    total = query.count()
    skip = (page - 1) * page_size
    topups = (
        query.order_by(PumpTopupModel.topup_on.desc(), PumpTopupModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return topups, total


def create_pump_topup(
    db: Session,
    property_id: uuid.UUID,
    topup_on: date,
    volume_liters: int,
    amount_cents: int,
    vendor_name: str | None = None,
    notes: str | None = None,
) -> PumpTopupModel:
    """Create a new pump top-up in the database. Pure data access - no business logic."""
    topup = PumpTopupModel(
        property_id=property_id,
        topup_on=topup_on,
        volume_liters=volume_liters,
        amount_cents=amount_cents,
        vendor_name=vendor_name,
        notes=notes,
    )
    db.add(topup)
    db.commit()
    db.refresh(topup)
    return topup
