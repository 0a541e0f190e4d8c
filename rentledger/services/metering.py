"""Meter readings and pump top-ups: the inputs of the water billing run."""

import uuid
from datetime import date

from sqlalchemy.orm import Session

import rentledger.repositories.meter_reading as meter_repo
import rentledger.repositories.property as property_repo
import rentledger.repositories.unit as unit_repo
from rentledger.db.models.meter_reading import MeterReading as MeterReadingModel
from rentledger.db.models.meter_reading import PumpTopup as PumpTopupModel
from rentledger.domain.enums import MeterType
from rentledger.errors import DomainValidationError, NotFoundError


def create_meter_reading(
    db: Session,
    property_id: uuid.UUID,
    meter_type: str,
    reading_value: int,
    reading_on: date,
    unit_id: uuid.UUID | None = None,
    notes: str | None = None,
) -> MeterReadingModel:
    """
    Record a cumulative meter reading.

    - Water readings belong to a unit of the property
    - A water reading may not be lower than the unit's previous reading
    """
    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")
    if reading_value < 0:
        raise DomainValidationError("Reading value cannot be negative")

    if unit_id is not None:
        unit = unit_repo.get_unit_by_id(db, unit_id)
        if not unit:
            raise NotFoundError(f"Unit with id {unit_id} not found")
        if unit.property_id != property_id:
            raise DomainValidationError(f"Unit {unit_id} does not belong to property {property_id}")

    if meter_type == MeterType.WATER.value:
        if unit_id is None:
            raise DomainValidationError("Water readings require a unit")
        previous = meter_repo.get_latest_water_reading(db, unit_id, on_or_before=reading_on)
        if previous is not None and reading_value < previous.reading_value:
            raise DomainValidationError(
                f"Reading {reading_value} is lower than the previous reading "
                f"{previous.reading_value} on {previous.reading_on}"
            )

    return meter_repo.create_meter_reading(
        db,
        property_id=property_id,
        unit_id=unit_id,
        meter_type=meter_type,
        reading_value=reading_value,
        reading_on=reading_on,
        notes=notes,
    )


def create_pump_topup(
    db: Session,
    property_id: uuid.UUID,
    topup_on: date,
    volume_liters: int,
    amount_cents: int,
    vendor_name: str | None = None,
    notes: str | None = None,
) -> PumpTopupModel:
    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")
    if volume_liters <= 0 or amount_cents <= 0:
        raise DomainValidationError("Volume and amount must be greater than zero")

    return meter_repo.create_pump_topup(
        db,
        property_id=property_id,
        topup_on=topup_on,
        volume_liters=volume_liters,
        amount_cents=amount_cents,
        vendor_name=vendor_name,
        notes=notes,
    )
