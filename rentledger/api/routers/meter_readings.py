import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import rentledger.repositories.meter_reading as meter_repo
from rentledger.api.deps import get_db, require_roles
from rentledger.db.models.user import User
from rentledger.schemas.meter_reading import (
    MeterReading,
    MeterReadingCreate,
    PumpTopup,
    PumpTopupCreate,
)
from rentledger.schemas.pagination import PaginatedResponse
from rentledger.services.metering import create_meter_reading, create_pump_topup

METERING_ROLES = ("owner", "admin", "property_manager", "caretaker")

router = APIRouter(prefix="/meter_readings", tags=["meter_readings"])
topups_router = APIRouter(prefix="/pump_topups", tags=["pump_topups"])


@router.post("", response_model=MeterReading, status_code=status.HTTP_201_CREATED)
def create_new_meter_reading(
    reading_data: MeterReadingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*METERING_ROLES)),
):
    reading = create_meter_reading(
        db,
        property_id=reading_data.property_id,
        unit_id=reading_data.unit_id,
        meter_type=reading_data.meter_type.value,
        reading_value=reading_data.reading_value,
        reading_on=reading_data.reading_on,
        notes=reading_data.notes,
    )
    return MeterReading.model_validate(reading)


@router.get("", response_model=PaginatedResponse[MeterReading])
def get_all_meter_readings(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    unit_id: uuid.UUID | None = Query(None, description="Filter by unit"),
    meter_type: str | None = Query(None, description="Filter by meter type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*METERING_ROLES)),
):
    readings, total = meter_repo.get_all_meter_readings_paginated(
        db,
        page=page,
        page_size=page_size,
        property_id=property_id,
        unit_id=unit_id,
        meter_type=meter_type,
    )
    return PaginatedResponse(
        items=[MeterReading.model_validate(r) for r in readings],
        total=total,
        page=page,
        page_size=page_size,
    )


@topups_router.post("", response_model=PumpTopup, status_code=status.HTTP_201_CREATED)
def create_new_pump_topup(
    topup_data: PumpTopupCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*METERING_ROLES)),
):
    topup = create_pump_topup(db, **topup_data.model_dump())
    return PumpTopup.model_validate(topup)


@topups_router.get("", response_model=PaginatedResponse[PumpTopup])
def get_all_pump_topups(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*METERING_ROLES)),
):
    topups, total = meter_repo.get_all_pump_topups_paginated(
        db, page=page, page_size=page_size, property_id=property_id
    )
    return PaginatedResponse(
        items=[PumpTopup.model_validate(t) for t in topups],
        total=total,
        page=page,
        page_size=page_size,
    )
