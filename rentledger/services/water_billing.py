"""Monthly water billing run: one water invoice per occupied unit per billing month."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import rentledger.repositories.invoice as invoice_repo
import rentledger.repositories.lease as lease_repo
import rentledger.repositories.meter_reading as meter_repo
import rentledger.repositories.property as property_repo
from rentledger.core.config import settings
from rentledger.db.models.lease import Lease as LeaseModel
from rentledger.db.models.unit import Unit as UnitModel
from rentledger.domain.invoice_status import InvoiceType
from rentledger.domain.lease_term import first_of_month, last_of_month
from rentledger.errors import DomainError, NotFoundError
from rentledger.services.invoice import stage_invoice

logger = logging.getLogger(__name__)


@dataclass
class UnitBillingFailure:
    unit_id: uuid.UUID
    reason: str


@dataclass
class WaterBillingRunResult:
    property_id: uuid.UUID
    billing_month: date
    invoices_created: int = 0
    invoice_ids: list[uuid.UUID] = field(default_factory=list)
    skipped_unit_ids: list[uuid.UUID] = field(default_factory=list)
    failures: list[UnitBillingFailure] = field(default_factory=list)


class _UnitNotBillable(Exception):
    """A unit that cannot be billed this month; recorded as a failure of the run."""


def _price_per_liter(db: Session, property_id: uuid.UUID, period_start: date, period_end: date) -> Decimal:
    """Top-up cost divided by top-up volume for the month, or the configured rate."""
    volume, cost = meter_repo.get_topup_totals(db, property_id, period_start, period_end)
    if volume > 0 and cost > 0:
        return Decimal(cost) / Decimal(volume)
    return settings.water_rate_cents_per_liter


def _consumption_liters(db: Session, unit: UnitModel, period_start: date, period_end: date) -> int:
    closing = meter_repo.get_latest_water_reading(
        db, unit.id, on_or_after=period_start, on_or_before=period_end
    )
    if closing is None:
        raise _UnitNotBillable(f"No water reading for unit {unit.unit_number} in {period_start:%Y-%m}")

    opening = meter_repo.get_latest_water_reading(
        db, unit.id, on_or_before=period_start - timedelta(days=1)
    )
    if opening is None:
        opening = meter_repo.get_earliest_water_reading(db, unit.id, period_start, period_end)

    consumption = closing.reading_value - opening.reading_value
    if consumption < 0:
        raise _UnitNotBillable(
            f"Water meter of unit {unit.unit_number} went backwards "
            f"({opening.reading_value} -> {closing.reading_value})"
        )
    return consumption


def _occupying_leases(db: Session, property_id: uuid.UUID, period_start: date, period_end: date) -> dict[uuid.UUID, LeaseModel]:
    """Lease occupying each unit during the month; the latest-starting one wins."""
    occupying = {}
    for lease in lease_repo.get_occupying_leases_for_period(db, property_id, period_start, period_end):
        current = occupying.get(lease.unit_id)
        if current is None or lease.start_date > current.start_date:
            occupying[lease.unit_id] = lease
    return occupying


def run_water_billing(
    db: Session,
    property_id: uuid.UUID,
    billing_month: date | None = None,
    as_of: date | None = None,
) -> WaterBillingRunResult:
    """
    Generate water invoices for every occupied unit of a property.

    - billing_month is normalized to its first day and defaults to the current month
    - a unit already holding a non-void water invoice for the month is skipped
    - every unit commits on its own; a failing unit is recorded and the run continues

    Raises:
        NotFoundError: If the property does not exist.
    """
    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")

    as_of = as_of or date.today()
    period_start = first_of_month(billing_month or as_of)
    period_end = last_of_month(period_start)
    result = WaterBillingRunResult(property_id=property_id, billing_month=period_start)

    price = _price_per_liter(db, property_id, period_start, period_end)
    leases = _occupying_leases(db, property_id, period_start, period_end)

    for unit_id, lease in leases.items():
        unit = lease.unit
        if invoice_repo.get_billed_water_invoice(db, property_id, unit_id, period_start):
            result.skipped_unit_ids.append(unit_id)
            continue

        try:
            consumption = _consumption_liters(db, unit, period_start, period_end)
            amount_cents = int(
                (Decimal(consumption) * price).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
            )
            if amount_cents <= 0:
                raise _UnitNotBillable(f"No billable water consumption for unit {unit.unit_number}")

            invoice = stage_invoice(
                db,
                property_id=property_id,
                invoice_type=InvoiceType.WATER.value,
                issued_on=as_of,
                due_on=as_of + timedelta(days=settings.water_invoice_due_days),
                items=[
                    {
                        "description": f"Water {period_start:%Y-%m}: {consumption} L at {price:.4f} cents/L",
                        "quantity": 1,
                        "unit_price_cents": amount_cents,
                    }
                ],
                tenant_id=lease.tenant_id,
                unit_id=unit_id,
                billing_period=period_start,
                as_of=as_of,
            )
            db.commit()
        except IntegrityError:
            # Another run billed this unit between the check and the insert.
            db.rollback()
            result.skipped_unit_ids.append(unit_id)
            continue
        except (_UnitNotBillable, DomainError) as exc:
            db.rollback()
            logger.warning("Water billing skipped unit %s: %s", unit_id, exc)
            result.failures.append(UnitBillingFailure(unit_id=unit_id, reason=str(exc)))
            continue

        result.invoices_created += 1
        result.invoice_ids.append(invoice.id)

    logger.info(
        "Water billing %s for property %s: %s created, %s skipped, %s failed",
        period_start.strftime("%Y-%m"),
        property_id,
        result.invoices_created,
        len(result.skipped_unit_ids),
        len(result.failures),
    )
    return result
