from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rentledger.api.deps import get_db, require_roles
from rentledger.db.models.user import User
from rentledger.schemas.billing import WaterBillingRunRequest, WaterBillingRunResult
from rentledger.services.water_billing import run_water_billing

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/water_invoices", response_model=WaterBillingRunResult)
def run_water_invoices(
    run_data: WaterBillingRunRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("owner", "admin", "property_manager")),
):
    """
    Generate the month's water invoices for every occupied unit of a property.

    Safe to re-run: units already billed for the month are reported as skipped.
    """
    result = run_water_billing(
        db,
        property_id=run_data.property_id,
        billing_month=run_data.billing_month,
    )
    return WaterBillingRunResult.model_validate(asdict(result))
