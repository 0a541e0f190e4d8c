import uuid

from sqlalchemy.orm import Session

import rentledger.repositories.invoice as invoice_repo
import rentledger.repositories.property as property_repo
import rentledger.repositories.tenant as tenant_repo
from rentledger.db.models.tenant import Tenant as TenantModel
from rentledger.errors import NotFoundError


def get_tenant(db: Session, tenant_id: uuid.UUID) -> TenantModel:
    tenant = tenant_repo.get_tenant_by_id(db, tenant_id)
    if not tenant:
        raise NotFoundError("Tenant not found")
    return tenant


def get_outstanding_cents(db: Session, tenant_id: uuid.UUID) -> int:
    """Sum of the balances of the tenant's open invoices."""
    get_tenant(db, tenant_id)
    return invoice_repo.get_outstanding_cents_for_tenant(db, tenant_id)


def create_tenant(
    db: Session,
    property_id: uuid.UUID,
    full_name: str,
    email: str,
    phone: str,
    status: str,
) -> TenantModel:
    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")
    return tenant_repo.create_tenant(
        db,
        property_id=property_id,
        full_name=full_name,
        email=email,
        phone=phone,
        status=status,
    )
