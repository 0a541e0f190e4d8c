import uuid

from sqlalchemy.orm import Session

from rentledger.db.models.tenant import Tenant as TenantModel


def get_tenant_by_id(db: Session, tenant_id: uuid.UUID) -> TenantModel | None:
    """Get a tenant by ID."""
    return db.query(TenantModel).filter(TenantModel.id == tenant_id).first()


def lock_tenant(db: Session, tenant_id: uuid.UUID) -> TenantModel | None:
    """
    Get a tenant by ID holding a row lock until the end of the transaction.

    Payments for the same tenant serialize on this lock. SQLite ignores
    FOR UPDATE; there the invoice version counter detects the conflict instead.
    """
    return (
        db.query(TenantModel)
        .filter(TenantModel.id == tenant_id)
        .with_for_update()
        .first()
    )


def get_all_tenants_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    property_id: uuid.UUID | None = None,
    status: str | None = None,
) -> tuple[list[TenantModel], int]:
    """Get all tenants with pagination and optional filters, sorted by name."""
    query = db.query(TenantModel)
    if property_id is not None:
        query = query.filter(TenantModel.property_id == property_id)
    if status is not None:
        query = query.filter(TenantModel.status == status)

    total = query.count()
    skip = (page - 1) * page_size
    tenants = (
        query.order_by(TenantModel.full_name, TenantModel.id)
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return tenants, total


def create_tenant(
    db: Session,
    property_id: uuid.UUID,
    full_name: str,
    email: str,
    phone: str,
    status: str,
) -> TenantModel:
    """Create a new tenant in the database. Pure data access - no business logic."""
    db_tenant = TenantModel(
        property_id=property_id,
        full_name=full_name,
        email=email,
        phone=phone,
        status=status,
    )
    db.add(db_tenant)
    db.commit()
    db.refresh(db_tenant)
    return db_tenant
