import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from rentledger.db.base import Base, utcnow


class Lease(Base):
    __tablename__ = "leases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    plan_months = Column(Integer, nullable=False)
    billing_mode = Column(String(10), nullable=False, default="term")
    status = Column(String(20), nullable=False, default="pending")
    rent_cents = Column(Integer, nullable=False)
    security_deposit_cents = Column(Integer, nullable=False, default=0)
    paid_through_date = Column(Date, nullable=True)
    activated_at = Column(DateTime, nullable=True)
    terminated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    unit = relationship("Unit", backref="leases")
    tenant = relationship("Tenant", backref="leases")
    installments = relationship(
        "RentInstallment",
        back_populates="lease",
        order_by="RentInstallment.sequence",
        cascade="all, delete-orphan",
    )
