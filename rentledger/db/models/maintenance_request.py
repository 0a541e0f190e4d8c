import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from rentledger.db.base import Base, utcnow


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String(20), nullable=False, default="medium")
    category = Column(String(20), nullable=False, default="other")
    status = Column(String(20), nullable=False, default="open")
    requested_at = Column(DateTime, nullable=False, default=utcnow)
    resolved_at = Column(DateTime, nullable=True)
    assigned_to = Column(String(255), nullable=True)
    estimated_cost_cents = Column(Integer, nullable=True)
    actual_cost_cents = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    unit = relationship("Unit", backref="maintenance_requests")
    tenant = relationship("Tenant", backref="maintenance_requests")
