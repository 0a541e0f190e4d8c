import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from rentledger.db.base import Base, utcnow


class Unit(Base):
    __tablename__ = "units"
    __table_args__ = (
        UniqueConstraint("property_id", "unit_number", name="uq_units_property_unit_number"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    unit_number = Column(String(32), nullable=False)
    status = Column(String(20), nullable=False, default="available")
    monthly_rent_cents = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    property = relationship("Property", backref="units")
