import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from rentledger.db.base import Base, utcnow


class MeterReading(Base):
    __tablename__ = "meter_readings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=True, index=True)
    meter_type = Column(String(20), nullable=False)
    reading_value = Column(Integer, nullable=False)
    reading_on = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    unit = relationship("Unit", backref="meter_readings")


class PumpTopup(Base):
    __tablename__ = "pump_topups"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    topup_on = Column(Date, nullable=False)
    volume_liters = Column(Integer, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    vendor_name = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
