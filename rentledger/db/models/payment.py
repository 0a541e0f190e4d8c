import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from rentledger.db.base import Base, utcnow


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("property_id", "reference", name="uq_payments_property_reference"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    reference = Column(String(120), nullable=False)
    payment_method = Column(String(20), nullable=False)
    amount_cents = Column(Integer, nullable=False)
    unallocated_cents = Column(Integer, nullable=False)
    paid_at = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    tenant = relationship("Tenant", backref="payments")
    allocations = relationship(
        "PaymentAllocation",
        back_populates="payment",
        order_by="PaymentAllocation.sequence",
    )


class PaymentAllocation(Base):
    __tablename__ = "payment_allocations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    payment_id = Column(Uuid, ForeignKey("payments.id"), nullable=False, index=True)
    invoice_id = Column(Uuid, ForeignKey("invoices.id"), nullable=False, index=True)
    # Position of this allocation in the payment's oldest-first walk.
    sequence = Column(Integer, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    allocated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    payment = relationship("Payment", back_populates="allocations")
    invoice = relationship("Invoice", backref="allocations")
