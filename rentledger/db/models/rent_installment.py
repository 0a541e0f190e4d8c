import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import backref, relationship

from rentledger.db.base import Base, utcnow


class RentInstallment(Base):
    __tablename__ = "rent_installments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    lease_id = Column(Uuid, ForeignKey("leases.id"), nullable=False, index=True)
    invoice_id = Column(Uuid, ForeignKey("invoices.id"), nullable=True, unique=True)
    sequence = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    amount_paid_cents = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending")
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    lease = relationship("Lease", back_populates="installments")
    invoice = relationship("Invoice", backref=backref("installment", uselist=False))

    @hybrid_property
    def balance_cents(self):
        return self.amount_cents - self.amount_paid_cents
