import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship

from rentledger.db.base import Base, utcnow


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_invoices_amount_positive"),
        CheckConstraint(
            "amount_paid_cents >= 0 AND amount_paid_cents <= amount_cents",
            name="ck_invoices_amount_paid_range",
        ),
        CheckConstraint("due_on >= issued_on", name="ck_invoices_due_after_issue"),
        # At most one live invoice per unit, period and type (water billing idempotence).
        Index(
            "uq_invoices_active_billing_period",
            "property_id",
            "unit_id",
            "billing_period",
            "invoice_type",
            unique=True,
            sqlite_where=text("status != 'void' AND billing_period IS NOT NULL"),
            postgresql_where=text("status != 'void' AND billing_period IS NOT NULL"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=True, index=True)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=True)
    lease_id = Column(Uuid, ForeignKey("leases.id"), nullable=True, index=True)
    invoice_number = Column(String(40), unique=True, nullable=False)
    invoice_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False)
    amount_cents = Column(Integer, nullable=False)
    amount_paid_cents = Column(Integer, nullable=False, default=0)
    issued_on = Column(Date, nullable=False)
    due_on = Column(Date, nullable=False)
    billing_period = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    voided_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Every UPDATE is guarded by "WHERE version = <loaded version>"; a concurrent
    # writer makes the flush raise StaleDataError.
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    tenant = relationship("Tenant", backref="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        order_by="InvoiceItem.created_at",
        cascade="all, delete-orphan",
    )

    @hybrid_property
    def balance_cents(self):
        return self.amount_cents - self.amount_paid_cents


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_id = Column(Uuid, ForeignKey("invoices.id"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(Integer, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    invoice = relationship("Invoice", back_populates="items")
