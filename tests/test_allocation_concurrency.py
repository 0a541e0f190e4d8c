from datetime import date, datetime

import pytest
from sqlalchemy.orm import Session

import rentledger.repositories.invoice as invoice_repo
from rentledger.db.models.payment import Payment as PaymentModel
from rentledger.errors import ConcurrencyConflictError
from rentledger.repositories.payment import sum_allocations_for_invoice
from rentledger.services.payment import record_payment

PAID_AT = datetime(2025, 1, 15, 9, 30)
AS_OF = date(2025, 1, 15)


def _record(db: Session, property_, tenant, reference: str, amount_cents: int):
    return record_payment(
        db,
        property_id=property_.id,
        tenant_id=tenant.id,
        reference=reference,
        payment_method="mobile_money",
        amount_cents=amount_cents,
        paid_at=PAID_AT,
        as_of=AS_OF,
    )


def test_competing_payments_never_overpay_an_invoice(
    db: Session, session_factory, property_, tenant, make_invoice, monkeypatch
):
    """
    Two payments of 60 race for a single invoice of 100.

    The second payment commits after the first has read the invoice but
    before it writes. The first attempt is rejected, the retry sees the new
    balance and allocates only the remaining 40.
    """
    invoice = make_invoice(100, due_on=date(2025, 1, 1), issued_on=date(2024, 12, 1))
    original = invoice_repo.get_open_invoices_for_tenant
    state = {"raced": False}

    def racing_lookup(session, tenant_id, property_id=None):
        candidates = original(session, tenant_id, property_id=property_id)
        if not state["raced"]:
            state["raced"] = True
            other = session_factory()
            try:
                _record(other, property_, tenant, "PAY-RIVAL", 60)
            finally:
                other.close()
        return candidates

    monkeypatch.setattr(invoice_repo, "get_open_invoices_for_tenant", racing_lookup)

    result = _record(db, property_, tenant, "PAY-SLOW", 60)

    db.refresh(invoice)
    assert [a.amount_cents for a in result.allocations] == [40]
    assert result.payment.unallocated_cents == 20
    assert invoice.amount_paid_cents == 100
    assert invoice.status == "paid"
    assert sum_allocations_for_invoice(db, invoice.id) == 100

    rival = db.query(PaymentModel).filter(PaymentModel.reference == "PAY-RIVAL").one()
    assert rival.unallocated_cents == 0


def test_allocation_gives_up_after_configured_retries(
    db: Session, session_factory, property_, tenant, make_invoice, monkeypatch
):
    invoice = make_invoice(100, due_on=date(2025, 1, 1), issued_on=date(2024, 12, 1))
    original = invoice_repo.get_open_invoices_for_tenant
    state = {"competing": False, "rivals": 0}

    def always_racing_lookup(session, tenant_id, property_id=None):
        candidates = original(session, tenant_id, property_id=property_id)
        if not state["competing"]:
            state["competing"] = True
            state["rivals"] += 1
            other = session_factory()
            try:
                _record(other, property_, tenant, f"PAY-RIVAL-{state['rivals']}", 1)
            finally:
                other.close()
                state["competing"] = False
        return candidates

    monkeypatch.setattr(invoice_repo, "get_open_invoices_for_tenant", always_racing_lookup)

    with pytest.raises(ConcurrencyConflictError):
        _record(db, property_, tenant, "PAY-UNLUCKY", 60)

    db.refresh(invoice)
    assert state["rivals"] == 3
    assert db.query(PaymentModel).filter(PaymentModel.reference == "PAY-UNLUCKY").first() is None
    assert invoice.amount_paid_cents == 3
    assert sum_allocations_for_invoice(db, invoice.id) == 3
