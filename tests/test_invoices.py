import uuid
from datetime import date, datetime

import pytest
from sqlalchemy.orm import Session

from rentledger.errors import (
    DomainValidationError,
    InvalidStateError,
    NotFoundError,
    OverpaymentError,
)
from rentledger.services.invoice import (
    add_invoice_item,
    apply_payment,
    create_invoice,
    get_invoice,
    issue_invoice,
    refresh_overdue_invoices,
    update_invoice,
    void_invoice,
)
from rentledger.services.payment import record_payment


def _invoice_payload(property_, tenant, **overrides) -> dict:
    payload = {
        "property_id": str(property_.id),
        "tenant_id": str(tenant.id),
        "invoice_type": "rent",
        "issued_on": "2099-01-01",
        "due_on": "2099-01-31",
        "amount_cents": 25000,
    }
    payload.update(overrides)
    return payload


# ============================================================================
# CREATE INVOICE TESTS
# ============================================================================


def test_create_invoice_as_admin_success(client, auth_headers, property_, tenant):
    response = client.post(
        "/api/v1/invoices",
        json=_invoice_payload(property_, tenant, notes="January rent"),
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "issued"
    assert data["amount_cents"] == 25000
    assert data["amount_paid_cents"] == 0
    assert data["balance_cents"] == 25000
    assert data["invoice_number"].startswith("INV-209901-")
    assert data["notes"] == "January rent"


def test_create_invoice_from_line_items(client, auth_headers, property_, tenant):
    payload = _invoice_payload(property_, tenant, invoice_type="service_charge")
    del payload["amount_cents"]
    payload["items"] = [
        {"description": "Security", "quantity": 1, "unit_price_cents": 1500},
        {"description": "Garbage collection", "quantity": 2, "unit_price_cents": 250},
    ]

    response = client.post("/api/v1/invoices", json=payload, headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["amount_cents"] == 2000
    assert len(data["items"]) == 2
    assert sorted(item["amount_cents"] for item in data["items"]) == [500, 1500]


def test_create_invoice_items_must_match_amount(client, auth_headers, property_, tenant):
    payload = _invoice_payload(property_, tenant, amount_cents=999)
    payload["items"] = [{"description": "Security", "quantity": 1, "unit_price_cents": 1500}]

    response = client.post("/api/v1/invoices", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_create_invoice_as_draft(client, auth_headers, property_, tenant):
    response = client.post(
        "/api/v1/invoices",
        json=_invoice_payload(property_, tenant, issue=False),
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["status"] == "draft"


@pytest.mark.parametrize("amount", [0, -100])
def test_create_invoice_non_positive_amount_fails(client, auth_headers, property_, tenant, amount):
    response = client.post(
        "/api/v1/invoices",
        json=_invoice_payload(property_, tenant, amount_cents=amount),
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_create_invoice_due_before_issue_fails(client, auth_headers, property_, tenant):
    response = client.post(
        "/api/v1/invoices",
        json=_invoice_payload(property_, tenant, issued_on="2099-02-01", due_on="2099-01-31"),
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert "cannot precede" in response.json()["detail"]


def test_create_invoice_unknown_property_fails(client, auth_headers, property_, tenant):
    response = client.post(
        "/api/v1/invoices",
        json=_invoice_payload(
            property_, tenant, property_id="00000000-0000-0000-0000-000000000000"
        ),
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_create_invoice_tenant_of_other_property_fails(
    db: Session, property_, other_property, tenant
):
    with pytest.raises(DomainValidationError):
        create_invoice(
            db,
            property_id=other_property.id,
            tenant_id=tenant.id,
            invoice_type="rent",
            issued_on=date(2025, 1, 1),
            due_on=date(2025, 1, 31),
            amount_cents=1000,
        )


def test_create_invoice_as_accountant_success(client, accountant_token, property_, tenant):
    response = client.post(
        "/api/v1/invoices",
        json=_invoice_payload(property_, tenant),
        headers={"Authorization": f"Bearer {accountant_token}"},
    )
    assert response.status_code == 201


@pytest.mark.parametrize("token_fixture", ["caretaker_token", "tenant_token"])
def test_create_invoice_forbidden_roles(client, request, property_, tenant, token_fixture):
    token = request.getfixturevalue(token_fixture)
    response = client.post(
        "/api/v1/invoices",
        json=_invoice_payload(property_, tenant),
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 403
    assert "Not enough permissions" in response.json()["detail"]


def test_create_invoice_without_authentication(client, property_, tenant):
    response = client.post("/api/v1/invoices", json=_invoice_payload(property_, tenant))
    assert response.status_code == 401


# ============================================================================
# APPLY PAYMENT TESTS
# ============================================================================


def test_apply_payment_moves_through_partial_to_paid(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2025, 2, 1), issued_on=date(2025, 1, 1))
    as_of = date(2025, 1, 15)

    apply_payment(db, invoice, 40, as_of=as_of)
    assert invoice.status == "partial"
    assert invoice.balance_cents == 60

    apply_payment(db, invoice, 60, as_of=as_of)
    assert invoice.status == "paid"
    assert invoice.balance_cents == 0


def test_apply_payment_rejects_overpayment(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2025, 2, 1), issued_on=date(2025, 1, 1))

    with pytest.raises(OverpaymentError):
        apply_payment(db, invoice, 101, as_of=date(2025, 1, 15))
    assert invoice.amount_paid_cents == 0


def test_apply_payment_rejects_void_invoice(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2025, 2, 1), issued_on=date(2025, 1, 1))
    void_invoice(db, invoice.id)

    with pytest.raises(InvalidStateError):
        apply_payment(db, invoice, 10, as_of=date(2025, 1, 15))


@pytest.mark.parametrize("amount", [0, -5])
def test_apply_payment_rejects_non_positive_amount(db: Session, make_invoice, amount):
    invoice = make_invoice(100, due_on=date(2025, 2, 1), issued_on=date(2025, 1, 1))

    with pytest.raises(DomainValidationError):
        apply_payment(db, invoice, amount, as_of=date(2025, 1, 15))


# ============================================================================
# VOID INVOICE TESTS (Scenario E)
# ============================================================================


def test_void_issued_invoice_with_balance(client, auth_headers, make_invoice):
    invoice = make_invoice(5000, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))

    response = client.patch(f"/api/v1/invoices/{invoice.id}/void", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "void"
    assert data["voided_at"] is not None


def test_void_paid_invoice_fails(client, db: Session, auth_headers, property_, tenant, make_invoice):
    invoice = make_invoice(5000, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))
    record_payment(
        db,
        property_id=property_.id,
        tenant_id=tenant.id,
        reference="PAY-VOID-1",
        payment_method="cash",
        amount_cents=5000,
        paid_at=datetime(2099, 1, 5, 10, 0),
        as_of=date(2099, 1, 5),
    )

    response = client.patch(f"/api/v1/invoices/{invoice.id}/void", headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATE"


def test_void_keeps_prior_allocations(db: Session, property_, tenant, make_invoice):
    invoice = make_invoice(5000, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))
    result = record_payment(
        db,
        property_id=property_.id,
        tenant_id=tenant.id,
        reference="PAY-VOID-2",
        payment_method="mobile_money",
        amount_cents=2000,
        paid_at=datetime(2099, 1, 5, 10, 0),
        as_of=date(2099, 1, 5),
    )

    voided = void_invoice(db, invoice.id)

    assert voided.status == "void"
    assert voided.amount_paid_cents == 2000
    assert [a.invoice_id for a in voided.allocations] == [invoice.id]
    assert result.payment.unallocated_cents == 0


def test_void_twice_fails(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))
    void_invoice(db, invoice.id)

    with pytest.raises(InvalidStateError):
        void_invoice(db, invoice.id)


def test_void_unknown_invoice(client, auth_headers):
    response = client.patch(
        "/api/v1/invoices/00000000-0000-0000-0000-000000000000/void", headers=auth_headers
    )
    assert response.status_code == 404


# ============================================================================
# UPDATE / ITEMS / OVERDUE TESTS
# ============================================================================


def test_update_draft_invoice_dates_and_issue(client, auth_headers, make_invoice):
    invoice = make_invoice(100, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1), issue=False)

    response = client.patch(
        f"/api/v1/invoices/{invoice.id}",
        json={"due_on": "2099-02-28", "status": "issued"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["due_on"] == "2099-02-28"
    assert data["status"] == "issued"


def test_issue_draft_invoice(db: Session, make_invoice):
    draft = make_invoice(100, due_on=date(2025, 1, 31), issued_on=date(2025, 1, 1), issue=False)

    issued = issue_invoice(db, draft.id, as_of=date(2025, 1, 10))

    assert issued.status == "issued"


def test_issue_draft_invoice_already_past_due(db: Session, make_invoice):
    draft = make_invoice(100, due_on=date(2025, 1, 31), issued_on=date(2025, 1, 1), issue=False)

    issued = issue_invoice(db, draft.id, as_of=date(2025, 2, 15))

    assert issued.status == "overdue"


def test_issue_non_draft_invoice_fails(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2025, 1, 31), issued_on=date(2025, 1, 1))

    with pytest.raises(InvalidStateError):
        issue_invoice(db, invoice.id, as_of=date(2025, 1, 10))


def test_update_issued_invoice_dates_fails(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))

    with pytest.raises(InvalidStateError):
        update_invoice(db, invoice.id, due_on=date(2099, 3, 1))


def test_update_invoice_rejects_arbitrary_status(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))

    with pytest.raises(DomainValidationError):
        update_invoice(db, invoice.id, status="paid")


def test_update_invoice_notes_always_allowed(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))

    updated = update_invoice(db, invoice.id, notes="Tenant promised to pay Friday")

    assert updated.notes == "Tenant promised to pay Friday"


def test_add_item_to_draft_recomputes_amount(client, auth_headers, property_, tenant):
    payload = _invoice_payload(property_, tenant, invoice_type="other", issue=False)
    del payload["amount_cents"]
    payload["items"] = [{"description": "Key replacement", "quantity": 1, "unit_price_cents": 800}]
    created = client.post("/api/v1/invoices", json=payload, headers=auth_headers).json()

    response = client.post(
        f"/api/v1/invoices/{created['id']}/items",
        json={"description": "Lock", "quantity": 2, "unit_price_cents": 600},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.json()["amount_cents"] == 2000


def test_add_item_to_issued_invoice_fails(db: Session, make_invoice):
    invoice = make_invoice(100, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))

    with pytest.raises(InvalidStateError):
        add_invoice_item(db, invoice.id, description="Extra", quantity=1, unit_price_cents=10)


def test_add_item_to_amount_only_draft_keeps_amount(db: Session, make_invoice):
    invoice = make_invoice(5000, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1), issue=False)

    with pytest.raises(InvalidStateError):
        add_invoice_item(db, invoice.id, description="Key replacement", quantity=1, unit_price_cents=800)

    db.refresh(invoice)
    assert invoice.amount_cents == 5000
    assert invoice.items == []


def test_add_item_to_amount_only_draft_endpoint(client, auth_headers, property_, tenant):
    payload = _invoice_payload(property_, tenant, invoice_type="other", issue=False)
    created = client.post("/api/v1/invoices", json=payload, headers=auth_headers).json()

    response = client.post(
        f"/api/v1/invoices/{created['id']}/items",
        json={"description": "Lock", "quantity": 1, "unit_price_cents": 800},
        headers=auth_headers,
    )

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATE"
    detail = client.get(f"/api/v1/invoices/{created['id']}", headers=auth_headers).json()
    assert detail["amount_cents"] == payload["amount_cents"]


def test_refresh_overdue_invoices(db: Session, make_invoice):
    late = make_invoice(100, due_on=date(2025, 1, 31), issued_on=date(2025, 1, 1))
    current = make_invoice(100, due_on=date(2025, 3, 31), issued_on=date(2025, 3, 1))

    updated = refresh_overdue_invoices(db, as_of=date(2025, 2, 15))

    db.refresh(late)
    db.refresh(current)
    assert updated == 1
    assert late.status == "overdue"
    assert current.status == "issued"


def test_refresh_overdue_endpoint(client, accountant_token, make_invoice):
    make_invoice(100, due_on=date(2025, 1, 31), issued_on=date(2025, 1, 1))

    response = client.post(
        "/api/v1/invoices/refresh-overdue",
        params={"as_of": "2025-02-15"},
        headers={"Authorization": f"Bearer {accountant_token}"},
    )

    assert response.status_code == 200
    assert response.json() == {"as_of": "2025-02-15", "updated": 1}


# ============================================================================
# READ TESTS
# ============================================================================


def test_list_invoices_with_filters(client, auth_headers, make_invoice):
    make_invoice(100, due_on=date(2099, 1, 31), issued_on=date(2099, 1, 1))
    make_invoice(200, due_on=date(2099, 2, 28), issued_on=date(2099, 2, 1), invoice_type="water")

    response = client.get(
        "/api/v1/invoices", params={"invoice_type": "water"}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["amount_cents"] == 200
    assert data["page"] == 1


def test_get_invoice_not_found(db: Session):
    with pytest.raises(NotFoundError):
        get_invoice(db, uuid.uuid4())
