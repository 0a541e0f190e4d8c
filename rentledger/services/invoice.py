"""Invoice ledger: the single source of truth for invoice balances and status."""

import logging
import uuid
from datetime import date

from sqlalchemy.orm import Session

import rentledger.repositories.invoice as invoice_repo
import rentledger.repositories.lease as lease_repo
import rentledger.repositories.property as property_repo
import rentledger.repositories.tenant as tenant_repo
import rentledger.repositories.unit as unit_repo
from rentledger.db.base import utcnow
from rentledger.db.models.invoice import Invoice as InvoiceModel
from rentledger.domain.invoice_status import (
    TERMINAL_INVOICE_STATUSES,
    InstallmentStatus,
    InvoiceStatus,
    InvoiceStatusPolicy,
    InvoiceType,
)
from rentledger.errors import (
    DomainValidationError,
    InvalidStateError,
    NotFoundError,
    OverpaymentError,
)
from rentledger.services.lease_billing import handle_invoice_voided

logger = logging.getLogger(__name__)


def get_invoice(db: Session, invoice_id: uuid.UUID) -> InvoiceModel:
    invoice = invoice_repo.get_invoice_by_id(db, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


def stage_invoice(
    db: Session,
    property_id: uuid.UUID,
    invoice_type: str,
    issued_on: date,
    due_on: date,
    amount_cents: int | None = None,
    items: list[dict] | None = None,
    tenant_id: uuid.UUID | None = None,
    unit_id: uuid.UUID | None = None,
    lease_id: uuid.UUID | None = None,
    billing_period: date | None = None,
    notes: str | None = None,
    issue: bool = True,
    as_of: date | None = None,
) -> InvoiceModel:
    """
    Validate amounts and dates and stage an invoice without committing.

    Used by create_invoice and by the flows that generate invoices inside a
    larger unit of work (lease creation, water billing).

    - When items are given, the amount is the sum of quantity * unit_price_cents
    - Amount must be positive
    - due_on must not precede issued_on
    """
    if invoice_type not in {t.value for t in InvoiceType}:
        raise DomainValidationError(f"Unknown invoice type: {invoice_type}")

    if items:
        items_total = sum(item["quantity"] * item["unit_price_cents"] for item in items)
        if amount_cents is not None and amount_cents != items_total:
            raise DomainValidationError(
                f"Amount ({amount_cents}) does not match the sum of line items ({items_total})"
            )
        amount_cents = items_total

    if amount_cents is None or amount_cents <= 0:
        raise DomainValidationError("Invoice amount must be greater than zero")

    if due_on < issued_on:
        raise DomainValidationError(
            f"Due date ({due_on}) cannot precede issue date ({issued_on})"
        )

    policy = InvoiceStatusPolicy(as_of=as_of or date.today())
    status = policy.resolve(
        amount_cents=amount_cents,
        amount_paid_cents=0,
        due_on=due_on,
        is_draft=not issue,
    )

    return invoice_repo.add_invoice(
        db,
        property_id=property_id,
        invoice_type=invoice_type,
        status=status.value,
        amount_cents=amount_cents,
        issued_on=issued_on,
        due_on=due_on,
        tenant_id=tenant_id,
        unit_id=unit_id,
        lease_id=lease_id,
        billing_period=billing_period,
        notes=notes,
        items=items,
    )


def create_invoice(
    db: Session,
    property_id: uuid.UUID,
    invoice_type: str,
    issued_on: date,
    due_on: date,
    amount_cents: int | None = None,
    items: list[dict] | None = None,
    tenant_id: uuid.UUID | None = None,
    unit_id: uuid.UUID | None = None,
    lease_id: uuid.UUID | None = None,
    notes: str | None = None,
    issue: bool = True,
    as_of: date | None = None,
) -> InvoiceModel:
    """
    Create a new invoice in draft or issued status with business logic validation.

    - Validates property, tenant, unit and lease exist and belong to the property
    - Validates amount and dates (see stage_invoice)
    """
    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError(f"Property with id {property_id} not found")

    if tenant_id is not None:
        tenant = tenant_repo.get_tenant_by_id(db, tenant_id)
        if not tenant:
            raise NotFoundError(f"Tenant with id {tenant_id} not found")
        if tenant.property_id != property_id:
            raise DomainValidationError(
                f"Tenant {tenant_id} does not belong to property {property_id}"
            )

    if unit_id is not None:
        unit = unit_repo.get_unit_by_id(db, unit_id)
        if not unit:
            raise NotFoundError(f"Unit with id {unit_id} not found")
        if unit.property_id != property_id:
            raise DomainValidationError(
                f"Unit {unit_id} does not belong to property {property_id}"
            )

    if lease_id is not None:
        lease = lease_repo.get_lease_by_id(db, lease_id)
        if not lease:
            raise NotFoundError(f"Lease with id {lease_id} not found")
        if lease.property_id != property_id:
            raise DomainValidationError(
                f"Lease {lease_id} does not belong to property {property_id}"
            )

    invoice = stage_invoice(
        db,
        property_id=property_id,
        invoice_type=invoice_type,
        issued_on=issued_on,
        due_on=due_on,
        amount_cents=amount_cents,
        items=items,
        tenant_id=tenant_id,
        unit_id=unit_id,
        lease_id=lease_id,
        notes=notes,
        issue=issue,
        as_of=as_of,
    )
    db.commit()
    db.refresh(invoice)
    logger.info(
        "Created invoice %s (%s, %s cents, status=%s)",
        invoice.invoice_number,
        invoice.invoice_type,
        invoice.amount_cents,
        invoice.status,
    )
    return invoice


def _sync_installment(invoice: InvoiceModel, policy: InvoiceStatusPolicy) -> None:
    """Mirror an invoice's settlement onto the rent installment it bills, if any."""
    installment = invoice.installment
    if installment is None:
        return

    installment.amount_paid_cents = invoice.amount_paid_cents
    status = policy.resolve_installment(
        amount_cents=installment.amount_cents,
        amount_paid_cents=installment.amount_paid_cents,
        due_date=installment.due_date,
    )
    installment.status = status.value
    if status == InstallmentStatus.PAID and installment.paid_at is None:
        installment.paid_at = utcnow()


def _refresh_status(invoice: InvoiceModel, policy: InvoiceStatusPolicy) -> None:
    status = policy.resolve(
        amount_cents=invoice.amount_cents,
        amount_paid_cents=invoice.amount_paid_cents,
        due_on=invoice.due_on,
        is_draft=invoice.status == InvoiceStatus.DRAFT.value,
        is_void=invoice.status == InvoiceStatus.VOID.value,
    )
    invoice.status = status.value


def apply_payment(
    db: Session,
    invoice: InvoiceModel,
    amount_cents: int,
    as_of: date | None = None,
) -> InvoiceModel:
    """
    Increase an invoice's amount_paid and recompute its status.

    Does not commit: the allocation engine calls this inside the payment's
    unit of work.

    Raises:
        DomainValidationError: If amount is not positive.
        InvalidStateError: If the invoice is void.
        OverpaymentError: If amount_paid would exceed the invoice amount.
    """
    if amount_cents <= 0:
        raise DomainValidationError("Applied amount must be greater than zero")

    if invoice.status == InvoiceStatus.VOID.value:
        raise InvalidStateError(f"Invoice {invoice.invoice_number} is void")

    if invoice.amount_paid_cents + amount_cents > invoice.amount_cents:
        logger.error(
            "Overpayment guard tripped on invoice %s: paid=%s, applying=%s, amount=%s",
            invoice.id,
            invoice.amount_paid_cents,
            amount_cents,
            invoice.amount_cents,
        )
        raise OverpaymentError(
            f"Applying {amount_cents} to invoice {invoice.invoice_number} would exceed "
            f"its balance of {invoice.balance_cents}"
        )

    policy = InvoiceStatusPolicy(as_of=as_of or date.today())
    invoice.amount_paid_cents += amount_cents
    _refresh_status(invoice, policy)
    _sync_installment(invoice, policy)
    return invoice


def void_invoice(db: Session, invoice_id: uuid.UUID) -> InvoiceModel:
    """
    Void an invoice.

    Prior allocations remain as audit records; the invoice no longer accepts
    allocations. A voided rent month is waived for the lease's paid-through date.

    Raises:
        NotFoundError: If invoice does not exist.
        InvalidStateError: If the invoice is already paid or void.
    """
    invoice = get_invoice(db, invoice_id)
    _void(invoice)
    handle_invoice_voided(db, invoice)
    db.commit()
    db.refresh(invoice)
    logger.info("Voided invoice %s", invoice.invoice_number)
    return invoice


def _void(invoice: InvoiceModel) -> None:
    if invoice.status in TERMINAL_INVOICE_STATUSES:
        raise InvalidStateError(
            f"Cannot void invoice {invoice.invoice_number}: status is {invoice.status}"
        )
    invoice.status = InvoiceStatus.VOID.value
    invoice.voided_at = utcnow()


def _issue(invoice: InvoiceModel, as_of: date) -> None:
    if invoice.status != InvoiceStatus.DRAFT.value:
        raise InvalidStateError(
            f"Only draft invoices can be issued; invoice {invoice.invoice_number} is {invoice.status}"
        )
    policy = InvoiceStatusPolicy(as_of=as_of)
    invoice.status = policy.resolve(
        amount_cents=invoice.amount_cents,
        amount_paid_cents=invoice.amount_paid_cents,
        due_on=invoice.due_on,
    ).value
    _sync_installment(invoice, policy)


def issue_invoice(db: Session, invoice_id: uuid.UUID, as_of: date | None = None) -> InvoiceModel:
    """Move a draft invoice to issued (or overdue when already past due)."""
    invoice = get_invoice(db, invoice_id)
    _issue(invoice, as_of or date.today())
    db.commit()
    db.refresh(invoice)
    return invoice


def update_invoice(
    db: Session,
    invoice_id: uuid.UUID,
    as_of: date | None = None,
    **update_fields,
) -> InvoiceModel:
    """
    Update an invoice with business logic validation.

    - notes can always be changed
    - issued_on and due_on can only change while the invoice is a draft
    - status can only be set to "issued" (from draft) or "void"

    Only fields explicitly provided in update_fields will be updated.
    """
    invoice = get_invoice(db, invoice_id)
    as_of = as_of or date.today()

    if "issued_on" in update_fields or "due_on" in update_fields:
        if invoice.status != InvoiceStatus.DRAFT.value:
            raise InvalidStateError("Dates can only be changed on draft invoices")
        issued_on = update_fields.get("issued_on") or invoice.issued_on
        due_on = update_fields.get("due_on") or invoice.due_on
        if due_on < issued_on:
            raise DomainValidationError(
                f"Due date ({due_on}) cannot precede issue date ({issued_on})"
            )
        invoice.issued_on = issued_on
        invoice.due_on = due_on

    if "notes" in update_fields:
        invoice.notes = update_fields["notes"]  # Can be None to clear

    status = update_fields.get("status")
    if status is not None:
        if status == InvoiceStatus.ISSUED.value:
            _issue(invoice, as_of)
        elif status == InvoiceStatus.VOID.value:
            _void(invoice)
            handle_invoice_voided(db, invoice)
        else:
            raise DomainValidationError(
                "Invoice status can only be set to 'issued' or 'void'"
            )

    db.commit()
    db.refresh(invoice)
    return invoice


def add_invoice_item(
    db: Session,
    invoice_id: uuid.UUID,
    description: str,
    quantity: int,
    unit_price_cents: int,
) -> InvoiceModel:
    """
    Add a line item to a draft invoice and recompute its amount.

    Only drafts created from line items accept more; an amount-only draft has
    no items to add to.

    Raises:
        InvalidStateError: If the invoice is no longer a draft (amount is immutable once issued)
            or its amount was not built from line items.
    """
    invoice = get_invoice(db, invoice_id)
    if invoice.status != InvoiceStatus.DRAFT.value:
        raise InvalidStateError("Line items can only be added to draft invoices")
    if not invoice.items:
        raise InvalidStateError(
            f"Invoice {invoice.invoice_number} has a fixed amount without line items; "
            "create it from line items to itemize it"
        )
    if quantity <= 0 or unit_price_cents <= 0:
        raise DomainValidationError("Quantity and unit price must be greater than zero")

    invoice_repo.add_invoice_item(
        db,
        invoice,
        description=description,
        quantity=quantity,
        unit_price_cents=unit_price_cents,
    )
    invoice.amount_cents = sum(item.amount_cents for item in invoice.items)
    db.commit()
    db.refresh(invoice)
    return invoice


def refresh_overdue_invoices(db: Session, as_of: date | None = None) -> int:
    """Mark issued and partial invoices past their due date as overdue. Returns the count."""
    policy = InvoiceStatusPolicy(as_of=as_of or date.today())
    updated = 0
    for invoice in invoice_repo.get_past_due_candidates(db, policy.as_of):
        previous = invoice.status
        _refresh_status(invoice, policy)
        _sync_installment(invoice, policy)
        if invoice.status != previous:
            updated += 1
    db.commit()
    if updated:
        logger.info("Marked %s invoice(s) overdue as of %s", updated, policy.as_of)
    return updated
