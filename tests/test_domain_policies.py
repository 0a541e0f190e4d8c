from datetime import date

import pytest

from rentledger.domain.invoice_status import (
    InstallmentStatus,
    InvoiceStatus,
    InvoiceStatusPolicy,
)
from rentledger.domain.lease_term import (
    BillingMode,
    LeaseTermPlan,
    PaidThroughPolicy,
    add_months,
    first_of_month,
    last_of_month,
)


# ============================================================================
# INVOICE STATUS POLICY
# ============================================================================

POLICY = InvoiceStatusPolicy(as_of=date(2025, 3, 10))


@pytest.mark.parametrize(
    "amount_paid, due_on, is_draft, is_void, expected",
    [
        (0, date(2025, 3, 31), False, False, InvoiceStatus.ISSUED),
        (40, date(2025, 3, 31), False, False, InvoiceStatus.PARTIAL),
        (100, date(2025, 3, 31), False, False, InvoiceStatus.PAID),
        (100, date(2025, 1, 1), False, False, InvoiceStatus.PAID),
        (0, date(2025, 3, 9), False, False, InvoiceStatus.OVERDUE),
        (40, date(2025, 3, 9), False, False, InvoiceStatus.OVERDUE),
        (0, date(2025, 3, 10), False, False, InvoiceStatus.ISSUED),
        (0, date(2025, 3, 31), True, False, InvoiceStatus.DRAFT),
        (40, date(2025, 3, 31), False, True, InvoiceStatus.VOID),
        (100, date(2025, 3, 31), False, True, InvoiceStatus.VOID),
    ],
)
def test_invoice_status_resolution(amount_paid, due_on, is_draft, is_void, expected):
    status = POLICY.resolve(
        amount_cents=100,
        amount_paid_cents=amount_paid,
        due_on=due_on,
        is_draft=is_draft,
        is_void=is_void,
    )
    assert status == expected


def test_invoice_due_today_is_not_overdue():
    assert POLICY.is_past_due(date(2025, 3, 10)) is False
    assert POLICY.is_past_due(date(2025, 3, 9)) is True


def test_installment_status_resolution():
    assert (
        POLICY.resolve_installment(amount_cents=100, amount_paid_cents=0, due_date=date(2025, 4, 1))
        == InstallmentStatus.PENDING
    )
    assert (
        POLICY.resolve_installment(amount_cents=100, amount_paid_cents=30, due_date=date(2025, 4, 1))
        == InstallmentStatus.PARTIAL
    )
    assert (
        POLICY.resolve_installment(amount_cents=100, amount_paid_cents=30, due_date=date(2025, 2, 1))
        == InstallmentStatus.OVERDUE
    )
    assert (
        POLICY.resolve_installment(amount_cents=100, amount_paid_cents=100, due_date=date(2025, 2, 1))
        == InstallmentStatus.PAID
    )


# ============================================================================
# LEASE TERM CALENDAR
# ============================================================================


def test_add_months_clamps_to_month_end():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)
    assert add_months(date(2025, 1, 1), 12) == date(2026, 1, 1)


def test_month_bounds():
    assert first_of_month(date(2025, 2, 17)) == date(2025, 2, 1)
    assert last_of_month(date(2025, 2, 17)) == date(2025, 2, 28)
    assert last_of_month(date(2024, 2, 1)) == date(2024, 2, 29)


def test_term_plan_has_single_installment_for_whole_plan():
    plan = LeaseTermPlan(start_date=date(2025, 1, 1), plan_months=12, rent_cents=300)

    installments = plan.installments()

    assert plan.end_date == date(2026, 1, 1)
    assert len(installments) == 1
    assert installments[0].sequence == 1
    assert installments[0].due_date == date(2025, 1, 1)
    assert installments[0].amount_cents == 3600


def test_monthly_plan_has_one_installment_per_month():
    plan = LeaseTermPlan(
        start_date=date(2025, 1, 15),
        plan_months=3,
        rent_cents=500,
        billing_mode=BillingMode.MONTHLY,
    )

    installments = plan.installments()

    assert [i.due_date for i in installments] == [
        date(2025, 1, 15),
        date(2025, 2, 15),
        date(2025, 3, 15),
    ]
    assert [i.sequence for i in installments] == [1, 2, 3]
    assert sum(i.amount_cents for i in installments) == plan.total_cents == 1500


# ============================================================================
# PAID-THROUGH POLICY
# ============================================================================

END = date(2025, 4, 1)
SCHEDULE_DATES = [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]


def test_fully_paid_schedule_moves_to_end_date():
    policy = PaidThroughPolicy(end_date=END)
    assert policy.advance(current=None, schedule=[(date(2025, 1, 1), True)]) == END


def test_paid_prefix_moves_to_newest_paid_due_date():
    policy = PaidThroughPolicy(end_date=END)
    schedule = list(zip(SCHEDULE_DATES, [True, True, False]))
    assert policy.advance(current=None, schedule=schedule) == date(2025, 2, 1)


def test_gap_in_schedule_blocks_later_paid_installments():
    policy = PaidThroughPolicy(end_date=END)
    schedule = list(zip(SCHEDULE_DATES, [True, False, True]))
    assert policy.advance(current=None, schedule=schedule) == date(2025, 1, 1)


def test_schedule_order_does_not_matter():
    policy = PaidThroughPolicy(end_date=END)
    schedule = list(zip(reversed(SCHEDULE_DATES), [False, True, True]))
    assert policy.advance(current=None, schedule=schedule) == date(2025, 2, 1)


def test_nothing_paid_keeps_current_value():
    policy = PaidThroughPolicy(end_date=END)
    schedule = list(zip(SCHEDULE_DATES, [False, False, False]))
    assert policy.advance(current=None, schedule=schedule) is None
    assert policy.advance(current=date(2025, 1, 1), schedule=schedule) == date(2025, 1, 1)


def test_paid_through_never_decreases():
    policy = PaidThroughPolicy(end_date=END)
    schedule = list(zip(SCHEDULE_DATES, [True, False, False]))
    assert policy.advance(current=date(2025, 3, 1), schedule=schedule) == date(2025, 3, 1)
