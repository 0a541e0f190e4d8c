from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from enum import Enum


class LeaseStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class BillingMode(str, Enum):
    TERM = "term"
    MONTHLY = "monthly"


ALLOWED_PLAN_MONTHS = (3, 6, 12)


def add_months(start: date, months: int) -> date:
    """Add calendar months to a date, clamping to the last day of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def last_of_month(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


@dataclass(frozen=True, slots=True)
class ScheduledInstallment:
    sequence: int
    due_date: date
    amount_cents: int


@dataclass(frozen=True, slots=True)
class LeaseTermPlan:
    """The billing horizon of a lease.

    A term-mode lease is billed as a single installment for the whole plan,
    due on the start date. A monthly-mode lease gets one installment per
    month, the i-th due on start_date + i months.
    """

    start_date: date
    plan_months: int
    rent_cents: int
    billing_mode: BillingMode = BillingMode.TERM

    @property
    def end_date(self) -> date:
        return add_months(self.start_date, self.plan_months)

    @property
    def total_cents(self) -> int:
        return self.rent_cents * self.plan_months

    def installments(self) -> list[ScheduledInstallment]:
        if self.billing_mode == BillingMode.TERM:
            return [ScheduledInstallment(1, self.start_date, self.total_cents)]
        return [
            ScheduledInstallment(i + 1, add_months(self.start_date, i), self.rent_cents)
            for i in range(self.plan_months)
        ]


@dataclass(frozen=True, slots=True)
class PaidThroughPolicy:
    """Computes how far a lease's paid_through_date may advance.

    Installments are considered in due-date order. Only the contiguous prefix
    of paid installments counts: an installment paid ahead of an earlier,
    unpaid one does not move the date until the gap is back-filled.
    - whole schedule paid -> end_date
    - otherwise -> due date of the newest installment in the paid prefix
    The result never precedes the current value and never exceeds end_date.
    """

    end_date: date

    def advance(
        self,
        *,
        current: date | None,
        schedule: list[tuple[date, bool]],
    ) -> date | None:
        """Return the new paid_through_date, or ``current`` when nothing moves.

        ``schedule`` holds (due_date, is_paid) pairs in any order.
        """
        ordered = sorted(schedule, key=lambda item: item[0])
        candidate = None
        for due_date, is_paid in ordered:
            if not is_paid:
                break
            candidate = due_date
        else:
            if ordered:
                candidate = self.end_date

        if candidate is None:
            return current
        candidate = min(candidate, self.end_date)
        if current is not None and candidate <= current:
            return current
        return candidate
