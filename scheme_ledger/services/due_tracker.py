"""
Due Status Tracker.

Matches primary installments to billing months:

1. A month is PAID when a SUCCESS primary installment lands in its window
   [due_i, due_{i+1}); the earliest such payment is used.
2. Payments left over (paid before the first due date, a second payment in
   the same window, or after the tenure ended) go to the earliest month
   still unpaid. This is how customers catch up on missed months.
3. Anything still unpaid is PENDING if not yet due, otherwise OVERDUE.

Each payment satisfies at most one month.
"""

from bisect import bisect_right
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from scheme_ledger.schemas.savings import (
    BillingMonth,
    BillingStatus,
    ClassifiedMonth,
    DuesSummary,
    Enrollment,
    Payment,
)
from scheme_ledger.services.dates import DateLike, add_months, to_utc, whole_days_between
from scheme_ledger.services.ledger import successful_payments
from scheme_ledger.services.schedule import generate_schedule, tenure_end


def classify(
    schedule: Iterable[BillingMonth],
    payments: Iterable[Payment],
    as_of: DateLike,
    window_end: Optional[DateLike] = None,
) -> list[ClassifiedMonth]:
    """
    Classify every billing month of a schedule as PAID, PENDING or OVERDUE.

    Args:
        schedule: Billing months of one enrollment, in due-date order.
        payments: That enrollment's payments (any status or type).
        as_of: Instant the classification is made for.
        window_end: When the last month's window closes. Defaults to one
            calendar month after the last due date; use `classify_enrollment`
            to close it at the enrollment's tenure end instead.

    Raises:
        InvalidInputError: a payment belongs to another enrollment or fails validation.
    """
    months = list(schedule)
    if not months:
        return []

    as_of = to_utc(as_of)
    dues = [to_utc(m.due_date) for m in months]
    end = to_utc(window_end) if window_end is not None else add_months(dues[-1], 1)

    primaries = [
        p for p in successful_payments(payments, months[0].enrollment_id) if p.is_primary
    ]

    applied: dict[int, Payment] = {}
    leftovers: list[Payment] = []
    for payment in primaries:
        index = _window_index(dues, end, to_utc(payment.paid_at))
        if index is not None and index not in applied:
            applied[index] = payment
        else:
            leftovers.append(payment)

    unpaid = (i for i in range(len(months)) if i not in applied)
    for payment in leftovers:
        index = next(unpaid, None)
        if index is None:
            break
        applied[index] = payment

    classified = []
    for i, month in enumerate(months):
        payment = applied.get(i)
        if payment is not None:
            status = BillingStatus.PAID
            days_overdue = 0
        elif dues[i] > as_of:
            status = BillingStatus.PENDING
            days_overdue = 0
        else:
            status = BillingStatus.OVERDUE
            days_overdue = max(0, whole_days_between(dues[i], as_of))

        classified.append(
            ClassifiedMonth(
                billing_month=month.model_copy(
                    update={"primary_paid": payment is not None, "status": status}
                ),
                status=status,
                days_overdue=days_overdue,
                payment_id=payment.payment_id if payment else None,
                amount_applied=payment.amount if payment else None,
            )
        )
    return classified


def _window_index(dues: list[datetime], end: datetime, paid_at: datetime) -> Optional[int]:
    """Index of the month whose window contains `paid_at`, None outside every window."""
    if paid_at >= end:
        return None
    index = bisect_right(dues, paid_at) - 1
    return index if index >= 0 else None


def classify_enrollment(
    enrollment: Enrollment,
    payments: Iterable[Payment],
    as_of: DateLike,
) -> list[ClassifiedMonth]:
    """Generate the enrollment's schedule and classify it, closing the last window at tenure end."""
    return classify(
        generate_schedule(enrollment),
        payments,
        as_of,
        window_end=tenure_end(enrollment),
    )


def summarize_dues(classified: Iterable[ClassifiedMonth], commitment_amount: Decimal) -> DuesSummary:
    """
    Dues outstanding for one enrollment: every OVERDUE month owes one commitment.
    `next_due_date` is the earliest month not yet due.
    """
    overdue = 0
    pending_dates = []
    for row in classified:
        if row.status == BillingStatus.OVERDUE:
            overdue += 1
        elif row.status == BillingStatus.PENDING:
            pending_dates.append(to_utc(row.billing_month.due_date))

    return DuesSummary(
        total_due=Decimal(commitment_amount) * overdue,
        overdue_count=overdue,
        pending_count=len(pending_dates),
        next_due_date=min(pending_dates) if pending_dates else None,
    )
