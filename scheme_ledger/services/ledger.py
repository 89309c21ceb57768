"""
Ledger Aggregator.

Folds a payment stream into dashboard totals. Only SUCCESS payments are
counted; PENDING and FAILED payments are left out entirely rather than
contributing zero.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Iterable, Optional, Union

from scheme_ledger.core.exceptions import InvalidInputError
from scheme_ledger.schemas.savings import (
    Enrollment,
    GradeTotals,
    LedgerSummary,
    MetalGrade,
    Payment,
)
from scheme_ledger.services.allocation import to_positive_decimal, verify_allocation
from scheme_ledger.services.dates import to_utc

logger = logging.getLogger(__name__)

GROUP_BY_OPTIONS = ("none", "grade")


def successful_payments(
    payments: Iterable[Payment],
    enrollment_id: Optional[str] = None,
) -> list[Payment]:
    """
    Validate a payment stream and return its SUCCESS payments in (paid_at, payment_id) order.

    Every payment is checked, whatever its status: amount and rate must be
    positive and the stored grams must match the rate snapshot. When
    `enrollment_id` is given, a payment of any other enrollment is rejected.
    """
    accepted = []
    for payment in payments:
        if enrollment_id is not None and payment.enrollment_id != enrollment_id:
            raise InvalidInputError(
                f"Payment {payment.payment_id} belongs to enrollment {payment.enrollment_id}, "
                f"not {enrollment_id}"
            )
        to_positive_decimal(payment.amount, "amount")
        verify_allocation(payment)
        if payment.is_success:
            accepted.append(payment)
    accepted.sort(key=lambda p: (to_utc(p.paid_at), p.payment_id))
    return accepted


def _enrollment_index(
    enrollments: Union[Mapping, Iterable[Enrollment], None],
) -> dict[str, Enrollment]:
    if enrollments is None:
        return {}
    if isinstance(enrollments, Mapping):
        return dict(enrollments)
    return {e.enrollment_id: e for e in enrollments}


def summarize(
    payments: Iterable[Payment],
    group_by: str = "none",
    enrollments: Union[Mapping, Iterable[Enrollment], None] = None,
) -> LedgerSummary:
    """
    Total amount paid and grams allocated across SUCCESS payments.

    Args:
        payments: Payment stream, any statuses, any enrollments.
        group_by: "none" or "grade". Grade comes from each payment's enrollment.
        enrollments: Enrollments (iterable or mapping by id); required for "grade".

    Raises:
        InvalidInputError: unknown group_by, or a payment whose enrollment is missing.
    """
    if group_by not in GROUP_BY_OPTIONS:
        raise InvalidInputError(f"group_by must be one of {GROUP_BY_OPTIONS}, got {group_by!r}")

    counted = successful_payments(payments)
    total_paid = sum((p.amount for p in counted), Decimal("0"))
    total_grams = sum((p.grams_allocated for p in counted), Decimal("0"))

    by_grade = None
    if group_by == "grade":
        index = _enrollment_index(enrollments)
        buckets: dict[MetalGrade, dict] = {}
        for p in counted:
            enrollment = index.get(p.enrollment_id)
            if enrollment is None:
                raise InvalidInputError(
                    f"Payment {p.payment_id} references unknown enrollment {p.enrollment_id}"
                )
            bucket = buckets.setdefault(
                enrollment.grade,
                {"total_paid": Decimal("0"), "total_grams": Decimal("0"), "payment_count": 0},
            )
            bucket["total_paid"] += p.amount
            bucket["total_grams"] += p.grams_allocated
            bucket["payment_count"] += 1
        by_grade = {grade: GradeTotals(**values) for grade, values in buckets.items()}

    logger.debug("Summarized %d successful payments (group_by=%s)", len(counted), group_by)
    return LedgerSummary(
        total_paid=total_paid,
        total_grams=total_grams,
        payment_count=len(counted),
        by_grade=by_grade,
    )
