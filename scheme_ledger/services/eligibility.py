"""
Eligibility Evaluator.

An enrollment can be redeemed once all of these hold:
  - the maturity date has been reached,
  - SUCCESS primary installments cover commitment x tenure (top-ups don't count),
  - some metal has actually been allocated.

The evaluator only reports; closing the enrollment is the redemption
workflow's job.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from scheme_ledger.core.exceptions import InvalidInputError
from scheme_ledger.schemas.savings import (
    EligibilityResult,
    Enrollment,
    Payment,
    RateSnapshot,
)
from scheme_ledger.services.allocation import valuate
from scheme_ledger.services.dates import DateLike, to_utc
from scheme_ledger.services.ledger import successful_payments
from scheme_ledger.services.schedule import validate_enrollment

logger = logging.getLogger(__name__)


def evaluate(
    enrollment: Enrollment,
    payments: Iterable[Payment],
    as_of: DateLike,
    current_rate: Optional[RateSnapshot] = None,
) -> EligibilityResult:
    """
    Decide redemption eligibility and report accumulated totals.

    Args:
        enrollment: The enrollment being evaluated.
        payments: Its payments (any status or type).
        as_of: Instant of evaluation.
        current_rate: Optional rate of the enrollment's grade, used to value the grams.

    Raises:
        InvalidEnrollmentError: the enrollment is inconsistent.
        InvalidInputError: a payment is invalid or belongs elsewhere, or the rate's grade differs.
    """
    validate_enrollment(enrollment)
    as_of = to_utc(as_of)
    maturity = enrollment.effective_maturity_date
    required = enrollment.required_amount

    counted = successful_payments(payments, enrollment.enrollment_id)
    total_paid = Decimal("0")
    total_grams = Decimal("0")
    primary_paid = Decimal("0")
    principal_met_at = None
    for payment in counted:
        total_paid += payment.amount
        total_grams += payment.grams_allocated
        if payment.is_primary:
            primary_paid += payment.amount
            if principal_met_at is None and primary_paid >= required:
                principal_met_at = to_utc(payment.paid_at)

    unmet = []
    if as_of < maturity:
        unmet.append(f"Tenure not complete: matures on {maturity.date().isoformat()}")
    if primary_paid < required:
        unmet.append(f"Primary installments {primary_paid} below required {required}")
    if total_grams <= 0:
        unmet.append("No metal allocated")

    eligible = not unmet
    eligible_date = max(maturity, principal_met_at) if eligible else None

    current_value = None
    if current_rate is not None:
        if current_rate.grade != enrollment.grade:
            raise InvalidInputError(
                f"Rate grade {current_rate.grade.value} does not match enrollment grade "
                f"{enrollment.grade.value}"
            )
        current_value = valuate(total_grams, current_rate.rate_per_gram)

    logger.debug(
        "Enrollment %s eligibility=%s (primary %s / %s)",
        enrollment.enrollment_id, eligible, primary_paid, required,
    )
    return EligibilityResult(
        eligible=eligible,
        total_grams=total_grams,
        total_paid=total_paid,
        primary_paid=primary_paid,
        required_amount=required,
        shortfall=max(required - primary_paid, Decimal("0")),
        maturity_date=maturity,
        eligible_date=eligible_date,
        unmet_conditions=unmet,
        current_value=current_value,
    )
