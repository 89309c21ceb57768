"""
Billing Schedule Generator.

Produces the ordered due dates of an enrollment. Month i is due on the
creation day advanced by i calendar months, always counted from the creation
date (Jan 31 -> Feb 29 -> Mar 31), never chained from the previous due date.
"""

from datetime import datetime
from typing import Iterator

from scheme_ledger.core.exceptions import InvalidEnrollmentError, InvalidInputError
from scheme_ledger.schemas.savings import BillingMonth, Enrollment
from scheme_ledger.services.allocation import to_decimal
from scheme_ledger.services.dates import add_months, month_label, start_of_day


def validate_enrollment(enrollment: Enrollment) -> None:
    """Raise InvalidEnrollmentError for records no schedule can be built from."""
    if enrollment.tenure_months is None or enrollment.tenure_months <= 0:
        raise InvalidEnrollmentError(
            f"Enrollment {enrollment.enrollment_id}: tenure_months must be positive, "
            f"got {enrollment.tenure_months}"
        )
    try:
        commitment = to_decimal(enrollment.commitment_amount, "commitment_amount")
    except InvalidInputError as e:
        raise InvalidEnrollmentError(f"Enrollment {enrollment.enrollment_id}: {e.message}") from e
    if commitment <= 0:
        raise InvalidEnrollmentError(
            f"Enrollment {enrollment.enrollment_id}: commitment_amount must be positive, "
            f"got {commitment}"
        )
    if enrollment.maturity_date is not None:
        if start_of_day(enrollment.maturity_date) < start_of_day(enrollment.created_at):
            raise InvalidEnrollmentError(
                f"Enrollment {enrollment.enrollment_id}: maturity date "
                f"{enrollment.maturity_date} precedes creation {enrollment.created_at}"
            )


def due_dates(enrollment: Enrollment) -> list[datetime]:
    """All due dates of the enrollment, final one clamped to an explicit maturity date."""
    validate_enrollment(enrollment)
    dates = [add_months(enrollment.created_at, i) for i in range(enrollment.tenure_months)]

    if enrollment.maturity_date is not None:
        maturity = start_of_day(enrollment.maturity_date)
        if dates[-1] > maturity:
            dates[-1] = maturity
        if len(dates) > 1 and dates[-1] <= dates[-2]:
            raise InvalidEnrollmentError(
                f"Enrollment {enrollment.enrollment_id}: maturity date {maturity.date()} "
                f"falls before billing month {len(dates) - 1}"
            )
    return dates


def tenure_end(enrollment: Enrollment) -> datetime:
    """
    Instant the last billing month's payment window closes: the later of the
    effective maturity date and the natural next due date.
    """
    natural_end = add_months(enrollment.created_at, enrollment.tenure_months)
    return max(natural_end, enrollment.effective_maturity_date)


def generate_schedule(enrollment: Enrollment) -> Iterator[BillingMonth]:
    """
    Lazily yield exactly `tenure_months` billing months in increasing due-date order.

    Validation is eager: a bad enrollment raises InvalidEnrollmentError here,
    not on first iteration.
    """
    dates = due_dates(enrollment)
    return _iter_schedule(enrollment.enrollment_id, dates)


def _iter_schedule(enrollment_id: str, dates: list[datetime]) -> Iterator[BillingMonth]:
    for index, due in enumerate(dates):
        yield BillingMonth(
            enrollment_id=enrollment_id,
            index=index,
            billing_month=month_label(due),
            due_date=due,
        )
