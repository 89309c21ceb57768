"""
Redemption eligibility tests.
Tenure elapsed, full principal paid through primary installments, grams > 0.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from factories import dt, make_enrollment, make_payment
from scheme_ledger.core.exceptions import InvalidEnrollmentError, InvalidInputError
from scheme_ledger.schemas.savings import (
    EnrollmentStatus,
    MetalGrade,
    PaymentStatus,
    PaymentType,
    RateSnapshot,
)
from scheme_ledger.services.eligibility import evaluate
from scheme_ledger.services.dates import add_months

CREATED = dt(2023, 1, 1)
MATURITY = dt(2024, 1, 1)


def _year_plan():
    return make_enrollment(created_at=CREATED, tenure_months=12, commitment_amount=Decimal("5000"))


def _installments(amounts, rate="12500"):
    return [
        make_payment(add_months(CREATED, i) + timedelta(days=1), amount=str(amount), rate=rate)
        for i, amount in enumerate(amounts)
    ]


class TestEligible:

    def test_full_principal_at_maturity(self):
        """12 x 5000 primary + one top-up, 0.4 g each -> 5.2 g, eligible on the maturity date."""
        payments = _installments([5000] * 12) + [
            make_payment(dt(2023, 6, 20), amount="5000", rate="12500", payment_type=PaymentType.TOP_UP)
        ]

        result = evaluate(_year_plan(), payments, MATURITY)

        assert result.eligible is True
        assert result.total_grams == Decimal("5.2")
        assert result.primary_paid == Decimal("60000")
        assert result.total_paid == Decimal("65000")
        assert result.required_amount == Decimal("60000")
        assert result.shortfall == Decimal("0")
        assert result.maturity_date == MATURITY
        assert result.eligible_date == MATURITY
        assert result.unmet_conditions == []

    def test_eligible_date_is_when_principal_completed_after_maturity(self):
        late = make_payment(dt(2024, 2, 10, 12), amount="5000", rate="12500")
        payments = _installments([5000] * 11) + [late]

        result = evaluate(_year_plan(), payments, dt(2024, 3, 1))

        assert result.eligible is True
        assert result.eligible_date == dt(2024, 2, 10, 12)

    def test_explicit_maturity_date(self):
        enrollment = make_enrollment(
            created_at=CREATED, tenure_months=12, maturity_date=dt(2024, 3, 1)
        )
        payments = _installments([5000] * 12)

        assert evaluate(enrollment, payments, MATURITY).eligible is False
        assert evaluate(enrollment, payments, dt(2024, 3, 1)).eligible is True

    def test_current_value_at_rate_of_same_grade(self):
        rate = RateSnapshot(grade=MetalGrade.K22, rate_per_gram=Decimal("7000"), effective_from=MATURITY)
        result = evaluate(_year_plan(), _installments([5000] * 12), MATURITY, current_rate=rate)

        # 4.8 g * 7000
        assert result.current_value == Decimal("33600.00")

    def test_enrollment_is_not_modified(self):
        enrollment = _year_plan()
        evaluate(enrollment, _installments([5000] * 12), MATURITY)
        assert enrollment.status == EnrollmentStatus.ACTIVE


class TestNotEligible:

    def test_short_principal_still_reports_totals(self):
        """11 x 5000 + 4000 = 59000 of 60000."""
        payments = _installments([5000] * 11 + [4000])

        result = evaluate(_year_plan(), payments, MATURITY)

        assert result.eligible is False
        assert result.primary_paid == Decimal("59000")
        assert result.required_amount == Decimal("60000")
        assert result.shortfall == Decimal("1000")
        assert result.total_grams > 0
        assert result.eligible_date is None
        assert len(result.unmet_conditions) == 1

    def test_top_ups_do_not_count_toward_principal(self):
        payments = _installments([5000] * 11) + [
            make_payment(dt(2023, 12, 5), amount="5000", rate="12500", payment_type=PaymentType.TOP_UP)
        ]

        result = evaluate(_year_plan(), payments, MATURITY)

        assert result.eligible is False
        assert result.total_paid == Decimal("60000")
        assert result.primary_paid == Decimal("55000")

    def test_before_maturity(self):
        result = evaluate(_year_plan(), _installments([5000] * 12), MATURITY - timedelta(seconds=1))

        assert result.eligible is False
        assert any("matures on 2024-01-01" in reason for reason in result.unmet_conditions)

    def test_failed_and_pending_payments_ignored(self):
        payments = _installments([5000] * 11) + [
            make_payment(dt(2023, 12, 5), status=PaymentStatus.FAILED, rate="12500"),
            make_payment(dt(2023, 12, 6), status=PaymentStatus.PENDING, rate="12500"),
        ]

        result = evaluate(_year_plan(), payments, MATURITY)

        assert result.eligible is False
        assert result.primary_paid == Decimal("55000")
        assert result.total_grams == Decimal("4.4")

    def test_no_metal_allocated(self):
        # 1 rupee at 100000/g rounds to 0.0000 g
        enrollment = make_enrollment(
            created_at=CREATED, tenure_months=1, commitment_amount=Decimal("1")
        )
        payment = make_payment(dt(2023, 1, 2), amount="1", rate="100000")

        result = evaluate(enrollment, [payment], dt(2023, 3, 1))

        assert result.eligible is False
        assert result.unmet_conditions == ["No metal allocated"]

    def test_nothing_paid(self):
        result = evaluate(_year_plan(), [], MATURITY)

        assert result.eligible is False
        assert result.total_paid == Decimal("0")
        assert result.total_grams == Decimal("0")
        assert len(result.unmet_conditions) == 2


class TestEligibilityErrors:

    def test_invalid_enrollment(self):
        with pytest.raises(InvalidEnrollmentError):
            evaluate(make_enrollment(tenure_months=0), [], MATURITY)

    def test_rate_of_another_grade(self):
        rate = RateSnapshot(grade=MetalGrade.SILVER, rate_per_gram=Decimal("80"), effective_from=MATURITY)
        with pytest.raises(InvalidInputError, match="grade"):
            evaluate(_year_plan(), _installments([5000] * 12), MATURITY, current_rate=rate)

    def test_payment_of_another_enrollment(self):
        stray = make_payment(dt(2023, 2, 2), enrollment_id="enr-9")
        with pytest.raises(InvalidInputError):
            evaluate(_year_plan(), [stray], MATURITY)
