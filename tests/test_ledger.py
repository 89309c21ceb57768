"""
Ledger aggregation tests.
Only SUCCESS payments are counted; grade comes from the payment's enrollment.
"""

from decimal import Decimal

import pytest

from factories import dt, make_enrollment, make_payment
from scheme_ledger.core.exceptions import InvalidInputError
from scheme_ledger.schemas.savings import MetalGrade, PaymentStatus, PaymentType
from scheme_ledger.services.ledger import successful_payments, summarize

GOLD = make_enrollment(enrollment_id="enr-gold", grade=MetalGrade.K22)
SILVER = make_enrollment(enrollment_id="enr-silver", grade=MetalGrade.SILVER, commitment_amount=Decimal("1000"))


def _payments():
    return [
        make_payment(dt(2024, 1, 16), amount="5000", rate="6250.50", enrollment_id="enr-gold"),
        make_payment(dt(2024, 2, 16), amount="5000", rate="6250.50", enrollment_id="enr-gold"),
        make_payment(dt(2024, 2, 20), amount="2000", rate="6250.50", enrollment_id="enr-gold",
                     payment_type=PaymentType.TOP_UP),
        make_payment(dt(2024, 1, 16), amount="1000", rate="78.40", enrollment_id="enr-silver"),
        make_payment(dt(2024, 2, 16), amount="1000", rate="78.40", enrollment_id="enr-silver",
                     status=PaymentStatus.PENDING),
        make_payment(dt(2024, 3, 16), amount="5000", rate="6250.50", enrollment_id="enr-gold",
                     status=PaymentStatus.FAILED),
    ]


class TestSummarize:

    def test_totals_over_successful_payments(self):
        summary = summarize(_payments())

        # 0.7999 + 0.7999 + 0.3200 gold, 12.7551 silver
        assert summary.total_paid == Decimal("13000")
        assert summary.total_grams == Decimal("14.6749")
        assert summary.payment_count == 4
        assert summary.by_grade is None

    def test_grouped_by_enrollment_grade(self):
        summary = summarize(_payments(), group_by="grade", enrollments=[GOLD, SILVER])

        assert set(summary.by_grade) == {MetalGrade.K22, MetalGrade.SILVER}
        gold = summary.by_grade[MetalGrade.K22]
        silver = summary.by_grade[MetalGrade.SILVER]
        assert gold.total_paid == Decimal("12000")
        assert gold.total_grams == Decimal("1.9198")
        assert gold.payment_count == 3
        assert silver.total_paid == Decimal("1000")
        assert silver.total_grams == Decimal("12.7551")
        assert silver.payment_count == 1

    def test_enrollments_as_mapping(self):
        summary = summarize(
            _payments(), group_by="grade",
            enrollments={"enr-gold": GOLD, "enr-silver": SILVER},
        )
        assert summary.by_grade[MetalGrade.SILVER].payment_count == 1

    def test_grades_without_successful_payments_are_absent(self):
        only_pending = [p for p in _payments() if p.status != PaymentStatus.SUCCESS]
        summary = summarize(only_pending, group_by="grade", enrollments=[GOLD, SILVER])

        assert summary.payment_count == 0
        assert summary.total_paid == Decimal("0")
        assert summary.by_grade == {}

    def test_order_independent(self):
        payments = _payments()
        assert summarize(payments, "grade", [GOLD, SILVER]) == summarize(
            list(reversed(payments)), "grade", [SILVER, GOLD]
        )

    def test_unknown_enrollment_when_grouping(self):
        with pytest.raises(InvalidInputError, match="unknown enrollment"):
            summarize(_payments(), group_by="grade", enrollments=[GOLD])

    def test_unknown_group_by(self):
        with pytest.raises(InvalidInputError, match="group_by"):
            summarize(_payments(), group_by="karat")

    def test_invalid_payment_not_silently_zeroed(self):
        bad = make_payment(dt(2024, 1, 16)).model_copy(update={"amount": Decimal("-5000")})
        with pytest.raises(InvalidInputError):
            summarize([bad])


class TestSuccessfulPayments:

    def test_sorted_chronologically(self):
        later = make_payment(dt(2024, 3, 1))
        earlier = make_payment(dt(2024, 1, 1))
        assert successful_payments([later, earlier]) == [earlier, later]

    def test_rejects_payments_of_other_enrollments(self):
        with pytest.raises(InvalidInputError):
            successful_payments(_payments(), enrollment_id="enr-gold")
