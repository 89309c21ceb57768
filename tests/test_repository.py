"""
Repository tests: money inputs are rounded to the stored precision
before grams are allocated, so what is returned is what is read back.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from scheme_ledger.core.exceptions import InvalidInputError
from scheme_ledger.schemas.savings import MetalGrade
from scheme_ledger.services import repository
from scheme_ledger.services.allocation import verify_allocation
from scheme_ledger.services.due_tracker import classify_enrollment

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _silver_enrollment(db, commitment="1000"):
    return repository.create_enrollment(
        db,
        customer_id="cust-r",
        grade=MetalGrade.SILVER,
        commitment_amount=Decimal(commitment),
        tenure_months=3,
        scheme_name="Chandi 3",
        created_at=JAN_1,
    )


class TestAddRate:

    def test_rate_rounded_half_up_to_paise(self, db):
        snapshot = repository.add_rate(db, MetalGrade.SILVER, Decimal("80.005"), JAN_1)

        assert snapshot.rate_per_gram == Decimal("80.01")
        assert repository.list_rates(db, MetalGrade.SILVER)[0].rate_per_gram == Decimal("80.01")

    def test_rate_rounding_to_zero_rejected(self, db):
        with pytest.raises(InvalidInputError):
            repository.add_rate(db, MetalGrade.SILVER, Decimal("0.004"), JAN_1)


class TestRecordPayment:

    def test_stored_payment_matches_returned_payment(self, db):
        repository.add_rate(db, MetalGrade.SILVER, Decimal("1.00"), JAN_1)
        enrollment = _silver_enrollment(db)

        recorded = repository.record_payment(
            db, enrollment, Decimal("1000.009"), paid_at=datetime(2024, 1, 2, tzinfo=timezone.utc)
        )

        assert recorded.amount == Decimal("1000.01")
        assert recorded.grams_allocated == Decimal("1000.0100")
        _, payments = repository.load_enrollment(db, enrollment.enrollment_id)
        assert payments == [recorded]
        verify_allocation(payments[0])

        months = classify_enrollment(enrollment, payments, datetime(2024, 1, 5, tzinfo=timezone.utc))
        assert months[0].payment_id == recorded.payment_id

    def test_amount_rounding_to_zero_rejected(self, db):
        repository.add_rate(db, MetalGrade.SILVER, Decimal("1.00"), JAN_1)
        enrollment = _silver_enrollment(db)

        with pytest.raises(InvalidInputError):
            repository.record_payment(db, enrollment, Decimal("0.004"), paid_at=JAN_1)


def test_commitment_rounded_to_paise(db):
    enrollment = _silver_enrollment(db, commitment="999.995")

    assert enrollment.commitment_amount == Decimal("1000.00")
