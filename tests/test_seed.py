"""Demo seed data must load cleanly through the same paths the API uses."""

from datetime import datetime, timezone

from scheme_ledger.models.enrollment import Enrollment as EnrollmentRow
from scheme_ledger.models.payment import Payment as PaymentRow
from scheme_ledger.services import repository
from scheme_ledger.services.allocation import verify_allocation
from scheme_ledger.services.due_tracker import classify_enrollment
from scheme_ledger.services.eligibility import evaluate
from scheme_ledger.services.rates import current_rates
from scheme_ledger.services.seed_data import PERSONAS, seed_database


def test_seed_populates_every_persona(db):
    seed_database(db)

    assert db.query(EnrollmentRow).count() == len(PERSONAS)
    now = datetime.now(timezone.utc)
    for config in PERSONAS.values():
        enrollment, payments = repository.load_enrollment(db, config["enrollment_id"])
        for payment in payments:
            verify_allocation(payment)

        months = classify_enrollment(enrollment, payments, now)
        assert len(months) == config["tenure"]
        evaluate(enrollment, payments, now)


def test_seed_publishes_rates_for_every_grade(db):
    seed_database(db)
    rates = current_rates(repository.list_rates(db))
    assert all(snapshot is not None for snapshot in rates.values())


def test_seed_is_skipped_when_data_exists(db):
    seed_database(db)
    payments = db.query(PaymentRow).count()

    seed_database(db)

    assert db.query(EnrollmentRow).count() == len(PERSONAS)
    assert db.query(PaymentRow).count() == payments
