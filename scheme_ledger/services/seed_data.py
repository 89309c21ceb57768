"""
Database Seed Script.

Seeds metal rates and 4 demo customers with enrollments and payment histories:
1. On-track saver  – 22K, 11-month plan, every installment paid on time
2. Late payer      – 22K, 12-month plan, missed two months then caught up partly
3. Matured saver   – 24K, 6-month plan, fully paid and past maturity
4. Silver starter  – SILVER, 12-month plan, one pending payment only
"""

import random
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from scheme_ledger.models.enrollment import Enrollment as EnrollmentRow
from scheme_ledger.models.payment import Payment as PaymentRow
from scheme_ledger.models.rate import MetalRate
from scheme_ledger.services.allocation import allocate_grams
from scheme_ledger.services.dates import add_months

logger = logging.getLogger(__name__)

# Base ₹/g rates a year ago; each month the price drifts a little
BASE_RATES = {
    "18K": Decimal("5200.00"),
    "22K": Decimal("6250.50"),
    "24K": Decimal("6800.00"),
    "SILVER": Decimal("78.40"),
}

# Fixed IDs for a deterministic demo
PERSONAS = {
    "on_track": {
        "customer_id": "c1111111-1111-1111-1111-111111111111",
        "enrollment_id": "e1111111-1111-1111-1111-111111111111",
        "scheme_name": "Swarna 11+1",
        "grade": "22K",
        "commitment": Decimal("5000"),
        "tenure": 11,
        "months_ago": 6,
        "paid_months": [0, 1, 2, 3, 4, 5],
        "top_ups": [],
    },
    "late_payer": {
        "customer_id": "c2222222-2222-2222-2222-222222222222",
        "enrollment_id": "e2222222-2222-2222-2222-222222222222",
        "scheme_name": "Gold Saver 12",
        "grade": "22K",
        "commitment": Decimal("3000"),
        "tenure": 12,
        "months_ago": 7,
        "paid_months": [0, 1, 4, 4, 6],  # Two payments in month 4 = one catch-up
        "top_ups": [],
    },
    "matured": {
        "customer_id": "c3333333-3333-3333-3333-333333333333",
        "enrollment_id": "e3333333-3333-3333-3333-333333333333",
        "scheme_name": "Kuber 6",
        "grade": "24K",
        "commitment": Decimal("10000"),
        "tenure": 6,
        "months_ago": 8,
        "paid_months": [0, 1, 2, 3, 4, 5],
        "top_ups": [3],
    },
    "silver_starter": {
        "customer_id": "c4444444-4444-4444-4444-444444444444",
        "enrollment_id": "e4444444-4444-4444-4444-444444444444",
        "scheme_name": "Chandi 12",
        "grade": "SILVER",
        "commitment": Decimal("1000"),
        "tenure": 12,
        "months_ago": 1,
        "paid_months": [],
        "top_ups": [],
        "pending": [0],
    },
}


def seed_database(db: Session) -> None:
    """
    Seeds rates, enrollments and payments.
    Skips seeding if enrollments already exist.
    """
    existing = db.query(EnrollmentRow).count()
    if existing > 0:
        logger.info(f"Database already has {existing} enrollments, skipping seed")
        return

    logger.info("Seeding database with demo rates and %d customers...", len(PERSONAS))
    random.seed(42)  # Deterministic for demo reproducibility

    now = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    rate_history = _seed_rates(db, now)

    for persona_key, config in PERSONAS.items():
        created_at = add_months(now, -config["months_ago"])
        db.add(
            EnrollmentRow(
                enrollment_id=config["enrollment_id"],
                customer_id=config["customer_id"],
                scheme_name=config["scheme_name"],
                grade=config["grade"],
                commitment_amount=config["commitment"],
                tenure_months=config["tenure"],
                created_at=created_at.replace(tzinfo=None),
                status="ACTIVE",
            )
        )

        for month in config["paid_months"]:
            _add_payment(db, config, rate_history, created_at, month, "PRIMARY_INSTALLMENT", "SUCCESS")
        for month in config["top_ups"]:
            _add_payment(db, config, rate_history, created_at, month, "TOP_UP", "SUCCESS")
        for month in config.get("pending", []):
            _add_payment(db, config, rate_history, created_at, month, "PRIMARY_INSTALLMENT", "PENDING")

    db.commit()
    logger.info("Database seeded successfully")


def _seed_rates(db: Session, now: datetime) -> dict[str, list[tuple[datetime, Decimal]]]:
    """A year of monthly rates per grade (13 points), oldest first."""
    history = {}
    for grade, base in BASE_RATES.items():
        rate = base
        points = []
        for months_back in range(12, -1, -1):
            effective = add_months(now, -months_back)
            drift = Decimal(str(round(random.uniform(-0.01, 0.025), 4)))
            rate = (rate * (1 + drift)).quantize(Decimal("0.01"))
            points.append((effective, rate))
            db.add(MetalRate(grade=grade, rate_per_gram=rate, effective_from=effective.replace(tzinfo=None)))
        history[grade] = points
    return history


def _rate_at(points: list[tuple[datetime, Decimal]], moment: datetime) -> Decimal:
    applicable = [rate for effective, rate in points if effective <= moment]
    return applicable[-1] if applicable else points[0][1]


def _add_payment(db, config, rate_history, created_at, month, payment_type, status) -> None:
    paid_at = add_months(created_at, month) + timedelta(days=random.randint(0, 5), hours=11)
    rate = _rate_at(rate_history[config["grade"]], paid_at)
    amount = config["commitment"]
    db.add(
        PaymentRow(
            enrollment_id=config["enrollment_id"],
            amount=amount,
            rate_per_gram=rate,
            grams_allocated=allocate_grams(amount, rate),
            payment_type=payment_type,
            status=status,
            mode=random.choice(["CASH", "UPI", "CARD"]),
            paid_at=paid_at.replace(tzinfo=None),
        )
    )
