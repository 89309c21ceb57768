from datetime import datetime, timezone
from decimal import Decimal

import pytest

import mcp_server
from scheme_ledger.schemas.savings import MetalGrade, PaymentType
from scheme_ledger.services import repository


@pytest.fixture()
def enrollment_id(session_factory, monkeypatch):
    """One 22K enrollment with the first installment paid and a top-up."""
    monkeypatch.setattr(mcp_server, "SessionLocal", session_factory)

    db = session_factory()
    try:
        repository.add_rate(db, MetalGrade.K22, Decimal("6250.50"), datetime(2024, 1, 1, tzinfo=timezone.utc))
        enrollment = repository.create_enrollment(
            db,
            customer_id="cust-mcp",
            grade=MetalGrade.K22,
            commitment_amount=Decimal("5000"),
            tenure_months=3,
            scheme_name="Swarna 3",
            created_at=datetime(2024, 1, 31, tzinfo=timezone.utc),
        )
        repository.record_payment(
            db, enrollment, Decimal("5000"), paid_at=datetime(2024, 1, 31, 10, tzinfo=timezone.utc)
        )
        repository.record_payment(
            db, enrollment, Decimal("2000"), payment_type=PaymentType.TOP_UP,
            paid_at=datetime(2024, 2, 5, tzinfo=timezone.utc),
        )
    finally:
        db.close()
    return enrollment.enrollment_id


def test_get_enrollment_dues(enrollment_id):
    dues = mcp_server.get_enrollment_dues(enrollment_id, as_of="2024-03-05T00:00:00+00:00")

    assert Decimal(dues["total_due"]) == Decimal("5000")
    assert dues["overdue_count"] == 1
    assert dues["overdue"][0]["billing_month"] == "2024-02"
    assert dues["overdue"][0]["days_overdue"] == 5
    assert dues["next_due_date"].startswith("2024-03-31")


def test_check_redemption_eligibility(enrollment_id):
    result = mcp_server.check_redemption_eligibility(enrollment_id, as_of="2024-05-01T00:00:00")

    assert result["eligible"] is False
    assert Decimal(result["primary_paid"]) == Decimal("5000")
    assert Decimal(result["total_paid"]) == Decimal("7000")
    assert len(result["unmet_conditions"]) == 1


def test_get_ledger_summary(enrollment_id):
    summary = mcp_server.get_ledger_summary("cust-mcp")

    assert summary["payment_count"] == 2
    # 0.7999 + 0.3200
    assert Decimal(summary["total_grams"]) == Decimal("1.1199")
    assert summary["by_grade"]["22K"]["payment_count"] == 2


def test_unknown_ids(enrollment_id):
    assert "error" in mcp_server.get_enrollment_dues("missing")
    assert "error" in mcp_server.check_redemption_eligibility("missing")
    assert "error" in mcp_server.get_ledger_summary("nobody")
