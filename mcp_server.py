"""MCP tools over the savings ledger: dues, redemption eligibility and customer totals."""

import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from mcp.server.fastmcp import FastMCP

from scheme_ledger.core.database import SessionLocal
from scheme_ledger.core.exceptions import SchemeLedgerError
from scheme_ledger.schemas.savings import BillingStatus
from scheme_ledger.services import repository
from scheme_ledger.services.dates import to_utc
from scheme_ledger.services.due_tracker import classify_enrollment, summarize_dues
from scheme_ledger.services.eligibility import evaluate
from scheme_ledger.services.ledger import summarize
from scheme_ledger.services.rates import latest_rate

mcp = FastMCP("Scheme-Ledger-Server")

@contextmanager
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def _as_of(as_of: Optional[str]) -> datetime:
    return to_utc(datetime.fromisoformat(as_of)) if as_of else datetime.now(timezone.utc)

@mcp.tool()
def get_enrollment_dues(enrollment_id: str, as_of: Optional[str] = None) -> dict:
    """List overdue installments of an enrollment and the total amount due (as_of is ISO 8601)."""
    with get_db() as db:
        snapshot = repository.load_enrollment(db, enrollment_id)
        if snapshot is None:
            return {"error": "Enrollment not found"}
        enrollment, payments = snapshot
        try:
            months = classify_enrollment(enrollment, payments, _as_of(as_of))
        except SchemeLedgerError as e:
            return {"error": e.message}

        summary = summarize_dues(months, enrollment.commitment_amount)
        return {
            "enrollment_id": enrollment_id,
            "grade": enrollment.grade.value,
            "total_due": str(summary.total_due),
            "overdue_count": summary.overdue_count,
            "next_due_date": summary.next_due_date.isoformat() if summary.next_due_date else None,
            "overdue": [
                {
                    "billing_month": m.billing_month.billing_month,
                    "due_date": m.billing_month.due_date.isoformat(),
                    "days_overdue": m.days_overdue,
                }
                for m in months if m.status == BillingStatus.OVERDUE
            ],
        }

@mcp.tool()
def check_redemption_eligibility(enrollment_id: str, as_of: Optional[str] = None) -> dict:
    """Check whether an enrollment has matured and paid its full principal."""
    with get_db() as db:
        snapshot = repository.load_enrollment(db, enrollment_id)
        if snapshot is None:
            return {"error": "Enrollment not found"}
        enrollment, payments = snapshot
        moment = _as_of(as_of)
        rate = latest_rate(repository.list_rates(db, enrollment.grade), enrollment.grade, at=moment)
        try:
            result = evaluate(enrollment, payments, moment, current_rate=rate)
        except SchemeLedgerError as e:
            return {"error": e.message}
        return {"enrollment_id": enrollment_id, **result.model_dump(mode="json")}

@mcp.tool()
def get_ledger_summary(customer_id: str, group_by: str = "grade") -> dict:
    """Total paid and grams accumulated by a customer, optionally per metal grade."""
    with get_db() as db:
        enrollments, payments = repository.load_customer(db, customer_id)
        if not enrollments:
            return {"error": "Customer has no enrollments"}
        try:
            summary = summarize(payments, group_by=group_by, enrollments=enrollments)
        except SchemeLedgerError as e:
            return {"error": e.message}
        return {"customer_id": customer_id, **summary.model_dump(mode="json")}

if __name__ == "__main__":
    # Start the standard streaming stdio server
    print("Starting Scheme Ledger MCP Server on stdio...", file=sys.stderr)
    mcp.run()
