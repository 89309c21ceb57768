"""Pydantic schemas for ledger summary responses."""

from pydantic import BaseModel, Field

from scheme_ledger.schemas.savings import LedgerSummary


class LedgerSummaryResponse(BaseModel):
    customer_id: str
    group_by: str = Field("none", description="none or grade")
    active_enrollments: int = 0
    summary: LedgerSummary
