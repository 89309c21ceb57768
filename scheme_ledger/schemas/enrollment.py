"""
Pydantic schemas for the Enrollment API.
Covers enrollment creation, schedule, dues and eligibility responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from scheme_ledger.schemas.savings import (
    ClassifiedMonth,
    DuesSummary,
    EligibilityResult,
    Enrollment,
    MetalGrade,
)


class EnrollmentCreateRequest(BaseModel):
    """Request payload to enroll a customer in a scheme."""
    customer_id: str = Field(..., min_length=1, description="Customer to enroll")
    grade: Optional[MetalGrade] = Field(None, description="Metal grade; defaults to the configured grade")
    commitment_amount: Decimal = Field(..., gt=0, decimal_places=2, description="Monthly installment amount (₹)")
    tenure_months: int = Field(..., gt=0, le=120, description="Number of monthly installments")
    scheme_name: str = Field("Gold Plan", description="Display name of the scheme")
    created_at: Optional[datetime] = Field(None, description="Enrollment date; defaults to now")
    maturity_date: Optional[datetime] = Field(None, description="Explicit maturity date, if any")


class EnrollmentResponse(BaseModel):
    """Enrollment record with its effective maturity date."""
    enrollment: Enrollment
    maturity_date: datetime = Field(..., description="Explicit or derived maturity date")

    @classmethod
    def of(cls, enrollment: Enrollment) -> "EnrollmentResponse":
        return cls(enrollment=enrollment, maturity_date=enrollment.effective_maturity_date)


class EnrollmentListResponse(BaseModel):
    enrollments: list[EnrollmentResponse]
    total: int


class ScheduleResponse(BaseModel):
    """Billing months of an enrollment classified as of a given instant."""
    enrollment_id: str
    as_of: datetime
    months: list[ClassifiedMonth]


class DuesResponse(BaseModel):
    """Unpaid months that have come due, plus the totals for the dues screen."""
    enrollment_id: str
    scheme_name: Optional[str] = None
    grade: MetalGrade
    as_of: datetime
    dues: list[ClassifiedMonth]
    summary: DuesSummary


class EligibilityResponse(BaseModel):
    enrollment_id: str
    as_of: datetime
    result: EligibilityResult
