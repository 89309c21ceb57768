"""
Enrollment API endpoints.
Schedule, dues and eligibility views are computed on request from the
stored payments; nothing derived is persisted.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from scheme_ledger.core.config import get_settings
from scheme_ledger.core.database import get_db
from scheme_ledger.core.redis import cache_delete, summary_cache_key
from scheme_ledger.models.enrollment import Enrollment as EnrollmentRow
from scheme_ledger.schemas.enrollment import (
    DuesResponse,
    EligibilityResponse,
    EnrollmentCreateRequest,
    EnrollmentListResponse,
    EnrollmentResponse,
    ScheduleResponse,
)
from scheme_ledger.schemas.savings import BillingStatus
from scheme_ledger.services import repository
from scheme_ledger.services.due_tracker import classify_enrollment, summarize_dues
from scheme_ledger.services.dates import to_utc
from scheme_ledger.services.eligibility import evaluate
from scheme_ledger.services.rates import latest_rate

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


def _as_of(value: Optional[datetime]) -> datetime:
    return to_utc(value) if value else datetime.now(timezone.utc)


def _load_or_404(db: Session, enrollment_id: str):
    snapshot = repository.load_enrollment(db, enrollment_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Enrollment {enrollment_id} not found")
    return snapshot


@router.post("", response_model=EnrollmentResponse, status_code=201)
async def create_enrollment(request: EnrollmentCreateRequest, db: Session = Depends(get_db)):
    """Enroll a customer in a fixed-tenure savings scheme."""
    enrollment = repository.create_enrollment(
        db,
        customer_id=request.customer_id,
        grade=request.grade or settings.DEFAULT_GRADE,
        commitment_amount=request.commitment_amount,
        tenure_months=request.tenure_months,
        scheme_name=request.scheme_name,
        created_at=request.created_at,
        maturity_date=request.maturity_date,
    )
    cache_delete(
        summary_cache_key(request.customer_id, "none"),
        summary_cache_key(request.customer_id, "grade"),
    )
    return EnrollmentResponse.of(enrollment)


@router.get("", response_model=EnrollmentListResponse)
async def list_enrollments(
    customer_id: Optional[str] = Query(None, description="Filter: owning customer"),
    status: Optional[str] = Query(None, description="Filter: ACTIVE or CLOSED"),
    db: Session = Depends(get_db),
):
    """List enrollments, optionally for one customer."""
    query = db.query(EnrollmentRow)
    if customer_id:
        query = query.filter(EnrollmentRow.customer_id == customer_id)
    if status:
        query = query.filter(EnrollmentRow.status == status.upper())

    rows = query.order_by(EnrollmentRow.created_at).all()
    enrollments = [EnrollmentResponse.of(repository.to_enrollment(r)) for r in rows]
    return EnrollmentListResponse(enrollments=enrollments, total=len(enrollments))


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(enrollment_id: str, db: Session = Depends(get_db)):
    enrollment, _ = _load_or_404(db, enrollment_id)
    return EnrollmentResponse.of(enrollment)


@router.get("/{enrollment_id}/schedule", response_model=ScheduleResponse)
async def get_schedule(
    enrollment_id: str,
    as_of: Optional[datetime] = Query(None, description="Classify as of this instant; defaults to now"),
    db: Session = Depends(get_db),
):
    """Every billing month of the enrollment with its paid/pending/overdue status."""
    enrollment, payments = _load_or_404(db, enrollment_id)
    moment = _as_of(as_of)
    months = classify_enrollment(enrollment, payments, moment)
    return ScheduleResponse(enrollment_id=enrollment_id, as_of=moment, months=months)


@router.get("/{enrollment_id}/dues", response_model=DuesResponse)
async def get_dues(
    enrollment_id: str,
    as_of: Optional[datetime] = Query(None, description="Defaults to now"),
    db: Session = Depends(get_db),
):
    """Installments that have come due and are still unpaid."""
    enrollment, payments = _load_or_404(db, enrollment_id)
    moment = _as_of(as_of)
    months = classify_enrollment(enrollment, payments, moment)
    return DuesResponse(
        enrollment_id=enrollment_id,
        scheme_name=enrollment.scheme_name,
        grade=enrollment.grade,
        as_of=moment,
        dues=[m for m in months if m.status == BillingStatus.OVERDUE],
        summary=summarize_dues(months, enrollment.commitment_amount),
    )


@router.get("/{enrollment_id}/eligibility", response_model=EligibilityResponse)
async def get_eligibility(
    enrollment_id: str,
    as_of: Optional[datetime] = Query(None, description="Defaults to now"),
    db: Session = Depends(get_db),
):
    """Redemption eligibility, valued at the current rate of the enrollment's grade."""
    enrollment, payments = _load_or_404(db, enrollment_id)
    moment = _as_of(as_of)
    rate = latest_rate(repository.list_rates(db, enrollment.grade), enrollment.grade, at=moment)
    result = evaluate(enrollment, payments, moment, current_rate=rate)
    logger.info("Eligibility for %s as of %s: %s", enrollment_id, moment.date(), result.eligible)
    return EligibilityResponse(enrollment_id=enrollment_id, as_of=moment, result=result)
