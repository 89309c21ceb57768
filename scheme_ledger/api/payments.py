"""
Payments API endpoints.
Recording a payment snapshots the current metal rate and allocates grams once.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from scheme_ledger.core.database import get_db
from scheme_ledger.core.redis import cache_delete, summary_cache_key
from scheme_ledger.models.payment import Payment as PaymentRow
from scheme_ledger.schemas.payment import PaymentCreateRequest, PaymentListResponse
from scheme_ledger.schemas.savings import EnrollmentStatus, Payment
from scheme_ledger.services import repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("", response_model=Payment, status_code=201)
async def record_payment(request: PaymentCreateRequest, db: Session = Depends(get_db)):
    """Record a collection against an enrollment at the rate in force when it was paid."""
    row = repository.get_enrollment_row(db, request.enrollment_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Enrollment {request.enrollment_id} not found")

    enrollment = repository.to_enrollment(row)
    if enrollment.status == EnrollmentStatus.CLOSED:
        raise HTTPException(status_code=409, detail=f"Enrollment {request.enrollment_id} is closed")

    payment = repository.record_payment(
        db,
        enrollment,
        amount=request.amount,
        payment_type=request.payment_type,
        status=request.status,
        paid_at=request.paid_at,
        mode=request.mode,
    )
    cache_delete(
        summary_cache_key(enrollment.customer_id, "none"),
        summary_cache_key(enrollment.customer_id, "grade"),
    )
    return payment


@router.get("/{enrollment_id}", response_model=PaymentListResponse)
async def list_payments(
    enrollment_id: str,
    limit: int = Query(100, ge=1, le=500, description="Max results"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    db: Session = Depends(get_db),
):
    """Payment history of an enrollment, newest first."""
    if repository.get_enrollment_row(db, enrollment_id) is None:
        raise HTTPException(status_code=404, detail=f"Enrollment {enrollment_id} not found")

    query = db.query(PaymentRow).filter(PaymentRow.enrollment_id == enrollment_id)
    total = query.count()
    rows = (
        query
        .order_by(PaymentRow.paid_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return PaymentListResponse(
        payments=[repository.to_payment(r) for r in rows],
        total=total,
        enrollment_id=enrollment_id,
    )
