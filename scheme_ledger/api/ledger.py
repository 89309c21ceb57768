"""
Ledger summary endpoint.
Dashboard totals for a customer, cached in Redis when it is enabled.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from scheme_ledger.core.database import get_db
from scheme_ledger.core.redis import cache_get, cache_set, summary_cache_key
from scheme_ledger.schemas.ledger import LedgerSummaryResponse
from scheme_ledger.schemas.savings import EnrollmentStatus
from scheme_ledger.services import repository
from scheme_ledger.services.ledger import summarize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.get("/summary", response_model=LedgerSummaryResponse)
async def get_summary(
    customer_id: str = Query(..., description="Customer to summarize"),
    group_by: str = Query("none", pattern="^(none|grade)$", description="none or grade"),
    db: Session = Depends(get_db),
):
    """Total paid and grams allocated over all of a customer's enrollments."""
    cache_key = summary_cache_key(customer_id, group_by)
    cached = cache_get(cache_key)
    if cached:
        logger.info("[CACHE HIT] Ledger summary for %s", customer_id)
        return LedgerSummaryResponse(**cached)

    enrollments, payments = repository.load_customer(db, customer_id)
    if not enrollments:
        raise HTTPException(status_code=404, detail=f"No enrollments for customer {customer_id}")

    response = LedgerSummaryResponse(
        customer_id=customer_id,
        group_by=group_by,
        active_enrollments=sum(1 for e in enrollments if e.status == EnrollmentStatus.ACTIVE),
        summary=summarize(payments, group_by=group_by, enrollments=enrollments),
    )
    cache_set(cache_key, response.model_dump(mode="json"))
    return response
