"""Metal rate endpoints: current rates per grade and rate updates."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scheme_ledger.core.database import get_db
from scheme_ledger.schemas.rate import CurrentRatesResponse, RateUpdateRequest
from scheme_ledger.schemas.savings import RateSnapshot
from scheme_ledger.services import repository
from scheme_ledger.services.rates import current_rates

router = APIRouter(prefix="/rates", tags=["Rates"])


@router.get("/current", response_model=CurrentRatesResponse)
async def get_current_rates(db: Session = Depends(get_db)):
    """Latest published rate for 18K, 22K, 24K and silver."""
    return CurrentRatesResponse(rates=current_rates(repository.list_rates(db)))


@router.post("", response_model=RateSnapshot, status_code=201)
async def update_rate(request: RateUpdateRequest, db: Session = Depends(get_db)):
    """Publish a new rate. Existing payments keep the rate they were recorded at."""
    return repository.add_rate(db, request.grade, request.rate_per_gram, request.effective_from)
