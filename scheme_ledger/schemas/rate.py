"""Pydantic schemas for metal rate updates and lookups."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from scheme_ledger.schemas.savings import MetalGrade, RateSnapshot


class RateUpdateRequest(BaseModel):
    grade: MetalGrade
    rate_per_gram: Decimal = Field(..., gt=0, decimal_places=2, description="Price per gram (₹)")
    effective_from: Optional[datetime] = Field(None, description="Defaults to now")


class CurrentRatesResponse(BaseModel):
    """Latest rate of every grade; None where no rate has been published."""
    rates: dict[MetalGrade, Optional[RateSnapshot]]
