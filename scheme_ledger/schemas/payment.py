"""Pydantic schemas for the Payment API."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from scheme_ledger.schemas.savings import Payment, PaymentStatus, PaymentType


class PaymentCreateRequest(BaseModel):
    """Collection entry made at the counter or through the customer portal."""
    enrollment_id: str = Field(..., description="Enrollment being paid into")
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount received (₹)")
    payment_type: PaymentType = Field(PaymentType.PRIMARY_INSTALLMENT)
    status: PaymentStatus = Field(PaymentStatus.SUCCESS)
    mode: str = Field("CASH", description="Collection mode: CASH, UPI, CARD")
    paid_at: Optional[datetime] = Field(None, description="When received; defaults to now")


class PaymentListResponse(BaseModel):
    payments: list[Payment]
    total: int
    enrollment_id: str
