"""Metal rate model: per-gram price of a grade, effective from a timestamp."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Numeric, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from scheme_ledger.core.database import Base


class MetalRate(Base):
    __tablename__ = "metal_rates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    grade: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
        doc="Metal grade: 18K, 22K, 24K, SILVER"
    )
    rate_per_gram: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    effective_from: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<MetalRate(grade={self.grade}, rate={self.rate_per_gram}, from={self.effective_from})>"
