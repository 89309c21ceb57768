"""
Allocation Calculator.

Converts a payment amount into grams of metal at the rate captured when the
payment was recorded. The rate is stored with the payment and never re-read
from a live feed, so historical allocations stay reproducible.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from scheme_ledger.core.exceptions import InvalidInputError

GRAM_QUANTUM = Decimal("0.0001")
CURRENCY_QUANTUM = Decimal("0.01")


def to_decimal(value: Any, field: str) -> Decimal:
    """
    Parse a numeric input into a finite Decimal.
    Floats go through str() so 6250.50 means exactly 6250.50.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    try:
        if isinstance(value, Decimal):
            number = value
        elif isinstance(value, (int, float, str)):
            number = Decimal(str(value).strip())
        else:
            raise InvalidInputError(f"{field} must be a number, got {type(value).__name__}")
    except InvalidOperation:
        raise InvalidInputError(f"{field} is not a valid number: {value!r}") from None
    if not number.is_finite():
        raise InvalidInputError(f"{field} must be finite, got {value!r}")
    return number


def to_positive_decimal(value: Any, field: str) -> Decimal:
    number = to_decimal(value, field)
    if number <= 0:
        raise InvalidInputError(f"{field} must be greater than zero, got {number}")
    return number


def to_currency(value: Any, field: str) -> Decimal:
    """Round a money amount or rate half-up to paise, the precision it is stored at."""
    return to_decimal(value, field).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def allocate_grams(amount: Any, rate_per_gram: Any) -> Decimal:
    """
    Grams bought by `amount` at `rate_per_gram`.

    Computed in decimal arithmetic and rounded half-up to 4 places,
    e.g. allocate_grams(5000, "6250.50") == Decimal("0.7999").

    Raises:
        InvalidInputError: amount or rate is non-positive or non-finite.
    """
    amount_dec = to_positive_decimal(amount, "amount")
    rate_dec = to_positive_decimal(rate_per_gram, "rate_per_gram")
    return (amount_dec / rate_dec).quantize(GRAM_QUANTUM, rounding=ROUND_HALF_UP)


def verify_allocation(payment) -> Decimal:
    """
    Check a stored payment against its own rate snapshot.
    Returns the stored grams; raises InvalidInputError on drift beyond one rounding unit.
    """
    expected = allocate_grams(payment.amount, payment.rate_per_gram)
    stored = to_decimal(payment.grams_allocated, "grams_allocated")
    if abs(stored - expected) > GRAM_QUANTUM:
        raise InvalidInputError(
            f"Payment {payment.payment_id}: grams_allocated {stored} does not match "
            f"amount {payment.amount} / rate {payment.rate_per_gram} = {expected}"
        )
    return stored


def valuate(grams: Any, rate_per_gram: Any) -> Decimal:
    """Currency value of `grams` at `rate_per_gram`, rounded half-up to paise."""
    grams_dec = to_decimal(grams, "grams")
    if grams_dec < 0:
        raise InvalidInputError(f"grams must not be negative, got {grams_dec}")
    rate_dec = to_positive_decimal(rate_per_gram, "rate_per_gram")
    return (grams_dec * rate_dec).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)
