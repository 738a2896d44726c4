from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")


@dataclass(frozen=True)
class Amortization:
    monthly_payment: Decimal
    total_interest: Decimal
    total_amount: Decimal


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_money(value) -> Decimal:
    return _as_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    return annual_rate_percent / Decimal("1200")


def amortize(principal, annual_rate_percent, term_months: int) -> Amortization:
    """Level monthly payment for a fully amortizing loan.

    The rounded monthly payment drives the totals, so
    ``total_amount == monthly_payment * term_months`` holds exactly.
    """
    principal = _as_decimal(principal)
    annual_rate_percent = _as_decimal(annual_rate_percent)
    if principal <= 0:
        raise ValueError("principal must be positive")
    if annual_rate_percent < 0:
        raise ValueError("annual rate must not be negative")
    if isinstance(term_months, bool) or int(term_months) != term_months or term_months < 1:
        raise ValueError("term must be a positive whole number of months")
    term_months = int(term_months)

    rate = _monthly_rate(annual_rate_percent)
    if rate == 0:
        payment = principal / Decimal(term_months)
    else:
        factor = (Decimal("1") + rate) ** term_months
        payment = principal * rate * factor / (factor - Decimal("1"))
    monthly_payment = payment.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    total_amount = (monthly_payment * Decimal(term_months)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    total_interest = (total_amount - principal).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return Amortization(
        monthly_payment=monthly_payment,
        total_interest=total_interest,
        total_amount=total_amount,
    )


def remaining_balance(previous_balance, amount) -> Decimal:
    """Wallet balance left after a withdrawal of ``amount``."""
    return round_money(_as_decimal(previous_balance) - _as_decimal(amount))
