"""
Core utility functions for the Loan Settlement service.

Contains the flat-rate amortization calculator and money helpers used
across the settlement engines. All financial calculations use Python's
Decimal for precision.
"""

from datetime import date
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, getcontext
from typing import List, NamedTuple, Optional

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

# Set high precision for intermediate financial calculations
getcontext().prec = 28

ZERO = Decimal('0')

# Scale of every money column (DecimalField decimal_places).
MONEY_DECIMAL_PLACES = 2


class FlatRateTerms(NamedTuple):
    """Level payment terms produced by the amortization calculator."""

    period_payment: Decimal
    total_interest: Decimal
    total_payable: Decimal


class ScheduleLine(NamedTuple):
    payment_number: int
    due_date: date
    amount: Decimal


def currency_quantum() -> Decimal:
    """
    Smallest currency unit, from SETTLEMENT_CURRENCY_QUANTUM.

    Raises:
        ImproperlyConfigured: If the quantum is not positive or is finer
            than the money columns can store.
    """
    quantum = Decimal(str(settings.SETTLEMENT_CURRENCY_QUANTUM))
    if quantum <= 0 or quantum.normalize().as_tuple().exponent < -MONEY_DECIMAL_PLACES:
        raise ImproperlyConfigured(
            f"SETTLEMENT_CURRENCY_QUANTUM must be positive with at most "
            f"{MONEY_DECIMAL_PLACES} decimal places, got {quantum}."
        )
    return quantum


def to_decimal(value) -> Decimal:
    """Coerce int, float, str or Decimal to Decimal via its string form."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value, rounding=ROUND_HALF_UP) -> Decimal:
    """Round ``value`` to the currency quantum."""
    return to_decimal(value).quantize(currency_quantum(), rounding=rounding)


def is_whole_money(value: Decimal) -> bool:
    """True when ``value`` has no precision below the currency quantum."""
    return value == value.quantize(currency_quantum())


def calculate_flat_rate_payment(
    principal,
    periodic_rate,
    num_periods: int,
) -> FlatRateTerms:
    """
    Calculate level payment terms for a flat-rate loan.

    Interest is charged once on the original principal for every period:

        total_interest = P × (rate / 100) × n
        period_payment = ceil((P + total_interest) / n)

    The period payment is rounded UP to the currency quantum so rounding
    never under-collects. The rounding difference is absorbed into the
    interest figure, never into the principal.

    Args:
        principal: Loan amount (must be > 0). Accepts Decimal, float, or int.
        periodic_rate: Flat rate per period as a percentage (e.g., 2 for 2%).
        num_periods: Number of payments (must be >= 1).

    Returns:
        FlatRateTerms(period_payment, total_interest, total_payable).

    Raises:
        ValueError: If inputs are invalid.
    """
    principal = to_decimal(principal)
    periodic_rate = to_decimal(periodic_rate)

    if principal <= 0:
        raise ValueError("Principal must be greater than 0.")
    if periodic_rate < 0:
        raise ValueError("Interest rate cannot be negative.")
    if num_periods < 1:
        raise ValueError("Number of payments must be at least 1.")

    periods = Decimal(num_periods)
    raw_interest = principal * (periodic_rate / Decimal('100')) * periods
    raw_total = principal + raw_interest

    period_payment = quantize_money(raw_total / periods, rounding=ROUND_CEILING)
    total_payable = period_payment * periods
    total_interest = total_payable - principal

    return FlatRateTerms(
        period_payment=period_payment,
        total_interest=total_interest,
        total_payable=total_payable,
    )


def calculate_principal_per_period(principal, num_periods: int) -> Decimal:
    """
    Pure-principal share of one full period payment.

    Rounded half-up to the currency quantum. Computed once at origination
    and stored on the loan so both allocation waterfalls split every period
    against the same figure.
    """
    if num_periods < 1:
        raise ValueError("Number of payments must be at least 1.")
    return quantize_money(to_decimal(principal) / Decimal(num_periods))


def build_payment_schedule(
    loan_start_date: date,
    period_payment: Decimal,
    num_periods: int,
) -> List[ScheduleLine]:
    """
    Emit one line per period, due on successive calendar months.

    Payment ``i`` (1-based) falls due ``i`` months after the start date;
    relativedelta clamps to month end (Jan 31 → Feb 28).
    """
    return [
        ScheduleLine(
            payment_number=i + 1,
            due_date=loan_start_date + relativedelta(months=i + 1),
            amount=period_payment,
        )
        for i in range(num_periods)
    ]


def sum_money(values, start: Optional[Decimal] = None) -> Decimal:
    """Sum an iterable of amounts starting from Decimal zero."""
    total = ZERO if start is None else start
    for value in values:
        total += value
    return total
