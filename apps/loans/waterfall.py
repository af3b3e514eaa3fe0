"""
Allocation waterfalls.

Pure functions over a loan's open periods; no database access. Both
waterfalls walk periods oldest first (ascending payment_number) and split
each period's balance against the loan's principal_per_period: whatever
exceeds it is interest, the rest is principal.

    interest  = max(0, balance − principal_per_period)
    principal = min(balance, principal_per_period)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple

from apps.core.exceptions import AmountExceedsBalanceError
from apps.core.utils import ZERO, sum_money


class OpenPeriod(NamedTuple):
    scheduled_payment_id: int
    payment_number: int
    balance: Decimal


class PeriodAllocation(NamedTuple):
    scheduled_payment_id: int
    amount: Decimal


@dataclass
class PaymentPlan:
    allocations: List[PeriodAllocation] = field(default_factory=list)
    interest_paid: Decimal = ZERO
    principal_paid: Decimal = ZERO
    paid_off: bool = False


@dataclass
class AdjustmentPlan:
    allocations: List[PeriodAllocation] = field(default_factory=list)
    interest_adjusted: Decimal = ZERO
    principal_adjusted: Decimal = ZERO
    paid_off: bool = False


def split_period(balance: Decimal, principal_per_period: Decimal):
    """Return (interest, principal) outstanding in a period balance."""
    interest = max(ZERO, balance - principal_per_period)
    principal = min(balance, principal_per_period)
    return interest, principal


def open_periods(periods: Iterable[OpenPeriod]) -> List[OpenPeriod]:
    """Periods with a positive balance, oldest first."""
    return sorted(
        (p for p in periods if p.balance > 0),
        key=lambda p: p.payment_number,
    )


def _check_amount(candidates: List[OpenPeriod], amount: Decimal) -> bool:
    """Raise if ``amount`` exceeds the total balance; return paid_off."""
    total_balance = sum_money(p.balance for p in candidates)
    if amount > total_balance:
        raise AmountExceedsBalanceError()
    return amount == total_balance


def plan_payment(
    periods: Iterable[OpenPeriod],
    amount: Decimal,
    principal_per_period: Decimal,
) -> PaymentPlan:
    """
    Apply a cash receipt to open periods, earliest first.

    Each fully covered period takes its whole balance. The first period
    the funds cannot cover takes what is left, interest first, and the
    walk stops there.

    Raises:
        AmountExceedsBalanceError: If ``amount`` exceeds the total balance.
    """
    candidates = open_periods(periods)
    plan = PaymentPlan(paid_off=_check_amount(candidates, amount))

    available = amount
    for period in candidates:
        if available <= 0:
            break

        interest, principal = split_period(period.balance, principal_per_period)

        if period.balance <= available:
            plan.allocations.append(
                PeriodAllocation(period.scheduled_payment_id, period.balance)
            )
            plan.interest_paid += interest
            plan.principal_paid += principal
            available -= period.balance
        else:
            interest_part = min(interest, available)
            plan.allocations.append(
                PeriodAllocation(period.scheduled_payment_id, available)
            )
            plan.interest_paid += interest_part
            plan.principal_paid += available - interest_part
            available = ZERO

    return plan


def plan_adjustment(
    periods: Iterable[OpenPeriod],
    amount: Decimal,
    principal_per_period: Decimal,
) -> AdjustmentPlan:
    """
    Forgive balance interest-first across all open periods.

    Pass 1 writes off the interest part of every period in order; only
    what remains goes to pass 2, which writes off principal in order.
    Allocations are merged per scheduled payment, in first-touched order.

    Raises:
        AmountExceedsBalanceError: If ``amount`` exceeds the total balance.
    """
    candidates = open_periods(periods)
    plan = AdjustmentPlan(paid_off=_check_amount(candidates, amount))

    available = amount
    interest_allocated: Dict[int, Decimal] = {}
    merged: Dict[int, Decimal] = {}

    for period in candidates:
        if available <= 0:
            break
        interest, _ = split_period(period.balance, principal_per_period)
        if interest > 0:
            allocated = min(interest, available)
            interest_allocated[period.scheduled_payment_id] = allocated
            merged[period.scheduled_payment_id] = allocated
            plan.interest_adjusted += allocated
            available -= allocated

    for period in candidates:
        if available <= 0:
            break
        if period.balance > principal_per_period:
            principal = principal_per_period
        else:
            principal = period.balance - interest_allocated.get(period.scheduled_payment_id, ZERO)
        if principal > 0:
            allocated = min(principal, available)
            merged[period.scheduled_payment_id] = (
                merged.get(period.scheduled_payment_id, ZERO) + allocated
            )
            plan.principal_adjusted += allocated
            available -= allocated

    plan.allocations = [
        PeriodAllocation(scheduled_payment_id, allocated)
        for scheduled_payment_id, allocated in merged.items()
    ]
    return plan
