"""
Debt Amortization

Months-to-zero and interest for a single outstanding balance under a
fixed monthly payment. Interest accrues on the balance before the
payment is applied:

    interest = round(balance * monthly_rate)
    balance  = max(0, balance + interest - payment)

A balance that is not cleared within PAYOFF_CEILING_MONTHS is reported
as UNBOUNDED rather than as an error.
"""

from decimal import Decimal
from typing import Optional

from finfree.finance.rounding import UNBOUNDED, Number, round_half_up
from finfree.models.metrics import PayoffScheduleEntry

PAYOFF_CEILING_MONTHS = 120  # 10 years


def monthly_interest(balance: Number, monthly_rate: float) -> int:
    """Interest charged for one month on the given balance."""
    return round_half_up(float(balance) * monthly_rate)


def end_balance(
    start_balance: Number,
    payment: Number,
    monthly_rate: float,
    interest: Optional[int] = None,
):
    """Balance after one month: interest accrues first, then the payment lands."""
    if interest is None:
        interest = monthly_interest(start_balance, monthly_rate)
    # Mixed Decimal/float inputs are computed in Decimal
    if isinstance(start_balance, Decimal) or isinstance(payment, Decimal):
        start_balance = Decimal(str(start_balance))
        payment = Decimal(str(payment))
    return max(0, start_balance + interest - payment)


def months_to_payoff(balance: Number, payment: Number, monthly_rate: float) -> float:
    """
    Months until the balance reaches zero.

    Returns 0 when there is nothing to pay, and UNBOUNDED when the payment
    cannot outrun the interest or the ceiling is hit first.
    """
    if balance <= 0:
        return 0
    if payment <= 0 or payment <= monthly_interest(balance, monthly_rate):
        return UNBOUNDED

    remaining = float(balance)
    months = 0
    while remaining > 0 and months < PAYOFF_CEILING_MONTHS:
        interest = monthly_interest(remaining, monthly_rate)
        remaining = remaining + interest - float(payment)
        months += 1

    return months if remaining <= 0 else UNBOUNDED


def total_interest(balance: Number, payment: Number, monthly_rate: float) -> int:
    """Interest paid over the same loop months_to_payoff runs."""
    remaining = float(balance)
    paid = 0
    months = 0
    while remaining > 0 and months < PAYOFF_CEILING_MONTHS:
        interest = monthly_interest(remaining, monthly_rate)
        paid += interest
        remaining = remaining + interest - float(payment)
        months += 1
    return paid


def payoff_schedule(
    balance: Number,
    payment: Number,
    monthly_rate: float,
    start_period: str,
) -> list[PayoffScheduleEntry]:
    """
    Month-by-month payoff table starting at start_period (YYYY-MM).

    Stops when the balance is cleared or at the ceiling. An empty list
    means there is nothing to pay or the payment never reduces it.
    """
    if balance <= 0 or payment <= 0:
        return []

    rows = []
    remaining = float(balance)
    paid_interest = 0
    period = start_period
    while remaining > 0 and len(rows) < PAYOFF_CEILING_MONTHS:
        interest = monthly_interest(remaining, monthly_rate)
        closing = end_balance(remaining, float(payment), monthly_rate, interest)
        if closing >= remaining:
            break
        paid_interest += interest
        rows.append(PayoffScheduleEntry(
            period=period,
            start_balance=remaining,
            interest=interest,
            payment=float(payment),
            end_balance=closing,
            interest_to_date=paid_interest,
        ))
        remaining = closing
        period = next_period(period)
    return rows


def next_period(period: str) -> str:
    """The YYYY-MM period following the given one."""
    year, month = (int(part) for part in period.split("-"))
    if month == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{month + 1:02d}"
