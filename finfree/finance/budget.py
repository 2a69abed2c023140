"""Monthly budget helpers: surplus, remaining lifestyle budget, daily limit."""

import calendar
from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence

from finfree.finance.aggregation import ZERO, sum_by_category
from finfree.finance.rounding import Number, round_half_up
from finfree.models.ledger import Transaction
from finfree.models.metrics import BudgetLine


def monthly_surplus(income: Number, installments: Number, lifestyle_cap: Number) -> Decimal:
    """Income left after installments and the lifestyle cap. May be negative."""
    return Decimal(str(income)) - Decimal(str(installments)) - Decimal(str(lifestyle_cap))


def remaining_budget(spent: Number, cap: Number) -> Decimal:
    return max(ZERO, Decimal(str(cap)) - Decimal(str(spent)))


def daily_limit(remaining: Number, days_left: int) -> int:
    """Even spend per remaining day, rounded. No days left means no allowance."""
    if days_left <= 0:
        return 0
    return round_half_up(float(remaining) / days_left)


def days_remaining(today: date) -> int:
    """Days after today until the end of its month (0 on the last day)."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return last_day - today.day


def analyze_budget(
    transactions: Sequence[Transaction],
    period: str,
    budget: Mapping[str, Number],
) -> list[BudgetLine]:
    """Spending per budgeted category for one period, in budget order."""
    lines = []
    for category, budgeted in budget.items():
        planned = Decimal(str(budgeted))
        spent = sum_by_category(transactions, category, period)
        lines.append(BudgetLine(
            category=category,
            budgeted=planned,
            spent=spent,
            remaining=planned - spent,
            percentage=float(spent / planned * 100) if planned > 0 else 0.0,
        ))
    return lines
