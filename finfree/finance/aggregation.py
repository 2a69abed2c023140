"""
Ledger Aggregation

Sums and filters over transactions by kind, category and period.
Every function here is pure, and an empty input always yields zero.
"""

from collections import Counter
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from finfree.finance.rounding import Number
from finfree.models.ledger import MonthlyEntry, Transaction, TransactionKind
from finfree.models.metrics import MonthlyRecord, MonthlyTotals

ZERO = Decimal("0")


def sum_by_kind(
    transactions: Iterable[Transaction],
    kind: TransactionKind,
    period: Optional[str] = None,
) -> Decimal:
    """Sum the amounts of one kind, optionally restricted to a YYYY-MM period."""
    return sum(
        (
            t.amount for t in transactions
            if t.kind == kind and (period is None or t.period == period)
        ),
        ZERO,
    )


def sum_by_category(
    transactions: Iterable[Transaction],
    category: str,
    period: Optional[str] = None,
    kind: TransactionKind = TransactionKind.EXPENSE,
) -> Decimal:
    """Sum one category's amounts (expenses unless another kind is given)."""
    return sum(
        (
            t.amount for t in transactions
            if t.kind == kind
            and t.category == category
            and (period is None or t.period == period)
        ),
        ZERO,
    )


def monthly_totals(transactions: Sequence[Transaction], period: str) -> MonthlyTotals:
    return MonthlyTotals(
        period=period,
        income=sum_by_kind(transactions, TransactionKind.INCOME, period),
        expenses=sum_by_kind(transactions, TransactionKind.EXPENSE, period),
        installments_paid=sum_by_kind(transactions, TransactionKind.INSTALLMENT_PAYMENT, period),
        debt_payments=sum_by_kind(transactions, TransactionKind.DEBT_PAYMENT, period),
        savings=sum_by_kind(transactions, TransactionKind.SAVINGS_CONTRIBUTION, period),
    )


def category_breakdown(
    transactions: Iterable[Transaction],
    period: Optional[str] = None,
) -> list[tuple[str, Decimal]]:
    """Expense totals per category, largest first."""
    by_category: Counter = Counter()
    for t in transactions:
        if t.kind != TransactionKind.EXPENSE:
            continue
        if period is not None and t.period != period:
            continue
        by_category[t.category or "uncategorized"] += t.amount
    return [(category, Decimal(total)) for category, total in by_category.most_common()]


def savings_rate(income: Number, expenses: Number, installments: Number = 0) -> float:
    """
    Savings rate = (income - expenses - installments) / income.

    Returned as a fraction in [0, 1]. Zero or negative income gives 0.
    """
    if income <= 0:
        return 0.0
    savings = float(income) - float(expenses) - float(installments)
    return max(0.0, min(1.0, savings / float(income)))


def savings_amount(income: Number, expenses: Number, installments: Number = 0) -> Decimal:
    """What is left after expenses and installments, never below zero."""
    left = Decimal(str(income)) - Decimal(str(expenses)) - Decimal(str(installments))
    return max(ZERO, left)


def build_monthly_record(transactions: Sequence[Transaction], period: str) -> MonthlyRecord:
    """Totals, leftover and savings rate for one month."""
    totals = monthly_totals(transactions, period)
    return MonthlyRecord(
        period=period,
        totals=totals,
        net_savings=totals.income - totals.expenses - totals.installments_paid,
        savings_rate=savings_rate(totals.income, totals.expenses, totals.installments_paid),
        lifestyle_spent=totals.expenses,
        transactions=[t for t in transactions if t.period == period],
    )


def average_monthly_income(entries: Sequence[MonthlyEntry]) -> Decimal:
    if not entries:
        return ZERO
    return sum((e.income for e in entries), ZERO) / len(entries)


def average_monthly_expenses(entries: Sequence[MonthlyEntry]) -> Decimal:
    if not entries:
        return ZERO
    return sum((e.expenses for e in entries), ZERO) / len(entries)


def average_savings_rate(entries: Sequence[MonthlyEntry]) -> float:
    if not entries:
        return 0.0
    return savings_rate(average_monthly_income(entries), average_monthly_expenses(entries))
