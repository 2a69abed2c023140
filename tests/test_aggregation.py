"""Tests for ledger aggregation."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from finfree.finance.aggregation import (
    average_monthly_expenses,
    average_monthly_income,
    average_savings_rate,
    build_monthly_record,
    category_breakdown,
    monthly_totals,
    savings_amount,
    savings_rate,
    sum_by_category,
    sum_by_kind,
)
from finfree.models import MonthlyEntry, Transaction, TransactionKind


def txn(amount, kind, category="", day=(2026, 2, 5)):
    return Transaction(
        amount=Decimal(str(amount)),
        kind=kind,
        category=category,
        timestamp=datetime(*day, tzinfo=timezone.utc),
    )


@pytest.fixture
def ledger():
    return [
        txn(109000, TransactionKind.INCOME),
        txn(15000, TransactionKind.EXPENSE, "rent"),
        txn(4200, TransactionKind.EXPENSE, "food_groceries"),
        txn(1800, TransactionKind.EXPENSE, "food_groceries"),
        txn(18000, TransactionKind.INSTALLMENT_PAYMENT),
        txn(46000, TransactionKind.DEBT_PAYMENT),
        txn(5000, TransactionKind.SAVINGS_CONTRIBUTION, "emergency_fund"),
        # previous month
        txn(900, TransactionKind.EXPENSE, "rent", day=(2026, 1, 31)),
        txn(100000, TransactionKind.INCOME, day=(2026, 1, 1)),
    ]


class TestSums:
    """Tests for per-kind and per-category sums."""

    def test_empty_is_zero(self):
        assert sum_by_kind([], TransactionKind.EXPENSE) == 0
        assert sum_by_category([], "rent") == 0

    def test_sum_by_kind_all_periods(self, ledger):
        assert sum_by_kind(ledger, TransactionKind.INCOME) == Decimal("209000")

    def test_sum_by_kind_one_period(self, ledger):
        assert sum_by_kind(ledger, TransactionKind.INCOME, "2026-02") == Decimal("109000")
        assert sum_by_kind(ledger, TransactionKind.EXPENSE, "2026-01") == Decimal("900")

    def test_sum_by_category(self, ledger):
        assert sum_by_category(ledger, "food_groceries", "2026-02") == Decimal("6000")

    def test_sum_by_category_other_kind(self, ledger):
        total = sum_by_category(
            ledger, "emergency_fund", kind=TransactionKind.SAVINGS_CONTRIBUTION,
        )
        assert total == Decimal("5000")


class TestMonthlyTotals:
    def test_totals(self, ledger):
        totals = monthly_totals(ledger, "2026-02")
        assert totals.income == Decimal("109000")
        assert totals.expenses == Decimal("21000")
        assert totals.installments_paid == Decimal("18000")
        assert totals.debt_payments == Decimal("46000")
        assert totals.savings == Decimal("5000")

    def test_empty_period(self, ledger):
        totals = monthly_totals(ledger, "2025-06")
        assert totals.income == 0
        assert totals.expenses == 0

    def test_monthly_record(self, ledger):
        record = build_monthly_record(ledger, "2026-02")
        assert record.net_savings == Decimal("70000")
        assert record.savings_rate == pytest.approx(70000 / 109000)
        assert record.lifestyle_spent == Decimal("21000")
        assert len(record.transactions) == 7


class TestCategoryBreakdown:
    def test_largest_first(self, ledger):
        breakdown = category_breakdown(ledger, "2026-02")
        assert breakdown == [
            ("rent", Decimal("15000")),
            ("food_groceries", Decimal("6000")),
        ]

    def test_only_expenses(self, ledger):
        categories = [name for name, _ in category_breakdown(ledger)]
        assert "emergency_fund" not in categories


class TestSavingsRate:
    """Tests for savings rate and amount."""

    def test_zero_income(self):
        assert savings_rate(0, 5000) == 0.0

    def test_negative_income(self):
        assert savings_rate(-100, 0) == 0.0

    def test_with_installments(self):
        assert savings_rate(100000, 40000, 18000) == pytest.approx(0.42)

    def test_overspending_clamps_to_zero(self):
        assert savings_rate(1000, 5000) == 0.0

    def test_savings_amount_floor(self):
        assert savings_amount(1000, 5000) == 0
        assert savings_amount(100000, 40000, 18000) == Decimal("42000")


class TestAverages:
    def test_empty_entries(self):
        assert average_monthly_income([]) == 0
        assert average_monthly_expenses([]) == 0
        assert average_savings_rate([]) == 0.0

    def test_averages(self):
        entries = [
            MonthlyEntry(period="2026-01", income=Decimal("100000"), expenses=Decimal("60000")),
            MonthlyEntry(period="2026-02", income=Decimal("120000"), expenses=Decimal("40000")),
        ]
        assert average_monthly_income(entries) == Decimal("110000")
        assert average_monthly_expenses(entries) == Decimal("50000")
        assert average_savings_rate(entries) == pytest.approx(60000 / 110000)
