"""Tests for debt amortization."""

import math
from decimal import Decimal

import pytest

from finfree.finance.amortization import (
    PAYOFF_CEILING_MONTHS,
    end_balance,
    monthly_interest,
    months_to_payoff,
    next_period,
    payoff_schedule,
    total_interest,
)

RATE = 0.0124


class TestMonthlyInterest:
    """Tests for one month of interest."""

    def test_plan_balance_interest(self):
        """Test first-month interest on the plan's overdraft."""
        assert monthly_interest(248989, RATE) == 3087

    def test_rounds_half_up(self):
        assert monthly_interest(250, 0.01) == 3  # 2.5
        assert monthly_interest(249, 0.01) == 2

    def test_accepts_decimal(self):
        assert monthly_interest(Decimal("248989"), RATE) == 3087

    def test_zero_balance(self):
        assert monthly_interest(0, RATE) == 0


class TestEndBalance:
    """Tests for a single period's closing balance."""

    def test_interest_then_payment(self):
        assert end_balance(248989, 46000, RATE) == 206076

    def test_never_negative(self):
        assert end_balance(1000, 5000, RATE) == 0

    def test_explicit_interest(self):
        assert end_balance(1000, 100, RATE, interest=50) == 950

    def test_decimal_balance_with_float_payment(self):
        result = end_balance(Decimal("1000"), 100.0, 0.01)
        assert result == Decimal("910")
        assert isinstance(result, Decimal)

    def test_float_balance_with_decimal_payment(self):
        assert end_balance(1000.5, Decimal("100.25"), 0.0) == Decimal("900.25")


class TestMonthsToPayoff:
    """Tests for months until the balance reaches zero."""

    def test_plan_scenario_six_months(self):
        """Test 248989 at 1.24% with 46000 a month clears in six payments."""
        assert months_to_payoff(248989, 46000, RATE) == 6

    def test_zero_balance_is_zero_months(self):
        assert months_to_payoff(0, 46000, RATE) == 0

    def test_zero_balance_with_zero_payment_is_zero_months(self):
        assert months_to_payoff(0, 0, RATE) == 0

    def test_zero_payment_never_ends(self):
        assert months_to_payoff(1000, 0, RATE) == math.inf

    def test_payment_equal_to_interest_never_ends(self):
        """Test that a payment that only covers interest never terminates."""
        assert months_to_payoff(100000, 2000, 0.02) == math.inf

    def test_payment_below_interest_never_ends(self):
        assert months_to_payoff(100000, 1500, 0.02) == math.inf

    def test_ceiling_reached_is_unbounded(self):
        """Test a barely-sufficient payment hits the ten-year ceiling."""
        assert months_to_payoff(100000, 2001, 0.02) == math.inf

    def test_zero_rate(self):
        assert months_to_payoff(1000, 100, 0.0) == 10

    @pytest.mark.parametrize(
        "balance,payment,rate",
        [
            (248989, 46000, RATE),
            (50000, 5000, 0.01),
            (1000, 999, 0.0),
            (75000.5, 12000, 0.015),
        ],
    )
    def test_termination_replays_to_zero(self, balance, payment, rate):
        """Test that running the loop for the returned months clears the balance."""
        months = months_to_payoff(balance, payment, rate)
        assert months != math.inf

        remaining = float(balance)
        for _ in range(months):
            remaining = remaining + monthly_interest(remaining, rate) - payment
        assert remaining <= 0


class TestTotalInterest:
    """Tests for interest over the payoff."""

    def test_plan_scenario(self):
        assert total_interest(248989, 46000, RATE) == 10409

    def test_no_balance_no_interest(self):
        assert total_interest(0, 46000, RATE) == 0

    def test_zero_rate(self):
        assert total_interest(1000, 100, 0.0) == 0


class TestPayoffSchedule:
    """Tests for the month-by-month schedule."""

    def test_plan_schedule(self):
        """Test the six-row schedule from February to July."""
        rows = payoff_schedule(248989, 46000, RATE, "2026-02")

        assert [row.period for row in rows] == [
            "2026-02", "2026-03", "2026-04", "2026-05", "2026-06", "2026-07",
        ]
        assert rows[0].start_balance == 248989
        assert rows[0].interest == 3087
        assert rows[0].end_balance == 206076
        assert rows[1].start_balance == rows[0].end_balance
        assert rows[-1].end_balance == 0
        assert rows[-1].interest_to_date == 10409

    def test_length_matches_months_to_payoff(self):
        rows = payoff_schedule(50000, 5000, 0.01, "2026-01")
        assert len(rows) == months_to_payoff(50000, 5000, 0.01)

    def test_empty_when_nothing_owed(self):
        assert payoff_schedule(0, 46000, RATE, "2026-02") == []

    def test_empty_when_payment_never_reduces_balance(self):
        assert payoff_schedule(100000, 2000, 0.02, "2026-02") == []

    def test_stops_at_ceiling(self):
        rows = payoff_schedule(100000, 2001, 0.02, "2026-02")
        assert len(rows) == PAYOFF_CEILING_MONTHS
        assert rows[-1].end_balance > 0


class TestNextPeriod:
    def test_within_year(self):
        assert next_period("2026-02") == "2026-03"

    def test_year_rollover(self):
        assert next_period("2026-12") == "2027-01"
