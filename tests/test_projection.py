"""Tests for compound growth projection and FIRE targets."""

import math

import pytest

from finfree.finance.projection import (
    GOAL_CEILING_MONTHS,
    fire_number,
    fire_targets,
    monthly_passive_income,
    months_to_goal,
    project_future_value,
    project_net_worth,
    years_to_target,
)


class TestProjectFutureValue:
    """Tests for month-by-month compounding."""

    def test_growth_without_contribution(self):
        """Test 1% a month for a year on 1000."""
        assert project_future_value(1000, 0, 0.12, 12) == 1127

    def test_contribution_without_growth(self):
        assert project_future_value(0, 100, 0.0, 12) == 1200

    def test_zero_months(self):
        assert project_future_value(1000.4, 100, 0.07, 0) == 1000


class TestProjectNetWorth:
    """Tests for the yearly projection series."""

    def test_year_zero_is_unmodified(self):
        """Test year 0 is the starting balance exactly, not rounded."""
        points = project_net_worth(1000.4, 0, years=2, annual_rate=0.0)
        assert points[0].year == 0
        assert points[0].value == 1000.4
        assert points[1].value == 1000

    def test_one_point_per_year(self):
        points = project_net_worth(0, 1000, years=30)
        assert [p.year for p in points] == list(range(31))

    def test_year_values_use_monthly_steps(self):
        points = project_net_worth(0, 1000, years=1, annual_rate=0.0)
        assert points[1].value == 12000

    @pytest.mark.parametrize(
        "current,contribution,rate",
        [
            (0, 1000, 0.07),
            (50000, 0, 0.05),
            (100000, 2500, 0.0),
            (-20000, 3000, 0.07),
        ],
    )
    def test_monotonic_for_non_negative_inputs(self, current, contribution, rate):
        """Test that non-negative contributions and rates never shrink the series."""
        values = [p.value for p in project_net_worth(current, contribution, 30, rate)]
        assert all(later >= earlier for earlier, later in zip(values, values[1:]))


class TestYearsToTarget:
    """Tests for years until a balance reaches a target."""

    def test_already_there(self):
        assert years_to_target(1000, 0, 1000) == 0
        assert years_to_target(2000, 100, 1000) == 0

    def test_nothing_saved_nothing_added(self):
        assert years_to_target(0, 0, 1000) == math.inf

    def test_negative_contribution_with_nothing_saved(self):
        assert years_to_target(0, -100, 1000) == math.inf

    def test_closed_form_without_contribution(self):
        """Test the closed form: doubling at 12% a year, compounded monthly."""
        years = years_to_target(1000, 0, 2000, annual_rate=0.12)
        assert years == pytest.approx(math.log(2) / math.log(1.01) / 12)

    def test_closed_form_agrees_with_compounding(self):
        """Test that rounding the closed form up gives whole years that reach the target."""
        years = years_to_target(1000, 0, 2000, annual_rate=0.12)
        whole = math.ceil(years)
        assert project_future_value(1000, 0, 0.12, whole * 12) >= 2000
        assert project_future_value(1000, 0, 0.12, (whole - 1) * 12) < 2000

    def test_closed_form_zero_rate(self):
        assert years_to_target(1000, 0, 2000, annual_rate=0.0) == math.inf

    def test_closed_form_negative_rate(self):
        assert years_to_target(1000, 0, 2000, annual_rate=-0.05) == math.inf

    def test_loop_whole_years(self):
        assert years_to_target(0, 1000, 12000, annual_rate=0.0) == 1
        assert years_to_target(0, 1000, 12001, annual_rate=0.0) == 2

    def test_loop_ceiling(self):
        """Test that a target beyond a century is unreachable."""
        assert years_to_target(0, 1, 10 ** 12, annual_rate=0.0) == math.inf

    def test_fire_scenario(self):
        years = years_to_target(100000, 20000, fire_number(40000), annual_rate=0.07)
        assert 0 < years < 100
        assert years == int(years)


class TestMonthsToGoal:
    """Tests for months until a goal is funded."""

    def test_already_reached(self):
        assert months_to_goal(5000, 5000, 0) == 0

    def test_no_contribution(self):
        assert months_to_goal(0, 5000, 0) == math.inf

    def test_reached_by_contributions(self):
        assert months_to_goal(0, 1200, 100, annual_rate=0.0) == 12

    def test_growth_shortens_the_wait(self):
        assert months_to_goal(0, 135000, 46000) == 3

    def test_ceiling(self):
        assert GOAL_CEILING_MONTHS == 600
        assert months_to_goal(0, 10 ** 9, 1, annual_rate=0.0) == math.inf


class TestFire:
    """Tests for FIRE figures."""

    def test_fire_number(self):
        assert fire_number(50000, 0.04) == pytest.approx(15000000)

    def test_fire_number_zero_rate(self):
        assert fire_number(50000, 0) == math.inf

    def test_passive_income(self):
        assert monthly_passive_income(1200000, 0.04) == pytest.approx(4000)

    def test_fire_targets(self):
        targets = fire_targets(1000, current_age=30, retirement_age=65, annual_rate=0.07)
        assert targets.regular_fire == pytest.approx(300000)
        assert targets.lean_fire == pytest.approx(180000)
        assert targets.fat_fire == pytest.approx(600000)
        assert targets.coast_fire == pytest.approx(300000 / 1.07 ** 35)

    def test_coast_equals_regular_at_retirement(self):
        targets = fire_targets(1000, current_age=65, retirement_age=65)
        assert targets.coast_fire == pytest.approx(targets.regular_fire)
