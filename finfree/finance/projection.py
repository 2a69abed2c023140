"""
Compound Growth Projection

Forward projection of a balance with a fixed monthly contribution and a
fixed annual rate. Compounding is always monthly, even where results are
reported per year:

    balance = balance * (1 + annual_rate / 12) + contribution

Targets that can never be reached come back as UNBOUNDED.
"""

import math

from finfree.finance.rounding import UNBOUNDED, Number, round_half_up
from finfree.models.metrics import FIRETargets, ProjectionPoint

PROJECTION_CEILING_YEARS = 100
GOAL_CEILING_MONTHS = 600  # 50 years

# 4% rule: the portfolio must be 25x annual expenses
FIRE_MULTIPLIER = 25
LEAN_FIRE_FACTOR = 0.6
FAT_FIRE_FACTOR = 2.0


def _step(balance: float, monthly_rate: float, contribution: float) -> float:
    return balance * (1 + monthly_rate) + contribution


def project_future_value(
    principal: Number,
    monthly_contribution: Number,
    annual_rate: float,
    months: int,
) -> int:
    """Value after the given number of months, rounded to whole units."""
    monthly_rate = annual_rate / 12
    balance = float(principal)
    contribution = float(monthly_contribution)
    for _ in range(months):
        balance = _step(balance, monthly_rate, contribution)
    return round_half_up(balance)


def project_net_worth(
    current: Number,
    monthly_contribution: Number,
    years: int = 30,
    annual_rate: float = 0.07,
) -> list[ProjectionPoint]:
    """
    Year-by-year projection.

    Year 0 is the starting balance as given; each later point is the
    rounded balance after another twelve monthly steps.
    """
    monthly_rate = annual_rate / 12
    balance = float(current)
    contribution = float(monthly_contribution)

    points = [ProjectionPoint(year=0, value=balance)]
    for year in range(1, years + 1):
        for _ in range(12):
            balance = _step(balance, monthly_rate, contribution)
        points.append(ProjectionPoint(year=year, value=round_half_up(balance)))
    return points


def years_to_target(
    current: Number,
    monthly_contribution: Number,
    target: Number,
    annual_rate: float = 0.07,
) -> float:
    """
    Years until current savings reach target.

    With a contribution the answer is whole years of monthly compounding.
    Without one, a positive balance is solved in closed form and the
    answer is fractional; both agree once the fraction is rounded up.
    """
    if current >= target:
        return 0
    if monthly_contribution <= 0 and current <= 0:
        return UNBOUNDED

    monthly_rate = annual_rate / 12

    if monthly_contribution <= 0:
        if monthly_rate <= 0:
            return UNBOUNDED
        months = math.log(float(target) / float(current)) / math.log(1 + monthly_rate)
        years = months / 12
        return years if years <= PROJECTION_CEILING_YEARS else UNBOUNDED

    return _years_to_target_iterative(current, monthly_contribution, target, annual_rate)


def _years_to_target_iterative(
    current: Number,
    monthly_contribution: Number,
    target: Number,
    annual_rate: float,
) -> float:
    monthly_rate = annual_rate / 12
    balance = float(current)
    contribution = float(monthly_contribution)
    goal = float(target)

    years = 0
    while balance < goal and years < PROJECTION_CEILING_YEARS:
        for _ in range(12):
            balance = _step(balance, monthly_rate, contribution)
        years += 1

    return years if balance >= goal else UNBOUNDED


def months_to_goal(
    current: Number,
    target: Number,
    monthly_contribution: Number,
    annual_rate: float = 0.08,
) -> float:
    """Months of contributions (with growth) until a goal is reached."""
    if current >= target:
        return 0
    if monthly_contribution <= 0:
        return UNBOUNDED

    monthly_rate = annual_rate / 12
    balance = float(current)
    contribution = float(monthly_contribution)
    goal = float(target)

    months = 0
    while balance < goal and months < GOAL_CEILING_MONTHS:
        balance = _step(balance, monthly_rate, contribution)
        months += 1

    return months if balance >= goal else UNBOUNDED


def fire_number(monthly_expenses: Number, withdrawal_rate: float = 0.04) -> float:
    """Portfolio needed to live off withdrawals: annual expenses / withdrawal rate."""
    if withdrawal_rate <= 0:
        return UNBOUNDED
    return float(monthly_expenses) * 12 / withdrawal_rate


def monthly_passive_income(invested_assets: Number, withdrawal_rate: float = 0.04) -> float:
    return float(invested_assets) * withdrawal_rate / 12


def fire_targets(
    monthly_expenses: Number,
    current_age: int = 30,
    retirement_age: int = 65,
    annual_rate: float = 0.07,
) -> FIRETargets:
    """Lean, coast, regular and fat FIRE milestones."""
    annual_expenses = float(monthly_expenses) * 12
    regular = annual_expenses * FIRE_MULTIPLIER
    years_to_retirement = max(0, retirement_age - current_age)
    coast = regular / math.pow(1 + annual_rate, years_to_retirement)

    return FIRETargets(
        lean_fire=annual_expenses * LEAN_FIRE_FACTOR * FIRE_MULTIPLIER,
        coast_fire=coast,
        regular_fire=regular,
        fat_fire=annual_expenses * FAT_FIRE_FACTOR * FIRE_MULTIPLIER,
    )
