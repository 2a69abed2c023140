"""
Composite Progress Scoring

A freedom score is a weighted sum of sub-goal progress ratios, each in
[0, 1], scaled to a whole number in [0, 100].
"""

import math
from typing import Sequence

from finfree.finance.projection import fire_number
from finfree.finance.rounding import Number, round_half_up
from finfree.models.metrics import ScoreComponent

DEBT_WEIGHT = 0.40
EMERGENCY_WEIGHT = 0.20
GOALS_WEIGHT = 0.40

WEIGHT_TOLERANCE = 1e-9

PHASE_DEBT_ELIMINATION = 1
PHASE_EMERGENCY_FUND = 2
PHASE_GOAL_SAVING = 3

PHASE_NAMES = {
    PHASE_DEBT_ELIMINATION: "Debt Elimination",
    PHASE_EMERGENCY_FUND: "Emergency Fund",
    PHASE_GOAL_SAVING: "Goal Saving",
}


def sub_progress(achieved: Number, target: Number) -> float:
    """
    Fraction of target achieved, clamped to [0, 1].

    A zero or negative target counts as met unless achieved is negative.
    """
    if target <= 0:
        return 1.0 if achieved >= 0 else 0.0
    return max(0.0, min(1.0, float(achieved) / float(target)))


def composite_score(components: Sequence[ScoreComponent]) -> int:
    """round(sum(weight * progress * 100)), clamped to [0, 100]."""
    total_weight = sum(c.weight for c in components)
    if not math.isclose(total_weight, 1.0, abs_tol=WEIGHT_TOLERANCE):
        raise ValueError(f"Score weights must sum to 1, got {total_weight}")

    raw = sum(c.weight * c.progress * 100 for c in components)
    return max(0, min(100, round_half_up(raw)))


def freedom_components(
    debt_balance: Number,
    initial_debt: Number,
    emergency_fund: Number,
    emergency_target: Number,
    land_fund: Number,
    land_target: Number,
    wedding_fund: Number,
    wedding_target: Number,
) -> list[ScoreComponent]:
    """The three weighted inputs of the debt-then-savings freedom score."""
    debt_paid = float(initial_debt) - float(debt_balance)
    goals = (sub_progress(land_fund, land_target) + sub_progress(wedding_fund, wedding_target)) / 2

    return [
        ScoreComponent(name="debt", weight=DEBT_WEIGHT, progress=sub_progress(debt_paid, initial_debt)),
        ScoreComponent(
            name="emergency_fund",
            weight=EMERGENCY_WEIGHT,
            progress=sub_progress(emergency_fund, emergency_target),
        ),
        ScoreComponent(name="goals", weight=GOALS_WEIGHT, progress=goals),
    ]


def freedom_score(
    debt_balance: Number,
    initial_debt: Number,
    emergency_fund: Number,
    emergency_target: Number,
    land_fund: Number,
    land_target: Number,
    wedding_fund: Number,
    wedding_target: Number,
) -> int:
    """
    Freedom score for the debt-payoff-then-savings plan.

    40% debt paid off against the initial balance, 20% emergency fund,
    40% the mean of land and wedding fund progress.
    """
    return composite_score(freedom_components(
        debt_balance,
        initial_debt,
        emergency_fund,
        emergency_target,
        land_fund,
        land_target,
        wedding_fund,
        wedding_target,
    ))


def fire_progress(
    invested: Number,
    monthly_expenses: Number,
    withdrawal_rate: float = 0.04,
) -> float:
    """Invested assets as a percentage of the FIRE number, capped at 100."""
    if monthly_expenses <= 0:
        return 100.0
    target = fire_number(monthly_expenses, withdrawal_rate)
    return min(100.0, max(0.0, float(invested) / target * 100))


def fire_freedom_score(
    invested: Number,
    monthly_expenses: Number,
    withdrawal_rate: float = 0.04,
) -> int:
    """Single-component score: how much of the FIRE number is invested."""
    progress = fire_progress(invested, monthly_expenses, withdrawal_rate) / 100
    return composite_score([ScoreComponent(name="fire", weight=1.0, progress=progress)])


def current_phase(debt_balance: Number, emergency_fund: Number, emergency_target: Number) -> int:
    """1 while any debt remains, 2 until the emergency fund is full, then 3."""
    if debt_balance > 0:
        return PHASE_DEBT_ELIMINATION
    if emergency_fund < emergency_target:
        return PHASE_EMERGENCY_FUND
    return PHASE_GOAL_SAVING
