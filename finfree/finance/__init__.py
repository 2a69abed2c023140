"""
Finance Package

Pure calculations over FinFree models. Nothing here performs I/O or
holds state; every function is safe to call on any committed snapshot.
"""

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
from finfree.finance.amortization import (
    end_balance,
    monthly_interest,
    months_to_payoff,
    next_period,
    payoff_schedule,
    total_interest,
)
from finfree.finance.budget import (
    analyze_budget,
    daily_limit,
    days_remaining,
    monthly_surplus,
    remaining_budget,
)
from finfree.finance.networth import (
    create_net_worth_snapshot,
    installment_outstanding,
    invested_assets,
    net_worth,
    state_net_worth,
    total_monthly_installment,
)
from finfree.finance.projection import (
    fire_number,
    fire_targets,
    monthly_passive_income,
    months_to_goal,
    project_future_value,
    project_net_worth,
    years_to_target,
)
from finfree.finance.rounding import UNBOUNDED, is_unbounded, round_half_up
from finfree.finance.scoring import (
    composite_score,
    current_phase,
    fire_freedom_score,
    fire_progress,
    freedom_components,
    freedom_score,
    sub_progress,
)

__all__ = [
    # Aggregation
    "average_monthly_expenses",
    "average_monthly_income",
    "average_savings_rate",
    "build_monthly_record",
    "category_breakdown",
    "monthly_totals",
    "savings_amount",
    "savings_rate",
    "sum_by_category",
    "sum_by_kind",
    # Amortization
    "end_balance",
    "monthly_interest",
    "months_to_payoff",
    "next_period",
    "payoff_schedule",
    "total_interest",
    # Budget
    "analyze_budget",
    "daily_limit",
    "days_remaining",
    "monthly_surplus",
    "remaining_budget",
    # Net worth
    "create_net_worth_snapshot",
    "installment_outstanding",
    "invested_assets",
    "net_worth",
    "state_net_worth",
    "total_monthly_installment",
    # Projection
    "fire_number",
    "fire_targets",
    "monthly_passive_income",
    "months_to_goal",
    "project_future_value",
    "project_net_worth",
    "years_to_target",
    # Scoring
    "composite_score",
    "current_phase",
    "fire_freedom_score",
    "fire_progress",
    "freedom_components",
    "freedom_score",
    "sub_progress",
    # Rounding
    "UNBOUNDED",
    "is_unbounded",
    "round_half_up",
]
