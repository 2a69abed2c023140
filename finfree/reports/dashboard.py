"""
Dashboard Report

DESIGN DECISION: The dashboard is DETERMINISTIC.
Every figure is computed from one committed FinancialState by the pure
functions in finfree.finance; nothing is cached between renders and
nothing is estimated outside those functions.

Where a figure cannot be reached (a payment that never outruns the
interest, a FIRE number that is never hit) the summary carries
math.inf and the UI decides how to show it.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from finfree.config import PlanSettings
from finfree.finance.aggregation import (
    ZERO,
    average_monthly_expenses,
    build_monthly_record,
)
from finfree.finance.amortization import months_to_payoff, payoff_schedule, total_interest
from finfree.finance.budget import (
    analyze_budget,
    daily_limit,
    days_remaining,
    monthly_surplus,
    remaining_budget,
)
from finfree.finance.networth import (
    installment_outstanding,
    invested_assets,
    state_net_worth,
    total_monthly_installment,
)
from finfree.finance.projection import fire_number, project_net_worth, years_to_target
from finfree.finance.scoring import (
    PHASE_NAMES,
    current_phase,
    fire_progress,
    freedom_score,
    sub_progress,
)
from finfree.models.ledger import FundName, period_of, utcnow
from finfree.models.metrics import (
    BudgetLine,
    MonthlyRecord,
    PayoffScheduleEntry,
    ProjectionPoint,
)
from finfree.models.state import FinancialState

PROJECTION_YEARS = 30


class DashboardSummary(BaseModel):
    """Everything the dashboard shows, for one state at one date."""

    generated_at: datetime = Field(default_factory=utcnow)
    period: str

    # This month
    month: MonthlyRecord
    lifestyle_cap: Decimal
    lifestyle_remaining: Decimal
    days_remaining: int
    daily_limit: int
    budget: list[BudgetLine] = Field(default_factory=list)
    monthly_surplus: Decimal

    # Debt
    debt_balance: Decimal
    months_to_payoff: float
    total_interest: int
    payoff_schedule: list[PayoffScheduleEntry] = Field(default_factory=list)

    # Installments
    total_monthly_installment: Decimal
    installment_outstanding: Decimal

    # Progress
    freedom_score: int = Field(..., ge=0, le=100)
    phase: int
    phase_name: str
    goal_progress: dict[str, float] = Field(default_factory=dict)

    # Net worth and FIRE
    net_worth: Decimal
    invested: Decimal
    fire_number: float
    fire_progress: float
    years_to_fire: float
    projection: list[ProjectionPoint] = Field(default_factory=list)


def _fire_expenses(state: FinancialState) -> Decimal:
    """Monthly spend the FIRE number is based on."""
    if state.monthly_entries:
        return average_monthly_expenses(state.monthly_entries)
    return state.lifestyle_cap


def build_dashboard(
    state: FinancialState,
    plan: PlanSettings,
    today: Optional[date] = None,
) -> DashboardSummary:
    """
    Build the dashboard for the given state.

    Args:
        state: Latest committed state
        plan: Plan targets (initial debt, fund targets, budget)
        today: Reference date; the current month is derived from it
    """
    today = today or date.today()
    period = period_of(today)
    settings = state.settings

    record = build_monthly_record(state.transactions, period)
    lifestyle_left = remaining_budget(record.totals.expenses, state.lifestyle_cap)
    days_left = days_remaining(today)
    installments_due = total_monthly_installment(state.installments)
    surplus = monthly_surplus(state.monthly_net_income, installments_due, state.lifestyle_cap)

    debt_months = months_to_payoff(
        state.debt_balance, state.target_debt_payment, settings.debt_monthly_rate
    )
    debt_interest = total_interest(
        state.debt_balance, state.target_debt_payment, settings.debt_monthly_rate
    )

    fund_targets = {
        FundName.EMERGENCY: plan.emergency_fund_target,
        FundName.LAND: plan.land_fund_target,
        FundName.WEDDING: plan.wedding_fund_target,
    }
    goal_progress = {
        goal.id: sub_progress(goal.current_amount, goal.target_amount) for goal in state.goals
    }

    invested = invested_assets(state.assets) + sum(
        (state.fund_balance(fund) for fund in FundName), ZERO
    )
    expenses = _fire_expenses(state)
    target = fire_number(expenses, settings.withdrawal_rate)
    contribution = max(ZERO, surplus)
    worth = state_net_worth(state)
    phase = current_phase(
        state.debt_balance, state.emergency_fund, fund_targets[FundName.EMERGENCY]
    )

    return DashboardSummary(
        period=period,
        month=record,
        lifestyle_cap=state.lifestyle_cap,
        lifestyle_remaining=lifestyle_left,
        days_remaining=days_left,
        daily_limit=daily_limit(lifestyle_left, days_left),
        budget=analyze_budget(state.transactions, period, plan.lifestyle_budget),
        monthly_surplus=surplus,
        debt_balance=state.debt_balance,
        months_to_payoff=debt_months,
        total_interest=debt_interest,
        payoff_schedule=payoff_schedule(
            state.debt_balance,
            state.target_debt_payment,
            settings.debt_monthly_rate,
            period,
        ),
        total_monthly_installment=installments_due,
        installment_outstanding=installment_outstanding(state.installments),
        freedom_score=freedom_score(
            debt_balance=state.debt_balance,
            initial_debt=plan.initial_debt_balance,
            emergency_fund=state.emergency_fund,
            emergency_target=fund_targets[FundName.EMERGENCY],
            land_fund=state.land_fund,
            land_target=fund_targets[FundName.LAND],
            wedding_fund=state.wedding_fund,
            wedding_target=fund_targets[FundName.WEDDING],
        ),
        phase=phase,
        phase_name=PHASE_NAMES[phase],
        goal_progress=goal_progress,
        net_worth=worth,
        invested=invested,
        fire_number=target,
        fire_progress=fire_progress(invested, expenses, settings.withdrawal_rate),
        years_to_fire=years_to_target(invested, contribution, target, settings.expected_return),
        projection=project_net_worth(worth, contribution, PROJECTION_YEARS, settings.expected_return),
    )
