"""
Default State

A fresh install and a reset both start from the plan in PlanSettings:
the debt at its initial balance, empty funds, the four plan goals and
the one installment already running.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from finfree.config import PlanSettings, get_settings
from finfree.models.ledger import FundName, Goal, GoalCategory, RecurringInstallment
from finfree.models.state import FinancialState, UserSettings

DEBT_GOAL_ID = "od-payoff"
DEFAULT_INSTALLMENT_ID = "debit-card-emi"

# Goal that mirrors each fund balance
FUND_GOAL_IDS = {
    FundName.EMERGENCY: "emergency-fund",
    FundName.LAND: "land-fund",
    FundName.WEDDING: "wedding-fund",
}

# Monthly contributions planned once the debt is cleared
EMERGENCY_CONTRIBUTION = 46000
LAND_CONTRIBUTION = 25000
WEDDING_CONTRIBUTION = 10000


def _period_start(period: str) -> date:
    year, month = (int(part) for part in period.split("-"))
    return date(year, month, 1)


def default_goals(plan: PlanSettings) -> list[Goal]:
    return [
        Goal(
            id=DEBT_GOAL_ID,
            name="Clear Overdraft",
            target_amount=Decimal(plan.initial_debt_balance),
            target_date=date.fromisoformat(plan.debt_payoff_target_date),
            start_date=_period_start(plan.debt_payoff_start),
            category=GoalCategory.DEBT_PAYOFF,
            monthly_contribution=Decimal(plan.target_debt_payment),
        ),
        Goal(
            id=FUND_GOAL_IDS[FundName.EMERGENCY],
            name="Emergency Fund",
            target_amount=Decimal(plan.emergency_fund_target),
            target_date=date(2026, 10, 31),
            start_date=date(2026, 8, 1),
            category=GoalCategory.EMERGENCY_FUND,
            monthly_contribution=Decimal(EMERGENCY_CONTRIBUTION),
        ),
        Goal(
            id=FUND_GOAL_IDS[FundName.LAND],
            name="Land",
            target_amount=Decimal(plan.land_fund_target),
            target_date=date(2027, 6, 30),
            start_date=date(2026, 11, 1),
            monthly_contribution=Decimal(LAND_CONTRIBUTION),
        ),
        Goal(
            id=FUND_GOAL_IDS[FundName.WEDDING],
            name="Wedding Fund",
            target_amount=Decimal(plan.wedding_fund_target),
            target_date=date(2027, 12, 31),
            start_date=date(2026, 11, 1),
            monthly_contribution=Decimal(WEDDING_CONTRIBUTION),
        ),
    ]


def default_installments(plan: PlanSettings) -> list[RecurringInstallment]:
    return [
        RecurringInstallment(
            id=DEFAULT_INSTALLMENT_ID,
            name=plan.installment_name,
            amount=Decimal(plan.installment_amount),
            total_installments=plan.installment_total,
            paid_installments=plan.installment_paid,
            start_period=plan.installment_start,
            end_period=plan.installment_end,
        )
    ]


def build_initial_state(plan: Optional[PlanSettings] = None) -> FinancialState:
    """A complete FinancialState built from the plan defaults."""
    plan = plan or get_settings().plan
    return FinancialState(
        monthly_net_income=Decimal(plan.monthly_net_income),
        debt_balance=Decimal(plan.initial_debt_balance),
        target_debt_payment=Decimal(plan.target_debt_payment),
        lifestyle_cap=Decimal(plan.lifestyle_cap),
        goals=default_goals(plan),
        installments=default_installments(plan),
        settings=UserSettings(debt_monthly_rate=plan.debt_monthly_rate),
    )
