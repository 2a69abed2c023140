"""
Derived Metric Models

Results of the pure calculations in finfree.finance. None of these
are persisted; they are recomputed from the latest committed state.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finfree.models.ledger import Transaction, utcnow


class MonthlyTotals(BaseModel):
    """Per-kind sums for one period."""

    period: str
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    installments_paid: Decimal = Decimal("0")
    debt_payments: Decimal = Decimal("0")
    savings: Decimal = Decimal("0")


class MonthlyRecord(BaseModel):
    """A month's totals plus what was left over."""

    period: str
    totals: MonthlyTotals
    net_savings: Decimal = Field(
        ...,
        description="Income minus expenses minus installments"
    )
    savings_rate: float = Field(..., ge=0.0, le=1.0)
    lifestyle_spent: Decimal
    transactions: list[Transaction] = Field(default_factory=list)


class BudgetLine(BaseModel):
    """Spending in one category against its budget."""

    category: str
    budgeted: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: float


class PayoffScheduleEntry(BaseModel):
    """One period of a debt payoff schedule."""

    period: str
    start_balance: float
    interest: int
    payment: float
    end_balance: float
    interest_to_date: int


class ProjectionPoint(BaseModel):
    """Projected value at the end of a year (year 0 is today)."""

    year: int = Field(..., ge=0)
    value: float


class FIRETargets(BaseModel):
    lean_fire: float = Field(..., description="25x lean (60%) annual expenses")
    coast_fire: float = Field(..., description="Amount that grows to regular FIRE by retirement")
    regular_fire: float = Field(..., description="25x annual expenses")
    fat_fire: float = Field(..., description="25x fat (200%) annual expenses")


class ScoreComponent(BaseModel):
    """One weighted input to a composite score."""

    name: str
    weight: float = Field(..., ge=0.0, le=1.0)
    progress: float = Field(..., ge=0.0, le=1.0)


class NetWorthSnapshot(BaseModel):
    taken_at: datetime = Field(default_factory=utcnow)
    assets: dict[str, Decimal] = Field(default_factory=dict)
    liabilities: dict[str, Decimal] = Field(default_factory=dict)
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
