"""
Ledger Models for FinFree

These models define the records a user creates by hand: transactions,
installment obligations, goals, and (for the net-worth view) assets,
liabilities and monthly income/expense entries.

DESIGN DECISION: Money is Decimal everywhere it is stored.
Adding a contribution and then deleting it must put a balance back
exactly where it was, which binary floats cannot promise.
Rates and ratios stay float.
"""

import re
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def new_id() -> str:
    """Generate a unique entity id."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def period_of(moment: datetime | date) -> str:
    """Return the YYYY-MM period a date or timestamp falls in."""
    return f"{moment.year:04d}-{moment.month:02d}"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    What a transaction does to the user's money.

    Only DEBT_PAYMENT and SAVINGS_CONTRIBUTION touch a derived balance.
    """
    INCOME = "income"
    EXPENSE = "expense"
    DEBT_PAYMENT = "debt_payment"
    INSTALLMENT_PAYMENT = "installment_payment"
    SAVINGS_CONTRIBUTION = "savings_contribution"


class FundName(str, Enum):
    """Savings funds a contribution can be directed into."""
    EMERGENCY = "emergency_fund"
    LAND = "land_fund"
    WEDDING = "wedding_fund"


class GoalCategory(str, Enum):
    DEBT_PAYOFF = "debt_payoff"
    EMERGENCY_FUND = "emergency_fund"
    SAVINGS_GOAL = "savings_goal"


class AssetType(str, Enum):
    CASH = "cash"
    STOCKS = "stocks"
    REAL_ESTATE = "real_estate"
    BONDS = "bonds"
    CRYPTO = "crypto"
    OTHER = "other"


class LiabilityType(str, Enum):
    MORTGAGE = "mortgage"
    CAR_LOAN = "car_loan"
    STUDENT_LOAN = "student_loan"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


# Asset types that count as invested (they produce passive income)
INVESTED_ASSET_TYPES = frozenset({AssetType.STOCKS, AssetType.BONDS, AssetType.CRYPTO})


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single ledger entry.

    Immutable once created except through the store's explicit
    update/delete actions. The period is derived from the timestamp
    when it is not given.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the transaction happened"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in the user's currency (never negative)"
    )
    kind: TransactionKind
    category: str = Field(
        default="",
        max_length=100,
        description="Free-form tag, e.g. food_groceries or emergency_fund"
    )
    period: str = Field(
        default="",
        description="YYYY-MM period this transaction is counted in"
    )
    description: str = Field(default="", max_length=500)

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC so all of them compare."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator('period')
    @classmethod
    def validate_period(cls, v: str) -> str:
        if v and not _is_period(v):
            raise ValueError(f"Period must be YYYY-MM, got {v!r}")
        return v

    @model_validator(mode='after')
    def fill_period(self) -> 'Transaction':
        if not self.period:
            self.period = period_of(self.timestamp)
        if not self.category:
            self.category = self.kind.value
        return self

    @property
    def fund(self) -> Optional[FundName]:
        """The fund this transaction feeds, if it is a fund contribution."""
        if self.kind != TransactionKind.SAVINGS_CONTRIBUTION:
            return None
        try:
            return FundName(self.category)
        except ValueError:
            return None


class RecurringInstallment(BaseModel):
    """
    A fixed-amount recurring obligation (EMI).

    Recording a payment increments paid_installments and emits a
    matching INSTALLMENT_PAYMENT transaction.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, description="Amount per installment")
    total_installments: int = Field(..., gt=0)
    paid_installments: int = Field(default=0, ge=0)
    start_period: str = Field(..., pattern=PERIOD_PATTERN)
    end_period: str = Field(..., pattern=PERIOD_PATTERN)
    description: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode='after')
    def validate_counts(self) -> 'RecurringInstallment':
        if self.paid_installments > self.total_installments:
            raise ValueError("Paid installments cannot exceed total installments")
        if self.end_period < self.start_period:
            raise ValueError("Installment end cannot be before start")
        return self

    @property
    def remaining_installments(self) -> int:
        return self.total_installments - self.paid_installments

    @property
    def outstanding(self) -> Decimal:
        return self.amount * self.remaining_installments

    @property
    def is_complete(self) -> bool:
        return self.paid_installments >= self.total_installments


class Goal(BaseModel):
    """A savings or payoff target; completed once current reaches target."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(..., ge=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    target_date: date
    start_date: Optional[date] = None
    category: GoalCategory = GoalCategory.SAVINGS_GOAL
    monthly_contribution: Decimal = Field(default=Decimal("0"), ge=0)

    @computed_field
    @property
    def completed(self) -> bool:
        return self.current_amount >= self.target_amount


class Asset(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    type: AssetType = AssetType.OTHER
    value: Decimal = Field(..., ge=0)
    last_updated: datetime = Field(default_factory=utcnow)


class Liability(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    type: LiabilityType = LiabilityType.OTHER
    value: Decimal = Field(..., ge=0)
    last_updated: datetime = Field(default_factory=utcnow)


class MonthlyEntry(BaseModel):
    """Income and expenses for one month, as entered in the net-worth view."""

    id: str = Field(default_factory=new_id)
    period: str = Field(..., pattern=PERIOD_PATTERN)
    income: Decimal = Field(default=Decimal("0"), ge=0)
    expenses: Decimal = Field(default=Decimal("0"), ge=0)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'not_numeric')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating user input.

    Errors block the mutation; warnings are shown but don't block.
    """

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


def _is_period(value: str) -> bool:
    return re.match(PERIOD_PATTERN, value) is not None
