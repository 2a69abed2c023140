"""
Aggregate State Models

FinancialState is the aggregate root: everything the user has entered,
plus the balances derived from it. It is owned by the FinancialStore,
persisted wholesale after every mutation and rebuilt wholesale on load.

The remaining models describe what goes to and comes back from storage:
the persisted snapshot envelope, the export document, and the outcome
of commits and hydration.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from finfree.models.ledger import (
    Asset,
    FundName,
    Goal,
    Liability,
    MonthlyEntry,
    RecurringInstallment,
    Transaction,
    ValidationIssue,
    utcnow,
)


# Bump when FinancialState gains or renames a field.
# Version 1 snapshots predate installments, the net-worth lists and settings.
CURRENT_SCHEMA_VERSION = 2


class UserSettings(BaseModel):
    """Rates and ages the projections are computed with."""

    currency: str = Field(default="INR", min_length=3, max_length=3)
    locale: str = "en-IN"
    withdrawal_rate: float = Field(
        default=0.04,
        gt=0.0,
        le=1.0,
        description="Safe withdrawal rate (4% rule)"
    )
    expected_return: float = Field(
        default=0.07,
        ge=-1.0,
        le=1.0,
        description="Expected annual return on invested assets"
    )
    goal_growth_rate: float = Field(
        default=0.08,
        ge=-1.0,
        le=1.0,
        description="Assumed annual growth of goal savings"
    )
    debt_monthly_rate: float = Field(
        default=0.0124,
        ge=0.0,
        le=1.0,
        description="Monthly interest rate charged on the debt balance"
    )
    current_age: int = Field(default=30, ge=0, le=120)
    target_retirement_age: int = Field(default=65, ge=0, le=120)

    @model_validator(mode='after')
    def validate_ages(self) -> 'UserSettings':
        if self.target_retirement_age < self.current_age:
            raise ValueError("Retirement age cannot be before current age")
        return self


class FinancialState(BaseModel):
    """The whole of the user's financial record set."""

    schema_version: int = CURRENT_SCHEMA_VERSION

    # Current snapshot
    monthly_net_income: Decimal = Field(default=Decimal("0"), ge=0)
    debt_balance: Decimal = Field(default=Decimal("0"), ge=0)
    target_debt_payment: Decimal = Field(default=Decimal("0"), ge=0)
    lifestyle_cap: Decimal = Field(default=Decimal("0"), ge=0)

    # Funds
    emergency_fund: Decimal = Field(default=Decimal("0"), ge=0)
    land_fund: Decimal = Field(default=Decimal("0"), ge=0)
    wedding_fund: Decimal = Field(default=Decimal("0"), ge=0)

    # Net-worth view
    assets: list[Asset] = Field(default_factory=list)
    liabilities: list[Liability] = Field(default_factory=list)
    monthly_entries: list[MonthlyEntry] = Field(default_factory=list)

    # Records
    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    installments: list[RecurringInstallment] = Field(default_factory=list)

    settings: UserSettings = Field(default_factory=UserSettings)

    def fund_balance(self, fund: FundName) -> Decimal:
        return getattr(self, fund.value)

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def find_installment(self, installment_id: str) -> Optional[RecurringInstallment]:
        return next((i for i in self.installments if i.id == installment_id), None)

    def find_goal(self, goal_id: str) -> Optional[Goal]:
        return next((g for g in self.goals if g.id == goal_id), None)


class PersistedSnapshot(BaseModel):
    """The single blob written under the fixed storage key."""

    version: int = CURRENT_SCHEMA_VERSION
    saved_at: datetime = Field(default_factory=utcnow)
    hydrated: bool = True
    state: FinancialState


class ExportDocument(BaseModel):
    """
    One-way backup of balances, transactions and installments.

    Not meant to be imported back.
    """

    exported_at: datetime = Field(default_factory=utcnow)
    debt_balance: Decimal
    emergency_fund: Decimal
    land_fund: Decimal
    wedding_fund: Decimal
    lifestyle_cap: Decimal
    installments: list[RecurringInstallment] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)


# =============================================================================
# OUTCOMES
# =============================================================================

class CommitStatus(str, Enum):
    COMMITTED = "committed"        # Mutated and written
    WRITE_FAILED = "write_failed"  # Mutated in memory, write did not land
    REJECTED = "rejected"          # Input failed validation, nothing changed
    NOOP = "noop"                  # Nothing to change (unknown id, fully paid, ...)


class CommitResult(BaseModel):
    """What happened to one store action."""

    status: CommitStatus
    entity_id: Optional[str] = None
    issues: list[ValidationIssue] = Field(default_factory=list)
    error: Optional[str] = None
    committed_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.status == CommitStatus.COMMITTED

    @property
    def mutated(self) -> bool:
        return self.status in (CommitStatus.COMMITTED, CommitStatus.WRITE_FAILED)


class HydrationStatus(str, Enum):
    LOADED = "loaded"      # A snapshot was read and migrated
    EMPTY = "empty"        # Nothing stored yet, defaults in use
    REJECTED = "rejected"  # Stored blob was unusable, defaults in use


class HydrationResult(BaseModel):
    status: HydrationStatus
    migrated_from: Optional[int] = Field(
        default=None,
        description="Schema version of the snapshot when it was older than current"
    )
    error: Optional[str] = None
