"""
Data Models Package

This package contains all Pydantic models used in FinFree.
All data flowing through the store must conform to these schemas.
"""

from finfree.models.ledger import (
    Asset,
    AssetType,
    FundName,
    Goal,
    GoalCategory,
    Liability,
    LiabilityType,
    MonthlyEntry,
    RecurringInstallment,
    Transaction,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
    new_id,
    period_of,
)
from finfree.models.metrics import (
    BudgetLine,
    FIRETargets,
    MonthlyRecord,
    MonthlyTotals,
    NetWorthSnapshot,
    PayoffScheduleEntry,
    ProjectionPoint,
    ScoreComponent,
)
from finfree.models.state import (
    CURRENT_SCHEMA_VERSION,
    CommitResult,
    CommitStatus,
    ExportDocument,
    FinancialState,
    HydrationResult,
    HydrationStatus,
    PersistedSnapshot,
    UserSettings,
)
from finfree.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Asset",
    "AssetType",
    "FundName",
    "Goal",
    "GoalCategory",
    "Liability",
    "LiabilityType",
    "MonthlyEntry",
    "RecurringInstallment",
    "Transaction",
    "TransactionKind",
    "ValidationIssue",
    "ValidationResult",
    "new_id",
    "period_of",
    # Metric models
    "BudgetLine",
    "FIRETargets",
    "MonthlyRecord",
    "MonthlyTotals",
    "NetWorthSnapshot",
    "PayoffScheduleEntry",
    "ProjectionPoint",
    "ScoreComponent",
    # State models
    "CURRENT_SCHEMA_VERSION",
    "CommitResult",
    "CommitStatus",
    "ExportDocument",
    "FinancialState",
    "HydrationResult",
    "HydrationStatus",
    "PersistedSnapshot",
    "UserSettings",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
