"""
Audit Models for FinFree

Every store mutation is logged for audit purposes.
This provides:
1. Traceability of every change to the financial state
2. Debugging information when a write fails or a snapshot is rejected
3. A recent-activity trail the UI can show

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from finfree.models.ledger import utcnow


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every store action has its own event type.
    """
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    DEBT_PAYMENT_RECORDED = "debt_payment_recorded"

    # Balances
    DEBT_BALANCE_SET = "debt_balance_set"
    FUND_BALANCE_SET = "fund_balance_set"

    # Installments
    INSTALLMENT_ADDED = "installment_added"
    INSTALLMENT_UPDATED = "installment_updated"
    INSTALLMENT_DELETED = "installment_deleted"
    INSTALLMENT_PAYMENT_RECORDED = "installment_payment_recorded"

    # Goals, net-worth records, settings
    GOAL_CHANGED = "goal_changed"
    RECORD_CHANGED = "record_changed"
    SETTINGS_UPDATED = "settings_updated"

    # Lifecycle
    STATE_HYDRATED = "state_hydrated"
    SNAPSHOT_MIGRATED = "snapshot_migrated"
    SNAPSHOT_REJECTED = "snapshot_rejected"
    STATE_RESET = "state_reset"
    STATE_EXPORTED = "state_exported"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    COMMIT_FAILED = "commit_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every store action creates one of these.
    """

    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'installment', 'state')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(txn_id, "expense", "1200")
        event = AuditEventBuilder.commit_failed("add_transaction", error)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        kind: str,
        amount: str,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {kind} of {amount}",
            details={"kind": kind, "amount": amount, "category": category},
        )

    @staticmethod
    def transaction_updated(
        transaction_id: str,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction updated: {', '.join(changed_fields) or 'no fields'}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        kind: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction deleted and its effect reversed: {kind} of {amount}",
            details={"kind": kind, "amount": amount},
        )

    @staticmethod
    def debt_payment_recorded(
        transaction_id: str,
        amount: str,
        interest: int,
        new_balance: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_PAYMENT_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Debt payment of {amount} recorded, balance now {new_balance}",
            details={"amount": amount, "interest": interest, "new_balance": new_balance},
        )

    @staticmethod
    def balance_set(
        name: str,
        old_value: str,
        new_value: str,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.DEBT_BALANCE_SET
            if name == "debt_balance"
            else AuditEventType.FUND_BALANCE_SET
        )
        return AuditEvent(
            event_type=event_type,
            entity_type="balance",
            entity_id=name,
            description=f"{name} set from {old_value} to {new_value}",
            details={"old_value": old_value, "new_value": new_value},
        )

    @staticmethod
    def installment_changed(
        event_type: AuditEventType,
        installment_id: str,
        name: str,
    ) -> AuditEvent:
        verb = event_type.value.replace("installment_", "").replace("_", " ")
        return AuditEvent(
            event_type=event_type,
            entity_type="installment",
            entity_id=installment_id,
            description=f"Installment {verb}: {name}",
            details={"name": name},
        )

    @staticmethod
    def installment_payment_recorded(
        installment_id: str,
        name: str,
        paid: int,
        total: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSTALLMENT_PAYMENT_RECORDED,
            entity_type="installment",
            entity_id=installment_id,
            description=f"{name} - Payment {paid}/{total}",
            details={"paid_installments": paid, "total_installments": total},
        )

    @staticmethod
    def record_changed(
        entity_type: str,
        entity_id: str,
        action: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.GOAL_CHANGED
                if entity_type == "goal"
                else AuditEventType.RECORD_CHANGED
            ),
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.replace('_', ' ').capitalize()} {action}",
            details={"action": action},
        )

    @staticmethod
    def settings_updated(
        changed: dict[str, Any],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            description=f"Settings updated: {', '.join(sorted(changed))}",
            details={key: str(value) for key, value in changed.items()},
        )

    @staticmethod
    def state_hydrated(
        status: str,
        transaction_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_HYDRATED,
            entity_type="state",
            description=f"State hydrated ({status}) with {transaction_count} transactions",
            details={"status": status, "transaction_count": transaction_count},
        )

    @staticmethod
    def snapshot_migrated(
        from_version: int,
        to_version: int,
        backfilled: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_MIGRATED,
            entity_type="state",
            description=f"Snapshot migrated from v{from_version} to v{to_version}",
            details={"backfilled": backfilled},
        )

    @staticmethod
    def snapshot_rejected(
        reason: str,
        backup_key: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_REJECTED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            description="Persisted snapshot could not be loaded; defaults in use",
            details={"backup_key": backup_key},
            error_message=reason,
        )

    @staticmethod
    def state_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="state",
            description="State reset to defaults; all transactions and installments discarded",
        )

    @staticmethod
    def state_exported(
        transaction_count: int,
        installment_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_EXPORTED,
            entity_type="state",
            description=(
                f"{transaction_count} transactions and "
                f"{installment_count} installments exported"
            ),
            details={
                "transaction_count": transaction_count,
                "installment_count": installment_count,
            },
        )

    @staticmethod
    def validation_failed(
        action: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="input",
            description=f"{action} rejected with {len(issues)} issues",
            details={"action": action, "issues": issues},
        )

    @staticmethod
    def commit_failed(
        action: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMIT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            description=f"State after {action} could not be written",
            details={"action": action},
            error_message=error_message,
        )
