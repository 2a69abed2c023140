"""
Financial Store

The single owner of the user's FinancialState.

DESIGN DECISION: The store is an explicitly constructed object, not a
module-level singleton. Whoever owns the UI builds one, hydrates it and
passes it down.

LIFECYCLE:
1. CONSTRUCT: state holds defaults, hydrated is False
2. HYDRATE: read the persisted blob, migrate it, replace state wholesale
3. MUTATE: every action validates, mutates, then writes the whole state

Every action returns a CommitResult. Validation failures never mutate.
A failed write leaves the mutation in memory and says so in the result,
so the UI can warn that the change is not yet saved.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ValidationError

from finfree.audit import AuditLogger
from finfree.config import Settings, get_settings
from finfree.finance.aggregation import ZERO
from finfree.finance.amortization import end_balance, monthly_interest
from finfree.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from finfree.models.ledger import (
    Asset,
    FundName,
    Goal,
    Liability,
    MonthlyEntry,
    RecurringInstallment,
    Transaction,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
    utcnow,
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
from finfree.services.storage import (
    StateStorageInterface,
    StorageError,
    StorageReadError,
)
from finfree.store.defaults import DEBT_GOAL_ID, FUND_GOAL_IDS, build_initial_state
from finfree.store.migration import SnapshotRejectedError, migrate_snapshot
from finfree.validation import (
    InstallmentValidator,
    TransactionValidator,
    parse_amount,
    parse_timestamp,
)

logger = structlog.get_logger()

TRANSACTION_FIELDS = ("amount", "kind", "category", "description", "timestamp")
INSTALLMENT_FIELDS = (
    "name",
    "amount",
    "total_installments",
    "paid_installments",
    "start_period",
    "end_period",
    "description",
)


class StoreNotHydratedError(Exception):
    """A mutation was attempted before the persisted state was loaded."""
    pass


def _issues_from_validation_error(error: ValidationError) -> list[ValidationIssue]:
    issues = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail.get("loc", ())) or "record"
        issues.append(ValidationIssue(
            field=field,
            issue_type=detail.get("type", "invalid_value"),
            message=detail.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


class FinancialStore:
    """
    Holds the one FinancialState and persists it after every mutation.

    Usage:
        store = FinancialStore(JsonFileStorage())
        store.hydrate()
        result = store.add_transaction(amount=1200, kind="expense", category="transport")
        if not result.ok:
            ...
    """

    def __init__(
        self,
        storage: StateStorageInterface,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = settings or get_settings()
        self._storage = storage
        self._plan = settings.plan
        self._app = settings.app
        self._key = settings.storage.state_key
        self._audit = audit_logger or AuditLogger(trail_size=self._app.audit_trail_size)
        self._transaction_validator = TransactionValidator(self._app)
        self._installment_validator = InstallmentValidator(self._app)

        self._state = build_initial_state(self._plan)
        self._hydrated = False

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def state(self) -> FinancialState:
        """A copy of the current state. Change it through actions only."""
        return self._state.model_copy(deep=True)

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def rejected_key(self) -> str:
        return f"{self._key}.rejected"

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        txn = self._state.find_transaction(transaction_id)
        return txn.model_copy() if txn else None

    def recent_transactions(self, limit: int = 10) -> list[Transaction]:
        """Newest first."""
        ordered = sorted(self._state.transactions, key=lambda t: t.timestamp, reverse=True)
        return [t.model_copy() for t in ordered[:limit]]

    # =========================================================================
    # HYDRATION
    # =========================================================================

    def hydrate(self) -> HydrationResult:
        """
        Load the persisted state, replacing the in-memory state wholesale.

        Never raises: an unreadable or unusable snapshot leaves the
        defaults in place and is reported as REJECTED.
        """
        defaults = build_initial_state(self._plan)

        try:
            raw = self._storage.read(self._key)
        except StorageReadError as e:
            self._state = defaults
            self._hydrated = True
            self._audit.log_snapshot_rejected(reason=str(e), backup_key=None)
            return self._hydration_done(HydrationResult(status=HydrationStatus.REJECTED, error=str(e)))

        if raw is None:
            self._state = defaults
            self._hydrated = True
            return self._hydration_done(HydrationResult(status=HydrationStatus.EMPTY))

        try:
            migration = migrate_snapshot(raw, defaults)
        except SnapshotRejectedError as e:
            backup_key = self._keep_rejected(raw)
            self._state = defaults
            self._hydrated = True
            self._audit.log_snapshot_rejected(reason=str(e), backup_key=backup_key)
            return self._hydration_done(HydrationResult(status=HydrationStatus.REJECTED, error=str(e)))

        self._state = migration.state
        self._hydrated = True

        migrated_from = None
        if migration.migrated:
            if migration.from_version < CURRENT_SCHEMA_VERSION:
                migrated_from = migration.from_version
            self._audit.log(AuditEventBuilder.snapshot_migrated(
                from_version=migration.from_version,
                to_version=CURRENT_SCHEMA_VERSION,
                backfilled=migration.backfilled,
            ))
            # Write the upgraded shape back so the next load is a plain read
            error = self._persist()
            if error:
                self._audit.log_commit_failed("hydrate", error)

        return self._hydration_done(HydrationResult(
            status=HydrationStatus.LOADED,
            migrated_from=migrated_from,
        ))

    def _hydration_done(self, result: HydrationResult) -> HydrationResult:
        self._audit.log(AuditEventBuilder.state_hydrated(
            status=result.status.value,
            transaction_count=len(self._state.transactions),
        ))
        return result

    def _keep_rejected(self, raw: str) -> Optional[str]:
        try:
            self._storage.write(self.rejected_key, raw)
        except StorageError as e:
            logger.error("Could not keep rejected snapshot", key=self.rejected_key, error=str(e))
            return None
        return self.rejected_key

    # =========================================================================
    # COMMIT
    # =========================================================================

    def _require_hydrated(self) -> None:
        if not self._hydrated:
            raise StoreNotHydratedError(
                "State has not been loaded yet; call hydrate() before changing it"
            )

    def _persist(self) -> Optional[str]:
        """Write the whole state. Returns the error message on failure."""
        snapshot = PersistedSnapshot(state=self._state)
        try:
            self._storage.write(self._key, snapshot.model_dump_json())
        except StorageError as e:
            return str(e)
        return None

    def _commit(
        self,
        action: str,
        event: Optional[AuditEvent] = None,
        entity_id: Optional[str] = None,
        notes: Optional[list[ValidationIssue]] = None,
    ) -> CommitResult:
        if event is not None:
            self._audit.log(event)

        error = self._persist()
        if error:
            self._audit.log_commit_failed(action, error)
            return CommitResult(
                status=CommitStatus.WRITE_FAILED,
                entity_id=entity_id,
                issues=notes or [],
                error=error,
            )

        return CommitResult(
            status=CommitStatus.COMMITTED,
            entity_id=entity_id,
            issues=notes or [],
            committed_at=utcnow(),
        )

    def _reject(self, action: str, issues: list[ValidationIssue]) -> CommitResult:
        self._audit.log_validation_failed(action, [issue.model_dump() for issue in issues])
        return CommitResult(status=CommitStatus.REJECTED, issues=issues)

    def _reject_validation(self, action: str, result: ValidationResult) -> CommitResult:
        return self._reject(action, result.issues)

    def _noop(self, entity_id: Optional[str] = None, reason: Optional[str] = None) -> CommitResult:
        return CommitResult(status=CommitStatus.NOOP, entity_id=entity_id, error=reason)

    # =========================================================================
    # DERIVED BALANCES
    # =========================================================================

    def _set_fund(self, fund: FundName, value: Decimal) -> None:
        """Set a fund balance and keep its goal in step."""
        value = max(ZERO, value)
        setattr(self._state, fund.value, value)
        goal = self._state.find_goal(FUND_GOAL_IDS[fund])
        if goal is not None:
            goal.current_amount = value

    def _move_debt_goal(self, txn: Transaction, delta: Decimal) -> None:
        """Payments tagged with the debt_payment category count towards the payoff goal."""
        if txn.category != TransactionKind.DEBT_PAYMENT.value:
            return
        goal = self._state.find_goal(DEBT_GOAL_ID)
        if goal is not None:
            goal.current_amount = max(ZERO, goal.current_amount + delta)

    def _apply_effect(self, txn: Transaction, accrue_interest: bool) -> Optional[int]:
        """
        Apply what a transaction does to the derived balances.

        Returns the interest accrued for a debt payment, if any.
        """
        if txn.kind == TransactionKind.DEBT_PAYMENT:
            rate = self._state.settings.debt_monthly_rate
            interest = monthly_interest(self._state.debt_balance, rate) if accrue_interest else 0
            self._state.debt_balance = Decimal(
                end_balance(self._state.debt_balance, txn.amount, rate, interest)
            )
            self._move_debt_goal(txn, txn.amount)
            return interest

        fund = txn.fund
        if fund is not None:
            self._set_fund(fund, self._state.fund_balance(fund) + txn.amount)
        return None

    def _reverse_effect(self, txn: Transaction) -> Optional[ValidationIssue]:
        """
        Undo the flat effect of a transaction.

        Interest accrued when a debt payment was recorded is not given
        back; the returned issue tells the caller so.
        """
        if txn.kind == TransactionKind.DEBT_PAYMENT:
            self._state.debt_balance = self._state.debt_balance + txn.amount
            self._move_debt_goal(txn, -txn.amount)
            return ValidationIssue(
                field="debt_balance",
                issue_type="approximate_reversal",
                message=(
                    f"Only the payment of {txn.amount} was added back to the debt; "
                    "interest charged when it was recorded is not replayed"
                ),
                severity="warning",
                suggested_fix="Use 'set debt balance' if the balance must match your statement",
            )

        fund = txn.fund
        if fund is not None:
            self._set_fund(fund, self._state.fund_balance(fund) - txn.amount)
        return None

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def _build_transaction(self, data: dict[str, Any], transaction_id: Optional[str] = None) -> Transaction:
        fields = {
            "amount": parse_amount(data["amount"]),
            "kind": TransactionKind(data["kind"]),
            "category": data.get("category") or "",
            "description": data.get("description") or "",
        }
        timestamp = parse_timestamp(data.get("timestamp"))
        if timestamp is not None:
            fields["timestamp"] = timestamp
        if transaction_id is not None:
            fields["id"] = transaction_id
        return Transaction(**fields)

    def add_transaction(
        self,
        amount: Any,
        kind: Any,
        category: str = "",
        description: str = "",
        timestamp: Any = None,
    ) -> CommitResult:
        """
        Record a transaction and apply its effect.

        A debt payment accrues one month of interest on the current
        balance before the payment lands. A savings contribution tagged
        with a fund name is added to that fund.
        """
        self._require_hydrated()
        data = {
            "amount": amount,
            "kind": kind,
            "category": category,
            "description": description,
            "timestamp": timestamp,
        }
        validation = self._transaction_validator.validate(data)
        if not validation.is_valid:
            return self._reject_validation("add_transaction", validation)

        txn = self._build_transaction(data)
        interest = self._apply_effect(txn, accrue_interest=True)
        self._state.transactions.append(txn)

        if txn.kind == TransactionKind.DEBT_PAYMENT:
            event = AuditEventBuilder.debt_payment_recorded(
                transaction_id=txn.id,
                amount=str(txn.amount),
                interest=interest or 0,
                new_balance=str(self._state.debt_balance),
            )
        else:
            event = AuditEventBuilder.transaction_added(
                transaction_id=txn.id,
                kind=txn.kind.value,
                amount=str(txn.amount),
                category=txn.category,
            )
        return self._commit("add_transaction", event, entity_id=txn.id, notes=validation.issues)

    def update_transaction(self, transaction_id: str, **changes: Any) -> CommitResult:
        """
        Edit a transaction.

        The old flat effect is reversed and the new one applied; no
        interest is accrued for an edited debt payment.
        """
        self._require_hydrated()
        unknown = set(changes) - set(TRANSACTION_FIELDS)
        if unknown:
            return self._reject("update_transaction", [ValidationIssue(
                field=name,
                issue_type="unknown_field",
                message=f"Transactions have no editable field {name!r}",
                severity="error",
            ) for name in sorted(unknown)])

        old = self._state.find_transaction(transaction_id)
        if old is None:
            return self._noop(transaction_id, "Transaction not found")

        data = {
            "amount": old.amount,
            "kind": old.kind.value,
            "category": old.category,
            "description": old.description,
            "timestamp": old.timestamp,
        }
        data.update(changes)
        validation = self._transaction_validator.validate(data)
        if not validation.is_valid:
            return self._reject_validation("update_transaction", validation)

        new = self._build_transaction(data, transaction_id=old.id)
        changed = [
            name for name in TRANSACTION_FIELDS
            if getattr(new, name) != getattr(old, name)
        ]
        if not changed:
            return self._noop(transaction_id, "Nothing changed")

        note = self._reverse_effect(old)
        self._apply_effect(new, accrue_interest=False)
        index = self._state.transactions.index(old)
        self._state.transactions[index] = new

        return self._commit(
            "update_transaction",
            AuditEventBuilder.transaction_updated(transaction_id=old.id, changed_fields=changed),
            entity_id=old.id,
            notes=[note] if note else None,
        )

    def delete_transaction(self, transaction_id: str) -> CommitResult:
        """Remove a transaction and reverse its flat effect."""
        self._require_hydrated()
        txn = self._state.find_transaction(transaction_id)
        if txn is None:
            return self._noop(transaction_id, "Transaction not found")

        note = self._reverse_effect(txn)
        self._state.transactions.remove(txn)

        return self._commit(
            "delete_transaction",
            AuditEventBuilder.transaction_deleted(
                transaction_id=txn.id,
                kind=txn.kind.value,
                amount=str(txn.amount),
            ),
            entity_id=txn.id,
            notes=[note] if note else None,
        )

    # =========================================================================
    # BALANCES
    # =========================================================================

    def record_debt_payment(
        self,
        amount: Any,
        description: str = "Debt Payment",
        timestamp: Any = None,
    ) -> CommitResult:
        """
        Record a payment against the debt.

        Same as adding a debt_payment transaction with the debt_payment
        category, which also counts the payment towards the payoff goal.
        Deleting or editing the transaction takes that progress back out.
        """
        self._require_hydrated()
        data = {
            "amount": amount,
            "kind": TransactionKind.DEBT_PAYMENT.value,
            "category": TransactionKind.DEBT_PAYMENT.value,
            "description": description,
            "timestamp": timestamp,
        }
        validation = self._transaction_validator.validate(data)
        if not validation.is_valid:
            return self._reject_validation("record_debt_payment", validation)

        txn = self._build_transaction(data)
        interest = self._apply_effect(txn, accrue_interest=True)
        self._state.transactions.append(txn)

        return self._commit(
            "record_debt_payment",
            AuditEventBuilder.debt_payment_recorded(
                transaction_id=txn.id,
                amount=str(txn.amount),
                interest=interest or 0,
                new_balance=str(self._state.debt_balance),
            ),
            entity_id=txn.id,
            notes=validation.issues,
        )

    def _parse_balance(self, action: str, amount: Any, field: str) -> tuple[Optional[Decimal], Optional[CommitResult]]:
        value = parse_amount(amount)
        if value is None:
            return None, self._reject(action, [ValidationIssue(
                field=field,
                issue_type="not_numeric",
                message=f"Amount {amount!r} is not a number",
                severity="error",
            )])
        # Negative balances are floored, not refused
        return max(ZERO, value), None

    def set_debt_balance(self, amount: Any) -> CommitResult:
        """Overwrite the debt balance, e.g. to match a bank statement."""
        self._require_hydrated()
        value, rejected = self._parse_balance("set_debt_balance", amount, "debt_balance")
        if rejected:
            return rejected

        old = self._state.debt_balance
        if value == old:
            return self._noop("debt_balance", "Nothing changed")
        self._state.debt_balance = value

        return self._commit(
            "set_debt_balance",
            AuditEventBuilder.balance_set("debt_balance", str(old), str(value)),
            entity_id="debt_balance",
        )

    def set_fund_balance(self, fund: Any, amount: Any) -> CommitResult:
        """Overwrite one fund balance; its goal follows."""
        self._require_hydrated()
        try:
            fund = FundName(fund)
        except ValueError:
            return self._reject("set_fund_balance", [ValidationIssue(
                field="fund",
                issue_type="invalid_value",
                message=f"Unknown fund {fund!r}",
                severity="error",
                suggested_fix=f"Use one of: {', '.join(f.value for f in FundName)}",
            )])

        value, rejected = self._parse_balance("set_fund_balance", amount, fund.value)
        if rejected:
            return rejected

        old = self._state.fund_balance(fund)
        if value == old:
            return self._noop(fund.value, "Nothing changed")
        self._set_fund(fund, value)

        return self._commit(
            "set_fund_balance",
            AuditEventBuilder.balance_set(fund.value, str(old), str(value)),
            entity_id=fund.value,
        )

    def update_lifestyle_cap(self, amount: Any) -> CommitResult:
        self._require_hydrated()
        value, rejected = self._parse_balance("update_lifestyle_cap", amount, "lifestyle_cap")
        if rejected:
            return rejected

        old = self._state.lifestyle_cap
        if value == old:
            return self._noop("lifestyle_cap", "Nothing changed")
        self._state.lifestyle_cap = value

        return self._commit(
            "update_lifestyle_cap",
            AuditEventBuilder.settings_updated({"lifestyle_cap": value}),
            entity_id="lifestyle_cap",
        )

    def update_settings(self, **changes: Any) -> CommitResult:
        """Change projection settings (rates, ages, currency)."""
        self._require_hydrated()
        unknown = set(changes) - set(UserSettings.model_fields)
        if unknown:
            return self._reject("update_settings", [ValidationIssue(
                field=name,
                issue_type="unknown_field",
                message=f"There is no setting called {name!r}",
                severity="error",
            ) for name in sorted(unknown)])

        current = self._state.settings
        try:
            updated = UserSettings.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            return self._reject("update_settings", _issues_from_validation_error(e))

        changed = {
            name: getattr(updated, name)
            for name in changes
            if getattr(updated, name) != getattr(current, name)
        }
        if not changed:
            return self._noop("settings", "Nothing changed")
        self._state.settings = updated

        return self._commit(
            "update_settings",
            AuditEventBuilder.settings_updated(changed),
            entity_id="settings",
        )

    # =========================================================================
    # INSTALLMENTS
    # =========================================================================

    def add_installment(
        self,
        name: str,
        amount: Any,
        total_installments: Any,
        start_period: str,
        end_period: str,
        paid_installments: Any = 0,
        description: Optional[str] = None,
    ) -> CommitResult:
        self._require_hydrated()
        data = {
            "name": name,
            "amount": amount,
            "total_installments": total_installments,
            "paid_installments": paid_installments,
            "start_period": start_period,
            "end_period": end_period,
            "description": description,
        }
        validation = self._installment_validator.validate(data)
        if not validation.is_valid:
            return self._reject_validation("add_installment", validation)

        installment = self._build_installment(data)
        self._state.installments.append(installment)

        return self._commit(
            "add_installment",
            AuditEventBuilder.installment_changed(
                AuditEventType.INSTALLMENT_ADDED, installment.id, installment.name
            ),
            entity_id=installment.id,
            notes=validation.issues,
        )

    def _build_installment(self, data: dict[str, Any], installment_id: Optional[str] = None) -> RecurringInstallment:
        fields = {
            "name": str(data["name"]).strip(),
            "amount": parse_amount(data["amount"]),
            "total_installments": int(parse_amount(data["total_installments"])),
            "paid_installments": int(parse_amount(data.get("paid_installments") or 0)),
            "start_period": data["start_period"],
            "end_period": data["end_period"],
            "description": data.get("description"),
        }
        if installment_id is not None:
            fields["id"] = installment_id
        return RecurringInstallment(**fields)

    def update_installment(self, installment_id: str, **changes: Any) -> CommitResult:
        self._require_hydrated()
        unknown = set(changes) - set(INSTALLMENT_FIELDS)
        if unknown:
            return self._reject("update_installment", [ValidationIssue(
                field=name,
                issue_type="unknown_field",
                message=f"Installments have no editable field {name!r}",
                severity="error",
            ) for name in sorted(unknown)])

        old = self._state.find_installment(installment_id)
        if old is None:
            return self._noop(installment_id, "Installment not found")

        data = {name: getattr(old, name) for name in INSTALLMENT_FIELDS}
        data.update(changes)
        validation = self._installment_validator.validate(data)
        if not validation.is_valid:
            return self._reject_validation("update_installment", validation)

        new = self._build_installment(data, installment_id=old.id)
        if new == old:
            return self._noop(installment_id, "Nothing changed")

        index = self._state.installments.index(old)
        self._state.installments[index] = new

        return self._commit(
            "update_installment",
            AuditEventBuilder.installment_changed(
                AuditEventType.INSTALLMENT_UPDATED, new.id, new.name
            ),
            entity_id=new.id,
        )

    def delete_installment(self, installment_id: str) -> CommitResult:
        """Remove an installment. Payment transactions already recorded stay."""
        self._require_hydrated()
        installment = self._state.find_installment(installment_id)
        if installment is None:
            return self._noop(installment_id, "Installment not found")

        self._state.installments.remove(installment)

        return self._commit(
            "delete_installment",
            AuditEventBuilder.installment_changed(
                AuditEventType.INSTALLMENT_DELETED, installment.id, installment.name
            ),
            entity_id=installment.id,
        )

    def record_installment_payment(self, installment_id: str, timestamp: Any = None) -> CommitResult:
        """
        Mark the next installment as paid.

        Emits an installment_payment transaction for the installment
        amount. Does nothing once every installment is paid.
        """
        self._require_hydrated()
        installment = self._state.find_installment(installment_id)
        if installment is None:
            return self._noop(installment_id, "Installment not found")
        if installment.is_complete:
            return self._noop(installment_id, "All installments are already paid")

        paid = installment.paid_installments + 1
        txn = self._build_transaction(
            {
                "amount": installment.amount,
                "kind": TransactionKind.INSTALLMENT_PAYMENT.value,
                "category": TransactionKind.INSTALLMENT_PAYMENT.value,
                "description": f"{installment.name} - Payment {paid}/{installment.total_installments}",
                "timestamp": timestamp,
            }
        )
        installment.paid_installments = paid
        self._state.transactions.append(txn)

        return self._commit(
            "record_installment_payment",
            AuditEventBuilder.installment_payment_recorded(
                installment_id=installment.id,
                name=installment.name,
                paid=paid,
                total=installment.total_installments,
            ),
            entity_id=txn.id,
        )

    # =========================================================================
    # GOALS AND NET-WORTH RECORDS
    # =========================================================================

    def _add_record(self, collection: str, model: type[BaseModel], entity_type: str, data: dict[str, Any]) -> CommitResult:
        self._require_hydrated()
        action = f"add_{entity_type}"
        try:
            record = model.model_validate(data)
        except ValidationError as e:
            return self._reject(action, _issues_from_validation_error(e))

        if any(existing.id == record.id for existing in getattr(self._state, collection)):
            return self._reject(action, [ValidationIssue(
                field="id",
                issue_type="duplicate",
                message=f"A {entity_type.replace('_', ' ')} with id {record.id!r} already exists",
                severity="error",
            )])

        getattr(self._state, collection).append(record)
        return self._commit(
            action,
            AuditEventBuilder.record_changed(entity_type, record.id, "added"),
            entity_id=record.id,
        )

    def _update_record(
        self,
        collection: str,
        model: type[BaseModel],
        entity_type: str,
        record_id: str,
        changes: dict[str, Any],
        touch: bool = False,
    ) -> CommitResult:
        self._require_hydrated()
        action = f"update_{entity_type}"
        records = getattr(self._state, collection)
        old = next((r for r in records if r.id == record_id), None)
        if old is None:
            return self._noop(record_id, f"{entity_type.replace('_', ' ').capitalize()} not found")
        if "id" in changes and changes["id"] != record_id:
            return self._reject(action, [ValidationIssue(
                field="id",
                issue_type="immutable",
                message="Record ids cannot be changed",
                severity="error",
            )])

        try:
            new = model.model_validate({**old.model_dump(), **changes})
        except ValidationError as e:
            return self._reject(action, _issues_from_validation_error(e))

        if new == old:
            return self._noop(record_id, "Nothing changed")
        if touch:
            new.last_updated = utcnow()

        records[records.index(old)] = new
        return self._commit(
            action,
            AuditEventBuilder.record_changed(entity_type, record_id, "updated"),
            entity_id=record_id,
        )

    def _delete_record(self, collection: str, entity_type: str, record_id: str) -> CommitResult:
        self._require_hydrated()
        records = getattr(self._state, collection)
        record = next((r for r in records if r.id == record_id), None)
        if record is None:
            return self._noop(record_id, f"{entity_type.replace('_', ' ').capitalize()} not found")

        records.remove(record)
        return self._commit(
            f"delete_{entity_type}",
            AuditEventBuilder.record_changed(entity_type, record_id, "deleted"),
            entity_id=record_id,
        )

    def add_goal(
        self,
        name: str,
        target_amount: Any,
        target_date: date,
        **fields: Any,
    ) -> CommitResult:
        return self._add_record(
            "goals", Goal, "goal",
            {"name": name, "target_amount": target_amount, "target_date": target_date, **fields},
        )

    def update_goal(self, goal_id: str, **changes: Any) -> CommitResult:
        changes.pop("completed", None)
        return self._update_record("goals", Goal, "goal", goal_id, changes)

    def delete_goal(self, goal_id: str) -> CommitResult:
        return self._delete_record("goals", "goal", goal_id)

    def add_asset(self, name: str, value: Any, type: Any = "other") -> CommitResult:
        return self._add_record("assets", Asset, "asset", {"name": name, "value": value, "type": type})

    def update_asset(self, asset_id: str, **changes: Any) -> CommitResult:
        return self._update_record("assets", Asset, "asset", asset_id, changes, touch=True)

    def delete_asset(self, asset_id: str) -> CommitResult:
        return self._delete_record("assets", "asset", asset_id)

    def add_liability(self, name: str, value: Any, type: Any = "other") -> CommitResult:
        return self._add_record(
            "liabilities", Liability, "liability", {"name": name, "value": value, "type": type}
        )

    def update_liability(self, liability_id: str, **changes: Any) -> CommitResult:
        return self._update_record("liabilities", Liability, "liability", liability_id, changes, touch=True)

    def delete_liability(self, liability_id: str) -> CommitResult:
        return self._delete_record("liabilities", "liability", liability_id)

    def add_monthly_entry(self, period: str, income: Any = 0, expenses: Any = 0) -> CommitResult:
        return self._add_record(
            "monthly_entries", MonthlyEntry, "monthly_entry",
            {"period": period, "income": income, "expenses": expenses},
        )

    def update_monthly_entry(self, entry_id: str, **changes: Any) -> CommitResult:
        return self._update_record("monthly_entries", MonthlyEntry, "monthly_entry", entry_id, changes)

    def delete_monthly_entry(self, entry_id: str) -> CommitResult:
        return self._delete_record("monthly_entries", "monthly_entry", entry_id)

    # =========================================================================
    # RESET AND EXPORT
    # =========================================================================

    def reset_to_defaults(self) -> CommitResult:
        """
        Restore the plan defaults, discarding every transaction and installment.

        Irreversible once written.
        """
        self._require_hydrated()
        self._state = build_initial_state(self._plan)
        return self._commit("reset_to_defaults", AuditEventBuilder.state_reset(), entity_id="state")

    def export_document(self) -> ExportDocument:
        """Balances, transactions and installments, tagged with the export time."""
        document = ExportDocument(
            debt_balance=self._state.debt_balance,
            emergency_fund=self._state.emergency_fund,
            land_fund=self._state.land_fund,
            wedding_fund=self._state.wedding_fund,
            lifestyle_cap=self._state.lifestyle_cap,
            installments=[i.model_copy() for i in self._state.installments],
            transactions=[t.model_copy() for t in self._state.transactions],
        )
        self._audit.log(AuditEventBuilder.state_exported(
            transaction_count=len(document.transactions),
            installment_count=len(document.installments),
        ))
        return document

    def export_json(self, indent: int = 2) -> str:
        return json.dumps(self.export_document().model_dump(mode="json"), indent=indent)

    def export_filename(self, today: Optional[date] = None) -> str:
        today = today or datetime.now().date()
        return f"{self._app.export_filename_prefix}-{today.isoformat()}.json"
