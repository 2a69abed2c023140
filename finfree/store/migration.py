"""
Snapshot Migration

DESIGN DECISION: A persisted snapshot is never trusted as-is.
Loading goes through four steps:

1. PARSE: text -> JSON object, or reject
2. UNWRAP: find the state and its schema version in the envelope
3. UPGRADE: map legacy keys and kind names to the current names
4. BACKFILL: any field still missing takes its default value

Only then is the result validated into a FinancialState. A snapshot
that fails any step raises SnapshotRejectedError; the store falls
back to defaults and keeps the rejected blob aside.
"""

import json
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from finfree.models.state import CURRENT_SCHEMA_VERSION, FinancialState, UserSettings

# Version 1 blobs were written by the camelCase ledger app
LEGACY_STATE_KEYS = {
    "monthlyNetIncome": "monthly_net_income",
    "currentODBalance": "debt_balance",
    "targetODPayment": "target_debt_payment",
    "lifestyleCap": "lifestyle_cap",
    "emergencyFund": "emergency_fund",
    "landFund": "land_fund",
    "weddingFund": "wedding_fund",
    "monthlyRecords": "monthly_records",
    "emis": "installments",
    "monthlyEntries": "monthly_entries",
}

LEGACY_TRANSACTION_KEYS = {
    "type": "kind",
    "date": "timestamp",
    "month": "period",
}

LEGACY_TRANSACTION_KINDS = {
    "od_payment": "debt_payment",
    "emi": "installment_payment",
    "savings": "savings_contribution",
}

LEGACY_GOAL_KEYS = {
    "targetAmount": "target_amount",
    "currentAmount": "current_amount",
    "targetDate": "target_date",
    "startDate": "start_date",
    "monthlyContribution": "monthly_contribution",
}

LEGACY_INSTALLMENT_KEYS = {
    "totalInstallments": "total_installments",
    "paidInstallments": "paid_installments",
    "startDate": "start_period",
    "endDate": "end_period",
}

LEGACY_SETTINGS_KEYS = {
    "withdrawalRate": "withdrawal_rate",
    "expectedReturn": "expected_return",
    "currentAge": "current_age",
    "targetRetirementAge": "target_retirement_age",
}

# Assets and liabilities
LEGACY_HOLDING_KEYS = {
    "lastUpdated": "last_updated",
}

LEGACY_ENTRY_KEYS = {
    "month": "period",
}

# Fields that used to be stored but are now derived or gone
DROPPED_KEYS = {
    "monthly_records",
    "emiRemaining",
    "emiAmount",
    "emiEndDate",
    "hasHydrated",
    "isCompleted",
}


class SnapshotRejectedError(Exception):
    """A persisted snapshot could not be turned into a valid state."""
    pass


class MigrationResult(BaseModel):
    state: FinancialState
    from_version: int
    backfilled: list[str] = Field(default_factory=list)

    @property
    def migrated(self) -> bool:
        return self.from_version != CURRENT_SCHEMA_VERSION or bool(self.backfilled)


def _rename(record: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    renamed = {}
    for key, value in record.items():
        if key in DROPPED_KEYS:
            continue
        renamed[mapping.get(key, key)] = value
    return renamed


def _upgrade_transaction(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    txn = _rename(raw, LEGACY_TRANSACTION_KEYS)
    kind = txn.get("kind")
    if kind in LEGACY_TRANSACTION_KINDS:
        txn["kind"] = LEGACY_TRANSACTION_KINDS[kind]
    # Categories that were named after a legacy kind follow the rename
    if txn.get("category") in LEGACY_TRANSACTION_KINDS:
        txn["category"] = LEGACY_TRANSACTION_KINDS[txn["category"]]
    return txn


def _upgrade_installment(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    installment = _rename(raw, LEGACY_INSTALLMENT_KEYS)
    for key in ("start_period", "end_period"):
        value = installment.get(key)
        # Full ISO dates become their YYYY-MM period
        if isinstance(value, str) and len(value) > 7:
            installment[key] = value[:7]
    return installment


def _rename_each(records: Any, mapping: dict[str, str]) -> Any:
    if not isinstance(records, list):
        return records
    return [_rename(r, mapping) if isinstance(r, dict) else r for r in records]


def _upgrade_legacy_state(raw_state: dict[str, Any]) -> dict[str, Any]:
    state = _rename(raw_state, LEGACY_STATE_KEYS)
    if isinstance(state.get("transactions"), list):
        state["transactions"] = [_upgrade_transaction(t) for t in state["transactions"]]
    if isinstance(state.get("installments"), list):
        state["installments"] = [_upgrade_installment(i) for i in state["installments"]]
    for key, mapping in (
        ("goals", LEGACY_GOAL_KEYS),
        ("assets", LEGACY_HOLDING_KEYS),
        ("liabilities", LEGACY_HOLDING_KEYS),
        ("monthly_entries", LEGACY_ENTRY_KEYS),
    ):
        if key in state:
            state[key] = _rename_each(state[key], mapping)
    if isinstance(state.get("settings"), dict):
        state["settings"] = _rename(state["settings"], LEGACY_SETTINGS_KEYS)
    return state


def _unwrap(document: dict[str, Any]) -> tuple[int, dict[str, Any]]:
    """Find the schema version and the raw state in a persisted document."""
    if isinstance(document.get("state"), dict):
        raw_state = document["state"]
        version = document.get("version", raw_state.get("schema_version", 1))
    else:
        # A bare state object, as written before the envelope existed
        raw_state = document
        version = document.get("schema_version", 1)

    if isinstance(version, bool) or not isinstance(version, int):
        raise SnapshotRejectedError(f"Snapshot version is not a number: {version!r}")
    return max(version, 1), raw_state


def migrate_snapshot(raw: str, defaults: FinancialState) -> MigrationResult:
    """
    Turn persisted text into a current FinancialState.

    Args:
        raw: The blob as read from storage
        defaults: State whose values fill every missing field

    Raises:
        SnapshotRejectedError: If the blob cannot be recovered
    """
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SnapshotRejectedError(f"Snapshot is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise SnapshotRejectedError(
            f"Snapshot must be a JSON object, got {type(document).__name__}"
        )

    version, raw_state = _unwrap(document)
    if version > CURRENT_SCHEMA_VERSION:
        raise SnapshotRejectedError(
            f"Snapshot version {version} is newer than supported version {CURRENT_SCHEMA_VERSION}"
        )

    if version < CURRENT_SCHEMA_VERSION:
        raw_state = _upgrade_legacy_state(raw_state)

    merged, backfilled = backfill(raw_state, defaults)
    merged["schema_version"] = CURRENT_SCHEMA_VERSION

    try:
        state = FinancialState.model_validate(merged)
    except ValidationError as e:
        raise SnapshotRejectedError(
            f"Snapshot failed validation with {e.error_count()} errors: {e}"
        ) from e

    return MigrationResult(state=state, from_version=version, backfilled=backfilled)


def backfill(
    raw_state: dict[str, Any],
    defaults: FinancialState,
    known_fields: Optional[set[str]] = None,
) -> tuple[dict[str, Any], list[str]]:
    """
    Fill every missing top-level field from defaults.

    Unknown keys are dropped. Settings are filled key by key, so a
    partial settings object keeps what it has. Returns the merged dict
    and the names of the fields that were filled in.
    """
    known_fields = known_fields or set(FinancialState.model_fields)
    default_values = defaults.model_dump(mode="json")

    merged = {key: value for key, value in raw_state.items() if key in known_fields}
    backfilled = []
    for key in sorted(known_fields):
        if key == "schema_version":
            continue
        if merged.get(key) is None:
            merged[key] = default_values[key]
            backfilled.append(key)

    settings = merged.get("settings")
    if "settings" in known_fields and isinstance(settings, dict):
        settings = {k: v for k, v in settings.items() if k in UserSettings.model_fields}
        for key, value in default_values["settings"].items():
            if settings.get(key) is None:
                settings[key] = value
                backfilled.append(f"settings.{key}")
        merged["settings"] = settings
    return merged, backfilled
