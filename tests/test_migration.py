"""Tests for snapshot migration and backfill."""

import json
from decimal import Decimal

import pytest

from finfree.models import (
    CURRENT_SCHEMA_VERSION,
    FinancialState,
    PersistedSnapshot,
    TransactionKind,
)
from finfree.store.defaults import build_initial_state
from finfree.store.migration import (
    SnapshotRejectedError,
    backfill,
    migrate_snapshot,
)


@pytest.fixture
def defaults() -> FinancialState:
    return build_initial_state()


LEGACY_BLOB = {
    "monthlyNetIncome": 109000,
    "currentODBalance": 202989,
    "targetODPayment": 46000,
    "lifestyleCap": 45000,
    "emergencyFund": 0,
    "landFund": 0,
    "weddingFund": 0,
    "hasHydrated": True,
    "monthlyRecords": [],
    "transactions": [
        {
            "id": "t-1",
            "type": "od_payment",
            "amount": 46000,
            "category": "od_payment",
            "description": "OD Payment",
            "date": "2026-02-10T09:00:00.000Z",
            "month": "2026-02",
        },
        {
            "id": "t-2",
            "type": "emi",
            "amount": 18000,
            "category": "emi",
            "date": "2026-02-05T09:00:00.000Z",
            "month": "2026-02",
        },
        {
            "id": "t-3",
            "type": "savings",
            "amount": 5000,
            "category": "emergency_fund",
            "date": "2026-02-06T09:00:00.000Z",
            "month": "2026-02",
        },
    ],
    "goals": [
        {
            "id": "land-fund",
            "name": "Land",
            "targetAmount": 2500000,
            "currentAmount": 0,
            "targetDate": "2027-06-30",
            "startDate": "2026-11-01",
            "monthlyContribution": 25000,
            "isCompleted": False,
        },
    ],
    "emis": [
        {
            "id": "emi-1",
            "name": "Debit Card EMI",
            "amount": 18000,
            "totalInstallments": 12,
            "paidInstallments": 5,
            "startDate": "2025-09-01",
            "endDate": "2026-08-31",
        },
    ],
}


class TestLegacySnapshots:
    """Tests for upgrading version 1 blobs."""

    def test_keys_and_kinds_are_renamed(self, defaults):
        result = migrate_snapshot(json.dumps(LEGACY_BLOB), defaults)

        assert result.from_version == 1
        assert result.migrated
        state = result.state
        assert state.debt_balance == Decimal("202989")
        assert [t.kind for t in state.transactions] == [
            TransactionKind.DEBT_PAYMENT,
            TransactionKind.INSTALLMENT_PAYMENT,
            TransactionKind.SAVINGS_CONTRIBUTION,
        ]
        assert state.transactions[0].category == "debt_payment"
        assert state.transactions[0].period == "2026-02"

    def test_goals_are_renamed(self, defaults):
        state = migrate_snapshot(json.dumps(LEGACY_BLOB), defaults).state
        assert state.goals[0].target_amount == Decimal("2500000")
        assert state.goals[0].monthly_contribution == Decimal("25000")

    def test_installment_dates_become_periods(self, defaults):
        state = migrate_snapshot(json.dumps(LEGACY_BLOB), defaults).state
        installment = state.installments[0]
        assert installment.start_period == "2025-09"
        assert installment.end_period == "2026-08"
        assert installment.paid_installments == 5

    def test_missing_fields_are_backfilled(self, defaults):
        result = migrate_snapshot(json.dumps(LEGACY_BLOB), defaults)
        assert "settings" in result.backfilled
        assert "assets" in result.backfilled
        assert result.state.settings.debt_monthly_rate == pytest.approx(0.0124)

    def test_net_worth_records_are_renamed(self, defaults):
        blob = {
            "version": 0,
            "state": {
                "assets": [{
                    "id": "a-1",
                    "name": "Index fund",
                    "type": "stocks",
                    "value": 150000,
                    "lastUpdated": "2026-01-15T10:00:00.000Z",
                }],
                "liabilities": [{
                    "id": "l-1",
                    "name": "Card",
                    "type": "credit_card",
                    "value": 8000,
                    "lastUpdated": "2026-01-20T10:00:00.000Z",
                }],
                "monthlyEntries": [
                    {"id": "m-1", "month": "2026-01", "income": 109000, "expenses": 52000},
                ],
            },
        }

        state = migrate_snapshot(json.dumps(blob), defaults).state

        assert state.monthly_entries[0].period == "2026-01"
        assert state.monthly_entries[0].expenses == Decimal("52000")
        assert state.assets[0].last_updated.isoformat().startswith("2026-01-15T10:00")
        assert state.liabilities[0].last_updated.day == 20

    def test_legacy_settings_are_kept(self, defaults):
        blob = {
            "state": {
                "settings": {
                    "currency": "USD",
                    "locale": "en-US",
                    "withdrawalRate": 0.03,
                    "expectedReturn": 0.06,
                    "currentAge": 34,
                    "targetRetirementAge": 50,
                },
            },
        }

        result = migrate_snapshot(json.dumps(blob), defaults)

        settings = result.state.settings
        assert settings.withdrawal_rate == pytest.approx(0.03)
        assert settings.expected_return == pytest.approx(0.06)
        assert settings.current_age == 34
        assert settings.target_retirement_age == 50
        assert settings.currency == "USD"
        # Fields the legacy app never had come from the plan
        assert settings.debt_monthly_rate == pytest.approx(0.0124)
        assert "settings.debt_monthly_rate" in result.backfilled
        assert "settings" not in result.backfilled

    def test_bare_state_without_version_is_legacy(self, defaults):
        result = migrate_snapshot(json.dumps({"currentODBalance": 1000}), defaults)
        assert result.from_version == 1
        assert result.state.debt_balance == Decimal("1000")
        assert result.state.goals == defaults.goals

    def test_version_zero_is_treated_as_one(self, defaults):
        blob = {"version": 0, "state": {"currentODBalance": 1000}}
        assert migrate_snapshot(json.dumps(blob), defaults).from_version == 1


class TestCurrentSnapshots:
    def test_current_snapshot_round_trips(self, defaults):
        defaults.emergency_fund = Decimal("12345.50")
        raw = PersistedSnapshot(state=defaults).model_dump_json()

        result = migrate_snapshot(raw, build_initial_state())

        assert result.from_version == CURRENT_SCHEMA_VERSION
        assert not result.migrated
        assert result.state == defaults

    def test_null_field_is_backfilled(self, defaults):
        document = json.loads(PersistedSnapshot(state=defaults).model_dump_json())
        document["state"]["lifestyle_cap"] = None

        result = migrate_snapshot(json.dumps(document), defaults)

        assert result.backfilled == ["lifestyle_cap"]
        assert result.migrated
        assert result.state.lifestyle_cap == Decimal("45000")


class TestRejection:
    """Tests for blobs that cannot be recovered."""

    def test_not_json(self, defaults):
        with pytest.raises(SnapshotRejectedError, match="not valid JSON"):
            migrate_snapshot("{{{", defaults)

    def test_not_an_object(self, defaults):
        with pytest.raises(SnapshotRejectedError, match="JSON object, got list"):
            migrate_snapshot("[1, 2]", defaults)

    def test_future_version(self, defaults):
        with pytest.raises(SnapshotRejectedError, match="newer than supported"):
            migrate_snapshot(json.dumps({"version": 3, "state": {}}), defaults)

    def test_non_numeric_version(self, defaults):
        with pytest.raises(SnapshotRejectedError, match="not a number"):
            migrate_snapshot(json.dumps({"version": "two", "state": {}}), defaults)

    def test_invalid_values(self, defaults):
        blob = {"version": 2, "state": {"debt_balance": -5}}
        with pytest.raises(SnapshotRejectedError, match="failed validation"):
            migrate_snapshot(json.dumps(blob), defaults)


class TestBackfill:
    def test_unknown_keys_are_dropped(self, defaults):
        merged, _ = backfill({"debt_balance": 10, "theme": "dark"}, defaults)
        assert "theme" not in merged
        assert merged["debt_balance"] == 10

    def test_reports_filled_fields_in_order(self, defaults):
        _, filled = backfill({"debt_balance": 10}, defaults, known_fields={"debt_balance", "land_fund", "emergency_fund"})
        assert filled == ["emergency_fund", "land_fund"]

    def test_partial_settings_are_filled_per_key(self, defaults):
        merged, filled = backfill({"settings": {"current_age": 41, "theme": "dark"}}, defaults)

        assert merged["settings"]["current_age"] == 41
        assert "theme" not in merged["settings"]
        assert merged["settings"]["withdrawal_rate"] == defaults.settings.withdrawal_rate
        assert "settings.withdrawal_rate" in filled
        assert "settings.current_age" not in filled

    def test_schema_version_is_not_reported(self, defaults):
        _, filled = backfill({}, defaults)
        assert "schema_version" not in filled
