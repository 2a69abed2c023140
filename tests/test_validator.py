"""
Tests for two-stage input validation.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from finfree.config import AppSettings
from finfree.validation import (
    InstallmentValidator,
    TransactionValidator,
    parse_amount,
    parse_timestamp,
)

TODAY = date(2026, 2, 10)


def issue_types(result):
    return [issue.issue_type for issue in result.issues]


class TestParseAmount:
    """Tests for amount parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (1200, Decimal("1200")),
            (12.5, Decimal("12.5")),
            ("1,25,000", Decimal("125000")),
            ("₹ 46,000", Decimal("46000")),
            ("$99.99", Decimal("99.99")),
            (Decimal("7"), Decimal("7")),
            ("-300", Decimal("-300")),
        ],
    )
    def test_parses(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", True, "NaN", "Infinity", float("inf"), [1]])
    def test_rejects(self, raw):
        assert parse_amount(raw) is None


class TestParseTimestamp:
    def test_iso_string(self):
        assert parse_timestamp("2026-02-10") == datetime(2026, 2, 10)

    def test_date(self):
        assert parse_timestamp(date(2026, 2, 10)) == datetime(2026, 2, 10)

    def test_datetime_passes_through(self):
        moment = datetime(2026, 2, 10, 9, 30, tzinfo=timezone.utc)
        assert parse_timestamp(moment) is moment

    def test_garbage(self):
        assert parse_timestamp("next tuesday") is None
        assert parse_timestamp(None) is None


class TestTransactionValidator:
    """Tests for transaction input."""

    @pytest.fixture
    def validator(self):
        return TransactionValidator(AppSettings())

    def test_valid_input(self, validator):
        result = validator.validate(
            {"amount": "1200", "kind": "expense", "category": "transport", "timestamp": "2026-02-09"},
            today=TODAY,
        )
        assert result.is_valid
        assert result.issues == []

    def test_missing_amount(self, validator):
        result = validator.validate({"amount": " ", "kind": "expense"}, today=TODAY)
        assert not result.is_valid
        assert issue_types(result) == ["missing"]

    def test_zero_amount(self, validator):
        result = validator.validate({"amount": 0, "kind": "expense"}, today=TODAY)
        assert issue_types(result) == ["invalid_value"]

    def test_negative_amount(self, validator):
        result = validator.validate({"amount": -50, "kind": "expense"}, today=TODAY)
        assert not result.is_valid

    def test_missing_and_unknown_kind(self, validator):
        assert issue_types(validator.validate({"amount": 1}, today=TODAY)) == ["missing"]
        assert issue_types(validator.validate({"amount": 1, "kind": "gift"}, today=TODAY)) == ["invalid_value"]

    def test_unreadable_timestamp(self, validator):
        result = validator.validate(
            {"amount": 1, "kind": "expense", "timestamp": "31/02/2026"}, today=TODAY,
        )
        assert issue_types(result) == ["invalid_format"]

    def test_long_text(self, validator):
        result = validator.validate(
            {"amount": 1, "kind": "expense", "category": "x" * 101, "description": "y" * 501},
            today=TODAY,
        )
        assert issue_types(result) == ["too_long", "too_long"]

    def test_errors_collected_together(self, validator):
        result = validator.validate({"amount": "abc", "kind": "gift"}, today=TODAY)
        assert result.error_count == 2

    def test_semantic_stage_skipped_on_errors(self, validator):
        result = validator.validate(
            {"amount": 0, "kind": "expense", "timestamp": "2030-01-01"}, today=TODAY,
        )
        assert "future_date" not in issue_types(result)

    def test_future_date_warns(self, validator):
        result = validator.validate(
            {"amount": 1200, "kind": "expense", "timestamp": "2026-02-20"}, today=TODAY,
        )
        assert result.is_valid
        assert issue_types(result) == ["future_date"]
        assert len(result.warnings) == 1

    def test_tomorrow_is_tolerated(self, validator):
        result = validator.validate(
            {"amount": 1200, "kind": "expense", "timestamp": "2026-02-11"}, today=TODAY,
        )
        assert result.issues == []

    def test_absurd_amount_warns(self):
        validator = TransactionValidator(AppSettings(max_transaction_amount=100000))
        result = validator.validate({"amount": 250000, "kind": "income"}, today=TODAY)
        assert result.is_valid
        assert issue_types(result) == ["suspicious_value"]

    def test_tiny_amount_warns(self, validator):
        result = validator.validate({"amount": "0.5", "kind": "expense"}, today=TODAY)
        assert issue_types(result) == ["suspicious_value"]

    def test_savings_without_fund_warns(self, validator):
        result = validator.validate(
            {"amount": 5000, "kind": "savings_contribution", "category": "vacation"}, today=TODAY,
        )
        assert result.is_valid
        assert issue_types(result) == ["no_fund"]

    def test_savings_into_fund(self, validator):
        result = validator.validate(
            {"amount": 5000, "kind": "savings_contribution", "category": "land_fund"}, today=TODAY,
        )
        assert result.issues == []

    def test_summary_all_passed(self, validator):
        result = validator.validate({"amount": 1, "kind": "expense"}, today=TODAY)
        assert validator.get_user_friendly_summary(result) == "✅ All checks passed!"

    def test_summary_lists_errors_and_fixes(self, validator):
        result = validator.validate({"amount": "abc", "kind": "expense"}, today=TODAY)
        summary = validator.get_user_friendly_summary(result)
        assert "is not a number" in summary
        assert "Use digits only" in summary
        assert summary.endswith("Please fix the issues above before saving.")

    def test_summary_warnings_only(self, validator):
        result = validator.validate(
            {"amount": 1200, "kind": "expense", "timestamp": "2026-03-20"}, today=TODAY,
        )
        summary = validator.get_user_friendly_summary(result)
        assert "Please verify the following" in summary
        assert summary.endswith("You can still save, but please double-check.")


class TestInstallmentValidator:
    """Tests for installment input."""

    @pytest.fixture
    def validator(self):
        return InstallmentValidator(AppSettings())

    @pytest.fixture
    def data(self):
        return {
            "name": "Phone EMI",
            "amount": "3000",
            "total_installments": 6,
            "paid_installments": 0,
            "start_period": "2026-01",
            "end_period": "2026-06",
        }

    def test_valid(self, validator, data):
        result = validator.validate(data)
        assert result.is_valid
        assert result.issues == []

    def test_blank_name(self, validator, data):
        data["name"] = "  "
        assert issue_types(validator.validate(data)) == ["missing"]

    @pytest.mark.parametrize("total", [0, -1, "six", 2.5, None])
    def test_bad_total(self, validator, data, total):
        data["total_installments"] = total
        result = validator.validate(data)
        assert not result.is_valid
        assert result.issues[0].field == "total_installments"

    def test_paid_exceeds_total(self, validator, data):
        data["paid_installments"] = 7
        assert issue_types(validator.validate(data)) == ["inconsistent"]

    def test_negative_paid(self, validator, data):
        data["paid_installments"] = -1
        assert not validator.validate(data).is_valid

    def test_fully_paid_warns(self, validator, data):
        data["paid_installments"] = 6
        result = validator.validate(data)
        assert result.is_valid
        assert issue_types(result) == ["complete"]

    def test_bad_period_format(self, validator, data):
        data["start_period"] = "2026-1"
        result = validator.validate(data)
        assert issue_types(result) == ["invalid_format"]

    def test_end_before_start(self, validator, data):
        data["start_period"] = "2026-06"
        data["end_period"] = "2026-01"
        assert issue_types(validator.validate(data)) == ["inconsistent"]

    def test_string_counts_accepted(self, validator, data):
        data["total_installments"] = "6"
        data["paid_installments"] = "2"
        assert validator.validate(data).is_valid
