"""
Two-Stage Input Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Numeric parsing of amounts and counts
- Format validation (kinds, YYYY-MM periods, timestamps)
- This catches empty or malformed form input

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Absurd amount detection
- Contributions that will not reach any fund
- This catches input that is well-formed but probably wrong

Stage 2 only runs when stage 1 passes.

IMPORTANT: Validators NEVER raise and NEVER fix input.
They report issues; the store refuses to mutate on any error.
"""

import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from finfree.config import AppSettings, get_settings
from finfree.models.ledger import (
    PERIOD_PATTERN,
    FundName,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
)

_CURRENCY_NOISE = re.compile(r"[,\s₹$]")


def parse_amount(raw: Any) -> Optional[Decimal]:
    """
    Parse a user-entered amount.

    Accepts numbers and strings with thousands separators or a currency
    sign ("₹1,25,000"). Returns None for anything that is not a finite
    number; bools are not amounts.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    elif isinstance(raw, str):
        cleaned = _CURRENCY_NOISE.sub("", raw)
        if not cleaned:
            return None
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None
    else:
        return None
    return value if value.is_finite() else None


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Accept a datetime, a date, or an ISO-8601 string."""
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if isinstance(raw, str) and raw.strip():
        try:
            return datetime.fromisoformat(raw.strip())
        except ValueError:
            return None
    return None


def _parse_count(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    value = parse_amount(raw)
    if value is None or value != value.to_integral_value():
        return None
    return int(value)


def _is_period(value: Any) -> bool:
    return isinstance(value, str) and re.match(PERIOD_PATTERN, value) is not None


class _Validator:
    """Shared result assembly and summaries."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _result(self, issues: list[ValidationIssue]) -> ValidationResult:
        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
            warnings=[issue.message for issue in issues if issue.severity == "warning"],
        )

    def _check_amount(
        self,
        raw: Any,
        field: str = "amount",
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, [ValidationIssue(
                field=field,
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter how much money moved",
            )]

        amount = parse_amount(raw)
        if amount is None:
            return None, [ValidationIssue(
                field=field,
                issue_type="not_numeric",
                message=f"Amount {raw!r} is not a number",
                severity="error",
                suggested_fix="Use digits only, e.g. 12500",
            )]

        if amount <= 0:
            return amount, [ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Record outflows with an expense or payment kind instead of a negative amount",
            )]

        return amount, []

    def _check_amount_range(self, amount: Decimal, field: str = "amount") -> list[ValidationIssue]:
        issues = []
        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if amount > max_amount:
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))
        if amount < Decimal("1"):
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"Amount ({amount}) seems unusually low",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))
        return issues

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the form shows under the submit button.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if result.has_errors:
            lines.append("❌ Some details need fixing:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        lines.append("")
        if result.is_valid:
            lines.append("You can still save, but please double-check.")
        else:
            lines.append("Please fix the issues above before saving.")

        return "\n".join(lines)


class TransactionValidator(_Validator):
    """
    Validates raw transaction input.

    Expected keys: amount, kind, and optionally category, description
    and timestamp.
    """

    def _validate_schema(self, data: Mapping[str, Any]) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        _, issues = self._check_amount(data.get("amount"))

        kind = data.get("kind")
        if kind is None or kind == "":
            issues.append(ValidationIssue(
                field="kind",
                issue_type="missing",
                message="Transaction kind is required",
                severity="error",
                suggested_fix="Choose income, expense, debt payment, installment payment or savings",
            ))
        else:
            try:
                TransactionKind(kind)
            except ValueError:
                issues.append(ValidationIssue(
                    field="kind",
                    issue_type="invalid_value",
                    message=f"Unknown transaction kind {kind!r}",
                    severity="error",
                    suggested_fix=f"Use one of: {', '.join(k.value for k in TransactionKind)}",
                ))

        raw_timestamp = data.get("timestamp")
        if raw_timestamp is not None and parse_timestamp(raw_timestamp) is None:
            issues.append(ValidationIssue(
                field="timestamp",
                issue_type="invalid_format",
                message=f"Date {raw_timestamp!r} could not be read",
                severity="error",
                suggested_fix="Use YYYY-MM-DD",
            ))

        category = data.get("category") or ""
        if len(str(category)) > 100:
            issues.append(ValidationIssue(
                field="category",
                issue_type="too_long",
                message="Category must be at most 100 characters",
                severity="error",
            ))

        description = data.get("description") or ""
        if len(str(description)) > 500:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message="Description must be at most 500 characters",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        data: Mapping[str, Any],
        today: date,
    ) -> list[ValidationIssue]:
        """Stage 2: checks on well-formed input. Only warnings come out of here."""
        issues = self._check_amount_range(parse_amount(data["amount"]))

        timestamp = parse_timestamp(data.get("timestamp"))
        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if timestamp is not None and timestamp.date() > max_future_date:
            issues.append(ValidationIssue(
                field="timestamp",
                issue_type="future_date",
                message=f"Date ({timestamp.date()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        kind = TransactionKind(data["kind"])
        category = data.get("category") or ""
        if kind == TransactionKind.SAVINGS_CONTRIBUTION and category:
            if category not in {fund.value for fund in FundName}:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="no_fund",
                    message=f"Savings tagged {category!r} will not be added to any fund",
                    severity="warning",
                    suggested_fix="Tag it emergency_fund, land_fund or wedding_fund to update a fund",
                ))

        return issues

    def validate(self, data: Mapping[str, Any], today: Optional[date] = None) -> ValidationResult:
        """
        Run the two-stage pipeline.

        Args:
            data: Raw input, as typed into the form
            today: Reference date for the future-date check

        Returns:
            ValidationResult with all issues found
        """
        schema_valid, issues = self._validate_schema(data)
        if schema_valid:
            issues.extend(self._validate_semantic(data, today or date.today()))
        return self._result(issues)


class InstallmentValidator(_Validator):
    """
    Validates raw installment input.

    Expected keys: name, amount, total_installments, paid_installments,
    start_period and end_period.
    """

    def validate(self, data: Mapping[str, Any]) -> ValidationResult:
        issues = []

        name = str(data.get("name") or "").strip()
        if not name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Installment name is required",
                severity="error",
                suggested_fix="e.g. Phone EMI",
            ))

        amount, amount_issues = self._check_amount(data.get("amount"))
        issues.extend(amount_issues)

        total = _parse_count(data.get("total_installments"))
        if total is None or total <= 0:
            issues.append(ValidationIssue(
                field="total_installments",
                issue_type="invalid_value",
                message="Number of installments must be a whole number above zero",
                severity="error",
            ))

        paid = _parse_count(data.get("paid_installments", 0))
        if paid is None or paid < 0:
            issues.append(ValidationIssue(
                field="paid_installments",
                issue_type="invalid_value",
                message="Installments paid must be a whole number, zero or more",
                severity="error",
            ))
        elif total is not None and total > 0 and paid > total:
            issues.append(ValidationIssue(
                field="paid_installments",
                issue_type="inconsistent",
                message=f"Paid installments ({paid}) exceed the total ({total})",
                severity="error",
            ))
        elif total is not None and total > 0 and paid == total:
            issues.append(ValidationIssue(
                field="paid_installments",
                issue_type="complete",
                message="This installment is already fully paid",
                severity="warning",
            ))

        start = data.get("start_period")
        end = data.get("end_period")
        for field, value in (("start_period", start), ("end_period", end)):
            if not _is_period(value):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_format",
                    message=f"{field.replace('_', ' ').capitalize()} must be YYYY-MM",
                    severity="error",
                    suggested_fix="e.g. 2026-02",
                ))
        if _is_period(start) and _is_period(end) and end < start:
            issues.append(ValidationIssue(
                field="end_period",
                issue_type="inconsistent",
                message="End period is before start period",
                severity="error",
            ))

        if amount is not None and amount > 0:
            issues.extend(self._check_amount_range(amount))

        return self._result(issues)
