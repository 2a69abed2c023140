"""Input validation for the store's actions."""

from finfree.validation.validator import (
    InstallmentValidator,
    TransactionValidator,
    parse_amount,
    parse_timestamp,
)

__all__ = [
    "InstallmentValidator",
    "TransactionValidator",
    "parse_amount",
    "parse_timestamp",
]
