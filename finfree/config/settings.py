"""
Configuration Management for FinFree

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The compiled-in plan numbers (income, debt, fund targets) live in
PlanSettings so a reset always restores the same defaults, and a user
can still override them from the environment or a .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """On-device storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINFREE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    directory: Path = Field(
        default=Path.home() / ".finfree",
        description="Directory holding the persisted state blobs"
    )
    state_key: str = Field(
        default="finfree-storage",
        min_length=1,
        description="Fixed storage name the whole state is kept under"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed write is attempted"
    )

    @field_validator('state_key')
    @classmethod
    def validate_state_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
        return v


class PlanSettings(BaseSettings):
    """
    The user's financial plan.

    These are the defaults a fresh (or reset) state is built from.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINFREE_PLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Income & budget
    monthly_net_income: int = Field(default=109000, ge=0)
    lifestyle_cap: int = Field(default=45000, ge=0)

    # Debt (overdraft)
    initial_debt_balance: int = Field(default=248989, ge=0)
    debt_monthly_rate: float = Field(
        default=0.0124,
        ge=0.0,
        le=1.0,
        description="Monthly interest rate on the debt balance (~15.5% annual)"
    )
    target_debt_payment: int = Field(default=46000, ge=0)
    debt_payoff_start: str = Field(default="2026-02", pattern=r"^\d{4}-\d{2}$")
    debt_payoff_target_date: str = Field(default="2026-07-31")

    # Installment obligation
    installment_name: str = Field(default="Debit Card EMI")
    installment_amount: int = Field(default=18000, gt=0)
    installment_total: int = Field(default=12, gt=0)
    installment_paid: int = Field(default=4, ge=0)
    installment_start: str = Field(default="2025-09", pattern=r"^\d{4}-\d{2}$")
    installment_end: str = Field(default="2026-08", pattern=r"^\d{4}-\d{2}$")

    # Goal targets
    emergency_fund_target: int = Field(
        default=135000,
        ge=0,
        description="Three months of essential expenses"
    )
    land_fund_target: int = Field(default=2500000, ge=0)
    wedding_fund_target: int = Field(default=1500000, ge=0)

    # Lifestyle budget breakdown (category -> monthly budget)
    lifestyle_budget: dict[str, int] = Field(
        default_factory=lambda: {
            "food_groceries": 15000,
            "rent": 15000,
            "transport": 5000,
            "utilities": 3000,
            "phone_internet": 1500,
            "miscellaneous": 5500,
        }
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the structured logger"
    )

    # Display
    currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
    )
    locale: str = Field(default="en-IN")

    # Validation thresholds
    max_transaction_amount: int = Field(
        default=10000000,
        gt=0,
        description="Amounts above this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="Days in the future a transaction may be dated without a warning"
    )

    # Export
    export_filename_prefix: str = Field(
        default="finfree-backup",
        description="Prefix of downloaded backup documents"
    )
    audit_trail_size: int = Field(
        default=200,
        ge=0,
        le=10000,
        description="How many recent audit events are kept in memory"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def plan(self) -> PlanSettings:
        return PlanSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    `<name>_error` entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "plan", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
