"""Shared fixtures: settings isolated from the environment, in-memory storage, a hydrated store."""

from datetime import datetime, timezone

import pytest

from finfree.audit import AuditLogger
from finfree.config import PlanSettings, get_settings
from finfree.services.storage import InMemoryStorage
from finfree.store import FinancialStore


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point storage at a temp dir and drop cached settings around each test."""
    monkeypatch.setenv("FINFREE_STORAGE_DIRECTORY", str(tmp_path / "state"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def plan() -> PlanSettings:
    return PlanSettings()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger(trail_size=50)


@pytest.fixture
def store(storage, settings, audit_logger) -> FinancialStore:
    store = FinancialStore(storage, settings=settings, audit_logger=audit_logger)
    store.hydrate()
    return store


@pytest.fixture
def feb_2026() -> datetime:
    return datetime(2026, 2, 10, 9, 30, tzinfo=timezone.utc)
