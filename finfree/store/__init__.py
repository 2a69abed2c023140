"""
Local State Store

Owns the FinancialState, persists it after every mutation and loads
(and migrates) it on startup.
"""

from finfree.store.defaults import build_initial_state
from finfree.store.financial_store import FinancialStore, StoreNotHydratedError
from finfree.store.migration import MigrationResult, SnapshotRejectedError, migrate_snapshot

__all__ = [
    "FinancialStore",
    "MigrationResult",
    "SnapshotRejectedError",
    "StoreNotHydratedError",
    "build_initial_state",
    "migrate_snapshot",
]
