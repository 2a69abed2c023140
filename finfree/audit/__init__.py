"""Audit logging package."""

from finfree.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
