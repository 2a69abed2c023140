"""
Audit Logger

DESIGN DECISION: Every store mutation is logged.
This provides:
1. Traceability of every change to the financial state
2. Debugging capability when a write fails
3. A recent-activity trail the UI can show

The audit logger:
- Is synchronous, like the store that calls it
- Gracefully handles failures (a logging error never fails a mutation)
- Keeps a bounded in-memory trail instead of a persistent log
"""

import logging
from collections import deque
from typing import Optional

import structlog

from finfree.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at the given level."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=numeric_level)
    logging.getLogger().setLevel(numeric_level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory trail (for the activity view)
    """

    def __init__(self, trail_size: int = 200):
        """
        Initialize audit logger.

        Args:
            trail_size: How many recent events to keep. 0 keeps none.
        """
        self._trail: deque[AuditEvent] = deque(maxlen=trail_size)
        self._logger = structlog.get_logger()

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be logged; never raises.
        """
        try:
            log_dict = event.to_log_dict()

            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).error("audit_logging_failed: %s", e)
            return False
        finally:
            self._trail.append(event)

        return True

    def recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """Most recent events first."""
        events = list(reversed(self._trail))
        return events if limit is None else events[:limit]

    def clear(self) -> None:
        self._trail.clear()

    def log_validation_failed(self, action: str, issues: list[dict]) -> None:
        """Log an action refused because its input did not validate."""
        self.log(AuditEventBuilder.validation_failed(action=action, issues=issues))

    def log_commit_failed(self, action: str, error_message: str) -> None:
        """Log a state write that did not land."""
        self.log(AuditEventBuilder.commit_failed(action=action, error_message=error_message))

    def log_snapshot_rejected(self, reason: str, backup_key: Optional[str]) -> None:
        """Log a persisted snapshot that could not be loaded."""
        self.log(AuditEventBuilder.snapshot_rejected(reason=reason, backup_key=backup_key))
