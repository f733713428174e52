"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged, and so is every
refusal. This provides:
1. Traceability of a session
2. Debugging capability

The audit logger:
- Writes through structlog into stdlib logging on stderr, so log lines
  never interleave with what the console prints on stdout
- Never raises back into the command flow
- Supports correlation IDs to tie together the events of one command
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from fintrack.models.audit import AuditSeverity, LedgerEvent


def configure_logging(level: str = "WARNING", json: bool = False) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: minimum level name (e.g. "INFO")
        json: render JSON lines instead of console key/value output
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs each LedgerEvent at the level matching its severity.
    """

    def __init__(self, logger=None, error_logger=None):
        """
        Initialize audit logger.

        Args:
            logger: structlog logger to write to.
                    If None, uses the "fintrack.audit" logger.
            error_logger: where failures to write are reported.
                    If None, uses the "fintrack.audit.errors" logger.
        """
        self._logger = logger or structlog.get_logger("fintrack.audit")
        self._error_logger = error_logger or structlog.get_logger("fintrack.audit.errors")
        self._events_logged = 0

    @property
    def events_logged(self) -> int:
        return self._events_logged

    def log(self, event: LedgerEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written. A failure to write is
        reported on the error channel instead of being raised.
        """
        log_dict = event.to_log_dict()

        try:
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
            self._error_logger.error(
                "audit_logging_failed",
                error=str(e),
                event_id=str(event.event_id),
                event_type=event.event_type.value,
            )
            return False

        self._events_logged += 1
        return True


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of each user command.
    Pass it to every event raised while handling that command.
    """
    return uuid4()
