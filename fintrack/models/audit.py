"""
Audit Models for FinTrack

Every change to the ledger, and every command the ledger refused, is
recorded as an audit event. This provides:
1. Traceability of what the user did in a session
2. Debugging information when a command is rejected

DESIGN DECISION: Audit events are append-only log lines. They are never
read back by the ledger and never influence its state.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from fintrack.models.record import Budget, BudgetStatus, ExpenseCategory, Expense, Income


class LedgerEventType(str, Enum):
    """
    Types of events we audit.

    One type per observable change, plus the two kinds of refusal.
    """
    # Records
    RECORD_ADDED = "record_added"
    RECORD_MODIFIED = "record_modified"
    RECORD_DELETED = "record_deleted"

    # Budgets
    BUDGET_SET = "budget_set"
    BUDGET_DELETED = "budget_deleted"
    BUDGET_ALERT = "budget_alert"

    # Export
    EXPORT_COMPLETED = "export_completed"
    EXPORT_FAILED = "export_failed"

    # Refusals
    VALIDATION_FAILED = "validation_failed"
    COMMAND_REJECTED = "command_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class LedgerEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: LedgerEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Kind of entity (e.g., 'expense', 'income', 'budget', 'export')"
    )

    # Correlation - ties all events of one command together
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by every event raised while handling one command"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


def _record_details(record) -> dict:
    return {
        "amount": str(record.amount),
        "category": record.category.value,
        "date": record.date.isoformat(),
        "description": record.description,
    }


def _kind(record) -> str:
    if isinstance(record, Expense):
        return "expense"
    if isinstance(record, Income):
        return "income"
    return "record"


class LedgerEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = LedgerEventBuilder.record_added(expense, correlation_id)
        event = LedgerEventBuilder.budget_alert(category, status, spent, limit, cid)
    """

    @staticmethod
    def record_added(record, correlation_id: Optional[UUID] = None) -> LedgerEvent:
        kind = _kind(record)
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_ADDED,
            entity_type=kind,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} added: {record.category.name} {record.amount}",
            details=_record_details(record),
        )

    @staticmethod
    def record_modified(
        position: int,
        old_record,
        new_record,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        kind = _kind(new_record)
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_MODIFIED,
            entity_type=kind,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} at position {position} modified",
            details={
                "position": position,
                "before": _record_details(old_record),
                "after": _record_details(new_record),
            },
        )

    @staticmethod
    def record_deleted(
        position: int,
        record,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        kind = _kind(record)
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_DELETED,
            entity_type=kind,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} at position {position} deleted",
            details={"position": position, **_record_details(record)},
        )

    @staticmethod
    def budget_set(budget: Budget, correlation_id: Optional[UUID] = None) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BUDGET_SET,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Budget set for {budget.category.name}: {budget.limit}",
            details={
                "category": budget.category.value,
                "limit": str(budget.limit),
            },
        )

    @staticmethod
    def budget_deleted(budget: Budget, correlation_id: Optional[UUID] = None) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BUDGET_DELETED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Budget deleted for {budget.category.name}",
            details={"category": budget.category.value},
        )

    @staticmethod
    def budget_alert(
        category: ExpenseCategory,
        status: BudgetStatus,
        total_spent,
        limit,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        state = "over" if status.is_over_budget else "near"
        return LedgerEvent(
            event_type=LedgerEventType.BUDGET_ALERT,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Spending on {category.name} is {state} its budget",
            details={
                "category": category.value,
                "state": state,
                "total_spent": str(total_spent),
                "limit": str(limit),
            },
        )

    @staticmethod
    def export_completed(
        path: str,
        income_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPORT_COMPLETED,
            entity_type="export",
            correlation_id=correlation_id,
            description=f"Exported {income_count} incomes and {expense_count} expenses",
            details={
                "path": path,
                "income_count": income_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def export_failed(
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="export",
            correlation_id=correlation_id,
            description="Export failed",
            error_message=error_message,
            details={"path": path},
        )

    @staticmethod
    def validation_failed(
        command: str,
        message: str,
        issues: Optional[list[dict]] = None,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        issues = issues or []
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="command",
            correlation_id=correlation_id,
            description=f"{command} rejected by validation with {len(issues)} issues",
            error_message=message,
            details={
                "command": command,
                "issues": issues,
            },
        )

    @staticmethod
    def command_rejected(
        command_text: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.COMMAND_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="command",
            correlation_id=correlation_id,
            description="Command could not be carried out",
            error_message=reason,
            details={"input": command_text[:200]},
        )
