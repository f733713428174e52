"""
Data Models Package

This package contains all Pydantic models used in FinTrack.
All data flowing through the ledger must conform to these schemas.
"""

from fintrack.models.record import (
    AddOutcome,
    Budget,
    BudgetStatus,
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    ModifyOutcome,
    Record,
    RecordPatch,
    ValidationIssue,
    YearMonth,
)
from fintrack.models.audit import (
    AuditSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Record models
    "AddOutcome",
    "Budget",
    "BudgetStatus",
    "Expense",
    "ExpenseCategory",
    "Income",
    "IncomeCategory",
    "ModifyOutcome",
    "Record",
    "RecordPatch",
    "ValidationIssue",
    "YearMonth",
    # Audit models
    "AuditSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
