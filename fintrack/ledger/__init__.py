"""Ledger package: ordered collections, budgets and the finance manager."""

from fintrack.errors import (
    BudgetNotFoundError,
    IndexOutOfRangeError,
    InvalidElementError,
    LedgerError,
    UnsupportedMutationError,
    ValidationFailedError,
)
from fintrack.ledger.budget import DEFAULT_NEAR_RATIO, BudgetEvaluator, evaluate_budget
from fintrack.ledger.collection import ReadOnlyView, ReverseChronoList
from fintrack.ledger.manager import FinanceManager
from fintrack.ledger.record_lists import ExpenseList, IncomeList

__all__ = [
    "BudgetEvaluator",
    "BudgetNotFoundError",
    "DEFAULT_NEAR_RATIO",
    "ExpenseList",
    "FinanceManager",
    "IncomeList",
    "IndexOutOfRangeError",
    "InvalidElementError",
    "LedgerError",
    "ReadOnlyView",
    "ReverseChronoList",
    "UnsupportedMutationError",
    "ValidationFailedError",
    "evaluate_budget",
]
