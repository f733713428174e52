"""
Abstract Export Interface

DESIGN DECISION: We define an abstract interface for export targets.
This allows us to:
1. Add other formats later without touching the command flow
2. Use an in-memory exporter for testing

The interface is intentionally small: one snapshot of the ledger in,
one written file out.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Sequence, Union

from fintrack.models.record import Expense, Income


class ExportInterface(ABC):
    """
    Abstract interface for ledger exports.

    Any export implementation (CSV, spreadsheet, etc.)
    must implement this method.
    """

    @abstractmethod
    def export(
        self,
        path: Union[str, Path],
        incomes: Sequence[Income],
        expenses: Sequence[Expense],
        total_income: Decimal,
        total_expense: Decimal,
        balance: Decimal,
    ) -> Path:
        """
        Write a snapshot of the ledger.

        Args:
            path: Target file; implementations may normalise it
            incomes: Incomes, newest first
            expenses: Expenses, newest first
            total_income: Sum of all incomes
            total_expense: Sum of all expenses
            balance: total_income - total_expense

        Returns:
            The path actually written

        Raises:
            ExportError: If the target cannot be written
        """
        pass


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ExportError(Exception):
    """Base exception for export errors."""
    pass


class InvalidExportPathError(ExportError):
    """The export target is not a usable file path."""
    pass
