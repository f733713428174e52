"""
Expense and income lists.

Thin wiring of ReverseChronoList to a record type: ordered by the
record's date, validated by a RecordValidator for that type.
"""

from operator import attrgetter
from typing import Optional

from fintrack.ledger.collection import ReverseChronoList
from fintrack.models.record import Expense, Income
from fintrack.validation import RecordValidator


_by_date = attrgetter("date")


class ExpenseList(ReverseChronoList[Expense]):
    """Expenses, newest first."""

    def __init__(self, validator: Optional[RecordValidator] = None):
        super().__init__(_by_date, validator or RecordValidator(Expense))


class IncomeList(ReverseChronoList[Income]):
    """Incomes, newest first."""

    def __init__(self, validator: Optional[RecordValidator] = None):
        super().__init__(_by_date, validator or RecordValidator(Income))
