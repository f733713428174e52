"""
Summary Query Engine

DESIGN DECISION: Summaries are computed on demand from the live ledger.
Nothing is cached between commands, so a summary can never disagree
with the list it summarises.

Every query returns a SummaryResult. A query that cannot be answered
comes back as success=False with an error_message; it never raises.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from fintrack.ledger import FinanceManager
from fintrack.models.record import YearMonth


class SummaryKind(str, Enum):
    """What a summary is about."""
    EXPENSE = "expense"
    INCOME = "income"
    BALANCE = "balance"


class SummaryQuery(BaseModel):
    """A request for totals, optionally limited to one month."""

    query_id: UUID = Field(default_factory=uuid4)
    kind: SummaryKind
    month: Optional[YearMonth] = Field(
        default=None,
        description="Limit the summary to this month; None means all time"
    )


class SummaryResult(BaseModel):
    """
    Result of executing a summary query.

    breakdown maps category name (e.g. "FOOD") to its total,
    largest first. It is empty for balance queries.
    """

    query_id: UUID
    executed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    # Success/failure
    success: bool
    error_message: Optional[str] = None

    # Results
    data_found: bool = Field(
        ...,
        description="Was any record counted?"
    )
    record_count: int = Field(
        ge=0,
        description="Number of records that went into the totals"
    )
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    breakdown: dict[str, Decimal] = Field(default_factory=dict)

    query_description: str = Field(
        ...,
        description="Human-readable description of what was summarised"
    )

    @property
    def top_category(self) -> Optional[str]:
        """Category with the largest total, if any."""
        return next(iter(self.breakdown), None)


class SummaryExecutor:
    """
    Executes summary queries against a FinanceManager.

    GUARANTEES:
    - Only reports what is in the ledger
    - Clear data_found=False when nothing matches
    """

    def __init__(self, manager: FinanceManager):
        self._manager = manager

    def execute(self, query: SummaryQuery) -> SummaryResult:
        """Execute a summary query and return its result."""
        try:
            if query.kind == SummaryKind.EXPENSE:
                return self._execute_expense(query)
            elif query.kind == SummaryKind.INCOME:
                return self._execute_income(query)
            else:
                return self._execute_balance(query)

        except Exception as e:
            return SummaryResult(
                query_id=query.query_id,
                success=False,
                error_message=str(e),
                data_found=False,
                record_count=0,
                query_description=f"Summary failed: {str(e)}",
            )

    def _execute_expense(self, query: SummaryQuery) -> SummaryResult:
        month = query.month
        records = (
            self._manager.expenses_for_month(month) if month
            else self._manager.expenses_view()
        )
        breakdown = self._manager.expense_breakdown(month)
        return SummaryResult(
            query_id=query.query_id,
            success=True,
            data_found=len(records) > 0,
            record_count=len(records),
            total_expense=self._manager.total_expense(month),
            breakdown={category.name: total for category, total in breakdown.items()},
            query_description=self._describe("Expense summary", month),
        )

    def _execute_income(self, query: SummaryQuery) -> SummaryResult:
        month = query.month
        records = (
            self._manager.incomes_for_month(month) if month
            else self._manager.incomes_view()
        )
        breakdown = self._manager.income_breakdown(month)
        return SummaryResult(
            query_id=query.query_id,
            success=True,
            data_found=len(records) > 0,
            record_count=len(records),
            total_income=self._manager.total_income(month),
            breakdown={category.name: total for category, total in breakdown.items()},
            query_description=self._describe("Income summary", month),
        )

    def _execute_balance(self, query: SummaryQuery) -> SummaryResult:
        month = query.month
        if month:
            count = len(self._manager.incomes_for_month(month)) \
                + len(self._manager.expenses_for_month(month))
        else:
            count = len(self._manager.incomes_view()) + len(self._manager.expenses_view())
        return SummaryResult(
            query_id=query.query_id,
            success=True,
            data_found=count > 0,
            record_count=count,
            total_income=self._manager.total_income(month),
            total_expense=self._manager.total_expense(month),
            balance=self._manager.balance(month),
            query_description=self._describe("Balance", month),
        )

    @staticmethod
    def _describe(label: str, month: Optional[YearMonth]) -> str:
        if month:
            return f"{label} for the month {month}"
        return f"{label} (all time)"
