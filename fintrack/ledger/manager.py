"""
Finance Manager

The single owner of all ledger state: the expense list, the income list
and the budget map. Command handlers talk to the ledger only through
this class, and only ever receive read-only views back.

ATOMIC MODIFY PROTOCOL:
1. Resolve the 1-based position (IndexOutOfRangeError if absent)
2. Merge the patch over the current record into a candidate
3. Validate the candidate exactly as a fresh insertion
4. Swap it in and let the list re-sort

Steps 1-3 touch nothing. Step 4 either fully happens or does not.

DESIGN DECISION: Nothing here logs or prints. Every outcome is returned
as data and every failure is raised as a LedgerError; the caller
decides what to show and what to audit.
"""

from collections import defaultdict
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Type

from pydantic import ValidationError

from fintrack.errors import (
    BudgetNotFoundError,
    IndexOutOfRangeError,
    InvalidElementError,
    ValidationFailedError,
)
from fintrack.ledger.budget import BudgetEvaluator
from fintrack.ledger.collection import ReadOnlyView, ReverseChronoList
from fintrack.ledger.record_lists import ExpenseList, IncomeList
from fintrack.models.record import (
    AddOutcome,
    Budget,
    BudgetStatus,
    Expense,
    ExpenseCategory,
    Income,
    ModifyOutcome,
    RecordPatch,
    ValidationIssue,
    YearMonth,
)


ZERO = Decimal("0")


def _issues_from(exc: ValidationError) -> list[ValidationIssue]:
    issues = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ())) or "record"
        issues.append(ValidationIssue(
            field=loc,
            issue_type=error.get("type", "invalid"),
            message=f"{loc}: {error.get('msg', 'invalid value')}",
        ))
    return issues


class FinanceManager:
    """
    Owns the expense list, income list and budgets.

    All positions taken by public methods are 1-based, matching the
    numbering shown to the user in list output.
    """

    def __init__(self, evaluator: Optional[BudgetEvaluator] = None):
        self._expenses = ExpenseList()
        self._incomes = IncomeList()
        self._budgets: dict[ExpenseCategory, Budget] = {}
        self._evaluator = evaluator or BudgetEvaluator()

    # =========================================================================
    # EXPENSES
    # =========================================================================

    def add_expense(self, expense: Expense) -> AddOutcome:
        """
        Add an expense and, if its category has a budget, evaluate it.

        Raises:
            InvalidElementError / ValidationFailedError: expense rejected
        """
        self._expenses.add(expense)
        return AddOutcome(
            record=expense,
            budget_status=self.get_budget_status(expense.category),
        )

    def add_expenses(self, expenses: Iterable[Expense]) -> bool:
        """Add a batch of expenses; all or nothing."""
        return self._expenses.add_all(expenses)

    def delete_expense(self, position: int) -> Expense:
        """
        Delete the expense at a 1-based position in the newest-first list.

        Raises:
            IndexOutOfRangeError: list empty or position invalid
        """
        index = self._resolve(self._expenses, position, "expense", "delete")
        return self._expenses.pop(index)

    def modify_expense(self, position: int, patch: RecordPatch) -> ModifyOutcome:
        """
        Atomically replace the expense at position with patched fields.

        If the resulting category has a budget, its status is part of
        the outcome.
        """
        old, new = self._modify(self._expenses, Expense, position, patch, "expense")
        return ModifyOutcome(
            position=position,
            old_record=old,
            new_record=new,
            budget_status=self.get_budget_status(new.category),
        )

    def expenses_view(self) -> ReadOnlyView[Expense]:
        """Read-only, newest-first view of all expenses."""
        return self._expenses.view()

    def expenses_for_month(self, month: YearMonth) -> tuple[Expense, ...]:
        """Newest-first expenses dated within month."""
        return tuple(e for e in self._expenses if month.contains(e.date))

    # =========================================================================
    # INCOMES
    # =========================================================================

    def add_income(self, income: Income) -> AddOutcome:
        """
        Add an income.

        Raises:
            InvalidElementError / ValidationFailedError: income rejected
        """
        self._incomes.add(income)
        return AddOutcome(record=income)

    def add_incomes(self, incomes: Iterable[Income]) -> bool:
        """Add a batch of incomes; all or nothing."""
        return self._incomes.add_all(incomes)

    def delete_income(self, position: int) -> Income:
        """Delete the income at a 1-based position in the newest-first list."""
        index = self._resolve(self._incomes, position, "income", "delete")
        return self._incomes.pop(index)

    def modify_income(self, position: int, patch: RecordPatch) -> ModifyOutcome:
        """Atomically replace the income at position with patched fields."""
        old, new = self._modify(self._incomes, Income, position, patch, "income")
        return ModifyOutcome(position=position, old_record=old, new_record=new)

    def incomes_view(self) -> ReadOnlyView[Income]:
        """Read-only, newest-first view of all incomes."""
        return self._incomes.view()

    def incomes_for_month(self, month: YearMonth) -> tuple[Income, ...]:
        """Newest-first incomes dated within month."""
        return tuple(i for i in self._incomes if month.contains(i.date))

    # =========================================================================
    # BUDGETS
    # =========================================================================

    def set_budget(self, category: ExpenseCategory, limit) -> Budget:
        """
        Create or replace the budget for a category.

        Raises:
            InvalidElementError: category missing
            ValidationFailedError: limit not a positive, finite number
        """
        if category is None:
            raise InvalidElementError("Category cannot be empty")
        try:
            budget = Budget(category=category, limit=limit)
        except ValidationError as exc:
            raise ValidationFailedError(
                "Budget amount must be a finite, positive number",
                issues=_issues_from(exc),
            ) from exc
        self._budgets[budget.category] = budget
        return budget

    def delete_budget(self, category: ExpenseCategory) -> Budget:
        """
        Remove the budget for a category.

        Raises:
            BudgetNotFoundError: no budget set for category
        """
        try:
            return self._budgets.pop(category)
        except KeyError:
            raise BudgetNotFoundError(
                f"No budget has been set for {getattr(category, 'name', category)}"
            ) from None

    def budget_for(self, category: ExpenseCategory) -> Optional[Budget]:
        return self._budgets.get(category)

    def budgets_view(self) -> Mapping[ExpenseCategory, Budget]:
        """Read-only mapping of category to budget."""
        return MappingProxyType(self._budgets)

    def get_budget_status(self, category: ExpenseCategory) -> Optional[BudgetStatus]:
        """
        Evaluate spending in category against its budget.

        Returns None when the category has no budget; that is not the
        same as being under budget.
        """
        budget = self._budgets.get(category)
        if budget is None:
            return None
        spent = self.total_expense_for_category(category)
        return self._evaluator.evaluate(budget.limit, spent)

    # =========================================================================
    # TOTALS
    # =========================================================================

    def total_expense_for_category(self, category: ExpenseCategory) -> Decimal:
        if category is None:
            return ZERO
        return sum((e.amount for e in self._expenses if e.category == category), ZERO)

    def total_income(self, month: Optional[YearMonth] = None) -> Decimal:
        return self._sum(self._incomes, month)

    def total_expense(self, month: Optional[YearMonth] = None) -> Decimal:
        return self._sum(self._expenses, month)

    def balance(self, month: Optional[YearMonth] = None) -> Decimal:
        """Income minus expense, overall or for one month."""
        return self.total_income(month) - self.total_expense(month)

    def expense_breakdown(self, month: Optional[YearMonth] = None) -> dict:
        """Per-category expense totals, largest first."""
        return self._breakdown(self._expenses, month)

    def income_breakdown(self, month: Optional[YearMonth] = None) -> dict:
        """Per-category income totals, largest first."""
        return self._breakdown(self._incomes, month)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @staticmethod
    def _resolve(
        records: ReverseChronoList,
        position: int,
        label: str,
        action: str = "modify",
    ) -> int:
        if len(records) == 0:
            raise IndexOutOfRangeError(
                f"Cannot {action} {label}: The {label} list is empty"
            )
        if isinstance(position, bool) or not isinstance(position, int) \
                or not 1 <= position <= len(records):
            raise IndexOutOfRangeError(
                f"{label.capitalize()} index out of range. "
                f"Valid range: 1 to {len(records)}"
            )
        return position - 1

    def _modify(
        self,
        records: ReverseChronoList,
        record_type: Type,
        position: int,
        patch: RecordPatch,
        label: str,
    ) -> tuple:
        index = self._resolve(records, position, label)
        current = records[index]
        candidate = self._build_candidate(record_type, current, patch)
        old = records.replace(index, candidate)
        return old, candidate

    @staticmethod
    def _build_candidate(record_type: Type, current, patch: Optional[RecordPatch]):
        overrides = patch.overrides() if patch is not None else {}
        merged = {**current.model_dump(), **overrides}
        try:
            return record_type.model_validate(merged)
        except ValidationError as exc:
            issues = _issues_from(exc)
            raise ValidationFailedError(
                issues[0].message if issues else f"Invalid {record_type.__name__}",
                issues=issues,
            ) from exc

    @staticmethod
    def _sum(records: Sequence, month: Optional[YearMonth]) -> Decimal:
        return sum(
            (r.amount for r in records if month is None or month.contains(r.date)),
            ZERO,
        )

    @staticmethod
    def _breakdown(records: Sequence, month: Optional[YearMonth]) -> dict:
        totals = defaultdict(lambda: ZERO)
        for record in records:
            if month is None or month.contains(record.date):
                totals[record.category] += record.amount
        return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))
