"""Tests for FinanceManager: records, atomic modify, budgets and totals."""

import pytest
from datetime import date
from decimal import Decimal

from fintrack.errors import (
    BudgetNotFoundError,
    IndexOutOfRangeError,
    InvalidElementError,
    UnsupportedMutationError,
    ValidationFailedError,
)
from fintrack.ledger import BudgetEvaluator, FinanceManager
from fintrack.models.record import (
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    RecordPatch,
    YearMonth,
)


def expense(amount, day, category=ExpenseCategory.FOOD, month=10, description=None):
    return Expense(
        amount=Decimal(str(amount)),
        category=category,
        date=date(2025, month, day),
        description=description,
    )


def income(amount, day, category=IncomeCategory.SALARY, month=10):
    return Income(amount=Decimal(str(amount)), category=category, date=date(2025, month, day))


@pytest.fixture
def manager():
    return FinanceManager(BudgetEvaluator(Decimal("0.9")))


@pytest.fixture
def three_expenses(manager):
    manager.add_expense(expense(10, 5, description="first"))
    manager.add_expense(expense(20, 8, ExpenseCategory.TRANSPORT, description="bus"))
    manager.add_expense(expense(15, 6, ExpenseCategory.BILLS))
    return manager


class TestRecords:
    """Tests for adding, listing and deleting records."""

    def test_expenses_listed_newest_first(self, three_expenses):
        """Test view order for out-of-order dates."""
        days = [e.date.day for e in three_expenses.expenses_view()]
        assert days == [8, 6, 5]

    def test_add_expense_without_budget_has_no_status(self, manager):
        """Test that an unbudgeted category gives no status."""
        outcome = manager.add_expense(expense(10, 1))
        assert outcome.budget_status is None
        assert outcome.record.amount == Decimal("10")

    def test_add_tiny_amount_rejected(self, manager):
        """Test that 1e-10 is refused and nothing is stored."""
        with pytest.raises(ValidationFailedError):
            manager.add_expense(expense("1e-10", 1))
        assert len(manager.expenses_view()) == 0

    def test_add_all_with_none_rejected(self, manager):
        """Test all-or-nothing batch add."""
        with pytest.raises(InvalidElementError):
            manager.add_expenses([expense(1, 1), None, expense(2, 2)])
        assert len(manager.expenses_view()) == 0

    def test_add_incomes_batch(self, manager):
        """Test batch add of incomes."""
        assert manager.add_incomes([income(100, 1), income(50, 9)]) is True
        assert [i.date.day for i in manager.incomes_view()] == [9, 1]

    def test_delete_expense_by_position(self, three_expenses):
        """Test 1-based delete returns the removed record."""
        removed = three_expenses.delete_expense(2)
        assert removed.date.day == 6
        assert [e.date.day for e in three_expenses.expenses_view()] == [8, 5]

    def test_delete_from_empty_list(self, manager):
        """Test deleting when there is nothing to delete."""
        with pytest.raises(IndexOutOfRangeError, match="The expense list is empty"):
            manager.delete_expense(1)

    @pytest.mark.parametrize("position", [0, 4, -1])
    def test_delete_out_of_range(self, three_expenses, position):
        """Test bad delete positions."""
        with pytest.raises(IndexOutOfRangeError, match="Valid range: 1 to 3"):
            three_expenses.delete_expense(position)
        assert len(three_expenses.expenses_view()) == 3

    def test_delete_income(self, manager):
        """Test income delete."""
        manager.add_income(income(100, 1))
        removed = manager.delete_income(1)
        assert removed.category == IncomeCategory.SALARY
        assert len(manager.incomes_view()) == 0

    def test_views_are_read_only(self, three_expenses):
        """Test that callers cannot mutate through a view."""
        with pytest.raises(UnsupportedMutationError):
            three_expenses.expenses_view().append(expense(1, 1))

    def test_monthly_views(self, manager):
        """Test month filtering, newest first."""
        manager.add_expense(expense(5, 29, month=9))
        manager.add_expense(expense(7, 2))
        manager.add_expense(expense(3, 1, month=9))
        september = manager.expenses_for_month(YearMonth(2025, 9))
        assert isinstance(september, tuple)
        assert [e.date.day for e in september] == [29, 1]

    def test_monthly_incomes(self, manager):
        """Test month filtering of incomes."""
        manager.add_income(income(100, 30, month=9))
        manager.add_income(income(120, 3))
        assert len(manager.incomes_for_month(YearMonth(2025, 9))) == 1
        assert manager.incomes_for_month(YearMonth(2024, 9)) == ()


class TestAtomicModify:
    """Tests for the modify protocol."""

    def test_modify_amount_only(self, three_expenses):
        """Test that unset fields keep their values."""
        before = three_expenses.expenses_view()[1]
        outcome = three_expenses.modify_expense(2, RecordPatch(amount=Decimal("25")))

        after = three_expenses.expenses_view()[1]
        assert after.amount == Decimal("25")
        assert after.category == before.category
        assert after.date == before.date
        assert after.description == before.description
        assert outcome.old_record == before
        assert outcome.new_record == after
        assert outcome.position == 2

    def test_modify_date_resorts(self, three_expenses):
        """Test that a new date moves the record."""
        three_expenses.modify_expense(3, RecordPatch(date=date(2025, 10, 30)))
        days = [e.date.day for e in three_expenses.expenses_view()]
        assert days == [30, 8, 6]

    def test_modify_category_by_name(self, three_expenses):
        """Test category override given as text."""
        outcome = three_expenses.modify_expense(1, RecordPatch(category="rent"))
        assert outcome.new_record.category == ExpenseCategory.RENT

    def test_modify_clears_description(self, three_expenses):
        """Test that an explicit blank description clears it."""
        three_expenses.modify_expense(1, RecordPatch(description=""))
        assert three_expenses.expenses_view()[0].description is None

    def test_invalid_candidate_leaves_record_in_place(self, three_expenses):
        """Test atomicity when the candidate cannot be built."""
        before = list(three_expenses.expenses_view())
        with pytest.raises(ValidationFailedError):
            three_expenses.modify_expense(
                2, RecordPatch(amount=Decimal("-5"), date=date(2025, 10, 1))
            )
        assert list(three_expenses.expenses_view()) == before

    def test_candidate_failing_policy_leaves_record_in_place(self, three_expenses):
        """Test atomicity when the policy rejects the candidate."""
        before = list(three_expenses.expenses_view())
        with pytest.raises(ValidationFailedError):
            three_expenses.modify_expense(
                1, RecordPatch(amount=Decimal("1e-10"), date=date(2025, 10, 1))
            )
        assert list(three_expenses.expenses_view()) == before

    def test_unknown_category_rejected(self, three_expenses):
        """Test that an income category cannot be patched onto an expense."""
        before = list(three_expenses.expenses_view())
        with pytest.raises(ValidationFailedError):
            three_expenses.modify_expense(1, RecordPatch(category="salary"))
        assert list(three_expenses.expenses_view()) == before

    def test_modify_missing_position(self, three_expenses):
        """Test modify on a position that does not exist."""
        with pytest.raises(IndexOutOfRangeError):
            three_expenses.modify_expense(4, RecordPatch(amount=Decimal("1")))

    def test_modify_empty_list(self, manager):
        """Test modify on an empty list."""
        with pytest.raises(IndexOutOfRangeError, match="empty"):
            manager.modify_income(1, RecordPatch(amount=Decimal("1")))

    def test_modify_income(self, manager):
        """Test modify on incomes."""
        manager.add_income(income(100, 1))
        outcome = manager.modify_income(1, RecordPatch(category="gift"))
        assert outcome.new_record.category == IncomeCategory.GIFT
        assert outcome.budget_status is None

    def test_modify_reevaluates_new_category(self, three_expenses):
        """Test that the budget of the new category is evaluated."""
        three_expenses.set_budget(ExpenseCategory.RENT, Decimal("20"))
        outcome = three_expenses.modify_expense(1, RecordPatch(category="rent"))
        # moved the 20.00 transport expense into RENT
        assert outcome.budget_status.is_near_budget is True
        assert outcome.budget_status.is_over_budget is False


class TestBudgets:
    """Tests for budget management."""

    def test_near_then_over(self, manager):
        """Test FOOD budget of 100 at 95 and then 101."""
        manager.set_budget(ExpenseCategory.FOOD, Decimal("100"))
        first = manager.add_expense(expense(95, 1))
        assert first.budget_status.is_near_budget is True
        assert first.budget_status.is_over_budget is False

        second = manager.add_expense(expense(6, 2))
        assert second.budget_status.is_over_budget is True
        assert second.budget_status.is_near_budget is False

    def test_set_budget_replaces(self, manager):
        """Test that setting a budget twice keeps one budget."""
        manager.set_budget(ExpenseCategory.FOOD, Decimal("100"))
        budget = manager.set_budget(ExpenseCategory.FOOD, Decimal("40"))
        assert budget.limit == Decimal("40")
        assert len(manager.budgets_view()) == 1
        assert manager.budget_for(ExpenseCategory.FOOD).limit == Decimal("40")

    @pytest.mark.parametrize("limit", [Decimal("0"), Decimal("-5"), Decimal("NaN")])
    def test_set_budget_invalid_limit(self, manager, limit):
        """Test that limits must be positive and finite."""
        with pytest.raises(ValidationFailedError):
            manager.set_budget(ExpenseCategory.FOOD, limit)
        assert manager.budget_for(ExpenseCategory.FOOD) is None

    def test_set_budget_requires_category(self, manager):
        """Test that a category is required."""
        with pytest.raises(InvalidElementError):
            manager.set_budget(None, Decimal("10"))

    def test_delete_budget(self, manager):
        """Test budget removal."""
        manager.set_budget(ExpenseCategory.FOOD, Decimal("100"))
        removed = manager.delete_budget(ExpenseCategory.FOOD)
        assert removed.limit == Decimal("100")
        assert manager.get_budget_status(ExpenseCategory.FOOD) is None

    def test_delete_missing_budget(self, manager):
        """Test deleting a budget that was never set."""
        with pytest.raises(BudgetNotFoundError) as exc_info:
            manager.delete_budget(ExpenseCategory.RENT)
        assert str(exc_info.value) == "No budget has been set for RENT"
        assert isinstance(exc_info.value, KeyError)

    def test_budgets_view_is_read_only(self, manager):
        """Test that the budget mapping cannot be mutated."""
        manager.set_budget(ExpenseCategory.FOOD, Decimal("100"))
        with pytest.raises(TypeError):
            manager.budgets_view()[ExpenseCategory.RENT] = None

    def test_status_follows_deletes(self, manager):
        """Test that status is recomputed from the live list."""
        manager.set_budget(ExpenseCategory.FOOD, Decimal("100"))
        manager.add_expense(expense(120, 1))
        assert manager.get_budget_status(ExpenseCategory.FOOD).is_over_budget
        manager.delete_expense(1)
        assert manager.get_budget_status(ExpenseCategory.FOOD).is_normal

    def test_other_categories_do_not_count(self, manager):
        """Test that only the budgeted category is summed."""
        manager.set_budget(ExpenseCategory.FOOD, Decimal("100"))
        manager.add_expense(expense(500, 1, ExpenseCategory.RENT))
        outcome = manager.add_expense(expense(10, 2))
        assert outcome.budget_status.is_normal


class TestTotals:
    """Tests for totals and breakdowns."""

    @pytest.fixture
    def ledger(self, manager):
        manager.add_income(income("1000", 1))
        manager.add_income(income("200.50", 15, IncomeCategory.GIFT, month=9))
        manager.add_expense(expense("30", 2))
        manager.add_expense(expense("70", 3, ExpenseCategory.RENT))
        manager.add_expense(expense("5.25", 20, month=9))
        return manager

    def test_overall_totals(self, ledger):
        """Test all-time totals and balance."""
        assert ledger.total_income() == Decimal("1200.50")
        assert ledger.total_expense() == Decimal("105.25")
        assert ledger.balance() == Decimal("1095.25")

    def test_monthly_totals(self, ledger):
        """Test totals for one month."""
        september = YearMonth(2025, 9)
        assert ledger.total_income(september) == Decimal("200.50")
        assert ledger.total_expense(september) == Decimal("5.25")
        assert ledger.balance(september) == Decimal("195.25")

    def test_category_total(self, ledger):
        """Test total for one expense category."""
        assert ledger.total_expense_for_category(ExpenseCategory.FOOD) == Decimal("35.25")
        assert ledger.total_expense_for_category(ExpenseCategory.STUDY) == Decimal("0")

    def test_expense_breakdown_largest_first(self, ledger):
        """Test per-category sums ordered by size."""
        breakdown = ledger.expense_breakdown()
        assert list(breakdown) == [ExpenseCategory.RENT, ExpenseCategory.FOOD]
        assert breakdown[ExpenseCategory.FOOD] == Decimal("35.25")

    def test_income_breakdown_for_month(self, ledger):
        """Test per-category income for one month."""
        assert ledger.income_breakdown(YearMonth(2025, 10)) == {
            IncomeCategory.SALARY: Decimal("1000"),
        }

    def test_empty_ledger(self, manager):
        """Test totals with no records."""
        assert manager.balance() == Decimal("0")
        assert manager.expense_breakdown() == {}
