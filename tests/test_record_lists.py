"""Tests for the record validation policy and the expense/income lists."""

import pytest
from datetime import date
from decimal import Decimal

from fintrack.errors import InvalidElementError, ValidationFailedError
from fintrack.ledger.record_lists import ExpenseList, IncomeList
from fintrack.models.record import Expense, ExpenseCategory, Income, IncomeCategory
from fintrack.validation import AMOUNT_EPSILON, RecordValidator


def expense(amount="10", day=5, category=ExpenseCategory.FOOD):
    return Expense(amount=Decimal(amount), category=category, date=date(2025, 10, day))


def income(amount="10", day=5, category=IncomeCategory.SALARY):
    return Income(amount=Decimal(amount), category=category, date=date(2025, 10, day))


class TestRecordValidator:
    """Tests for RecordValidator."""

    def test_valid_record_has_no_issues(self):
        """Test that a well-formed expense passes."""
        validator = RecordValidator(Expense)
        assert validator.check(expense()) == []
        validator(expense())

    def test_rejects_unsupported_record_type(self):
        """Test that only Expense and Income are supported."""
        with pytest.raises(ValueError):
            RecordValidator(dict)

    def test_none_is_invalid_element(self):
        """Test that None raises InvalidElementError."""
        with pytest.raises(InvalidElementError):
            RecordValidator(Expense)(None)

    def test_wrong_type_is_invalid_element(self):
        """Test that an Income is not accepted as an Expense."""
        with pytest.raises(InvalidElementError, match="Expected Expense"):
            RecordValidator(Expense)(income())

    def test_amount_at_epsilon_rejected(self):
        """Test that amounts at or below the epsilon fail."""
        validator = RecordValidator(Expense)
        with pytest.raises(ValidationFailedError) as exc_info:
            validator(expense(amount=str(AMOUNT_EPSILON)))
        assert exc_info.value.issues[0].issue_type == "not_positive"

    def test_amount_just_above_epsilon_accepted(self):
        """Test the lower bound is exclusive."""
        RecordValidator(Expense)(expense(amount="0.000000002"))

    def test_collects_every_issue(self):
        """Test that all problems are reported together."""
        broken = Expense.model_construct(amount=Decimal("NaN"), category=None, date=None)
        with pytest.raises(ValidationFailedError) as exc_info:
            RecordValidator(Expense)(broken, 3)
        error = exc_info.value
        assert {issue.field for issue in error.issues} == {"date", "category", "amount"}
        assert error.position == 3
        assert "(position 3)" in str(error)

    def test_unknown_category_detected(self):
        """Test a category from the wrong enum."""
        broken = Expense.model_construct(
            amount=Decimal("5"), category=IncomeCategory.GIFT, date=date(2025, 1, 1)
        )
        issues = RecordValidator(Expense).check(broken)
        assert [issue.issue_type for issue in issues] == ["unknown_category"]

    def test_errors_are_value_errors(self):
        """Test builtin bases so ValueError handlers still work."""
        assert issubclass(ValidationFailedError, ValueError)
        assert issubclass(InvalidElementError, ValueError)


class TestExpenseList:
    """Tests for ExpenseList."""

    def test_orders_expenses_newest_first(self):
        """Test newest-first ordering by record date."""
        expenses = ExpenseList()
        expenses.add(expense("10", 5))
        expenses.add(expense("20", 8))
        expenses.add(expense("15", 6))
        assert [e.date.day for e in expenses] == [8, 6, 5]

    def test_tiny_amount_rejected(self):
        """Test that 1e-10 reaches the list and is refused there."""
        expenses = ExpenseList()
        tiny = expense("1e-10")
        with pytest.raises(ValidationFailedError):
            expenses.add(tiny)
        assert len(expenses) == 0

    def test_income_rejected(self):
        """Test that the list only takes expenses."""
        with pytest.raises(InvalidElementError):
            ExpenseList().add(income())

    def test_batch_with_none_rejected(self):
        """Test all-or-nothing with a None element."""
        expenses = ExpenseList()
        with pytest.raises(InvalidElementError):
            expenses.add_all([expense(day=1), None, expense(day=2)])
        assert len(expenses) == 0

    def test_custom_validator(self):
        """Test that a stricter validator can be injected."""
        expenses = ExpenseList(RecordValidator(Expense, epsilon=Decimal("1")))
        with pytest.raises(ValidationFailedError):
            expenses.add(expense("0.5"))


class TestIncomeList:
    """Tests for IncomeList."""

    def test_orders_incomes_newest_first(self):
        """Test newest-first ordering by record date."""
        incomes = IncomeList()
        incomes.add_all([income(day=1), income(day=30), income(day=15)])
        assert [i.date.day for i in incomes] == [30, 15, 1]

    def test_expense_rejected(self):
        """Test that the list only takes incomes."""
        with pytest.raises(InvalidElementError):
            IncomeList().add(expense())
