"""
Record Validation Policy

DESIGN DECISION: The ordered collections do not know what a valid
record is. They are handed a policy object at construction and call it
before every insertion. This keeps the collection generic and gives the
policy a single, testable contract:

    policy(element, position) -> None, or raises

CHECKS:
- Element present and of the expected record type
- Date present
- Category present and a member of the record's category enum
- Amount finite and strictly greater than AMOUNT_EPSILON

IMPORTANT: Validation never fixes anything. Every problem found is
reported back in the raised error.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Type

from fintrack.errors import InvalidElementError, ValidationFailedError
from fintrack.models.record import (
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    ValidationIssue,
)


# Amounts at or below this are treated as zero (float noise) and rejected.
AMOUNT_EPSILON = Decimal("1e-9")

_CATEGORY_TYPES = {
    Expense: ExpenseCategory,
    Income: IncomeCategory,
}


def _as_decimal(value) -> Optional[Decimal]:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class RecordValidator:
    """
    Validation policy for one record type.

    Used by ExpenseList / IncomeList, and by the ledger to check a
    modify candidate exactly as a fresh insertion would be checked.
    """

    def __init__(
        self,
        record_type: Type,
        epsilon: Decimal = AMOUNT_EPSILON,
    ):
        """
        Initialize validator.

        Args:
            record_type: Expense or Income
            epsilon: amounts must be strictly greater than this
        """
        if record_type not in _CATEGORY_TYPES:
            raise ValueError(f"Unsupported record type: {record_type!r}")
        self._record_type = record_type
        self._category_type = _CATEGORY_TYPES[record_type]
        self._epsilon = epsilon

    @property
    def record_type(self) -> Type:
        return self._record_type

    @property
    def label(self) -> str:
        return self._record_type.__name__

    def check(self, element) -> list[ValidationIssue]:
        """
        Collect every issue with a present element.

        Returns an empty list when the element is valid.
        """
        issues = []

        if getattr(element, "date", None) is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message=f"{self.label} date cannot be empty",
            ))

        category = getattr(element, "category", None)
        if category is None:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message=f"{self.label} category cannot be empty",
            ))
        elif not isinstance(category, self._category_type):
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Unknown {self.label.lower()} category: {category}",
            ))

        amount = _as_decimal(getattr(element, "amount", None))
        if amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message=f"{self.label} amount must be a number",
            ))
        elif not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="non_finite",
                message=f"{self.label} amount must be a finite, positive number",
            ))
        elif amount <= self._epsilon:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message=f"{self.label} amount must be a finite, positive number",
            ))

        return issues

    def __call__(self, element, position: int = -1) -> None:
        """
        Validate one element for insertion.

        Args:
            element: the record to validate; may be None
            position: batch/index context for diagnostics (-1 if none)

        Raises:
            InvalidElementError: element is None or not the expected type
            ValidationFailedError: element has one or more issues
        """
        where = f" (position {position})" if position >= 0 else ""

        if element is None:
            raise InvalidElementError(
                f"{self.label} cannot be empty{where}",
                position=position if position >= 0 else None,
            )
        if not isinstance(element, self._record_type):
            raise InvalidElementError(
                f"Expected {self.label}, got {type(element).__name__}{where}",
                position=position if position >= 0 else None,
            )

        issues = self.check(element)
        if issues:
            raise ValidationFailedError(
                issues[0].message + where,
                issues=issues,
                position=position if position >= 0 else None,
            )
