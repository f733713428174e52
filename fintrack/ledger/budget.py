"""
Budget Evaluator

Classifies total spending in a category against that category's limit.

POLICY:
- over  = total_spent > limit
- near  = not over and total_spent >= near_ratio * limit
- Over always wins; the two flags are never both set.

This is a pure function of its inputs. The ledger recomputes the
category total from the live expense list before calling it, and does
not call it at all when the category has no budget.
"""

from decimal import Decimal
from typing import Union

from fintrack.errors import ValidationFailedError
from fintrack.models.record import BudgetStatus


DEFAULT_NEAR_RATIO = Decimal("0.9")

Number = Union[Decimal, int, float, str]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class BudgetEvaluator:
    """Near/over classification with a configurable near-limit ratio."""

    def __init__(self, near_ratio: Number = DEFAULT_NEAR_RATIO):
        ratio = _to_decimal(near_ratio)
        if not ratio.is_finite() or ratio <= 0 or ratio > 1:
            raise ValueError("near_ratio must be in (0, 1]")
        self._near_ratio = ratio

    @property
    def near_ratio(self) -> Decimal:
        return self._near_ratio

    def evaluate(self, limit: Number, total_spent: Number) -> BudgetStatus:
        """
        Classify spending against a limit.

        Args:
            limit: positive, finite budget limit
            total_spent: non-negative sum of expenses in the category

        Raises:
            ValidationFailedError: limit or total_spent out of range
        """
        limit = _to_decimal(limit)
        total_spent = _to_decimal(total_spent)

        if not limit.is_finite() or limit <= 0:
            raise ValidationFailedError("Budget limit must be a finite, positive number")
        if not total_spent.is_finite() or total_spent < 0:
            raise ValidationFailedError("Total spent must be a finite, non-negative number")

        if total_spent > limit:
            return BudgetStatus(is_over_budget=True, is_near_budget=False)

        near = total_spent >= self._near_ratio * limit
        return BudgetStatus(is_over_budget=False, is_near_budget=near)


def evaluate_budget(
    limit: Number,
    total_spent: Number,
    near_ratio: Number = DEFAULT_NEAR_RATIO,
) -> BudgetStatus:
    """Convenience wrapper around BudgetEvaluator.evaluate."""
    return BudgetEvaluator(near_ratio).evaluate(limit, total_spent)
