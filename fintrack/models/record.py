"""
Core Data Models for FinTrack

These models define the records and results flowing through the ledger.
They are designed to:
1. Be immutable once constructed (a modify builds a new record)
2. Reject malformed amounts and dates at construction
3. Carry plain data only; formatting belongs to the console

DESIGN DECISION: Amounts are Decimal, not float.
Summing many small expenses must not drift around budget thresholds.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class _ParsableCategory(str, Enum):
    """Case-insensitive lookup shared by both category enums."""

    @classmethod
    def parse(cls, text: str):
        """
        Parse a user-supplied category name.

        Raises:
            ValueError: if the name is blank or not a known category
        """
        if text is None or not str(text).strip():
            raise ValueError(f"Category cannot be blank. {cls.available()}")
        key = str(text).strip().lower()
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown {cls._label()} category! {cls.available()}"
            ) from None

    @classmethod
    def available(cls) -> str:
        names = ", ".join(member.name for member in cls)
        return f"Available categories: [{names}]"

    @classmethod
    def _label(cls) -> str:
        return "category"


class ExpenseCategory(_ParsableCategory):
    """Supported expense categories."""
    FOOD = "food"
    STUDY = "study"
    TRANSPORT = "transport"
    BILLS = "bills"
    ENTERTAINMENT = "entertainment"
    RENT = "rent"
    GROCERIES = "groceries"
    OTHERS = "others"

    @classmethod
    def _label(cls) -> str:
        return "expense"


class IncomeCategory(_ParsableCategory):
    """Supported income categories."""
    SALARY = "salary"
    SCHOLARSHIP = "scholarship"
    INVESTMENT = "investment"
    GIFT = "gift"

    @classmethod
    def _label(cls) -> str:
        return "income"


# =============================================================================
# RECORDS
# =============================================================================

class _Record(BaseModel):
    """
    Fields shared by expenses and incomes.

    CRITICAL: Records are frozen. To change one, build a replacement
    and hand it to the ledger; never mutate in place.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive, finite amount"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the record"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional free text"
    )

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_is_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("category", mode="before", check_fields=False)
    @classmethod
    def normalise_category(cls, v):
        """Accept enum members or any casing of the category name."""
        if isinstance(v, str) and not isinstance(v, Enum):
            return v.strip().lower()
        return v


class Expense(_Record):
    """A single expense entry."""

    category: ExpenseCategory = Field(
        ...,
        description="Expense category"
    )


class Income(_Record):
    """A single income entry."""

    category: IncomeCategory = Field(
        ...,
        description="Income category"
    )


Record = Union[Expense, Income]


class RecordPatch(BaseModel):
    """
    A partial set of record fields for a modify.

    Only the fields the caller actually set are applied;
    everything else keeps the current record's value.
    Values are checked when the replacement record is built,
    not here.
    """

    amount: Optional[Decimal] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def category_to_text(cls, v):
        if isinstance(v, Enum):
            return v.value
        return v

    def overrides(self) -> dict:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


# =============================================================================
# MONTHS
# =============================================================================

class YearMonth(NamedTuple):
    """A calendar month, e.g. YearMonth(2025, 10)."""

    year: int
    month: int

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        """
        Parse 'YYYY-MM'.

        Raises:
            ValueError: if the text is not a valid month
        """
        parts = (text or "").strip().split("-")
        if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
            raise ValueError("Month must be in YYYY-MM format.")
        try:
            year, month = int(parts[0]), int(parts[1])
        except ValueError:
            raise ValueError("Month must be in YYYY-MM format.") from None
        if not 1 <= month <= 12:
            raise ValueError("Month must be in YYYY-MM format.")
        return cls(year, month)

    @classmethod
    def of(cls, day: dt.date) -> "YearMonth":
        return cls(day.year, day.month)

    def contains(self, day: dt.date) -> bool:
        return day.year == self.year and day.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


# =============================================================================
# BUDGETS
# =============================================================================

class Budget(BaseModel):
    """Spending limit for one expense category."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    limit: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive, finite spending limit"
    )


class BudgetStatus(BaseModel):
    """
    Result of checking spending against a budget.

    Transient: computed after an expense add/modify, never stored.
    The evaluator never sets both flags, but the model allows it.
    """
    model_config = ConfigDict(frozen=True)

    is_over_budget: bool
    is_near_budget: bool

    @property
    def is_normal(self) -> bool:
        return not (self.is_over_budget or self.is_near_budget)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'non_finite', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


# =============================================================================
# OUTCOMES
# =============================================================================

class AddOutcome(BaseModel):
    """What the ledger reports after adding a record."""
    model_config = ConfigDict(frozen=True)

    record: Union[Expense, Income]
    budget_status: Optional[BudgetStatus] = None


class ModifyOutcome(BaseModel):
    """
    What the ledger reports after an atomic modify.

    old_record is kept for echoing back to the user.
    """
    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=1)
    old_record: Union[Expense, Income]
    new_record: Union[Expense, Income]
    budget_status: Optional[BudgetStatus] = None
