"""
Command Parser

Turns one line of user input into a ParsedCommand.

This is DETERMINISTIC - the same line (and the same "today") always
gives the same result, and nothing here touches the ledger.

ARGUMENT SYNTAX:
- Fields are introduced by prefixes: a/ (amount), c/ (category),
  d/ (date or month), des/ (description)
- A prefix only counts at the start of the arguments or after whitespace
- des/ takes the rest of the line, so descriptions may contain
  text that looks like a prefix ("Lunch with c/friends")
- Each prefix may appear at most once

CRITICAL: The parser checks shape and syntax only. Whether a record is
acceptable (amount above the ledger's epsilon, etc.) is decided by the
ledger when the record is added.
"""

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from fintrack.models.record import (
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    RecordPatch,
    YearMonth,
)


class CommandParseError(ValueError):
    """User input could not be turned into a command."""
    pass


class CommandType(str, Enum):
    """Every command the console understands."""
    ADD_EXPENSE = "add-expense"
    ADD_INCOME = "add-income"
    MODIFY_EXPENSE = "modify-expense"
    MODIFY_INCOME = "modify-income"
    DELETE_EXPENSE = "delete-expense"
    DELETE_INCOME = "delete-income"
    LIST_EXPENSE = "list-expense"
    LIST_INCOME = "list-income"
    BALANCE = "balance"
    BUDGET = "budget"
    DELETE_BUDGET = "delete-budget"
    LIST_BUDGET = "list-budget"
    SUMMARY_EXPENSE = "summary-expense"
    SUMMARY_INCOME = "summary-income"
    EXPORT = "export"
    TIPS = "tips"
    HELP = "help"
    BYE = "bye"


NO_ARGUMENT_COMMANDS = frozenset({
    CommandType.LIST_BUDGET,
    CommandType.SUMMARY_EXPENSE,
    CommandType.SUMMARY_INCOME,
    CommandType.TIPS,
    CommandType.HELP,
    CommandType.BYE,
})


class ParsedCommand(BaseModel):
    """
    A syntactically valid command.

    Only the fields relevant to the command are set.
    """
    model_config = ConfigDict(frozen=True)

    command: CommandType
    raw: str = Field(default="", description="The input line as typed")

    record: Optional[Union[Expense, Income]] = Field(
        default=None,
        description="Record to add (add-expense / add-income)"
    )
    index: Optional[int] = Field(
        default=None,
        ge=1,
        description="1-based list position (modify-* / delete-*)"
    )
    patch: Optional[RecordPatch] = Field(
        default=None,
        description="Fields to change (modify-*)"
    )
    month: Optional[YearMonth] = Field(
        default=None,
        description="Month filter (list-* / balance)"
    )
    category: Optional[ExpenseCategory] = Field(
        default=None,
        description="Budget category (budget / delete-budget)"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        description="Budget limit (budget)"
    )
    path: Optional[str] = Field(
        default=None,
        description="Export target (export); None means the configured default"
    )


# =============================================================================
# MESSAGES
# =============================================================================

INVALID_COMMAND = "Invalid command. Type 'help' for a list of available commands."
NON_ASCII = "Unsupported characters detected. Please use standard ASCII text only."
MISSING_PARAMETERS = "Missing parameters. See 'help'."
REQUIRED_FIELDS = "Required fields: a/<amount> c/<category> d/<YYYY-MM-DD>."
INVALID_AMOUNT = "Amount must be a valid number."
NON_FINITE_AMOUNT = "Amount must be finite."
NON_POSITIVE_AMOUNT = "Amount must be positive."
INVALID_DATE = "Date must be in YYYY-MM-DD format."
FUTURE_DATE = "Date cannot be in the future."
INVALID_MONTH = "Month must be in YYYY-MM format."
BUDGET_USAGE = "Usage: budget c/<category> a/<amount>"
DELETE_BUDGET_USAGE = "Usage: delete-budget c/<category>"
INVALID_PATH = "Invalid file path. Please provide a valid path for the CSV file."

_MODIFY_USAGE = "{cmd} <index> [a/<amount>] [c/<category>] [d/<YYYY-MM-DD>] [des/<text>]"

# "des" must come before "d" so that des/ is not read as d/ + "es/"
_PREFIX_PATTERN = re.compile(r"(?:^|(?<=\s))(des|a|c|d)/")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DESCRIPTION = "des"


# =============================================================================
# PARSER
# =============================================================================

class CommandParser:
    """
    Parses console input lines.

    Args:
        allow_future_dates: accept record dates after today
        today: callable returning today's date (injectable for tests)
    """

    def __init__(
        self,
        allow_future_dates: bool = False,
        today: Optional[Callable[[], dt.date]] = None,
    ):
        self._allow_future_dates = allow_future_dates
        self._today = today or dt.date.today

    def parse(self, text: str) -> ParsedCommand:
        """
        Parse one input line.

        Raises:
            CommandParseError: the line is not a valid command
        """
        line = (text or "").strip()
        if not line.isascii():
            raise CommandParseError(NON_ASCII)

        parts = line.split(maxsplit=1)
        if not parts:
            raise CommandParseError(INVALID_COMMAND)
        word = parts[0].lower()
        args = parts[1].strip() if len(parts) > 1 else ""

        try:
            command = CommandType(word)
        except ValueError:
            raise CommandParseError(INVALID_COMMAND) from None

        if command in NO_ARGUMENT_COMMANDS:
            if args:
                raise CommandParseError(
                    f"The '{command.value}' command does not take additional arguments."
                )
            return ParsedCommand(command=command, raw=line)

        handler = {
            CommandType.ADD_EXPENSE: self._parse_add_expense,
            CommandType.ADD_INCOME: self._parse_add_income,
            CommandType.MODIFY_EXPENSE: self._parse_modify,
            CommandType.MODIFY_INCOME: self._parse_modify,
            CommandType.DELETE_EXPENSE: self._parse_delete,
            CommandType.DELETE_INCOME: self._parse_delete,
            CommandType.LIST_EXPENSE: self._parse_month_filter,
            CommandType.LIST_INCOME: self._parse_month_filter,
            CommandType.BALANCE: self._parse_month_filter,
            CommandType.BUDGET: self._parse_budget,
            CommandType.DELETE_BUDGET: self._parse_delete_budget,
            CommandType.EXPORT: self._parse_export,
        }[command]

        fields = handler(command, args)
        return ParsedCommand(command=command, raw=line, **fields)

    # ----- records ---------------------------------------------------------

    def _parse_add_expense(self, command: CommandType, args: str) -> dict:
        return {"record": self._parse_record(Expense, ExpenseCategory, args)}

    def _parse_add_income(self, command: CommandType, args: str) -> dict:
        return {"record": self._parse_record(Income, IncomeCategory, args)}

    def _parse_record(self, record_type, category_type, args: str):
        if not args:
            raise CommandParseError(MISSING_PARAMETERS)

        leading, values = split_prefixed(args)
        if leading:
            raise CommandParseError(f"Unexpected text before parameters: '{leading}'")

        amount_text = values.get("a")
        category_text = values.get("c")
        date_text = values.get("d")
        if not amount_text or not category_text or not date_text:
            raise CommandParseError(REQUIRED_FIELDS)

        amount = parse_amount(amount_text)
        category = _parse_category(category_type, category_text)
        date = self._parse_date(date_text)

        try:
            return record_type(
                amount=amount,
                category=category,
                date=date,
                description=values.get(_DESCRIPTION),
            )
        except ValidationError as exc:
            raise CommandParseError(_first_error(exc)) from exc

    def _parse_modify(self, command: CommandType, args: str) -> dict:
        kind = _kind_of(command)
        usage = "Usage: " + _MODIFY_USAGE.format(cmd=command.value)
        if not args:
            raise CommandParseError(f"Missing index. {usage}")

        leading, values = split_prefixed(args)
        if not leading:
            raise CommandParseError(f"Missing index. {usage}")
        index = parse_index(leading, kind)

        if not values:
            raise CommandParseError(
                f"Nothing to modify. Provide at least one of a/, c/, d/ or des/. {usage}"
            )

        category_type = ExpenseCategory if kind == "Expense" else IncomeCategory
        patch = {}
        if "a" in values:
            patch["amount"] = parse_amount(values["a"])
        if "c" in values:
            patch["category"] = _parse_category(category_type, values["c"])
        if "d" in values:
            patch["date"] = self._parse_date(values["d"])
        if _DESCRIPTION in values:
            patch["description"] = values[_DESCRIPTION]

        return {"index": index, "patch": RecordPatch(**patch)}

    def _parse_delete(self, command: CommandType, args: str) -> dict:
        kind = _kind_of(command)
        if not args:
            raise CommandParseError(
                f"Missing {kind.lower()} index. Usage: {command.value} <index>"
            )
        return {"index": parse_index(args, kind)}

    # ----- views -----------------------------------------------------------

    def _parse_month_filter(self, command: CommandType, args: str) -> dict:
        if not args:
            return {"month": None}
        usage = f"Usage: {command.value} [d/YYYY-MM]"
        text = args[2:].strip() if args.startswith("d/") else args
        if not text or len(text.split()) != 1:
            raise CommandParseError(usage)
        try:
            return {"month": YearMonth.parse(text)}
        except ValueError:
            raise CommandParseError(INVALID_MONTH) from None

    # ----- budgets ---------------------------------------------------------

    def _parse_budget(self, command: CommandType, args: str) -> dict:
        if not args:
            raise CommandParseError(f"Missing parameters for budget command. {BUDGET_USAGE}")
        leading, values = split_prefixed(args)
        if leading or set(values) - {"a", "c"}:
            raise CommandParseError(BUDGET_USAGE)
        if not values.get("a") or not values.get("c"):
            raise CommandParseError(f"Missing parameters for budget command. {BUDGET_USAGE}")
        return {
            "category": _parse_category(ExpenseCategory, values["c"]),
            "amount": parse_amount(values["a"]),
        }

    def _parse_delete_budget(self, command: CommandType, args: str) -> dict:
        if not args:
            raise CommandParseError(DELETE_BUDGET_USAGE)
        leading, values = split_prefixed(args)
        if leading or set(values) != {"c"} or not values["c"]:
            raise CommandParseError(DELETE_BUDGET_USAGE)
        return {"category": _parse_category(ExpenseCategory, values["c"])}

    # ----- export ----------------------------------------------------------

    def _parse_export(self, command: CommandType, args: str) -> dict:
        if not args:
            return {"path": None}
        if "\0" in args:
            raise CommandParseError(INVALID_PATH)
        return {"path": args}

    # ----- fields ----------------------------------------------------------

    def _parse_date(self, text: str) -> dt.date:
        text = text.strip()
        if not _DATE_PATTERN.match(text):
            raise CommandParseError(INVALID_DATE)
        try:
            date = dt.datetime.strptime(text, "%Y-%m-%d").date()
        except ValueError:
            raise CommandParseError(INVALID_DATE) from None
        if not self._allow_future_dates and date > self._today():
            raise CommandParseError(FUTURE_DATE)
        return date


# =============================================================================
# FIELD HELPERS
# =============================================================================

def split_prefixed(args: str) -> tuple[str, dict[str, str]]:
    """
    Split an argument string into leading text and prefixed values.

    Returns:
        (text before the first prefix, {prefix_name: value})

    Raises:
        CommandParseError: a prefix appears more than once
    """
    matches = list(_PREFIX_PATTERN.finditer(args))
    if not matches:
        return args.strip(), {}

    leading = args[:matches[0].start()].strip()
    values: dict[str, str] = {}
    for position, match in enumerate(matches):
        name = match.group(1)
        if name in values:
            raise CommandParseError(f"Duplicate prefix '{name}/' is not allowed.")
        if name == _DESCRIPTION:
            values[name] = args[match.end():].strip()
            break
        end = matches[position + 1].start() if position + 1 < len(matches) else len(args)
        values[name] = args[match.end():end].strip()
    return leading, values


def parse_amount(text: str) -> Decimal:
    """
    Parse a positive, finite amount.

    Raises:
        CommandParseError: not a number, not finite, or not positive
    """
    try:
        amount = Decimal(text.strip())
    except (InvalidOperation, ValueError):
        raise CommandParseError(INVALID_AMOUNT) from None
    if not amount.is_finite():
        raise CommandParseError(NON_FINITE_AMOUNT)
    if amount <= 0:
        raise CommandParseError(NON_POSITIVE_AMOUNT)
    return amount


def parse_index(text: str, kind: str = "Expense") -> int:
    """
    Parse a 1-based list index.

    Raises:
        CommandParseError: not an integer, or not positive
    """
    try:
        index = int(text.strip())
    except ValueError:
        raise CommandParseError(f"{kind} index must be a valid number.") from None
    if index <= 0:
        raise CommandParseError(f"{kind} index must be a positive number.")
    return index


def _parse_category(category_type, text: str):
    try:
        return category_type.parse(text)
    except ValueError as exc:
        raise CommandParseError(str(exc)) from None


def _kind_of(command: CommandType) -> str:
    return "Income" if command.value.endswith("income") else "Expense"


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input."
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


def parse_command(
    text: str,
    today: Optional[dt.date] = None,
    allow_future_dates: bool = False,
) -> ParsedCommand:
    """
    Parse one input line with a one-off parser.

    Args:
        text: the input line
        today: the date future-date checks compare against (default: today)
        allow_future_dates: accept dates after today
    """
    today_provider = (lambda: today) if today is not None else None
    return CommandParser(allow_future_dates, today_provider).parse(text)
