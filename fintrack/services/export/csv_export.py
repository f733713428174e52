"""
CSV Export

Writes the ledger to a single CSV file with three sections:

    INCOMES
    Date,Amount,Category,Description
    ...

    EXPENSES
    Date,Amount,Category,Description
    ...

    SUMMARY
    Total Income,<amount>
    Total Expenses,<amount>
    Balance,<amount>

Amounts are written with two decimal places. Descriptions are quoted
by the csv module when they contain commas or quotes.
"""

import csv
from decimal import ROUND_HALF_UP, Decimal, localcontext
from pathlib import Path
from typing import Iterable, Sequence, Union

import structlog

from fintrack.models.record import Expense, Income
from fintrack.services.export.interface import (
    ExportError,
    ExportInterface,
    InvalidExportPathError,
)


logger = structlog.get_logger(__name__)

RECORD_HEADER = ["Date", "Amount", "Category", "Description"]
CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Two decimal places, half-up, for amounts of any magnitude."""
    value = Decimal(amount)
    with localcontext() as ctx:
        # quantize needs every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        ctx.Emax = max(ctx.Emax, value.adjusted() + 1)
        return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def normalise_export_path(path: Union[str, Path]) -> Path:
    """
    Turn user input into the path that will be written.

    A path without a suffix gets ".csv" appended.

    Raises:
        InvalidExportPathError: blank path, or one that names a directory
    """
    text = str(path).strip() if path is not None else ""
    if not text:
        raise InvalidExportPathError(
            "Invalid file path. Please provide a valid path for the CSV file."
        )
    target = Path(text).expanduser()
    if text.endswith(("/", "\\")) or target.is_dir():
        raise InvalidExportPathError(
            f"Invalid file path. {target} is a directory, not a file."
        )
    if not target.suffix:
        target = target.with_suffix(".csv")
    return target


class CsvExporter(ExportInterface):
    """Exports a ledger snapshot as sectioned CSV."""

    def export(
        self,
        path: Union[str, Path],
        incomes: Sequence[Income],
        expenses: Sequence[Expense],
        total_income: Decimal,
        total_expense: Decimal,
        balance: Decimal,
    ) -> Path:
        target = normalise_export_path(path)
        logger.info("export_started", path=str(target))

        parent = target.parent
        if not parent.exists():
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error("export_mkdir_failed", path=str(parent), error=str(e))
                raise ExportError(
                    f"Could not create directory {parent}. Please check your permissions."
                ) from e

        # Rows are built before the file is opened; a formatting failure writes nothing.
        try:
            rows = [
                *self._record_rows("INCOMES", incomes),
                [],
                *self._record_rows("EXPENSES", expenses),
                [],
                *self._summary_rows(total_income, total_expense, balance),
            ]
        except (ArithmeticError, ValueError, TypeError, AttributeError) as e:
            logger.error("export_format_failed", path=str(target), error=str(e))
            raise ExportError(f"Could not format the ledger for export: {e}") from e

        try:
            with target.open("w", newline="", encoding="utf-8") as handle:
                csv.writer(handle).writerows(rows)
        except OSError as e:
            logger.error("export_failed", path=str(target), error=str(e))
            raise ExportError(f"Failed to write the file: {target} ({e.strerror or e})") from e

        logger.info(
            "export_completed",
            path=str(target),
            incomes=len(incomes),
            expenses=len(expenses),
        )
        return target

    @staticmethod
    def _record_rows(title: str, records: Iterable) -> list:
        rows = [[title], RECORD_HEADER]
        for record in records:
            rows.append([
                record.date.isoformat(),
                format_amount(record.amount),
                record.category.name,
                record.description or "",
            ])
        return rows

    @staticmethod
    def _summary_rows(total_income, total_expense, balance) -> list:
        return [
            ["SUMMARY"],
            ["Total Income", format_amount(total_income)],
            ["Total Expenses", format_amount(total_expense)],
            ["Balance", format_amount(balance)],
        ]
