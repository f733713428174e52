"""Tests for CSV export."""

import csv
import pytest
from datetime import date
from decimal import Decimal

from fintrack.models.record import Expense, ExpenseCategory, Income
from fintrack.services.export import (
    CsvExporter,
    ExportError,
    InvalidExportPathError,
    format_amount,
    normalise_export_path,
)


@pytest.fixture
def records():
    incomes = [
        Income(amount=Decimal("1000"), category="salary", date=date(2025, 10, 1), description="Monthly pay"),
    ]
    expenses = [
        Expense(amount=Decimal("70"), category="rent", date=date(2025, 10, 3), description="Room, October"),
        Expense(amount=Decimal("30.005"), category="food", date=date(2025, 10, 2)),
    ]
    return incomes, expenses


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as handle:
        return list(csv.reader(handle))


class TestCsvExporter:
    """Tests for CsvExporter."""

    def test_sections_and_rows(self, tmp_path, records):
        """Test the three-section layout."""
        incomes, expenses = records
        target = CsvExporter().export(
            tmp_path / "out.csv", incomes, expenses,
            Decimal("1000"), Decimal("100.005"), Decimal("899.995"),
        )

        rows = read_rows(target)
        assert rows[0] == ["INCOMES"]
        assert rows[1] == ["Date", "Amount", "Category", "Description"]
        assert rows[2] == ["2025-10-01", "1000.00", "SALARY", "Monthly pay"]
        assert rows[3] == []
        assert rows[4] == ["EXPENSES"]
        assert rows[6] == ["2025-10-03", "70.00", "RENT", "Room, October"]
        assert rows[7] == ["2025-10-02", "30.01", "FOOD", ""]
        assert rows[9] == ["SUMMARY"]
        assert rows[10] == ["Total Income", "1000.00"]
        assert rows[11] == ["Total Expenses", "100.01"]
        assert rows[12] == ["Balance", "900.00"]

    def test_commas_are_quoted(self, tmp_path, records):
        """Test that descriptions with commas survive intact."""
        incomes, expenses = records
        target = CsvExporter().export(tmp_path / "q.csv", incomes, expenses, 0, 0, 0)
        assert '"Room, October"' in target.read_text(encoding="utf-8")

    def test_empty_ledger(self, tmp_path):
        """Test export with no records."""
        target = CsvExporter().export(tmp_path / "empty.csv", [], [], 0, 0, 0)
        rows = read_rows(target)
        assert rows[:2] == [["INCOMES"], ["Date", "Amount", "Category", "Description"]]
        assert ["Balance", "0.00"] in rows

    def test_adds_csv_suffix(self, tmp_path):
        """Test that a bare name becomes .csv."""
        target = CsvExporter().export(tmp_path / "report", [], [], 0, 0, 0)
        assert target.name == "report.csv"
        assert target.exists()

    def test_keeps_other_suffix(self, tmp_path):
        """Test that an explicit suffix is kept."""
        target = CsvExporter().export(tmp_path / "report.txt", [], [], 0, 0, 0)
        assert target.name == "report.txt"

    def test_creates_parent_directories(self, tmp_path):
        """Test that missing folders are created."""
        target = CsvExporter().export(tmp_path / "a" / "b" / "data.csv", [], [], 0, 0, 0)
        assert target.exists()

    def test_directory_target_rejected(self, tmp_path):
        """Test that a directory is not a valid target."""
        with pytest.raises(InvalidExportPathError):
            CsvExporter().export(tmp_path, [], [], 0, 0, 0)

    def test_unwritable_parent_raises_export_error(self, tmp_path):
        """Test that OS failures become ExportError."""
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory")
        with pytest.raises(ExportError):
            CsvExporter().export(blocker / "sub" / "out.csv", [], [], 0, 0, 0)


class TestHelpers:
    """Tests for export helpers."""

    def test_format_amount(self):
        """Test two-decimal formatting."""
        assert format_amount(Decimal("12.345")) == "12.35"
        assert format_amount(Decimal("-3")) == "-3.00"
        assert format_amount(7) == "7.00"

    def test_blank_path_rejected(self):
        """Test that an empty path is invalid."""
        with pytest.raises(InvalidExportPathError):
            normalise_export_path("   ")

    def test_format_amount_large_values(self):
        """Test amounts beyond the default decimal precision."""
        assert format_amount(Decimal("1e30")) == "1" + "0" * 30 + ".00"
        assert format_amount(Decimal("123456789012345678901234567890.125")) == (
            "123456789012345678901234567890.13"
        )


class TestUnexpectedFailures:
    """Tests that formatting problems surface as ExportError."""

    def test_huge_amounts_export(self, tmp_path):
        """Test that very large amounts are written in full."""
        expenses = [Expense(amount=Decimal("1e30"), category="food", date=date(2025, 10, 1))]
        target = CsvExporter().export(
            tmp_path / "big.csv", [], expenses, 0, Decimal("1e30"), Decimal("-1e30"),
        )
        rows = read_rows(target)
        assert rows[5] == ["2025-10-01", "1" + "0" * 30 + ".00", "FOOD", ""]
        assert rows[-1] == ["Balance", "-1" + "0" * 30 + ".00"]

    def test_unformattable_amount_leaves_no_file(self, tmp_path):
        """Test that a formatting failure raises ExportError before writing."""
        broken = Expense.model_construct(
            amount=Decimal("Infinity"), category=ExpenseCategory.FOOD,
            date=date(2025, 10, 1), description=None,
        )
        target = tmp_path / "broken.csv"
        with pytest.raises(ExportError, match="Could not format the ledger"):
            CsvExporter().export(target, [], [broken], 0, 0, 0)
        assert not target.exists()
