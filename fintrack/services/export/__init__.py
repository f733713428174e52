"""
Export Services Package

Provides the abstract export interface and the CSV implementation.
"""

from fintrack.services.export.interface import (
    ExportError,
    ExportInterface,
    InvalidExportPathError,
)
from fintrack.services.export.csv_export import (
    CsvExporter,
    format_amount,
    normalise_export_path,
)

__all__ = [
    # Interface
    "ExportInterface",
    # Exceptions
    "ExportError",
    "InvalidExportPathError",
    # CSV implementation
    "CsvExporter",
    "format_amount",
    "normalise_export_path",
]
