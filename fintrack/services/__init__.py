"""Services package."""

from fintrack.services.export import (
    CsvExporter,
    ExportError,
    ExportInterface,
    InvalidExportPathError,
)
from fintrack.services.tips import DEFAULT_TIPS, TipsProvider

__all__ = [
    # Export services
    "CsvExporter",
    "ExportError",
    "ExportInterface",
    "InvalidExportPathError",
    # Tips
    "DEFAULT_TIPS",
    "TipsProvider",
]
