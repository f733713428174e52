"""Summary query package."""

from fintrack.queries.executor import (
    SummaryExecutor,
    SummaryKind,
    SummaryQuery,
    SummaryResult,
)

__all__ = ["SummaryExecutor", "SummaryKind", "SummaryQuery", "SummaryResult"]
