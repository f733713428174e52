"""Shared fixtures."""

import pytest
from datetime import date

from fintrack.audit import AuditLogger
from fintrack.commands import CommandParser
from fintrack.ledger import FinanceManager
from fintrack.orchestrator import CommandFlow
from fintrack.services.tips import TipsProvider


TODAY = date(2025, 10, 31)


class RecordingLogger:
    """Stands in for a structlog logger and remembers every call."""

    def __init__(self):
        self.calls = []

    def _record(self, level, event, **kw):
        self.calls.append((level, event, kw))

    def debug(self, event, **kw):
        self._record("debug", event, **kw)

    def info(self, event, **kw):
        self._record("info", event, **kw)

    def warning(self, event, **kw):
        self._record("warning", event, **kw)

    def error(self, event, **kw):
        self._record("error", event, **kw)

    def event_types(self):
        return [kw["event_type"] for _, _, kw in self.calls]


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def flow(recording_logger, tmp_path):
    return CommandFlow(
        manager=FinanceManager(),
        parser=CommandParser(today=lambda: TODAY),
        tips=TipsProvider(["Only tip"]),
        audit_logger=AuditLogger(recording_logger),
        export_default_path=str(tmp_path / "default-export.csv"),
    )
