"""
Main Orchestrator for FinTrack

This module ties together all the components and defines the
end-to-end flow for one console command:

    text → parse → ledger operation → audit → CommandResult

DESIGN DECISION: The orchestrator enforces the boundaries:
- The ledger only ever sees parsed, typed input
- The ledger's typed errors become failed results here, never crashes
- Every change and every refusal is audited
- Nothing here formats text for the user; the console does that

This is the "glue" that keeps the ledger core free of I/O.
"""

from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from fintrack.audit import AuditLogger, create_correlation_id
from fintrack.commands import CommandParseError, CommandParser, CommandType, ParsedCommand
from fintrack.config import LedgerSettings, get_settings
from fintrack.errors import LedgerError, ValidationFailedError
from fintrack.ledger import BudgetEvaluator, FinanceManager
from fintrack.models.audit import LedgerEvent, LedgerEventBuilder
from fintrack.models.record import (
    AddOutcome,
    Budget,
    BudgetStatus,
    Expense,
    ExpenseCategory,
    Income,
    ModifyOutcome,
    YearMonth,
)
from fintrack.queries import SummaryExecutor, SummaryKind, SummaryQuery, SummaryResult
from fintrack.services.export import CsvExporter, ExportError, ExportInterface
from fintrack.services.tips import TipsProvider


# =============================================================================
# RESULT MODELS
# =============================================================================

class BudgetAlert(BaseModel):
    """Spending in a budgeted category reached near or over its limit."""

    category: ExpenseCategory
    status: BudgetStatus
    total_spent: Decimal
    limit: Decimal


class BudgetReport(BaseModel):
    """One line of the budget list."""

    category: ExpenseCategory
    limit: Decimal
    total_spent: Decimal
    status: BudgetStatus

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.total_spent


class CommandResult(BaseModel):
    """
    Outcome of one console command.

    success=False results carry error_message and nothing else.
    Otherwise only the fields relevant to the command are set.
    """

    command: Optional[CommandType] = None
    success: bool = True
    error_message: Optional[str] = None

    # Records
    added: Optional[AddOutcome] = None
    modified: Optional[ModifyOutcome] = None
    deleted: Optional[Union[Expense, Income]] = None
    position: Optional[int] = None
    records: list[Union[Expense, Income]] = Field(default_factory=list)
    month: Optional[YearMonth] = None

    # Budgets
    budget: Optional[Budget] = None
    budgets: list[BudgetReport] = Field(default_factory=list)
    alert: Optional[BudgetAlert] = None

    # Queries and services
    summary: Optional[SummaryResult] = None
    export_path: Optional[str] = None
    tip: Optional[str] = None

    should_exit: bool = False

    @classmethod
    def failure(cls, message: str, command: Optional[CommandType] = None) -> "CommandResult":
        return cls(command=command, success=False, error_message=message)


# =============================================================================
# COMMAND FLOW
# =============================================================================

class CommandFlow:
    """
    Orchestrates one command from input text to result.

    Flow:
    1. Parse → ParsedCommand (CommandParseError becomes a failed result)
    2. Execute → FinanceManager / SummaryExecutor / exporter
    3. Audit → one event per change, alert or refusal
    4. Return → CommandResult for the console to render
    """

    def __init__(
        self,
        manager: Optional[FinanceManager] = None,
        parser: Optional[CommandParser] = None,
        exporter: Optional[ExportInterface] = None,
        tips: Optional[TipsProvider] = None,
        audit_logger: Optional[AuditLogger] = None,
        export_default_path: str = "fintrack-export.csv",
    ):
        self._manager = manager or FinanceManager()
        self._parser = parser or CommandParser()
        self._exporter = exporter or CsvExporter()
        self._tips = tips or TipsProvider()
        self._summaries = SummaryExecutor(self._manager)
        self._audit_logger = audit_logger
        self._export_default_path = export_default_path

        self._handlers = {
            CommandType.ADD_EXPENSE: self._add_expense,
            CommandType.ADD_INCOME: self._add_income,
            CommandType.MODIFY_EXPENSE: self._modify_expense,
            CommandType.MODIFY_INCOME: self._modify_income,
            CommandType.DELETE_EXPENSE: self._delete_expense,
            CommandType.DELETE_INCOME: self._delete_income,
            CommandType.LIST_EXPENSE: self._list_expense,
            CommandType.LIST_INCOME: self._list_income,
            CommandType.BALANCE: self._balance,
            CommandType.BUDGET: self._set_budget,
            CommandType.DELETE_BUDGET: self._delete_budget,
            CommandType.LIST_BUDGET: self._list_budget,
            CommandType.SUMMARY_EXPENSE: self._summary_expense,
            CommandType.SUMMARY_INCOME: self._summary_income,
            CommandType.EXPORT: self._export,
            CommandType.TIPS: self._tip,
            CommandType.HELP: self._help,
            CommandType.BYE: self._bye,
        }

    @property
    def manager(self) -> FinanceManager:
        return self._manager

    def handle(self, text: str, correlation_id: Optional[UUID] = None) -> CommandResult:
        """
        Parse and execute one line of input.

        Never raises for bad input or ledger refusals; those come back
        as success=False results.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            parsed = self._parser.parse(text)
        except CommandParseError as e:
            self._audit(LedgerEventBuilder.command_rejected(
                command_text=text or "",
                reason=str(e),
                correlation_id=correlation_id,
            ))
            return CommandResult.failure(str(e))

        return self.execute(parsed, correlation_id)

    def execute(
        self,
        parsed: ParsedCommand,
        correlation_id: Optional[UUID] = None,
    ) -> CommandResult:
        """Execute an already parsed command."""
        correlation_id = correlation_id or create_correlation_id()
        handler = self._handlers[parsed.command]

        try:
            return handler(parsed, correlation_id)
        except ValidationFailedError as e:
            self._audit(LedgerEventBuilder.validation_failed(
                command=parsed.command.value,
                message=str(e),
                issues=[issue.model_dump() for issue in e.issues],
                correlation_id=correlation_id,
            ))
            return CommandResult.failure(str(e), parsed.command)
        except LedgerError as e:
            self._audit(LedgerEventBuilder.command_rejected(
                command_text=parsed.raw,
                reason=str(e),
                correlation_id=correlation_id,
            ))
            return CommandResult.failure(str(e), parsed.command)

    # ----- records ---------------------------------------------------------

    def _add_expense(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        outcome = self._manager.add_expense(parsed.record)
        self._audit(LedgerEventBuilder.record_added(outcome.record, cid))
        alert = self._check_alert(outcome.record.category, outcome.budget_status, cid)
        return CommandResult(command=parsed.command, added=outcome, alert=alert)

    def _add_income(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        outcome = self._manager.add_income(parsed.record)
        self._audit(LedgerEventBuilder.record_added(outcome.record, cid))
        return CommandResult(command=parsed.command, added=outcome)

    def _modify_expense(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        outcome = self._manager.modify_expense(parsed.index, parsed.patch)
        self._audit(LedgerEventBuilder.record_modified(
            outcome.position, outcome.old_record, outcome.new_record, cid
        ))
        alert = self._check_alert(outcome.new_record.category, outcome.budget_status, cid)
        return CommandResult(command=parsed.command, modified=outcome, alert=alert)

    def _modify_income(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        outcome = self._manager.modify_income(parsed.index, parsed.patch)
        self._audit(LedgerEventBuilder.record_modified(
            outcome.position, outcome.old_record, outcome.new_record, cid
        ))
        return CommandResult(command=parsed.command, modified=outcome)

    def _delete_expense(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        removed = self._manager.delete_expense(parsed.index)
        self._audit(LedgerEventBuilder.record_deleted(parsed.index, removed, cid))
        return CommandResult(command=parsed.command, deleted=removed, position=parsed.index)

    def _delete_income(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        removed = self._manager.delete_income(parsed.index)
        self._audit(LedgerEventBuilder.record_deleted(parsed.index, removed, cid))
        return CommandResult(command=parsed.command, deleted=removed, position=parsed.index)

    def _list_expense(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        if parsed.month:
            records = self._manager.expenses_for_month(parsed.month)
        else:
            records = self._manager.expenses_view()
        return CommandResult(command=parsed.command, records=list(records), month=parsed.month)

    def _list_income(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        if parsed.month:
            records = self._manager.incomes_for_month(parsed.month)
        else:
            records = self._manager.incomes_view()
        return CommandResult(command=parsed.command, records=list(records), month=parsed.month)

    # ----- budgets ---------------------------------------------------------

    def _set_budget(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        budget = self._manager.set_budget(parsed.category, parsed.amount)
        self._audit(LedgerEventBuilder.budget_set(budget, cid))
        status = self._manager.get_budget_status(budget.category)
        alert = self._check_alert(budget.category, status, cid)
        return CommandResult(command=parsed.command, budget=budget, alert=alert)

    def _delete_budget(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        budget = self._manager.delete_budget(parsed.category)
        self._audit(LedgerEventBuilder.budget_deleted(budget, cid))
        return CommandResult(command=parsed.command, budget=budget)

    def _list_budget(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        budgets = self._manager.budgets_view()
        reports = [
            BudgetReport(
                category=category,
                limit=budgets[category].limit,
                total_spent=self._manager.total_expense_for_category(category),
                status=self._manager.get_budget_status(category),
            )
            for category in ExpenseCategory
            if category in budgets
        ]
        return CommandResult(command=parsed.command, budgets=reports)

    # ----- queries ---------------------------------------------------------

    def _balance(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        return self._summary(parsed, SummaryKind.BALANCE)

    def _summary_expense(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        return self._summary(parsed, SummaryKind.EXPENSE)

    def _summary_income(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        return self._summary(parsed, SummaryKind.INCOME)

    def _summary(self, parsed: ParsedCommand, kind: SummaryKind) -> CommandResult:
        result = self._summaries.execute(SummaryQuery(kind=kind, month=parsed.month))
        if not result.success:
            return CommandResult.failure(result.error_message, parsed.command)
        return CommandResult(command=parsed.command, summary=result, month=parsed.month)

    # ----- services --------------------------------------------------------

    def _export(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        path = parsed.path or self._export_default_path
        incomes = self._manager.incomes_view()
        expenses = self._manager.expenses_view()
        try:
            written = self._exporter.export(
                path,
                incomes,
                expenses,
                self._manager.total_income(),
                self._manager.total_expense(),
                self._manager.balance(),
            )
        except ExportError as e:
            self._audit(LedgerEventBuilder.export_failed(str(path), str(e), cid))
            return CommandResult.failure(str(e), parsed.command)

        self._audit(LedgerEventBuilder.export_completed(
            str(written), len(incomes), len(expenses), cid
        ))
        return CommandResult(command=parsed.command, export_path=str(written))

    def _tip(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        return CommandResult(command=parsed.command, tip=self._tips.random_tip())

    def _help(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        return CommandResult(command=parsed.command)

    def _bye(self, parsed: ParsedCommand, cid: UUID) -> CommandResult:
        return CommandResult(command=parsed.command, should_exit=True)

    # ----- internals -------------------------------------------------------

    def _check_alert(
        self,
        category: ExpenseCategory,
        status: Optional[BudgetStatus],
        cid: UUID,
    ) -> Optional[BudgetAlert]:
        if status is None or status.is_normal:
            return None
        budget = self._manager.budget_for(category)
        alert = BudgetAlert(
            category=category,
            status=status,
            total_spent=self._manager.total_expense_for_category(category),
            limit=budget.limit,
        )
        self._audit(LedgerEventBuilder.budget_alert(
            category, status, alert.total_spent, alert.limit, cid
        ))
        return alert

    def _audit(self, event: LedgerEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)


def create_app_components(
    settings: Optional[LedgerSettings] = None,
) -> tuple[CommandFlow, FinanceManager]:
    """
    Factory function to create all application components.

    Args:
        settings: Ledger settings to use. Defaults to the cached
                  environment settings.

    Returns:
        (command_flow, finance_manager)
    """
    settings = settings or get_settings().ledger

    manager = FinanceManager(BudgetEvaluator(str(settings.near_budget_ratio)))
    parser = CommandParser(allow_future_dates=settings.allow_future_dates)

    command_flow = CommandFlow(
        manager=manager,
        parser=parser,
        exporter=CsvExporter(),
        tips=TipsProvider(),
        audit_logger=AuditLogger(),
        export_default_path=settings.export_default_path,
    )

    return command_flow, manager
