"""
Console Frontend for FinTrack

This is the interface users type commands into.

DESIGN PRINCIPLES:
1. One command per line, one result per command
2. Clear error messages, always prefixed with "Error:"
3. Budget alerts are impossible to miss
4. Nothing is changed without an explicit command

All rendering lives here. The orchestrator hands back CommandResult
data; this module decides how it looks.
"""

import sys
from decimal import Decimal
from typing import Optional, TextIO

from fintrack.audit import configure_logging
from fintrack.commands import CommandType
from fintrack.config import LedgerSettings, get_settings
from fintrack.orchestrator import CommandFlow, CommandResult, create_app_components


PROMPT = "> "
WELCOME = "Welcome to FinTrack!"
GOODBYE = "Bye. Hope to see you again soon!"
DIVIDER = "-" * 60

HELP_TEXT = """\
FinTrack Command Summary
------------------------------------------------------------
add-expense a/<amount> c/<category> d/<YYYY-MM-DD> [des/<text>]
add-income a/<amount> c/<category> d/<YYYY-MM-DD> [des/<text>]
modify-expense <index> [a/<amount>] [c/<category>] [d/<YYYY-MM-DD>] [des/<text>]
modify-income <index> [a/<amount>] [c/<category>] [d/<YYYY-MM-DD>] [des/<text>]
delete-expense <index>
delete-income <index>
list-expense [d/YYYY-MM]
list-income [d/YYYY-MM]
balance [d/YYYY-MM]
budget c/<category> a/<amount>
delete-budget c/<category>
list-budget
summary-expense
summary-income
export [<filepath>]
tips
help
bye
------------------------------------------------------------
Expense categories: FOOD, STUDY, TRANSPORT, BILLS, ENTERTAINMENT, RENT, GROCERIES, OTHERS
Income categories: SALARY, SCHOLARSHIP, INVESTMENT, GIFT
Indexes refer to the numbers shown by list-expense / list-income."""


class ConsoleApp:
    """
    Read-eval-print loop over a CommandFlow.

    Input and output streams are injectable so the whole loop can be
    driven from tests.
    """

    def __init__(
        self,
        flow: CommandFlow,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        currency: str = "$",
    ):
        self._flow = flow
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout
        self._currency = currency

    def run(self) -> None:
        """Run until 'bye' or end of input."""
        self._print(WELCOME)
        self._print("Type 'help' for available commands.")
        self._print()

        while True:
            self._out.write(PROMPT)
            self._out.flush()
            line = self._in.readline()
            if not line:
                break
            if not line.strip():
                continue

            result = self._flow.handle(line)
            self.render(result)
            if result.should_exit:
                break

        self._print(GOODBYE)

    # =========================================================================
    # RENDERING
    # =========================================================================

    def render(self, result: CommandResult) -> None:
        """Print the result of one command."""
        if not result.success:
            self._print(f"Error: {result.error_message}")
            return

        renderer = {
            CommandType.ADD_EXPENSE: self._render_added,
            CommandType.ADD_INCOME: self._render_added,
            CommandType.MODIFY_EXPENSE: self._render_modified,
            CommandType.MODIFY_INCOME: self._render_modified,
            CommandType.DELETE_EXPENSE: self._render_deleted,
            CommandType.DELETE_INCOME: self._render_deleted,
            CommandType.LIST_EXPENSE: self._render_list,
            CommandType.LIST_INCOME: self._render_list,
            CommandType.BALANCE: self._render_balance,
            CommandType.BUDGET: self._render_budget_set,
            CommandType.DELETE_BUDGET: self._render_budget_deleted,
            CommandType.LIST_BUDGET: self._render_budget_list,
            CommandType.SUMMARY_EXPENSE: self._render_summary,
            CommandType.SUMMARY_INCOME: self._render_summary,
            CommandType.EXPORT: self._render_export,
            CommandType.TIPS: self._render_tip,
            CommandType.HELP: self._render_help,
        }.get(result.command)

        if renderer:
            renderer(result)
        if result.alert:
            self._render_alert(result)

    def _render_added(self, result: CommandResult) -> None:
        record = result.added.record
        kind = "Expense" if result.command == CommandType.ADD_EXPENSE else "Income"
        self._print(f"{kind} added:")
        self._render_record(record)

    def _render_modified(self, result: CommandResult) -> None:
        outcome = result.modified
        kind = "Expense" if result.command == CommandType.MODIFY_EXPENSE else "Income"
        self._print(f"{kind} at index {outcome.position} modified to:")
        self._render_record(outcome.new_record)

    def _render_deleted(self, result: CommandResult) -> None:
        kind = "Expense" if result.command == CommandType.DELETE_EXPENSE else "Income"
        self._print(f"{kind} deleted (index {result.position}):")
        self._render_record(result.deleted)

    def _render_list(self, result: CommandResult) -> None:
        plural = "Expenses" if result.command == CommandType.LIST_EXPENSE else "Incomes"
        if not result.records:
            self._print(f"No {plural.lower()} recorded.")
            return

        if result.month:
            self._print(f"{plural} for the month {result.month} (Newest first):")
        else:
            self._print(f"{plural} (Newest first):")
        for number, record in enumerate(result.records, start=1):
            self._print(f"#{number}")
            self._render_record(record)
            self._print(DIVIDER)

    def _render_balance(self, result: CommandResult) -> None:
        summary = result.summary
        if result.month:
            self._print(f"Overall Balance for the month {result.month}: {self._money(summary.balance)}")
        else:
            self._print(f"Overall Balance: {self._money(summary.balance)}")
        self._print(f"  Total Income:  {self._money(summary.total_income)}")
        self._print(f"  Total Expense: {self._money(summary.total_expense)}")

    def _render_budget_set(self, result: CommandResult) -> None:
        budget = result.budget
        self._print(f"Budget set for {budget.category.name}: {self._money(budget.limit)}")

    def _render_budget_deleted(self, result: CommandResult) -> None:
        self._print(f"Budget deleted for {result.budget.category.name}.")

    def _render_budget_list(self, result: CommandResult) -> None:
        if not result.budgets:
            self._print("No budgets have been set.")
            return

        self._print("Budgets:")
        for report in result.budgets:
            if report.status.is_over_budget:
                state = "OVER"
            elif report.status.is_near_budget:
                state = "NEAR"
            else:
                state = "OK"
            self._print(
                f"  {report.category.name}: {self._money(report.total_spent)} spent "
                f"of {self._money(report.limit)} "
                f"({self._money(report.remaining)} left) [{state}]"
            )

    def _render_summary(self, result: CommandResult) -> None:
        summary = result.summary
        if result.command == CommandType.SUMMARY_EXPENSE:
            self._print("Here is an overall summary of your expenses!")
            total, label = summary.total_expense, "Total Expense"
        else:
            self._print("Here is an overall summary of your income!")
            total, label = summary.total_income, "Total Income"

        self._print(f"{label}: {self._money(total)}")
        if not summary.data_found:
            self._print("Nothing recorded yet.")
            return

        self._print(f"Highest category: {summary.top_category}")
        self._print("Breakdown by category:")
        for category, amount in summary.breakdown.items():
            share = (amount / total * 100) if total else Decimal("0")
            self._print(f"  {category}: {self._money(amount)} ({share:.1f}%)")

    def _render_export(self, result: CommandResult) -> None:
        self._print(f"Successfully exported data to: {result.export_path}")

    def _render_tip(self, result: CommandResult) -> None:
        self._print(f"Tip: {result.tip}")

    def _render_help(self, result: CommandResult) -> None:
        self._print(HELP_TEXT)

    def _render_alert(self, result: CommandResult) -> None:
        alert = result.alert
        name = alert.category.name
        self._print(DIVIDER)
        self._print("BUDGET ALERT")
        if alert.status.is_over_budget:
            self._print(
                f"You have exceeded your {name} budget of {self._money(alert.limit)}! "
                f"Spent: {self._money(alert.total_spent)}"
            )
        else:
            self._print(
                f"You are close to your {name} budget of {self._money(alert.limit)}. "
                f"Spent: {self._money(alert.total_spent)}"
            )
        self._print(DIVIDER)

    def _render_record(self, record) -> None:
        self._print(f"  Amount: {self._money(record.amount)}")
        self._print(f"  Category: {record.category.name}")
        self._print(f"  Date: {record.date.isoformat()}")
        if record.description:
            self._print(f"  Description: {record.description}")

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _money(self, amount: Decimal) -> str:
        sign = "-" if amount < 0 else ""
        return f"{sign}{self._currency}{abs(amount):.2f}"

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)


def main(settings: Optional[LedgerSettings] = None) -> None:
    """Console entry point."""
    settings = settings or get_settings().ledger
    configure_logging(settings.log_level, json=settings.log_json)

    flow, _ = create_app_components(settings)
    ConsoleApp(flow, currency=settings.currency_symbol).run()


if __name__ == "__main__":
    main()
