"""Rich renderables for the expense tracker client."""
import logging
from datetime import datetime
from typing import Any, Dict, List

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from client.state import ViewState

logger = logging.getLogger(__name__)


def format_date(value: str) -> str:
    """Formats YYYY-MM-DD as e.g. 'Jan 15, 2025'."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").strftime("%b %d, %Y")
    except ValueError:
        logger.error(f"Invalid date format: {value}")
        return "Invalid date"


def format_amount(value: float) -> str:
    return f"${value:.2f}"


def render_expenses(state: ViewState):
    if state.loading:
        return Text("Loading expenses...", style="dim")
    if not state.filtered:
        return Text("No expenses found. Add some!", style="dim")

    table = Table(title="Expenses", expand=True)
    table.add_column("Description")
    table.add_column("Date")
    table.add_column("Category")
    table.add_column("Amount", justify="right", style="bold magenta")
    for expense in state.filtered:
        table.add_row(
            expense.description or "No description",
            format_date(expense.date),
            expense.category,
            format_amount(expense.amount),
        )
    return table


def render_state(state: ViewState) -> Group:
    parts = [Panel(Text(format_amount(state.total), style="bold magenta"), title="Total Expenses")]
    if state.error:
        parts.append(Panel(Text(state.error), title="Error", border_style="red"))
    parts.append(render_expenses(state))
    return Group(*parts)


def render_category_totals(rows: List[Dict[str, Any]]) -> Table:
    table = Table(title="By Category")
    table.add_column("Category")
    table.add_column("Count", justify="right")
    table.add_column("Total", justify="right")
    for row in rows:
        table.add_row(str(row.get("category")), str(row.get("count")), format_amount(row.get("total", 0)))
    return table
