"""Interactive console for the expense tracker: `python -m client`."""
import os
import logging
import logging.config

from dotenv import load_dotenv
from rich.console import Console
from rich.prompt import Prompt

from client.api import ExpenseApiClient
from client.state import CATEGORIES
from client.tracker import ExpenseTracker
from client.view import render_category_totals, render_state

load_dotenv()

EXPENSES_API_URL = os.getenv("EXPENSES_API_URL", "http://localhost:5000")

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(name)s - %(message)s"},
    },
    "handlers": {
        "default": {
            "class": "rich.logging.RichHandler",
            "formatter": "default",
            "show_path": False,
            "markup": False,
        },
    },
    "loggers": {
        "": {
            "handlers": ["default"],
            "level": "WARNING",
        },
    },
}

logging.config.dictConfig(LOGGING_CONFIG)

console = Console()

MENU = {
    "a": "add expense",
    "f": "filter",
    "r": "reset filter",
    "t": "total for date range",
    "c": "totals by category",
    "q": "quit",
}


def add_dialog(tracker: ExpenseTracker):
    tracker.open_add_dialog()
    form = tracker.state.add_form
    tracker.update_add_form(
        amount=Prompt.ask("Amount*"),
        category=Prompt.ask("Category*", choices=list(CATEGORIES)),
        date=Prompt.ask("Date* (YYYY-MM-DD)", default=form.date),
        description=Prompt.ask("Description", default=""),
    )
    tracker.add()
    # The console has no dialog to keep open on failure
    tracker.close_add_dialog()


def filter_dialog(tracker: ExpenseTracker):
    tracker.open_filter_dialog()
    category = Prompt.ask("Category (blank for all)", choices=["", *CATEGORIES], default="", show_choices=False)
    date = Prompt.ask("Date (YYYY-MM-DD, blank for any)", default="")
    tracker.update_filter_form(category=category, date=date)
    tracker.apply_filter()
    tracker.close_filter_dialog()


def range_total_dialog(tracker: ExpenseTracker):
    tracker.open_filter_dialog()
    start = Prompt.ask("Start date (YYYY-MM-DD)", default=tracker.state.filter_form.start_date)
    end = Prompt.ask("End date (YYYY-MM-DD)", default=tracker.state.filter_form.end_date)
    tracker.update_filter_form(start_date=start, end_date=end)
    tracker.compute_range_total()
    tracker.close_filter_dialog()


def main():
    tracker = ExpenseTracker(ExpenseApiClient(EXPENSES_API_URL))
    tracker.load()
    while True:
        console.print(render_state(tracker.state))
        tracker.dismiss_error()
        choice = Prompt.ask(
            " | ".join(f"[bold]{key}[/bold] {label}" for key, label in MENU.items()),
            choices=list(MENU),
            show_choices=False,
        )
        if choice == "a":
            add_dialog(tracker)
        elif choice == "f":
            filter_dialog(tracker)
        elif choice == "r":
            tracker.reset_filter()
        elif choice == "t":
            range_total_dialog(tracker)
        elif choice == "c":
            rows = tracker.category_breakdown()
            if rows:
                console.print(render_category_totals(rows))
        else:
            break


if __name__ == "__main__":
    main()
