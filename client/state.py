"""
View state for the expense tracker client.

All state lives in one immutable `ViewState`. Every change is a pure
function that takes a state and returns a new one. Responses are tagged
with the sequence number returned by `request_started`; a response whose
tag is no longer the latest one is ignored, so a slow request can never
overwrite the result of a newer one.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date
from numbers import Real
from typing import Any, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

CATEGORIES = (
    "Food", "Transportation", "Housing", "Entertainment",
    "Utilities", "Healthcare", "Shopping", "Other",
)


def today() -> str:
    return date.today().strftime("%Y-%m-%d")


@dataclass(frozen=True)
class ExpenseItem:
    amount: float
    category: str
    date: str
    description: str = ""
    id: Optional[str] = None


@dataclass(frozen=True)
class AddForm:
    amount: str = ""
    category: str = ""
    date: str = field(default_factory=today)
    description: str = ""


@dataclass(frozen=True)
class FilterForm:
    category: str = ""
    date: str = ""
    start_date: str = ""
    end_date: str = ""


@dataclass(frozen=True)
class ViewState:
    expenses: Tuple[ExpenseItem, ...] = ()
    filtered: Tuple[ExpenseItem, ...] = ()
    loading: bool = True
    error: Optional[str] = None
    total: float = 0.0
    add_form: AddForm = field(default_factory=AddForm)
    filter_form: FilterForm = field(default_factory=FilterForm)
    show_add_modal: bool = False
    show_filter_modal: bool = False
    request_seq: int = 0


# --- Record validation ---

def is_valid_expense(value: Any) -> bool:
    """Checks that a fetched element has the shape of an expense."""
    if not isinstance(value, dict):
        return False
    amount = value.get("amount")
    category = value.get("category")
    day = value.get("date")
    description = value.get("description", "")
    return (
        isinstance(amount, Real)
        and not isinstance(amount, bool)
        and not math.isnan(amount)
        and amount > 0
        and isinstance(category, str)
        and category.strip() != ""
        and isinstance(day, str)
        and day.strip() != ""
        and isinstance(description, str)
    )


def valid_expenses(data: Iterable[Any]) -> Tuple[ExpenseItem, ...]:
    """Keeps only well-formed elements, logging how many were dropped."""
    data = list(data)
    items = tuple(
        ExpenseItem(
            amount=float(value["amount"]),
            category=value["category"],
            date=value["date"],
            description=value.get("description", ""),
            id=value.get("id"),
        )
        for value in data
        if is_valid_expense(value)
    )
    if len(items) != len(data):
        logger.warning(f"Filtered out {len(data) - len(items)} invalid expenses")
    return items


def total_of(items: Iterable[ExpenseItem]) -> float:
    return math.fsum(item.amount for item in items)


# --- Request lifecycle ---

def request_started(state: ViewState) -> ViewState:
    """Marks a new request in flight. Its tag is the returned state's `request_seq`."""
    return replace(state, loading=True, error=None, request_seq=state.request_seq + 1)


def _is_current(state: ViewState, seq: int) -> bool:
    if seq != state.request_seq:
        logger.debug(f"Dropping stale response #{seq} (latest is #{state.request_seq})")
        return False
    return True


def load_succeeded(state: ViewState, seq: int, items: Tuple[ExpenseItem, ...]) -> ViewState:
    if not _is_current(state, seq):
        return state
    return replace(state, expenses=items, filtered=items, total=total_of(items), loading=False)


def load_failed(state: ViewState, seq: int, message: str) -> ViewState:
    if not _is_current(state, seq):
        return state
    return replace(state, expenses=(), filtered=(), total=0.0, loading=False, error=message)


def filter_applied(state: ViewState, seq: int, items: Tuple[ExpenseItem, ...]) -> ViewState:
    if not _is_current(state, seq):
        return state
    return replace(state, filtered=items, total=total_of(items), loading=False, show_filter_modal=False)


def filter_failed(state: ViewState, seq: int, message: str) -> ViewState:
    if not _is_current(state, seq):
        return state
    return replace(state, filtered=(), total=0.0, loading=False, error=message)


def filter_reset(state: ViewState) -> ViewState:
    """Restores the unfiltered list. Any request still in flight becomes stale."""
    return replace(
        state,
        filtered=state.expenses,
        total=total_of(state.expenses),
        filter_form=FilterForm(),
        show_filter_modal=False,
        loading=False,
        error=None,
        request_seq=state.request_seq + 1,
    )


def total_computed(state: ViewState, seq: int, total: float) -> ViewState:
    # Only the displayed total changes; the list stays as it is
    if not _is_current(state, seq):
        return state
    return replace(state, total=total, loading=False, show_filter_modal=False)


def total_failed(state: ViewState, seq: int, message: str) -> ViewState:
    if not _is_current(state, seq):
        return state
    return replace(state, total=0.0, loading=False, error=message)


# --- Forms, dialogs, errors ---

def error_set(state: ViewState, message: str) -> ViewState:
    return replace(state, error=message)


def error_cleared(state: ViewState) -> ViewState:
    return replace(state, error=None)


def add_form_updated(state: ViewState, **fields) -> ViewState:
    return replace(state, add_form=replace(state.add_form, **fields))


def filter_form_updated(state: ViewState, **fields) -> ViewState:
    return replace(state, filter_form=replace(state.filter_form, **fields))


def add_modal_toggled(state: ViewState, visible: bool) -> ViewState:
    return replace(state, show_add_modal=visible)


def filter_modal_toggled(state: ViewState, visible: bool) -> ViewState:
    return replace(state, show_filter_modal=visible)


def expense_added(state: ViewState) -> ViewState:
    """Clears the add form and closes its dialog after a successful submit."""
    return replace(state, add_form=AddForm(), show_add_modal=False)
