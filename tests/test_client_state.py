import math

import pytest

from client import state as view
from client.state import ExpenseItem, FilterForm, ViewState, is_valid_expense, valid_expenses

FOOD = ExpenseItem(amount=45.99, category="Food", date="2025-01-15")
RIDE = ExpenseItem(amount=12.5, category="Transportation", date="2025-01-14")


@pytest.mark.parametrize("value", [
    {"amount": "abc", "category": "Food", "date": "2025-01-15"},
    {"amount": 0, "category": "Food", "date": "2025-01-15"},
    {"amount": -3, "category": "Food", "date": "2025-01-15"},
    {"amount": math.nan, "category": "Food", "date": "2025-01-15"},
    {"amount": True, "category": "Food", "date": "2025-01-15"},
    {"amount": 5, "category": " ", "date": "2025-01-15"},
    {"amount": 5, "category": "Food", "date": ""},
    {"amount": 5, "category": "Food", "date": "2025-01-15", "description": None},
    ["not", "a", "dict"],
    None,
])
def test_is_valid_expense_rejects(value):
    assert not is_valid_expense(value)


def test_valid_expenses_drops_wrong_amount_type(caplog):
    data = [
        {"id": "a", "amount": 45.99, "category": "Food", "date": "2025-01-15", "description": "Groceries"},
        {"id": "b", "amount": "abc", "category": "Food", "date": "2025-01-15"},
        {"id": "c", "amount": 12, "category": "Other", "date": "2025-01-14"},
    ]
    items = valid_expenses(data)
    assert [item.id for item in items] == ["a", "c"]
    assert items[1].description == ""
    assert "Filtered out 1 invalid expenses" in caplog.text


def test_load_succeeded_sets_lists_and_total():
    state = view.request_started(ViewState())
    state = view.load_succeeded(state, state.request_seq, (FOOD, RIDE))
    assert state.expenses == state.filtered == (FOOD, RIDE)
    assert state.total == pytest.approx(58.49)
    assert state.loading is False


def test_stale_response_is_ignored():
    state = view.request_started(ViewState())
    first = state.request_seq
    state = view.request_started(state)
    second = state.request_seq

    state = view.filter_applied(state, second, (RIDE,))
    state = view.filter_applied(state, first, (FOOD,))
    assert state.filtered == (RIDE,)
    assert state.total == pytest.approx(12.5)


def test_stale_failure_is_ignored():
    state = view.request_started(ViewState())
    stale = state.request_seq
    state = view.request_started(state)
    state = view.load_succeeded(state, state.request_seq, (FOOD,))
    assert view.load_failed(state, stale, "boom") is state


def test_filter_reset_restores_full_list_and_invalidates_in_flight():
    state = view.request_started(ViewState())
    state = view.load_succeeded(state, state.request_seq, (FOOD, RIDE))
    state = view.filter_form_updated(state, category="Food", start_date="2025-01-01")
    state = view.request_started(state)
    in_flight = state.request_seq
    state = view.filter_applied(state, in_flight, (FOOD,))
    state = view.request_started(state)
    in_flight = state.request_seq

    state = view.filter_reset(state)
    assert state.filtered == (FOOD, RIDE)
    assert state.total == pytest.approx(58.49)
    assert state.filter_form == FilterForm()

    assert view.filter_applied(state, in_flight, ()) is state


def test_total_computed_leaves_list_alone():
    state = view.request_started(ViewState())
    state = view.load_succeeded(state, state.request_seq, (FOOD, RIDE))
    state = view.filter_modal_toggled(state, True)
    state = view.request_started(state)
    state = view.total_computed(state, state.request_seq, 12.5)
    assert state.total == 12.5
    assert state.filtered == (FOOD, RIDE)
    assert state.show_filter_modal is False


def test_failures_clear_what_they_replace():
    state = view.request_started(ViewState())
    state = view.load_succeeded(state, state.request_seq, (FOOD,))

    failed = view.request_started(state)
    failed = view.filter_failed(failed, failed.request_seq, "nope")
    assert failed.filtered == ()
    assert failed.expenses == (FOOD,)
    assert failed.total == 0.0
    assert failed.error == "nope"

    failed = view.request_started(state)
    failed = view.total_failed(failed, failed.request_seq, "nope")
    assert failed.filtered == (FOOD,)
    assert failed.total == 0.0


def test_expense_added_resets_form():
    state = view.add_form_updated(ViewState(), amount="3", category="Food", description="x")
    state = view.add_modal_toggled(state, True)
    state = view.expense_added(state)
    assert state.add_form.amount == ""
    assert state.add_form.category == ""
    assert state.add_form.date == view.today()
    assert state.show_add_modal is False
