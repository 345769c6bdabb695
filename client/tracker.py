"""Client operations: each one runs a request and applies the matching state transition."""
import logging
import math
from numbers import Real
from typing import Any, Dict, List

from client import state as view
from client.api import ApiError, ExpenseApiClient
from client.state import ViewState

logger = logging.getLogger(__name__)


class ExpenseTracker:
    def __init__(self, api: ExpenseApiClient):
        self.api = api
        self.state = ViewState()

    def load(self):
        self.state = view.request_started(self.state)
        seq = self.state.request_seq
        try:
            items = view.valid_expenses(self.api.list_expenses())
        except ApiError as e:
            logger.error(f"Fetch expenses error: {e}")
            self.state = view.load_failed(self.state, seq, "Error fetching expenses. Please try again later.")
            return
        self.state = view.load_succeeded(self.state, seq, items)

    def add(self):
        """Validates the add form, submits it and reloads on success."""
        self.state = view.error_cleared(self.state)
        form = self.state.add_form
        if not form.amount.strip() or not form.category or not form.date:
            self.state = view.error_set(self.state, "Please fill in all required fields")
            return

        try:
            amount = float(form.amount)
        except ValueError:
            amount = math.nan
        if math.isnan(amount) or math.isinf(amount) or amount <= 0:
            self.state = view.error_set(self.state, "Please enter a valid amount")
            return

        try:
            self.api.create_expense(amount, form.category, form.date, form.description.strip())
        except ApiError as e:
            logger.error(f"Add expense error: {e}")
            self.state = view.error_set(self.state, "Error adding expense. Please try again.")
            return

        self.state = view.expense_added(self.state)
        self.load()

    def apply_filter(self):
        form = self.state.filter_form
        self.state = view.request_started(self.state)
        seq = self.state.request_seq
        try:
            items = view.valid_expenses(self.api.list_expenses(category=form.category, date=form.date))
        except ApiError as e:
            logger.error(f"Apply filters error: {e}")
            self.state = view.filter_failed(self.state, seq, "Error applying filters. Please try again.")
            return
        self.state = view.filter_applied(self.state, seq, items)

    def reset_filter(self):
        self.state = view.filter_reset(self.state)

    def compute_range_total(self):
        form = self.state.filter_form
        if not form.start_date or not form.end_date:
            self.state = view.error_set(self.state, "Please select both start and end dates")
            return

        self.state = view.request_started(self.state)
        seq = self.state.request_seq
        try:
            total = self.api.total_for_range(form.start_date, form.end_date)
            if not isinstance(total, Real) or isinstance(total, bool) or math.isnan(total):
                raise ApiError("Invalid total amount received")
        except ApiError as e:
            logger.error(f"Get total error: {e}")
            self.state = view.total_failed(self.state, seq, "Error fetching total. Please try again.")
            return
        self.state = view.total_computed(self.state, seq, float(total))

    def category_breakdown(self) -> List[Dict[str, Any]]:
        """Fetches per-category totals. Failures set the error message and return an empty list."""
        try:
            return self.api.totals_by_category()
        except ApiError as e:
            logger.error(f"Category breakdown error: {e}")
            self.state = view.error_set(self.state, "Error fetching category totals. Please try again.")
            return []

    # --- Form and dialog helpers ---

    def update_add_form(self, **fields):
        self.state = view.add_form_updated(self.state, **fields)

    def update_filter_form(self, **fields):
        self.state = view.filter_form_updated(self.state, **fields)

    def open_add_dialog(self):
        self.state = view.add_modal_toggled(self.state, True)

    def close_add_dialog(self):
        self.state = view.add_modal_toggled(self.state, False)

    def open_filter_dialog(self):
        self.state = view.filter_modal_toggled(self.state, True)

    def close_filter_dialog(self):
        self.state = view.filter_modal_toggled(self.state, False)

    def dismiss_error(self):
        self.state = view.error_cleared(self.state)
