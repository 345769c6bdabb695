import pytest
import requests

from client.api import ApiError, ExpenseApiClient
from client.tracker import ExpenseTracker


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Returns canned responses and records the calls made."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("get", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("post", url, **kwargs)


@pytest.fixture
def tracker(api):
    """Tracker talking to the real app through the in-process test client."""
    return ExpenseTracker(ExpenseApiClient(base_url="", session=api))


def fill_add_form(tracker, **overrides):
    fields = {"amount": "45.99", "category": "Food", "date": "2025-01-15", "description": " Groceries "}
    fields.update(overrides)
    tracker.update_add_form(**fields)


def test_load_against_app(tracker, two_expenses):
    tracker.load()
    state = tracker.state
    assert state.error is None
    assert state.loading is False
    assert [e.category for e in state.filtered] == ["Food", "Transportation"]
    assert state.total == pytest.approx(58.49)


def test_add_then_reload(tracker):
    tracker.open_add_dialog()
    fill_add_form(tracker)
    tracker.add()
    state = tracker.state
    assert state.error is None
    assert state.show_add_modal is False
    assert state.add_form.amount == ""
    assert len(state.expenses) == 1
    assert state.expenses[0].description == "Groceries"


@pytest.mark.parametrize("overrides, message", [
    ({"amount": ""}, "Please fill in all required fields"),
    ({"category": ""}, "Please fill in all required fields"),
    ({"amount": "abc"}, "Please enter a valid amount"),
    ({"amount": "-4"}, "Please enter a valid amount"),
    ({"amount": "0"}, "Please enter a valid amount"),
])
def test_add_local_validation_blocks_submit(overrides, message):
    session = FakeSession()
    tracker = ExpenseTracker(ExpenseApiClient(session=session))
    fill_add_form(tracker, **overrides)
    tracker.add()
    assert tracker.state.error == message
    assert session.calls == []


def test_add_server_rejection_keeps_state(tracker, two_expenses):
    tracker.load()
    before = tracker.state.expenses
    fill_add_form(tracker, date="2025-13-01")
    tracker.add()
    assert tracker.state.error == "Error adding expense. Please try again."
    assert tracker.state.expenses == before


def test_apply_filter_and_reset(tracker, two_expenses):
    tracker.load()
    tracker.open_filter_dialog()
    tracker.update_filter_form(category="Transportation")
    tracker.apply_filter()
    state = tracker.state
    assert [e.category for e in state.filtered] == ["Transportation"]
    assert state.total == pytest.approx(12.5)
    assert len(state.expenses) == 2
    assert state.show_filter_modal is False

    tracker.reset_filter()
    assert len(tracker.state.filtered) == 2
    assert tracker.state.total == pytest.approx(58.49)
    assert tracker.state.filter_form.category == ""


def test_compute_range_total(tracker, two_expenses):
    tracker.load()
    tracker.update_filter_form(start_date="2025-01-15", end_date="2025-01-31")
    tracker.compute_range_total()
    assert tracker.state.total == pytest.approx(45.99)
    assert len(tracker.state.filtered) == 2


def test_compute_range_total_needs_both_dates(tracker):
    tracker.update_filter_form(start_date="2025-01-15")
    tracker.compute_range_total()
    assert tracker.state.error == "Please select both start and end dates"


def test_compute_range_total_rejects_non_numeric_total():
    tracker = ExpenseTracker(ExpenseApiClient(session=FakeSession(FakeResponse(payload={"total": "12"}))))
    tracker.update_filter_form(start_date="2025-01-01", end_date="2025-01-31")
    tracker.compute_range_total()
    assert tracker.state.error == "Error fetching total. Please try again."
    assert tracker.state.total == 0.0


def test_load_excludes_invalid_records():
    payload = [
        {"id": "1", "amount": 10.0, "category": "Food", "date": "2025-01-15"},
        {"id": "2", "amount": "abc", "category": "Food", "date": "2025-01-15"},
    ]
    tracker = ExpenseTracker(ExpenseApiClient(session=FakeSession(FakeResponse(payload=payload))))
    tracker.load()
    assert [e.id for e in tracker.state.filtered] == ["1"]
    assert tracker.state.total == 10.0


@pytest.mark.parametrize("response", [
    requests.ConnectionError("refused"),
    FakeResponse(status_code=500, payload={"message": "Server error"}),
    FakeResponse(payload=ValueError("no json")),
    FakeResponse(payload={"not": "a list"}),
])
def test_load_failure_sets_error(response):
    tracker = ExpenseTracker(ExpenseApiClient(session=FakeSession(response)))
    tracker.load()
    assert tracker.state.error == "Error fetching expenses. Please try again later."
    assert tracker.state.filtered == ()
    assert tracker.state.loading is False


def test_api_client_builds_urls_and_params():
    session = FakeSession(FakeResponse(payload=[]))
    ExpenseApiClient("http://example.test/", session=session).list_expenses(category="Food")
    assert session.calls == [("get", "http://example.test/api/expenses", {"params": {"category": "Food"}})]


def test_api_client_error_carries_status():
    client = ExpenseApiClient(session=FakeSession(FakeResponse(status_code=400, payload={"message": "bad"})))
    with pytest.raises(ApiError) as excinfo:
        client.create_expense(1.0, "Food", "2025-01-01")
    assert excinfo.value.status_code == 400


def test_category_breakdown(tracker, two_expenses):
    rows = tracker.category_breakdown()
    assert [row["category"] for row in rows] == ["Food", "Transportation"]
