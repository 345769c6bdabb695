import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

import main
from routes import get_expense_store
from services.store import ExpenseStore


@pytest.fixture
def store():
    return ExpenseStore(AsyncMongoMockClient()["expense_tracker_test"].get_collection("expenses"))


@pytest.fixture
def api(store):
    """TestClient bound to a fresh in-memory store. Lifespan is not run, so nothing is seeded."""
    main.app.dependency_overrides[get_expense_store] = lambda: store
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def two_expenses(api):
    food = api.post("/api/expenses", json={"amount": 45.99, "category": "Food", "date": "2025-01-15"})
    transport = api.post("/api/expenses", json={"amount": 12.50, "category": "Transportation", "date": "2025-01-14"})
    assert food.status_code == 201
    assert transport.status_code == 201
    return food.json(), transport.json()
