"""Service layer for handling expense-related logic."""
import logging
import math
from numbers import Real
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models.expense import CategoryTotal, Expense, ExpenseCreate, parse_iso_date
from services.store import ExpenseStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("amount", "category", "date")

SAMPLE_EXPENSES = [
    {"amount": 45.99, "category": "Food", "date": "2025-01-15", "description": "Grocery shopping at Whole Foods"},
    {"amount": 12.50, "category": "Transportation", "date": "2025-01-14", "description": "Uber ride to work"},
    {"amount": 1200.00, "category": "Housing", "date": "2025-01-01", "description": "Monthly rent payment"},
    {"amount": 35.75, "category": "Entertainment", "date": "2025-01-10", "description": "Movie tickets and snacks"},
    {"amount": 89.99, "category": "Utilities", "date": "2025-01-05", "description": "Electricity bill"},
    {"amount": 120.00, "category": "Healthcare", "date": "2025-01-08", "description": "Doctor appointment co-pay"},
    {"amount": 65.32, "category": "Shopping", "date": "2025-01-12", "description": "New t-shirts from H&M"},
]


class ExpenseValidationError(ValueError):
    """Raised when expense input is present but invalid."""


class MissingFieldsError(ExpenseValidationError):
    """Raised when a required field is absent or blank."""


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _document_to_expense(doc: Dict[str, Any]) -> Expense:
    if '_id' in doc:
        doc['id'] = str(doc.pop('_id'))
    return Expense(**doc)


def validate_new_expense(payload: Dict[str, Any]) -> ExpenseCreate:
    """
    Validates raw input for a new expense.

    Raises MissingFieldsError when amount, category or date is absent or blank
    and ExpenseValidationError for any other invalid value (e.g. amount <= 0).
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ExpenseValidationError("Request body must be a JSON object.")

    missing = [name for name in REQUIRED_FIELDS if _is_missing(payload.get(name))]
    if missing:
        logger.warning(f"Rejected expense, missing fields: {missing}")
        raise MissingFieldsError("Please provide amount, category, and date")

    amount = payload.get("amount")
    if isinstance(amount, bool):
        raise ExpenseValidationError("Amount must be a positive number.")

    try:
        return ExpenseCreate(
            amount=amount,
            category=payload.get("category"),
            date=payload.get("date"),
            description=payload.get("description"),
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = first["loc"][0] if first.get("loc") else "input"
        logger.warning(f"Rejected expense, validation error on '{field}': {first['msg']}")
        if field == "amount":
            raise ExpenseValidationError("Amount must be a positive number.")
        if field == "date":
            raise ExpenseValidationError("Date must be a valid date in YYYY-MM-DD format.")
        raise ExpenseValidationError(f"Invalid value for '{field}': {first['msg']}")


# --- Database Interaction Functions (Depend on store passed from route) ---

async def get_expenses_from_db(
    store: ExpenseStore,
    category: Optional[str] = None,
    date: Optional[str] = None,
) -> List[Expense]:
    """Fetches expenses matching the optional exact-match filters, newest date first."""
    filters = {}
    if category:
        filters["category"] = category
    if date:
        filters["date"] = date

    logger.info(f"Fetching expenses from collection '{store.name}' with filters {filters}...")
    try:
        docs = await store.find(filters)
    except Exception as e:
        logger.exception(f"Database error fetching expenses: {e}")
        raise ConnectionError(f"Database error fetching expenses: {e}")

    expenses = []
    for doc in docs:
        try:
            expenses.append(_document_to_expense(doc))
        except ValidationError as e:
            logger.error(f"Data validation error for document ID {doc.get('id', 'N/A')}: {e}")
            # Skip invalid documents
            continue
    logger.info(f"Fetched {len(expenses)} expenses successfully.")
    return expenses


async def add_expense_to_db(store: ExpenseStore, payload: Optional[Dict[str, Any]]) -> Expense:
    """Validates and stores a single expense, returning the stored record."""
    expense = validate_new_expense(payload)
    try:
        doc = await store.insert(expense)
    except Exception as e:
        logger.exception(f"Database error adding expense: {e}")
        raise ConnectionError(f"Database error adding expense: {e}")

    stored = _document_to_expense(doc)
    logger.info(f"Added expense {stored.id}: {stored.amount} ({stored.category}) on {stored.date}")
    return stored


async def get_total_for_range(store: ExpenseStore, start: Optional[str], end: Optional[str]) -> float:
    """Sums the amounts of all expenses whose date falls within [start, end]."""
    if _is_missing(start) or _is_missing(end):
        raise MissingFieldsError("Please provide start and end dates")
    try:
        start = parse_iso_date(start)
        end = parse_iso_date(end)
    except ValueError as ve:
        raise ExpenseValidationError(str(ve))

    try:
        docs = await store.find_in_date_range(start, end)
    except Exception as e:
        logger.exception(f"Database error calculating total: {e}")
        raise ConnectionError(f"Database error calculating total: {e}")

    amounts = [doc.get("amount") for doc in docs]
    amounts = [a for a in amounts if isinstance(a, Real) and not isinstance(a, bool)]
    if len(amounts) != len(docs):
        logger.error(f"Skipped {len(docs) - len(amounts)} documents with a non-numeric amount in {start}..{end}")
    total = math.fsum(amounts)
    logger.info(f"Total for {start}..{end}: {total} across {len(amounts)} expenses.")
    return total


async def get_totals_by_category(store: ExpenseStore) -> List[CategoryTotal]:
    """Sums and counts expenses per category, largest total first."""
    try:
        rows = await store.totals_by_category()
    except Exception as e:
        logger.exception(f"Database error fetching category statistics: {e}")
        raise ConnectionError(f"Database error fetching category statistics: {e}")

    totals = []
    for row in rows:
        try:
            totals.append(CategoryTotal(category=row["_id"], total=row["total"], count=row["count"]))
        except ValidationError as e:
            logger.error(f"Skipping category row {row.get('_id')!r}: {e}")
    return totals


async def seed_initial_data(store: ExpenseStore) -> int:
    """Inserts the sample expenses when the collection is empty. Returns the number inserted."""
    try:
        if await store.count() > 0:
            return 0
        logger.info("Seeding initial expense data...")
        inserted = await store.insert_many([ExpenseCreate(**item) for item in SAMPLE_EXPENSES])
        logger.info("Initial data seeded successfully!")
        return inserted
    except Exception as e:
        logger.error(f"Error seeding initial data: {e}")
        return 0
