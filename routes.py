"""API Routes for expenses"""
from fastapi import APIRouter, HTTPException, Body, Depends, Request, Query
from typing import Any, Dict, List, Annotated, Optional
from services import expenses_service
from services.store import ExpenseStore
from models.expense import Expense, CategoryTotal, RangeTotal
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"

# --- Dependency Function ---
def get_expense_store(request: Request) -> ExpenseStore:
    """Dependency to get the expense store from the request state."""
    store = getattr(request.state, "expense_store", None)
    if store is None:
        logger.error("Expense store not found in application state. Check startup logs.")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)
    return store

# Type hint for the dependency
ExpenseStoreDep = Annotated[ExpenseStore, Depends(get_expense_store)]

# --- API Routes ---

@router.get("/expenses", response_model=List[Expense], summary="List Expenses", description="Retrieves expenses, optionally filtered by exact category and/or date, sorted by date descending.")
async def list_expenses(
    store: ExpenseStoreDep,
    category: Optional[str] = Query(None, description="Exact category to match."),
    date: Optional[str] = Query(None, description="Exact date (YYYY-MM-DD) to match."),
) -> List[Expense]:
    logger.info(f"GET /expenses endpoint called. category={category!r} date={date!r}")
    try:
        return await expenses_service.get_expenses_from_db(store, category=category, date=date)
    except ConnectionError as ce:
        logger.error(f"Connection error fetching expenses: {ce}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

@router.post("/expenses", response_model=Expense, status_code=201, summary="Add Expense", description="Validates and stores a new expense.")
async def create_expense(store: ExpenseStoreDep, payload: Annotated[Optional[Dict[str, Any]], Body()] = None) -> Expense:
    logger.info("POST /expenses endpoint called.")
    try:
        return await expenses_service.add_expense_to_db(store, payload)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except ConnectionError as ce:
        logger.error(f"Connection error adding expense: {ce}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

@router.get("/expenses/total", response_model=RangeTotal, summary="Total for Date Range", description="Sums expense amounts with dates between start and end, inclusive.")
async def get_total_for_range(
    store: ExpenseStoreDep,
    start: Optional[str] = Query(None, description="Inclusive start date (YYYY-MM-DD)."),
    end: Optional[str] = Query(None, description="Inclusive end date (YYYY-MM-DD)."),
) -> RangeTotal:
    logger.info(f"GET /expenses/total endpoint called. start={start!r} end={end!r}")
    try:
        total = await expenses_service.get_total_for_range(store, start, end)
        return RangeTotal(total=total)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except ConnectionError as ce:
        logger.error(f"Connection error calculating total: {ce}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

@router.get("/expenses/by-category", response_model=List[CategoryTotal], summary="Totals by Category", description="Sum and count of expenses per category, largest total first.")
async def get_totals_by_category(store: ExpenseStoreDep) -> List[CategoryTotal]:
    logger.info("GET /expenses/by-category endpoint called.")
    try:
        return await expenses_service.get_totals_by_category(store)
    except ConnectionError as ce:
        logger.error(f"Connection error fetching category statistics: {ce}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)
