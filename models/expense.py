"""Pydantic models for Expense data"""
import math
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DATE_FORMAT = "%Y-%m-%d"


def parse_iso_date(value: str) -> str:
    """Checks that a date string is a real calendar date in YYYY-MM-DD form and returns it stripped."""
    value = value.strip()
    try:
        parsed = datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD.")
    # strptime accepts unpadded months/days, which would break string ordering
    if parsed.strftime(DATE_FORMAT) != value:
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD.")
    return value


class ExpenseCreate(BaseModel):
    """
    Validated input for a new expense.

    Every write to an expense store goes through this model, whichever
    backend is connected.
    """
    amount: float = Field(..., gt=0, description="Expense amount (> 0)")
    category: str = Field(..., min_length=1)
    date: str = Field(..., description="Date of the expense in YYYY-MM-DD format")
    description: str = ""

    @field_validator("amount")
    @classmethod
    def amount_is_finite(cls, value: float) -> float:
        if math.isnan(value) or math.isinf(value):
            raise ValueError("Amount must be a finite number.")
        return value

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Category cannot be empty.")
        return value

    @field_validator("date")
    @classmethod
    def date_is_iso(cls, value: str) -> str:
        return parse_iso_date(value)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value):
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value


class Expense(BaseModel):
    """
    Represents a single stored expense.
    """
    id: Optional[str] = None
    amount: float
    category: str
    date: str
    description: str = ""
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def created_at_is_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Mongo hands back naive datetimes that are already UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    class Config:
        populate_by_name = True
        from_attributes = True


class CategoryTotal(BaseModel):
    category: str
    total: float
    count: int


class RangeTotal(BaseModel):
    total: float
