from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.modules.expenses.types import (
    ExpenseCategory,
    FilterPeriod,
    SortField,
    SortOrder,
)
from app.utils.datetime import utc_today


def _not_in_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > utc_today():
        raise ValueError("Expense date cannot be in the future")
    return value


class CreateExpenseModel(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Short title of the expense")
    description: str = Field("", max_length=1000, description="Optional free-text details")
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount spent, two decimals at most")
    category: ExpenseCategory = Field(..., description="Expense category")
    expense_date: date = Field(..., description="When the expense occurred (YYYY-MM-DD)")

    @field_validator("expense_date")
    @classmethod
    def validate_expense_date(cls, value):
        return _not_in_future(value)


class UpdateExpenseModel(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    category: Optional[ExpenseCategory] = None
    expense_date: Optional[date] = None

    @field_validator("expense_date")
    @classmethod
    def validate_expense_date(cls, value):
        return _not_in_future(value)

    def to_update_values(self) -> Dict[str, Any]:
        """Explicitly provided fields, ready for an UPDATE statement."""
        values = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            if key == "description":
                values[key] = value or ""
            elif value is not None:
                values[key] = value.value if isinstance(value, ExpenseCategory) else value
        return values


class ExpenseStatsParams(BaseModel):
    """Filters shared by the list and stats endpoints."""

    period: Optional[FilterPeriod] = Field(None, description="Shorthand for a date range ending today")
    start_date: Optional[date] = Field(None, description="Inclusive lower bound on expense_date")
    end_date: Optional[date] = Field(None, description="Inclusive upper bound on expense_date")
    category: Optional[ExpenseCategory] = Field(None, description="Only this category")
    min_amount: Optional[Decimal] = Field(None, gt=0, description="Inclusive lower bound on amount")
    max_amount: Optional[Decimal] = Field(None, gt=0, description="Inclusive upper bound on amount")

    @field_validator(
        "period", "start_date", "end_date", "category", "min_amount", "max_amount",
        mode="before",
    )
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        # ?category= means "no filter"
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ExpenseFilterParams(ExpenseStatsParams):
    """Filters plus pagination and ordering for the list endpoint."""

    page: int = Field(1, ge=1, description="1-based page number")
    limit: int = Field(10, ge=1, le=100, description="Page size")
    sort_by: SortField = Field(SortField.EXPENSE_DATE, description="Sort key")
    sort_order: SortOrder = Field(SortOrder.DESC, description="Sort direction")


class ExpenseResponse(BaseModel):
    id: int = Field(..., description="Unique identifier for the expense")
    user_id: int = Field(..., description="ID of the user who owns this expense")
    title: str = Field(..., description="Short title of the expense")
    description: str = Field("", description="Free-text details")
    amount: float = Field(..., description="Amount of the expense")
    category: ExpenseCategory = Field(..., description="Expense category")
    expense_date: date = Field(..., description="When the expense occurred")
    created_at: datetime = Field(..., description="When the expense record was created")
    updated_at: Optional[datetime] = Field(None, description="When the expense record was last updated")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("description", mode="before")
    @classmethod
    def none_as_empty(cls, value: Optional[str]) -> str:
        return value or ""


class CategoryStats(BaseModel):
    category: ExpenseCategory
    count: int
    total_amount: float


class ExpenseStatsResponse(BaseModel):
    total_expenses: int = Field(..., description="Number of matching expenses")
    total_amount: float = Field(..., description="Sum of matching amounts")
    average_amount: float = Field(..., description="Mean amount, 0 when nothing matches")
    categories: List[CategoryStats] = Field(default_factory=list, description="Per-category totals, largest first")
