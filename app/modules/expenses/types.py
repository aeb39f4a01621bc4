from dataclasses import dataclass
from datetime import date
from enum import Enum


class ExpenseCategory(str, Enum):
    """Closed set of expense categories."""

    FOOD = "food"
    TRANSPORTATION = "transportation"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    HEALTHCARE = "healthcare"
    SHOPPING = "shopping"
    TRAVEL = "travel"
    EDUCATION = "education"
    OTHER = "other"


class FilterPeriod(str, Enum):
    """Symbolic date ranges anchored at today."""

    PAST_WEEK = "past_week"
    PAST_MONTH = "past_month"
    LAST_3_MONTHS = "last_3_months"
    CUSTOM = "custom"


class SortField(str, Enum):
    EXPENSE_DATE = "expense_date"
    AMOUNT = "amount"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date
