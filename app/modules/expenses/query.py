"""
Turns untrusted filter parameters into a per-user scoped query.

Every predicate built here starts with ``Expense.user_id == user_id``; the
remaining clauses are ANDed in only for the parameters actually supplied.
Date and amount bounds are inclusive at both ends.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta
from sqlalchemy import ColumnElement

from app.core.exceptions import ValidationError
from app.modules.expenses.dto import ExpenseFilterParams, ExpenseStatsParams
from app.modules.expenses.models import Expense
from app.modules.expenses.types import DateRange, FilterPeriod, SortField, SortOrder
from app.utils.datetime import utc_today

CENT = Decimal("0.01")

# Largest value a signed 64-bit INTEGER/BIGINT column or OFFSET accepts
MAX_ROW_ID = 2**63 - 1

_PERIOD_OFFSETS = {
    FilterPeriod.PAST_WEEK: relativedelta(days=7),
    FilterPeriod.PAST_MONTH: relativedelta(months=1),
    FilterPeriod.LAST_3_MONTHS: relativedelta(months=3),
}

_SORT_COLUMNS = {
    SortField.EXPENSE_DATE: Expense.expense_date,
    SortField.AMOUNT: Expense.amount,
    SortField.CREATED_AT: Expense.created_at,
}


def get_date_range_for_period(
    period: Union[FilterPeriod, str], today: Optional[date] = None
) -> DateRange:
    """
    Map a symbolic period to an explicit [start, end] range ending today.

    Month arithmetic clamps to the end of shorter months (May 31 minus one
    month is April 30). ``custom`` and unknown values are rejected.
    """
    try:
        period = FilterPeriod(period)
    except ValueError:
        raise ValidationError("Invalid period specified", message="Invalid period")

    offset = _PERIOD_OFFSETS.get(period)
    if offset is None:
        raise ValidationError("Invalid period specified", message="Invalid period")

    end_date = today or utc_today()
    return DateRange(start_date=end_date - offset, end_date=end_date)


def resolve_date_range(params: ExpenseStatsParams) -> Tuple[Optional[date], Optional[date]]:
    """Explicit dates win; a non-custom period fills in when neither is given."""
    if params.start_date is None and params.end_date is None and params.period not in (
        None,
        FilterPeriod.CUSTOM,
    ):
        date_range = get_date_range_for_period(params.period)
        return date_range.start_date, date_range.end_date
    return params.start_date, params.end_date


def validate_filters(params: ExpenseStatsParams) -> List[str]:
    """Cross-field checks the schema cannot express; returns error messages."""
    errors = []
    if params.start_date and params.end_date and params.start_date > params.end_date:
        errors.append("start_date must be on or before end_date")
    if (
        params.min_amount is not None
        and params.max_amount is not None
        and params.min_amount > params.max_amount
    ):
        errors.append("min_amount must be less than or equal to max_amount")
    return errors


def ensure_valid_filters(params: ExpenseStatsParams) -> None:
    errors = validate_filters(params)
    if errors:
        raise ValidationError(", ".join(errors), message="Invalid filter parameters")


def build_conditions(user_id: int, params: ExpenseStatsParams) -> List[ColumnElement[bool]]:
    """The scoped predicate as a list of clauses to AND together."""
    conditions: List[ColumnElement[bool]] = [Expense.user_id == user_id]

    start_date, end_date = resolve_date_range(params)
    if start_date is not None:
        conditions.append(Expense.expense_date >= start_date)
    if end_date is not None:
        conditions.append(Expense.expense_date <= end_date)
    if params.category is not None:
        conditions.append(Expense.category == params.category.value)
    if params.min_amount is not None:
        conditions.append(Expense.amount >= params.min_amount)
    if params.max_amount is not None:
        conditions.append(Expense.amount <= params.max_amount)

    return conditions


def build_ordering(sort_by: SortField, sort_order: SortOrder) -> List[Any]:
    """Primary key first, then id in the same direction so pages are stable."""
    column = _SORT_COLUMNS[sort_by]
    if sort_order is SortOrder.ASC:
        return [column.asc(), Expense.id.asc()]
    return [column.desc(), Expense.id.desc()]


def page_offset(params: ExpenseFilterParams) -> int:
    # Pages past the storage range are simply empty
    return min((params.page - 1) * params.limit, MAX_ROW_ID)


def round_amount(value: Any) -> Decimal:
    """Round half-up to cents; None counts as zero."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def average_amount(total: Any, count: int) -> Decimal:
    if not count:
        return Decimal("0.00")
    return round_amount(Decimal(str(total)) / count)
