"""
Unit tests for the expense filter engine: validation, scoped predicates,
ordering, pagination math and the period helper.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.dialects import sqlite

from app.core.exceptions import ValidationError
from app.core.responses import Pagination
from app.modules.expenses.dto import ExpenseFilterParams, ExpenseStatsParams
from app.modules.expenses.query import (
    MAX_ROW_ID,
    average_amount,
    build_conditions,
    build_ordering,
    ensure_valid_filters,
    get_date_range_for_period,
    page_offset,
    resolve_date_range,
    round_amount,
    validate_filters,
)
from app.modules.expenses.types import DateRange, FilterPeriod, SortField, SortOrder


def compile_clause(clause) -> str:
    return str(clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


class TestValidateFilters:
    def test_no_filters_is_valid(self):
        assert validate_filters(ExpenseFilterParams()) == []

    def test_start_after_end_is_rejected(self):
        params = ExpenseFilterParams(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))

        assert validate_filters(params) == ["start_date must be on or before end_date"]

    def test_equal_dates_are_allowed(self):
        params = ExpenseFilterParams(start_date=date(2024, 1, 1), end_date=date(2024, 1, 1))

        assert validate_filters(params) == []

    def test_min_above_max_is_rejected(self):
        params = ExpenseStatsParams(min_amount=Decimal("10"), max_amount=Decimal("5"))

        assert validate_filters(params) == ["min_amount must be less than or equal to max_amount"]

    def test_all_errors_are_collected(self):
        params = ExpenseFilterParams(
            start_date=date(2024, 2, 1),
            end_date=date(2024, 1, 1),
            min_amount=Decimal("10"),
            max_amount=Decimal("5"),
        )

        assert len(validate_filters(params)) == 2
        with pytest.raises(ValidationError) as exc_info:
            ensure_valid_filters(params)
        assert exc_info.value.status_code == 400


class TestFilterParams:
    def test_defaults(self):
        params = ExpenseFilterParams()

        assert params.page == 1
        assert params.limit == 10
        assert params.sort_by is SortField.EXPENSE_DATE
        assert params.sort_order is SortOrder.DESC

    @pytest.mark.parametrize("field,value", [("limit", 0), ("limit", 101), ("page", 0)])
    def test_out_of_range_pagination_is_rejected(self, field, value):
        with pytest.raises(PydanticValidationError):
            ExpenseFilterParams(**{field: value})

    def test_unknown_category_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            ExpenseFilterParams(category="groceries")

    def test_blank_values_mean_no_filter(self):
        params = ExpenseFilterParams(category="", start_date="", min_amount="")

        assert params.category is None
        assert params.start_date is None
        assert params.min_amount is None


class TestBuildConditions:
    def test_always_scoped_to_owner(self):
        conditions = build_conditions(5, ExpenseFilterParams())

        assert len(conditions) == 1
        assert compile_clause(conditions[0]) == "expenses.user_id = 5"

    def test_every_supplied_filter_adds_one_inclusive_clause(self):
        params = ExpenseFilterParams(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
            category="food",
            min_amount=Decimal("4"),
            max_amount=Decimal("5"),
        )

        clauses = [compile_clause(c) for c in build_conditions(9, params)]

        assert clauses[0] == "expenses.user_id = 9"
        assert "expenses.expense_date >= '2024-01-01'" in clauses
        assert "expenses.expense_date <= '2024-01-31'" in clauses
        assert "expenses.category = 'food'" in clauses
        assert any(c.startswith("expenses.amount >= 4") for c in clauses)
        assert any(c.startswith("expenses.amount <= 5") for c in clauses)
        assert len(clauses) == 6

    def test_period_supplies_dates_when_none_given(self):
        params = ExpenseStatsParams(period=FilterPeriod.PAST_WEEK)

        start, end = resolve_date_range(params)

        assert end is not None and start is not None
        assert (end - start).days == 7

    def test_explicit_dates_win_over_period(self):
        params = ExpenseStatsParams(period=FilterPeriod.PAST_WEEK, start_date=date(2020, 1, 1))

        assert resolve_date_range(params) == (date(2020, 1, 1), None)

    def test_custom_period_adds_nothing(self):
        params = ExpenseStatsParams(period=FilterPeriod.CUSTOM)

        assert resolve_date_range(params) == (None, None)
        assert len(build_conditions(1, params)) == 1


class TestOrderingAndPagination:
    @pytest.mark.parametrize(
        "sort_by,column",
        [
            (SortField.EXPENSE_DATE, "expenses.expense_date"),
            (SortField.AMOUNT, "expenses.amount"),
            (SortField.CREATED_AT, "expenses.created_at"),
        ],
    )
    def test_ordering_uses_requested_column_then_id(self, sort_by, column):
        ordering = [compile_clause(o) for o in build_ordering(sort_by, SortOrder.ASC)]

        assert ordering == [f"{column} ASC", "expenses.id ASC"]

    def test_descending_order(self):
        ordering = [compile_clause(o) for o in build_ordering(SortField.AMOUNT, SortOrder.DESC)]

        assert ordering == ["expenses.amount DESC", "expenses.id DESC"]

    def test_page_offset(self):
        assert page_offset(ExpenseFilterParams(page=1, limit=10)) == 0
        assert page_offset(ExpenseFilterParams(page=3, limit=25)) == 50

    def test_page_offset_stays_within_storage_range(self):
        assert page_offset(ExpenseFilterParams(page=10**20, limit=100)) == MAX_ROW_ID

    @pytest.mark.parametrize(
        "total,limit,pages", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (100, 100, 1)]
    )
    def test_total_pages_is_ceiling(self, total, limit, pages):
        assert Pagination.build(page=1, limit=limit, total=total).total_pages == pages


class TestAmounts:
    def test_round_amount_half_up(self):
        assert round_amount(Decimal("2.345")) == Decimal("2.35")
        assert round_amount(4.5) == Decimal("4.50")
        assert round_amount(None) == Decimal("0.00")

    def test_average_of_nothing_is_zero(self):
        assert average_amount(0, 0) == Decimal("0.00")

    def test_average_rounds_to_cents(self):
        assert average_amount(Decimal("10.00"), 3) == Decimal("3.33")


class TestPeriodHelper:
    def test_past_week(self):
        assert get_date_range_for_period(FilterPeriod.PAST_WEEK, today=date(2024, 3, 10)) == DateRange(
            start_date=date(2024, 3, 3), end_date=date(2024, 3, 10)
        )

    def test_past_month_clamps_to_month_end(self):
        result = get_date_range_for_period("past_month", today=date(2024, 3, 31))

        assert result == DateRange(start_date=date(2024, 2, 29), end_date=date(2024, 3, 31))

    def test_last_three_months(self):
        result = get_date_range_for_period(FilterPeriod.LAST_3_MONTHS, today=date(2024, 5, 15))

        assert result.start_date == date(2024, 2, 15)

    @pytest.mark.parametrize("period", ["custom", "yesterday", ""])
    def test_unknown_period_is_invalid_input(self, period):
        with pytest.raises(ValidationError):
            get_date_range_for_period(period)
