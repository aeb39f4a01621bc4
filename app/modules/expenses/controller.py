import re
from typing import Annotated

from fastapi import APIRouter, Query, status

from app.core.dependencies import CurrentUserDep, DatabaseDep, ExpenseServiceDep
from app.core.exceptions import ExpenseNotFoundError, ValidationError
from app.core.responses import ApiResponse, success_response
from app.modules.expenses.dto import (
    CreateExpenseModel,
    ExpenseFilterParams,
    ExpenseStatsParams,
    UpdateExpenseModel,
)
from app.modules.expenses.query import MAX_ROW_ID

router = APIRouter(prefix="/expenses", tags=["expenses"])


def parse_expense_id(raw_id: str) -> int:
    """Path ids arrive as text; anything but a positive integer is a 400."""
    if not re.fullmatch(r"[0-9]+", raw_id) or not raw_id.strip("0"):
        raise ValidationError("Expense ID must be a valid number", message="Invalid expense ID")

    # Beyond the storage integer range no row can match
    digits = raw_id.lstrip("0")
    if len(digits) > len(str(MAX_ROW_ID)) or int(digits) > MAX_ROW_ID:
        raise ExpenseNotFoundError(raw_id)
    return int(digits)


@router.post(
    "",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_expense(
    expense_data: CreateExpenseModel,
    current_user: CurrentUserDep,
    db: DatabaseDep,
    expenses_service: ExpenseServiceDep,
) -> ApiResponse:
    """API endpoint to create a new expense"""
    expense = await expenses_service.create_expense(db, current_user.user_id, expense_data)
    return success_response("Expense created successfully", {"expense": expense})


@router.get("", response_model=ApiResponse, response_model_exclude_none=True)
async def get_expenses(
    filters: Annotated[ExpenseFilterParams, Query()],
    current_user: CurrentUserDep,
    db: DatabaseDep,
    expenses_service: ExpenseServiceDep,
) -> ApiResponse:
    """API endpoint to fetch a filtered, sorted page of the user's expenses"""
    expenses, pagination = await expenses_service.get_expenses(
        db, current_user.user_id, filters
    )
    return success_response(
        "Expenses retrieved successfully", {"expenses": expenses}, pagination=pagination
    )


# Declared before /{expense_id} so "stats" is not taken for an id
@router.get("/stats", response_model=ApiResponse, response_model_exclude_none=True)
async def get_expense_stats(
    filters: Annotated[ExpenseStatsParams, Query()],
    current_user: CurrentUserDep,
    db: DatabaseDep,
    expenses_service: ExpenseServiceDep,
) -> ApiResponse:
    """API endpoint to aggregate the user's expenses"""
    stats = await expenses_service.get_stats(db, current_user.user_id, filters)
    return success_response("Expense statistics retrieved successfully", {"stats": stats})


@router.get("/{expense_id}", response_model=ApiResponse, response_model_exclude_none=True)
async def get_expense(
    expense_id: str,
    current_user: CurrentUserDep,
    db: DatabaseDep,
    expenses_service: ExpenseServiceDep,
) -> ApiResponse:
    """API endpoint to fetch one expense"""
    expense = await expenses_service.get_expense(
        db, current_user.user_id, parse_expense_id(expense_id)
    )
    return success_response("Expense retrieved successfully", {"expense": expense})


@router.put("/{expense_id}", response_model=ApiResponse, response_model_exclude_none=True)
async def update_expense(
    expense_id: str,
    update_data: UpdateExpenseModel,
    current_user: CurrentUserDep,
    db: DatabaseDep,
    expenses_service: ExpenseServiceDep,
) -> ApiResponse:
    """API endpoint to update an expense"""
    expense = await expenses_service.update_expense(
        db, current_user.user_id, parse_expense_id(expense_id), update_data
    )
    return success_response("Expense updated successfully", {"expense": expense})


@router.delete("/{expense_id}", response_model=ApiResponse, response_model_exclude_none=True)
async def delete_expense(
    expense_id: str,
    current_user: CurrentUserDep,
    db: DatabaseDep,
    expenses_service: ExpenseServiceDep,
) -> ApiResponse:
    """API endpoint to delete an expense"""
    await expenses_service.delete_expense(
        db, current_user.user_id, parse_expense_id(expense_id)
    )
    return success_response("Expense deleted successfully")
