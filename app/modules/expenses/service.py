from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, desc, func, select, update
from typing import List, Tuple
import logging

from app.core.exceptions import ExpenseNotFoundError, ValidationError
from app.core.responses import Pagination
from app.modules.expenses.dto import (
    CategoryStats,
    CreateExpenseModel,
    ExpenseFilterParams,
    ExpenseResponse,
    ExpenseStatsParams,
    ExpenseStatsResponse,
    UpdateExpenseModel,
)
from app.modules.expenses.models import Expense
from app.modules.expenses.query import (
    average_amount,
    build_conditions,
    build_ordering,
    ensure_valid_filters,
    page_offset,
    round_amount,
)

logger = logging.getLogger(__name__)


class ExpensesService:
    """
    Expense CRUD and queries. Every statement is scoped by the owning user,
    so another user's expense behaves exactly like a missing one.
    """

    def __init__(self):
        self.logger = logger

    async def create_expense(
        self, db: AsyncSession, user_id: int, data: CreateExpenseModel
    ) -> ExpenseResponse:
        self.logger.info(f"Creating new expense for user_id: {user_id}")

        new_expense = Expense(
            user_id=user_id,
            title=data.title,
            description=data.description or "",
            amount=data.amount,
            category=data.category.value,
            expense_date=data.expense_date,
        )

        db.add(new_expense)
        await db.commit()
        await db.refresh(new_expense)

        self.logger.info(f"Created expense {new_expense.id} for user_id: {user_id}")
        return ExpenseResponse.model_validate(new_expense)

    async def get_expense(
        self, db: AsyncSession, user_id: int, expense_id: int
    ) -> ExpenseResponse:
        expense = await db.scalar(
            select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
        )
        if expense is None:
            raise ExpenseNotFoundError(expense_id)
        return ExpenseResponse.model_validate(expense)

    async def update_expense(
        self,
        db: AsyncSession,
        user_id: int,
        expense_id: int,
        update_data: UpdateExpenseModel,
    ) -> ExpenseResponse:
        """Partial update; zero matched rows means not found"""
        values = update_data.to_update_values()
        if not values:
            raise ValidationError(
                "At least one field must be provided for update",
                message="Failed to update expense",
            )

        self.logger.info(f"Updating expense {expense_id} for user_id: {user_id}")

        result = await db.execute(
            update(Expense)
            .where(Expense.id == expense_id, Expense.user_id == user_id)
            .values(**values)
            .returning(Expense)
        )
        expense = result.scalar_one_or_none()
        if expense is None:
            self.logger.warning(f"Expense {expense_id} not found for user_id: {user_id}")
            raise ExpenseNotFoundError(expense_id)

        await db.commit()
        return ExpenseResponse.model_validate(expense)

    async def delete_expense(self, db: AsyncSession, user_id: int, expense_id: int) -> None:
        """Hard delete; zero affected rows means not found"""
        self.logger.info(f"Deleting expense {expense_id} for user_id: {user_id}")

        result = await db.execute(
            delete(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
        )
        if result.rowcount == 0:
            self.logger.warning(f"Expense {expense_id} not found for user_id: {user_id}")
            raise ExpenseNotFoundError(expense_id)

        await db.commit()

    async def get_expenses(
        self, db: AsyncSession, user_id: int, params: ExpenseFilterParams
    ) -> Tuple[List[ExpenseResponse], Pagination]:
        """One page of the user's expenses plus pagination metadata"""
        self.logger.debug(f"ExpensesService.get_expenses for user {user_id}: {params}")
        ensure_valid_filters(params)

        conditions = build_conditions(user_id, params)

        total = await db.scalar(
            select(func.count()).select_from(Expense).where(*conditions)
        )

        query = (
            select(Expense)
            .where(*conditions)
            .order_by(*build_ordering(params.sort_by, params.sort_order))
            .offset(page_offset(params))
            .limit(params.limit)
        )
        result = await db.execute(query)
        expenses = [ExpenseResponse.model_validate(row) for row in result.scalars().all()]

        return expenses, Pagination.build(params.page, params.limit, total or 0)

    async def get_stats(
        self, db: AsyncSession, user_id: int, params: ExpenseStatsParams
    ) -> ExpenseStatsResponse:
        """Count, sum, average and per-category breakdown over the filtered set"""
        self.logger.debug(f"ExpensesService.get_stats for user {user_id}: {params}")
        ensure_valid_filters(params)

        conditions = build_conditions(user_id, params)

        totals = await db.execute(
            select(func.count(Expense.id), func.sum(Expense.amount)).where(*conditions)
        )
        count, total = totals.one()

        category_total = func.sum(Expense.amount).label("total_amount")
        grouped = await db.execute(
            select(
                Expense.category,
                func.count(Expense.id),
                category_total,
            )
            .where(*conditions)
            .group_by(Expense.category)
            .order_by(desc(category_total))
        )

        return ExpenseStatsResponse(
            total_expenses=count,
            total_amount=round_amount(total),
            average_amount=average_amount(total or 0, count),
            categories=[
                CategoryStats(
                    category=category,
                    count=category_count,
                    total_amount=round_amount(category_sum),
                )
                for category, category_count, category_sum in grouped
            ],
        )
