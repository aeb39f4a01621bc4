from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import BaseModel

if TYPE_CHECKING:
    from app.modules.users.models import User


class Expense(BaseModel):
    __tablename__ = "expenses"
    __table_args__ = (
        # Indexes for query performance
        Index("idx_expenses_user_expense_date", "user_id", "expense_date"),
        Index("idx_expenses_user_category", "user_id", "category"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # One of ExpenseCategory values
    category: Mapped[str] = mapped_column(String(32), nullable=False)

    expense_date: Mapped[date] = mapped_column(Date, nullable=False)

    user: Mapped["User"] = relationship(
        "User", back_populates="expenses", lazy="noload"
    )

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, amount={self.amount}, user_id={self.user_id})>"
