"""Ledger service for incomes, expenses, and per-account categories."""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.ledger import (
    Expense,
    ExpenseCategoryAssigned,
    Income,
    IncomeCategoryAssigned,
    PaymentMethodAssigned,
)

logger = logging.getLogger("budget_keeper")


class LedgerService:
    """Handles bookkeeping entries and the categories assigned to an account."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_income_categories(self, user_id: int) -> list[IncomeCategoryAssigned]:
        return (
            self.db.query(IncomeCategoryAssigned)
            .filter(IncomeCategoryAssigned.user_id == user_id)
            .order_by(IncomeCategoryAssigned.id)
            .all()
        )

    def get_expense_categories(self, user_id: int) -> list[ExpenseCategoryAssigned]:
        return (
            self.db.query(ExpenseCategoryAssigned)
            .filter(ExpenseCategoryAssigned.user_id == user_id)
            .order_by(ExpenseCategoryAssigned.id)
            .all()
        )

    def get_payment_methods(self, user_id: int) -> list[PaymentMethodAssigned]:
        return (
            self.db.query(PaymentMethodAssigned)
            .filter(PaymentMethodAssigned.user_id == user_id)
            .order_by(PaymentMethodAssigned.id)
            .all()
        )

    def _owns(self, model, row_id: int, user_id: int) -> bool:
        return self.db.query(model.id).filter(model.id == row_id, model.user_id == user_id).first() is not None

    def save_income(
        self, user_id: int, category_id: int, amount: Decimal, date_of_income: date, comment: str | None = None
    ) -> bool:
        """Record an income. Returns False if the category isn't the user's or the write is rejected."""
        if not self._owns(IncomeCategoryAssigned, category_id, user_id):
            return False

        self.db.add(
            Income(
                user_id=user_id,
                income_category_assigned_id=category_id,
                amount=amount,
                date_of_income=date_of_income,
                income_comment=comment,
            )
        )
        return self._commit("income", user_id)

    def save_expense(
        self,
        user_id: int,
        category_id: int,
        payment_method_id: int,
        amount: Decimal,
        date_of_expense: date,
        comment: str | None = None,
    ) -> bool:
        """Record an expense. Category and payment method must both belong to the user."""
        if not self._owns(ExpenseCategoryAssigned, category_id, user_id):
            return False
        if not self._owns(PaymentMethodAssigned, payment_method_id, user_id):
            return False

        self.db.add(
            Expense(
                user_id=user_id,
                expense_category_assigned_id=category_id,
                payment_method_assigned_id=payment_method_id,
                amount=amount,
                date_of_expense=date_of_expense,
                expense_comment=comment,
            )
        )
        return self._commit("expense", user_id)

    def _commit(self, kind: str, user_id: int) -> bool:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Could not save %s for user id=%s", kind, user_id)
            return False
        return True

    def get_incomes(self, user_id: int, start: date, end: date) -> list[dict]:
        """Income totals per category between start and end (inclusive)."""
        rows = (
            self.db.query(IncomeCategoryAssigned.name, func.sum(Income.amount))
            .join(IncomeCategoryAssigned, Income.income_category_assigned_id == IncomeCategoryAssigned.id)
            .filter(Income.user_id == user_id, Income.date_of_income.between(start, end))
            .group_by(Income.income_category_assigned_id, IncomeCategoryAssigned.name)
            .order_by(IncomeCategoryAssigned.name)
            .all()
        )
        return [{"name": name, "total": Decimal(str(total))} for name, total in rows]

    def get_expenses(self, user_id: int, start: date, end: date) -> list[dict]:
        """Expense totals per category between start and end (inclusive)."""
        rows = (
            self.db.query(ExpenseCategoryAssigned.name, func.sum(Expense.amount))
            .join(ExpenseCategoryAssigned, Expense.expense_category_assigned_id == ExpenseCategoryAssigned.id)
            .filter(Expense.user_id == user_id, Expense.date_of_expense.between(start, end))
            .group_by(Expense.expense_category_assigned_id, ExpenseCategoryAssigned.name)
            .order_by(ExpenseCategoryAssigned.name)
            .all()
        )
        return [{"name": name, "total": Decimal(str(total))} for name, total in rows]

    def get_balance(self, user_id: int, start: date, end: date) -> Decimal:
        """Incomes minus expenses in the period. A side with no entries counts as zero."""
        total_incomes = (
            self.db.query(func.coalesce(func.sum(Income.amount), 0))
            .filter(Income.user_id == user_id, Income.date_of_income.between(start, end))
            .scalar()
        )
        total_expenses = (
            self.db.query(func.coalesce(func.sum(Expense.amount), 0))
            .filter(Expense.user_id == user_id, Expense.date_of_expense.between(start, end))
            .scalar()
        )
        return Decimal(str(total_incomes)) - Decimal(str(total_expenses))
