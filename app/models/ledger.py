"""Bookkeeping models: default and per-account categories, incomes, expenses."""

from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String

from app.database import Base


class IncomeCategoryDefault(Base):
    """Income category copied to every new account."""

    __tablename__ = "income_category_default"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False)


class ExpenseCategoryDefault(Base):
    """Expense category copied to every new account."""

    __tablename__ = "expense_category_default"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False)


class PaymentMethodDefault(Base):
    """Payment method copied to every new account."""

    __tablename__ = "payment_method_default"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False)


class IncomeCategoryAssigned(Base):
    __tablename__ = "income_category_assigned"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(64), nullable=False)


class ExpenseCategoryAssigned(Base):
    __tablename__ = "expense_category_assigned"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(64), nullable=False)


class PaymentMethodAssigned(Base):
    __tablename__ = "payment_method_assigned"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(64), nullable=False)


class Income(Base):
    """Single income entry."""

    __tablename__ = "income"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    income_category_assigned_id = Column(Integer, ForeignKey("income_category_assigned.id"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    date_of_income = Column(Date, nullable=False, index=True)
    income_comment = Column(String(256), nullable=True)


class Expense(Base):
    """Single expense entry."""

    __tablename__ = "expense"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    expense_category_assigned_id = Column(Integer, ForeignKey("expense_category_assigned.id"), nullable=False)
    payment_method_assigned_id = Column(Integer, ForeignKey("payment_method_assigned.id"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    date_of_expense = Column(Date, nullable=False, index=True)
    expense_comment = Column(String(256), nullable=True)
