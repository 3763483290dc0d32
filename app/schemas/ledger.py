"""Pydantic schemas for ledger endpoints."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class CategoryResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class CategoriesResponse(BaseModel):
    income_categories: list[CategoryResponse]
    expense_categories: list[CategoryResponse]
    payment_methods: list[CategoryResponse]


class IncomeCreate(BaseModel):
    category_id: int
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    date_of_income: date
    comment: str | None = Field(default=None, max_length=256)


class ExpenseCreate(BaseModel):
    category_id: int
    payment_method_id: int
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    date_of_expense: date
    comment: str | None = Field(default=None, max_length=256)


class CategoryTotal(BaseModel):
    name: str
    total: Decimal


class SummaryResponse(BaseModel):
    start: date
    end: date
    incomes: list[CategoryTotal]
    expenses: list[CategoryTotal]
    balance: Decimal
