"""Ledger API endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_current_user, get_ledger_service
from app.models.user import User
from app.schemas.ledger import (
    CategoriesResponse,
    CategoryResponse,
    CategoryTotal,
    ExpenseCreate,
    IncomeCreate,
    SummaryResponse,
)
from app.services.ledger import LedgerService

router = APIRouter(prefix="/api/v1/ledger", tags=["Ledger"])


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(
    user: User = Depends(get_current_user),
    ledger: LedgerService = Depends(get_ledger_service),
) -> CategoriesResponse:
    """List the income categories, expense categories and payment methods of the current user."""
    return CategoriesResponse(
        income_categories=[CategoryResponse.model_validate(c) for c in ledger.get_income_categories(user.id)],
        expense_categories=[CategoryResponse.model_validate(c) for c in ledger.get_expense_categories(user.id)],
        payment_methods=[CategoryResponse.model_validate(m) for m in ledger.get_payment_methods(user.id)],
    )


@router.post("/incomes", status_code=201)
def add_income(
    body: IncomeCreate,
    user: User = Depends(get_current_user),
    ledger: LedgerService = Depends(get_ledger_service),
) -> dict:
    """Record an income."""
    saved = ledger.save_income(user.id, body.category_id, body.amount, body.date_of_income, body.comment)
    if not saved:
        raise HTTPException(status_code=400, detail="Unknown income category")
    return {"detail": "Income saved"}


@router.post("/expenses", status_code=201)
def add_expense(
    body: ExpenseCreate,
    user: User = Depends(get_current_user),
    ledger: LedgerService = Depends(get_ledger_service),
) -> dict:
    """Record an expense."""
    saved = ledger.save_expense(
        user.id, body.category_id, body.payment_method_id, body.amount, body.date_of_expense, body.comment
    )
    if not saved:
        raise HTTPException(status_code=400, detail="Unknown expense category or payment method")
    return {"detail": "Expense saved"}


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    start: date | None = None,
    end: date | None = None,
    user: User = Depends(get_current_user),
    ledger: LedgerService = Depends(get_ledger_service),
) -> SummaryResponse:
    """Per-category totals and balance for a period. Defaults to the current month."""
    today = date.today()
    start = start or today.replace(day=1)
    end = end or today
    if start > end:
        raise HTTPException(status_code=400, detail="Start date must not be after end date")

    return SummaryResponse(
        start=start,
        end=end,
        incomes=[CategoryTotal(**row) for row in ledger.get_incomes(user.id, start, end)],
        expenses=[CategoryTotal(**row) for row in ledger.get_expenses(user.id, start, end)],
        balance=ledger.get_balance(user.id, start, end),
    )
