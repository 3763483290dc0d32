"""Seed the global default categories that new accounts are given."""

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.ledger import ExpenseCategoryDefault, IncomeCategoryDefault, PaymentMethodDefault

DEFAULT_INCOME_CATEGORIES = ["Salary", "Bank interest", "Online sales", "Other"]

DEFAULT_EXPENSE_CATEGORIES = [
    "Food",
    "Housing",
    "Transport",
    "Telecommunication",
    "Health",
    "Clothing",
    "Hygiene",
    "Kids",
    "Entertainment",
    "Travel",
    "Training",
    "Books",
    "Savings",
    "Retirement",
    "Debt repayment",
    "Gifts",
    "Other",
]

DEFAULT_PAYMENT_METHODS = ["Cash", "Debit card", "Credit card"]


def seed_default_categories(db: Session) -> int:
    """Insert any missing default names. Returns the number of rows added."""
    added = 0
    for model, names in (
        (IncomeCategoryDefault, DEFAULT_INCOME_CATEGORIES),
        (ExpenseCategoryDefault, DEFAULT_EXPENSE_CATEGORIES),
        (PaymentMethodDefault, DEFAULT_PAYMENT_METHODS),
    ):
        existing = {name for (name,) in db.query(model.name).all()}
        for name in names:
            if name not in existing:
                db.add(model(name=name))
                added += 1

    db.commit()
    return added


def run_seed() -> None:
    db = SessionLocal()
    try:
        seed_default_categories(db)
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
