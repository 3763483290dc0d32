"""Seed default income, expense and payment method names

Revision ID: 003
Revises: 002
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Frozen copy of app/models/seed.py at the time of this revision
DEFAULTS = {
    "income_category_default": ["Salary", "Bank interest", "Online sales", "Other"],
    "expense_category_default": [
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
    ],
    "payment_method_default": ["Cash", "Debit card", "Credit card"],
}


def _table(name: str) -> sa.Table:
    return sa.table(name, sa.column("id", sa.Integer), sa.column("name", sa.String))


def upgrade() -> None:
    for name, values in DEFAULTS.items():
        op.bulk_insert(_table(name), [{"name": value} for value in values])


def downgrade() -> None:
    for name, values in DEFAULTS.items():
        table = _table(name)
        op.execute(table.delete().where(table.c.name.in_(values)))
