"""Create category, income and expense tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

DEFAULT_TABLES = ("income_category_default", "expense_category_default", "payment_method_default")
ASSIGNED_TABLES = ("income_category_assigned", "expense_category_assigned", "payment_method_assigned")


def upgrade() -> None:
    for table in DEFAULT_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("name", sa.String(length=64), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    for table in ASSIGNED_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=64), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f(f"ix_{table}_user_id"), table, ["user_id"], unique=False)

    op.create_table(
        "income",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("income_category_assigned_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("date_of_income", sa.Date(), nullable=False),
        sa.Column("income_comment", sa.String(length=256), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["income_category_assigned_id"], ["income_category_assigned.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_income_user_id"), "income", ["user_id"], unique=False)
    op.create_index(op.f("ix_income_date_of_income"), "income", ["date_of_income"], unique=False)

    op.create_table(
        "expense",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("expense_category_assigned_id", sa.Integer(), nullable=False),
        sa.Column("payment_method_assigned_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("date_of_expense", sa.Date(), nullable=False),
        sa.Column("expense_comment", sa.String(length=256), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["expense_category_assigned_id"], ["expense_category_assigned.id"]),
        sa.ForeignKeyConstraint(["payment_method_assigned_id"], ["payment_method_assigned.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_expense_user_id"), "expense", ["user_id"], unique=False)
    op.create_index(op.f("ix_expense_date_of_expense"), "expense", ["date_of_expense"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_expense_date_of_expense"), table_name="expense")
    op.drop_index(op.f("ix_expense_user_id"), table_name="expense")
    op.drop_table("expense")
    op.drop_index(op.f("ix_income_date_of_income"), table_name="income")
    op.drop_index(op.f("ix_income_user_id"), table_name="income")
    op.drop_table("income")
    for table in reversed(ASSIGNED_TABLES):
        op.drop_index(op.f(f"ix_{table}_user_id"), table_name=table)
        op.drop_table(table)
    for table in reversed(DEFAULT_TABLES):
        op.drop_table(table)
