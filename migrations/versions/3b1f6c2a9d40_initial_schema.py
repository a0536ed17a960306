"""initial schema

Revision ID: 3b1f6c2a9d40
Revises:
Create Date: 2025-10-25 09:12:40.511203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3b1f6c2a9d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create members, registrations, chat and ledger tables."""
    op.create_table(
        "member",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("rice_preference", sa.String(length=8), nullable=False),
        sa.Column("role", sa.String(length=8), nullable=False),
        sa.Column("auto_meal_morning", sa.Boolean(), nullable=False),
        sa.Column("auto_meal_night", sa.Boolean(), nullable=False),
        sa.Column("auto_meal_morning_quantity", sa.Integer(), nullable=False),
        sa.Column("auto_meal_night_quantity", sa.Integer(), nullable=False),
        sa.Column("meal_month_start_date", sa.Date(), nullable=True),
        sa.Column("meal_month_end_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("rice_preference IN ('boiled', 'atop')", name="ck_member_rice_preference"),
        sa.CheckConstraint("role IN ('member', 'admin')", name="ck_member_role"),
        sa.CheckConstraint(
            "auto_meal_morning_quantity >= 0 AND auto_meal_morning_quantity <= 10",
            name="ck_member_auto_meal_morning_quantity",
        ),
        sa.CheckConstraint(
            "auto_meal_night_quantity >= 0 AND auto_meal_night_quantity <= 10",
            name="ck_member_auto_meal_night_quantity",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "meal_registration",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("meal_date", sa.Date(), nullable=False),
        sa.Column("period", sa.String(length=8), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("period IN ('morning', 'night')", name="ck_meal_registration_period"),
        sa.CheckConstraint("quantity >= 0 AND quantity <= 10", name="ck_meal_registration_quantity"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("member_id", "meal_date", "period", name="uq_meal_registration_slot"),
    )
    op.create_index(
        "ix_meal_registration_date_period",
        "meal_registration",
        ["meal_date", "period"],
    )
    op.create_table(
        "meal_details",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("meal_date", sa.Date(), nullable=False),
        sa.Column("morning_details", sa.Text(), nullable=True),
        sa.Column("night_details", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["updated_by"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("meal_date"),
    )
    op.create_table(
        "chat_message",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("mentions", sa.JSON(), nullable=False),
        sa.Column("is_violation", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["sender_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chat_message_created_at", "chat_message", ["created_at"])
    op.create_table(
        "egg_consumption",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("egg_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("quantity >= 0 AND quantity <= 50", name="ck_egg_consumption_quantity"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("member_id", "egg_date", name="uq_egg_consumption_member_date"),
    )
    op.create_table(
        "egg_inventory",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("total_eggs", sa.Integer(), nullable=False),
        sa.Column("added_by", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["added_by"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "egg_price",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("price_per_egg", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("updated_by", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["updated_by"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "deposit",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("depositor_id", sa.Integer(), nullable=False),
        sa.Column("added_by", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("deposit_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_deposit_amount"),
        sa.ForeignKeyConstraint(["added_by"], ["member.id"]),
        sa.ForeignKeyConstraint(["depositor_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "grocery_expense",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("shopper_id", sa.Integer(), nullable=False),
        sa.Column("added_by", sa.Integer(), nullable=False),
        sa.Column("transaction_type", sa.String(length=8), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_grocery_expense_amount"),
        sa.CheckConstraint(
            "transaction_type IN ('cash', 'credit')",
            name="ck_grocery_expense_transaction_type",
        ),
        sa.ForeignKeyConstraint(["added_by"], ["member.id"]),
        sa.ForeignKeyConstraint(["shopper_id"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_table("grocery_expense")
    op.drop_table("deposit")
    op.drop_table("egg_price")
    op.drop_table("egg_inventory")
    op.drop_table("egg_consumption")
    op.drop_index("ix_chat_message_created_at", table_name="chat_message")
    op.drop_table("chat_message")
    op.drop_table("meal_details")
    op.drop_index("ix_meal_registration_date_period", table_name="meal_registration")
    op.drop_table("meal_registration")
    op.drop_table("member")
