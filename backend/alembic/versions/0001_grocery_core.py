"""create grocery core tables

Revision ID: 0001_grocery_core
Revises:
Create Date: 2026-10-12 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_grocery_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("Name", sa.String(length=120), nullable=False),
        sa.Column("Email", sa.String(length=254), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_Id", "users", ["Id"])
    op.create_index("ix_users_Email", "users", ["Email"], unique=True)

    op.create_table(
        "couples",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("User1Id", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("User2Id", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_couples_Id", "couples", ["Id"])
    op.create_index("ix_couples_User1Id", "couples", ["User1Id"])
    op.create_index("ix_couples_User2Id", "couples", ["User2Id"])

    op.create_table(
        "categories",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("Name", sa.String(length=120), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_categories_Id", "categories", ["Id"])

    op.create_table(
        "grocery_lists",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("CoupleId", sa.Integer(), sa.ForeignKey("couples.Id"), nullable=False),
        sa.Column("WeekStart", sa.Date(), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("CoupleId", "WeekStart", name="uq_grocery_lists_couple_week"),
    )
    op.create_index("ix_grocery_lists_Id", "grocery_lists", ["Id"])
    op.create_index("ix_grocery_lists_CoupleId", "grocery_lists", ["CoupleId"])

    op.create_table(
        "grocery_items",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("ListId", sa.Integer(), sa.ForeignKey("grocery_lists.Id"), nullable=False),
        sa.Column("CategoryId", sa.Integer(), sa.ForeignKey("categories.Id"), nullable=False),
        sa.Column("Name", sa.String(length=200), nullable=False),
        sa.Column("Quantity", sa.String(length=80)),
        sa.Column("IsCompleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("AddedByUserId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("CompletedByUserId", sa.Integer(), sa.ForeignKey("users.Id")),
        sa.Column("CreatedAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("CompletedAt", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_grocery_items_Id", "grocery_items", ["Id"])
    op.create_index("ix_grocery_items_ListId", "grocery_items", ["ListId"])
    op.create_index("ix_grocery_items_CategoryId", "grocery_items", ["CategoryId"])
    op.create_index(
        "ix_grocery_items_list_completed",
        "grocery_items",
        ["ListId", "IsCompleted"],
    )


def downgrade() -> None:
    op.drop_index("ix_grocery_items_list_completed", table_name="grocery_items")
    op.drop_index("ix_grocery_items_CategoryId", table_name="grocery_items")
    op.drop_index("ix_grocery_items_ListId", table_name="grocery_items")
    op.drop_index("ix_grocery_items_Id", table_name="grocery_items")
    op.drop_table("grocery_items")
    op.drop_index("ix_grocery_lists_CoupleId", table_name="grocery_lists")
    op.drop_index("ix_grocery_lists_Id", table_name="grocery_lists")
    op.drop_table("grocery_lists")
    op.drop_index("ix_categories_Id", table_name="categories")
    op.drop_table("categories")
    op.drop_index("ix_couples_User2Id", table_name="couples")
    op.drop_index("ix_couples_User1Id", table_name="couples")
    op.drop_index("ix_couples_Id", table_name="couples")
    op.drop_table("couples")
    op.drop_index("ix_users_Email", table_name="users")
    op.drop_index("ix_users_Id", table_name="users")
    op.drop_table("users")
