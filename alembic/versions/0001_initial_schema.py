"""initial schema: users, projects, task_items

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("passwordHash", sa.String(length=255), nullable=False),
        sa.Column("refreshToken", sa.Text(), nullable=True),
        sa.Column("refreshTokenExpiry", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("dueDate", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("isCompleted", sa.Boolean(), nullable=False),
        sa.Column("isDeleted", sa.Boolean(), nullable=False),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
    )
    op.create_index("ix_projects_id", "projects", ["id"])
    op.create_index("ix_projects_userId", "projects", ["userId"])

    op.create_table(
        "task_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("isCompleted", sa.Boolean(), nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("dueDate", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("completedAt", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("priority", sa.String(length=20), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("repeatType", sa.String(length=50), nullable=True),
        sa.Column("isDeleted", sa.Boolean(), nullable=False),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("projectId", sa.Integer(), sa.ForeignKey("projects.id"), nullable=True),
    )
    op.create_index("ix_task_items_id", "task_items", ["id"])
    op.create_index("ix_task_items_userId", "task_items", ["userId"])
    op.create_index("ix_task_items_projectId", "task_items", ["projectId"])


def downgrade() -> None:
    op.drop_table("task_items")
    op.drop_table("projects")
    op.drop_table("users")
