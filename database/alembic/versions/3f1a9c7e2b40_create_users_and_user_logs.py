"""create_users_and_user_logs

Revision ID: 3f1a9c7e2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1a9c7e2b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'user')", name="users_role_check"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # No foreign key to users: entries outlive the account they describe
    op.create_table(
        "user_logs",
        sa.Column(
            "seq",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("login_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("logout_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("ip_address", sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id", name="uq_user_logs_id"),
    )
    op.create_index("ix_user_logs_user_id", "user_logs", ["user_id"], unique=False)
    op.create_index("ix_user_logs_login_time", "user_logs", ["login_time"], unique=False)
    op.create_index(
        "ix_user_logs_open_lookup",
        "user_logs",
        ["user_id", "token", "logout_time"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_user_logs_open_lookup", table_name="user_logs")
    op.drop_index("ix_user_logs_login_time", table_name="user_logs")
    op.drop_index("ix_user_logs_user_id", table_name="user_logs")
    op.drop_table("user_logs")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
