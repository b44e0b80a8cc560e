"""Create users, sessions, quotes and categories

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("cookie_preferences", sa.JSON(), nullable=True),
        sa.Column(
            "cookie_consent_given", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("cookie_consent_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Child tables cascade-delete with their user
    for table in ("sessions", "quotes", "categories"):
        columns = [
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column(
                "user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=False,
            ),
        ]
        if table == "sessions":
            columns.append(sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False))
        elif table == "quotes":
            columns += [
                sa.Column("text", sa.Text(), nullable=False),
                sa.Column("author", sa.String(length=255), nullable=False),
                sa.Column("category", sa.String(length=255), nullable=False),
            ]
        else:
            columns.append(sa.Column("name", sa.String(length=255), nullable=False))
        columns.append(
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            )
        )
        op.create_table(table, *columns)
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])

    op.create_index("ix_sessions_expires_at", "sessions", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_sessions_expires_at", table_name="sessions")
    for table in ("categories", "quotes", "sessions"):
        op.drop_index(f"ix_{table}_user_id", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
