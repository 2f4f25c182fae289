from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "3b8d2f6a1c47"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "database_locks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("ttl", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("locked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("name", name="uq_database_locks_name"),
        sa.CheckConstraint("ttl >= 0", name="ck_database_locks_ttl_non_negative"),
    )
    op.create_index("ix_database_locks_expires_at", "database_locks", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_database_locks_expires_at", table_name="database_locks")
    op.drop_table("database_locks")
