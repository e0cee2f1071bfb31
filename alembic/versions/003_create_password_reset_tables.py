"""Create password reset tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "password_resets",
        sa.Column("identifier", sa.String(length=256), nullable=False),
        sa.Column("code", sa.String(length=6), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("identifier"),
    )
    op.create_table(
        "reset_grants",
        sa.Column("jti", sa.String(length=64), nullable=False),
        sa.Column("identifier", sa.String(length=256), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("jti"),
    )
    op.create_index(op.f("ix_reset_grants_identifier"), "reset_grants", ["identifier"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_reset_grants_identifier"), table_name="reset_grants")
    op.drop_table("reset_grants")
    op.drop_table("password_resets")
