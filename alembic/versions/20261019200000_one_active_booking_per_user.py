"""Partial unique index: at most one pending/approved booking per user.

Revision ID: 20261019200000
Revises: 20261019100000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019200000"
down_revision: Union[str, None] = "20261019100000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index(
        "uq_bookings_one_active_per_user",
        "bookings",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'approved')"),
    )


def downgrade() -> None:
    op.drop_index("uq_bookings_one_active_per_user", table_name="bookings")
