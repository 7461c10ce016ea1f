"""Normalize legacy order statuses

received -> arrived_at_warehouse, shipped -> in_transit, on orders and
order_status_history. Re-running is a no-op.

Revision ID: 20260315_normalize_legacy
Revises: 20260301_initial_schema
Create Date: 2026-03-15 10:30:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260315_normalize_legacy"
down_revision = "20260301_initial_schema"
branch_labels = None
depends_on = None

LEGACY_STATUS_MAP = {
    "received": "arrived_at_warehouse",
    "shipped": "in_transit",
}

STATUS_COLUMNS = [
    ("orders", "status"),
    ("order_status_history", "previous_status"),
    ("order_status_history", "new_status"),
]


def upgrade():
    for table, column in STATUS_COLUMNS:
        for legacy, canonical in LEGACY_STATUS_MAP.items():
            op.execute(
                sa.text(f"UPDATE {table} SET {column} = :canonical WHERE {column} = :legacy").bindparams(
                    canonical=canonical, legacy=legacy
                )
            )


def downgrade():
    # Legacy values cannot be told apart from current ones after the upgrade
    pass
