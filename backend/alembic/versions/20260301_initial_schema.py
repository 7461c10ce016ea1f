"""Initial parcel forwarding schema

Revision ID: 20260301_initial_schema
Revises:
Create Date: 2026-03-01 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20260301_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _uuid():
    return postgresql.UUID(as_uuid=True)


def _json():
    return sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade():
    op.create_table(
        "forwarders",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("business_name", sa.String(), nullable=False, unique=True),
        sa.Column("contact_email", sa.String(), nullable=False),
        sa.Column("contact_phone", sa.String(), nullable=True),
        sa.Column("max_parcel_weight", sa.Numeric(10, 3), nullable=True),
        sa.Column("max_parcels_per_month", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "customers",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("shipping_address", sa.String(), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "warehouses",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, index=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        sa.Column("max_parcels", sa.Integer(), nullable=False),
        sa.Column("current_capacity", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "consolidation_settings",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, unique=True),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        sa.Column("holding_period_days", sa.Integer(), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("minimum_packages", sa.Integer(), nullable=True),
        sa.Column("maximum_packages", sa.Integer(), nullable=True),
        sa.Column("consolidation_frequency", sa.String(8), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "staff",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, index=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("can_update_order_status", sa.Boolean(), nullable=False),
        sa.Column("can_print_labels", sa.Boolean(), nullable=False),
        sa.Column("can_scan_barcodes", sa.Boolean(), nullable=False),
        sa.Column("can_view_reports", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_active_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "staff_warehouses",
        sa.Column("staff_id", _uuid(), sa.ForeignKey("staff.id"), primary_key=True),
        sa.Column("warehouse_id", _uuid(), sa.ForeignKey("warehouses.id"), primary_key=True),
    )
    op.create_table(
        "shipping_zones",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, index=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("countries", _json(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "shipping_rates",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, index=True),
        sa.Column("zone_id", _uuid(), sa.ForeignKey("shipping_zones.id"), nullable=True, index=True),
        sa.Column("warehouse_id", _uuid(), sa.ForeignKey("warehouses.id"), nullable=True),
        sa.Column("courier", sa.String(), nullable=False),
        sa.Column("service_type", sa.String(9), nullable=False),
        sa.Column("service_name", sa.String(), nullable=True),
        sa.Column("service_description", sa.String(), nullable=True),
        sa.Column("handling_fee", sa.Numeric(10, 2), nullable=False),
        sa.Column("insurance_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column("fuel_surcharge", sa.Numeric(10, 2), nullable=True),
        sa.Column("estimated_days_min", sa.Integer(), nullable=False),
        sa.Column("estimated_days_max", sa.Integer(), nullable=False),
        sa.Column("requires_signature", sa.Boolean(), nullable=False),
        sa.Column("tracking_included", sa.Boolean(), nullable=False),
        sa.Column("insurance_included", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "weight_slabs",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("rate_id", _uuid(), sa.ForeignKey("shipping_rates.id"), nullable=False),
        sa.Column("min_weight", sa.Numeric(10, 3), nullable=False),
        sa.Column("max_weight", sa.Numeric(10, 3), nullable=True),
        sa.Column("rate_per_kg", sa.Numeric(10, 4), nullable=True),
        sa.Column("flat_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("label", sa.String(), nullable=False),
    )
    op.create_table(
        "orders",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("customer_id", _uuid(), sa.ForeignKey("customers.id"), nullable=False, index=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, index=True),
        sa.Column("warehouse_id", _uuid(), sa.ForeignKey("warehouses.id"), nullable=False, index=True),
        sa.Column("customer_name", sa.String(), nullable=False),
        sa.Column("customer_email", sa.String(), nullable=False),
        sa.Column("shipping_address", sa.String(), nullable=False),
        sa.Column("destination_country", sa.String(2), nullable=True),
        sa.Column("tracking_number", sa.String(), nullable=True, index=True),
        sa.Column("merchant_name", sa.String(), nullable=True),
        sa.Column("declared_weight", sa.Numeric(10, 3), nullable=True),
        sa.Column("declared_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("shipping_type", sa.String(12), nullable=False),
        sa.Column("courier", sa.String(), nullable=True),
        sa.Column("courier_tracking_number", sa.String(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("label_printed", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("received_at", sa.DateTime(), nullable=True),
        sa.Column("packed_at", sa.DateTime(), nullable=True),
        sa.Column("awaiting_pickup_at", sa.DateTime(), nullable=True),
        sa.Column("shipped_at", sa.DateTime(), nullable=True),
        sa.Column("delivered_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, index=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "order_status_history",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("order_id", _uuid(), sa.ForeignKey("orders.id"), nullable=False, index=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, index=True),
        sa.Column("warehouse_id", _uuid(), sa.ForeignKey("warehouses.id"), nullable=True),
        sa.Column("previous_status", sa.String(20), nullable=True),
        sa.Column("new_status", sa.String(20), nullable=False),
        sa.Column("actor_id", _uuid(), nullable=True),
        sa.Column("actor_type", sa.String(9), nullable=False),
        sa.Column("staff_name", sa.String(), nullable=True),
        sa.Column("warehouse_name", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("scan_data", _json(), nullable=True),
        sa.Column("changed_at", sa.DateTime(), nullable=False, index=True),
    )
    op.create_table(
        "staff_activities",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("staff_id", _uuid(), sa.ForeignKey("staff.id"), nullable=False, index=True),
        sa.Column("forwarder_id", _uuid(), sa.ForeignKey("forwarders.id"), nullable=False, index=True),
        sa.Column("warehouse_id", _uuid(), sa.ForeignKey("warehouses.id"), nullable=True),
        sa.Column("order_id", _uuid(), sa.ForeignKey("orders.id"), nullable=True),
        sa.Column("activity_type", sa.String(13), nullable=False),
        sa.Column("details", _json(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, index=True),
    )


def downgrade():
    for table in (
        "staff_activities",
        "order_status_history",
        "orders",
        "weight_slabs",
        "shipping_rates",
        "shipping_zones",
        "staff_warehouses",
        "staff",
        "consolidation_settings",
        "warehouses",
        "customers",
        "forwarders",
    ):
        op.drop_table(table)
