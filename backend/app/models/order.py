"""
Order model.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Boolean, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.db.database import Base


class OrderStatus(str, enum.Enum):
    INCOMING = "incoming"
    ARRIVED_AT_WAREHOUSE = "arrived_at_warehouse"
    PACKED = "packed"
    AWAITING_PICKUP = "awaiting_pickup"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    # Legacy values, only found in historical rows
    RECEIVED = "received"
    SHIPPED = "shipped"


class ShippingType(str, enum.Enum):
    IMMEDIATE = "immediate"
    CONSOLIDATED = "consolidated"


class Order(Base):
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, index=True)
    warehouse_id = Column(UUID(as_uuid=True), ForeignKey("warehouses.id"), nullable=False, index=True)

    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    shipping_address = Column(String, nullable=False)
    destination_country = Column(String(2), nullable=True)  # ISO alpha-2

    tracking_number = Column(String, nullable=True, index=True)  # inbound tracking from merchant
    merchant_name = Column(String, nullable=True)
    declared_weight = Column(Numeric(10, 3), nullable=True)  # kg
    declared_value = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="USD")

    shipping_type = Column(
        SQLEnum(
            ShippingType,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=ShippingType.IMMEDIATE,
    )
    courier = Column(String, nullable=True)
    courier_tracking_number = Column(String, nullable=True)

    status = Column(
        SQLEnum(
            OrderStatus,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=OrderStatus.INCOMING,
        index=True,
    )
    label_printed = Column(Boolean, nullable=False, default=False)
    notes = Column(String, nullable=True)

    # Per-stage timestamps, stamped once
    received_at = Column(DateTime, nullable=True)
    packed_at = Column(DateTime, nullable=True)
    awaiting_pickup_at = Column(DateTime, nullable=True)
    shipped_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    customer = relationship("Customer", back_populates="orders")
    warehouse = relationship("Warehouse")
    status_history = relationship(
        "OrderStatusHistory",
        back_populates="order",
        order_by="OrderStatusHistory.changed_at",
    )
