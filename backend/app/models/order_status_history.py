"""
Order status history model. Rows are insert-only.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.db.database import Base, JSONType
from app.models.order import OrderStatus


class ActorType(str, enum.Enum):
    STAFF = "staff"
    FORWARDER = "forwarder"
    SYSTEM = "system"


def _status_enum(nullable: bool):
    return Column(
        SQLEnum(
            OrderStatus,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=nullable,
    )


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, index=True)
    warehouse_id = Column(UUID(as_uuid=True), ForeignKey("warehouses.id"), nullable=True)

    previous_status = _status_enum(nullable=True)  # None for the creation record
    new_status = _status_enum(nullable=False)

    actor_id = Column(UUID(as_uuid=True), nullable=True)
    actor_type = Column(
        SQLEnum(
            ActorType,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    staff_name = Column(String, nullable=True)
    warehouse_name = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    scan_data = Column(JSONType, nullable=True)  # {"barcode_value", "scan_location", "device_info"}

    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    order = relationship("Order", back_populates="status_history")
