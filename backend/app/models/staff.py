"""
Warehouse staff and staff activity models.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Table, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.db.database import Base, JSONType


class StaffRole(str, enum.Enum):
    WAREHOUSE_WORKER = "warehouse_worker"
    SUPERVISOR = "supervisor"
    MANAGER = "manager"


class ActivityType(str, enum.Enum):
    SCAN = "scan"
    STATUS_UPDATE = "status_update"
    LOGIN = "login"
    LOGOUT = "logout"


staff_warehouses = Table(
    "staff_warehouses",
    Base.metadata,
    Column("staff_id", UUID(as_uuid=True), ForeignKey("staff.id"), primary_key=True),
    Column("warehouse_id", UUID(as_uuid=True), ForeignKey("warehouses.id"), primary_key=True),
)


class Staff(Base):
    __tablename__ = "staff"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    role = Column(
        SQLEnum(
            StaffRole,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=StaffRole.WAREHOUSE_WORKER,
    )

    # Permissions
    can_update_order_status = Column(Boolean, nullable=False, default=True)
    can_print_labels = Column(Boolean, nullable=False, default=True)
    can_scan_barcodes = Column(Boolean, nullable=False, default=True)
    can_view_reports = Column(Boolean, nullable=False, default=False)

    is_active = Column(Boolean, nullable=False, default=True)
    last_active_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    warehouses = relationship("Warehouse", secondary=staff_warehouses)
    activities = relationship("StaffActivity", back_populates="staff")

    @property
    def warehouse_ids(self):
        return [warehouse.id for warehouse in self.warehouses]


class StaffActivity(Base):
    __tablename__ = "staff_activities"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    staff_id = Column(UUID(as_uuid=True), ForeignKey("staff.id"), nullable=False, index=True)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, index=True)
    warehouse_id = Column(UUID(as_uuid=True), ForeignKey("warehouses.id"), nullable=True)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=True)
    activity_type = Column(
        SQLEnum(
            ActivityType,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    details = Column(JSONType, nullable=True)  # {"old_status", "new_status", "scan_location"}
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    staff = relationship("Staff", back_populates="activities")
