"""
Forwarder, warehouse and consolidated shipping settings models.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Integer, Boolean, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.db.database import Base


class ConsolidationFrequency(str, enum.Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class Forwarder(Base):
    __tablename__ = "forwarders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_name = Column(String, nullable=False, unique=True)
    contact_email = Column(String, nullable=False)
    contact_phone = Column(String, nullable=True)
    max_parcel_weight = Column(Numeric(10, 3), nullable=True)  # kg per parcel
    max_parcels_per_month = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    warehouses = relationship("Warehouse", back_populates="forwarder", cascade="all, delete-orphan")
    zones = relationship("ShippingZone", back_populates="forwarder")
    consolidation_settings = relationship(
        "ConsolidationSettings", back_populates="forwarder", uselist=False, cascade="all, delete-orphan"
    )


class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=True)  # ISO code of the warehouse location
    max_parcels = Column(Integer, nullable=False, default=0)
    current_capacity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    forwarder = relationship("Forwarder", back_populates="warehouses")


class ConsolidationSettings(Base):
    __tablename__ = "consolidation_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, unique=True)
    is_enabled = Column(Boolean, nullable=False, default=False)
    holding_period_days = Column(Integer, nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=True)  # e.g. 20 = 20% off
    minimum_packages = Column(Integer, nullable=True)
    maximum_packages = Column(Integer, nullable=True)
    consolidation_frequency = Column(
        SQLEnum(
            ConsolidationFrequency,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=True,
    )
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    forwarder = relationship("Forwarder", back_populates="consolidation_settings")
