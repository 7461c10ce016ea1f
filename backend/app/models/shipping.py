"""
Shipping zone, rate and weight slab models.

Rates are hierarchical: Zone -> Courier -> Service -> Weight slabs.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Integer, Boolean, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.db.database import Base, JSONType


class ServiceType(str, enum.Enum):
    ECONOMY = "economy"
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


class ShippingZone(Base):
    __tablename__ = "shipping_zones"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, index=True)
    name = Column(String, nullable=False)  # "Domestic", "Asia", "International"
    countries = Column(JSONType, nullable=False, default=list)  # ["SG", "MY"]
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    forwarder = relationship("Forwarder", back_populates="zones")
    rates = relationship("ShippingRate", back_populates="zone")


class ShippingRate(Base):
    __tablename__ = "shipping_rates"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    forwarder_id = Column(UUID(as_uuid=True), ForeignKey("forwarders.id"), nullable=False, index=True)
    zone_id = Column(UUID(as_uuid=True), ForeignKey("shipping_zones.id"), nullable=True, index=True)
    # None = forwarder default, otherwise only for that warehouse
    warehouse_id = Column(UUID(as_uuid=True), ForeignKey("warehouses.id"), nullable=True)

    courier = Column(String, nullable=False)  # "DHL", "UPS", "FedEx"
    service_type = Column(
        SQLEnum(
            ServiceType,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    service_name = Column(String, nullable=True)  # "Express Plus"
    service_description = Column(String, nullable=True)

    handling_fee = Column(Numeric(10, 2), nullable=False, default=0)
    insurance_fee = Column(Numeric(10, 2), nullable=True)
    fuel_surcharge = Column(Numeric(10, 2), nullable=True)

    estimated_days_min = Column(Integer, nullable=False)
    estimated_days_max = Column(Integer, nullable=False)

    requires_signature = Column(Boolean, nullable=False, default=False)
    tracking_included = Column(Boolean, nullable=False, default=True)
    insurance_included = Column(Boolean, nullable=False, default=False)

    is_active = Column(Boolean, nullable=False, default=True)
    is_public = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    zone = relationship("ShippingZone", back_populates="rates")
    weight_slabs = relationship(
        "WeightSlab",
        back_populates="rate",
        cascade="all, delete-orphan",
        order_by="WeightSlab.min_weight",
    )


class WeightSlab(Base):
    __tablename__ = "weight_slabs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    rate_id = Column(UUID(as_uuid=True), ForeignKey("shipping_rates.id"), nullable=False)

    min_weight = Column(Numeric(10, 3), nullable=False)  # kg, inclusive
    max_weight = Column(Numeric(10, 3), nullable=True)  # kg, inclusive; None = unbounded

    # Exactly one of these is set
    rate_per_kg = Column(Numeric(10, 4), nullable=True)
    flat_rate = Column(Numeric(10, 2), nullable=True)

    label = Column(String, nullable=False)  # "0-1kg", "1-5kg", "5kg+"

    # Relationships
    rate = relationship("ShippingRate", back_populates="weight_slabs")
