# tests/factories.py
from decimal import Decimal
from typing import List, Optional

from app.models import Customer, ServiceType, StaffRole
from app.schemas.forwarder import ConsolidationSettingsUpdate, ForwarderCreate, WarehouseCreate
from app.schemas.order import OrderCreate
from app.schemas.shipping import ShippingRateCreate, ShippingZoneCreate, WeightSlabIn
from app.schemas.staff import StaffCreate
from app.services import forwarder_service, order_service, shipping_config


def make_forwarder(db, name: str = "Lion City Forwarding", max_parcel_weight: Optional[Decimal] = None):
    return forwarder_service.create_forwarder(
        db,
        ForwarderCreate(
            business_name=name,
            contact_email=f"ops@{name.lower().replace(' ', '')}.example",
            max_parcel_weight=max_parcel_weight,
        ),
    )


def make_warehouse(db, forwarder, name: str = "Changi Hub"):
    return forwarder_service.create_warehouse(
        db, forwarder.id, WarehouseCreate(name=name, country="SG", max_parcels=100)
    )


def make_customer(db, email: str = "sam@example.com") -> Customer:
    customer = Customer(name="Sam Tan", email=email, country="MY")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def make_staff(db, forwarder, warehouses: List, role: StaffRole = StaffRole.WAREHOUSE_WORKER, email: str = None, **perms):
    return forwarder_service.create_staff(
        db,
        forwarder.id,
        StaffCreate(
            name=f"{role.value} staff",
            email=email or f"{role.value}@example.com",
            role=role,
            warehouse_ids=[w.id for w in warehouses],
            **perms,
        ),
    )


def standard_slabs() -> List[WeightSlabIn]:
    return [
        WeightSlabIn(min_weight=Decimal("0"), max_weight=Decimal("1"), flat_rate=Decimal("35"), label="0-1kg"),
        WeightSlabIn(min_weight=Decimal("1"), max_weight=Decimal("5"), rate_per_kg=Decimal("25"), label="1-5kg"),
        WeightSlabIn(min_weight=Decimal("5"), rate_per_kg=Decimal("22"), label="5kg+"),
    ]


def make_zone(db, forwarder, name: str = "Asia", countries=("SG", "MY")):
    return shipping_config.create_zone(
        db, forwarder.id, ShippingZoneCreate(name=name, countries=list(countries))
    )


def make_rate(db, forwarder, zone, courier: str = "DHL", service_type: ServiceType = ServiceType.EXPRESS, **overrides):
    data = dict(
        zone_id=zone.id,
        courier=courier,
        service_type=service_type,
        weight_slabs=standard_slabs(),
        handling_fee=Decimal("5"),
        estimated_days_min=2,
        estimated_days_max=4,
    )
    data.update(overrides)
    return shipping_config.create_rate(db, forwarder.id, ShippingRateCreate(**data))


def enable_consolidation(db, forwarder, discount: Decimal = Decimal("20")):
    return shipping_config.upsert_consolidation_settings(
        db,
        forwarder.id,
        ConsolidationSettingsUpdate(is_enabled=True, holding_period_days=7, discount_percentage=discount),
    )


def make_order(db, forwarder, warehouse, customer, **overrides):
    data = dict(
        customer_id=customer.id,
        forwarder_id=forwarder.id,
        warehouse_id=warehouse.id,
        shipping_address="1 Jalan Ampang, Kuala Lumpur",
        destination_country="MY",
        tracking_number="TRK-0001",
        merchant_name="Shopee",
        declared_weight=Decimal("3.5"),
        declared_value=Decimal("200"),
    )
    data.update(overrides)
    return order_service.create_order(db, OrderCreate(**data))
