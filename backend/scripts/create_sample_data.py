"""
Script to create a sample forwarder with a warehouse, zones and rates for testing.
"""
import sys
import os
from decimal import Decimal
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.db.database import SessionLocal, Base, engine
from app.models import Customer, Forwarder, ServiceType
from app.schemas.forwarder import ForwarderCreate, WarehouseCreate, ConsolidationSettingsUpdate
from app.schemas.shipping import ShippingZoneCreate, ShippingRateCreate, WeightSlabIn
from app.services import forwarder_service, shipping_config
from app.services.errors import ServiceError

FORWARDER_NAME = "Lion City Forwarding"


def create_sample_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(Forwarder).filter(Forwarder.business_name == FORWARDER_NAME).first()
        if existing:
            print(f"Forwarder '{FORWARDER_NAME}' already exists with ID: {existing.id}")
            return

        forwarder = forwarder_service.create_forwarder(
            db,
            ForwarderCreate(
                business_name=FORWARDER_NAME,
                contact_email="ops@lioncity.example",
                max_parcel_weight=Decimal("30"),
            ),
        )
        warehouse = forwarder_service.create_warehouse(
            db,
            forwarder.id,
            WarehouseCreate(name="Changi Hub", city="Singapore", country="SG", max_parcels=500),
        )
        asia = shipping_config.create_zone(
            db, forwarder.id, ShippingZoneCreate(name="Asia", countries=["SG", "MY", "TH", "ID"])
        )
        shipping_config.create_zone_from_preset(db, forwarder.id, "North America", region="North America")

        shipping_config.create_rate(
            db,
            forwarder.id,
            ShippingRateCreate(
                zone_id=asia.id,
                courier="DHL",
                service_type=ServiceType.EXPRESS,
                weight_slabs=[
                    WeightSlabIn(min_weight=Decimal("0"), max_weight=Decimal("1"), flat_rate=Decimal("35"), label="0-1kg"),
                    WeightSlabIn(min_weight=Decimal("1"), max_weight=Decimal("5"), rate_per_kg=Decimal("25"), label="1-5kg"),
                    WeightSlabIn(min_weight=Decimal("5"), rate_per_kg=Decimal("22"), label="5kg+"),
                ],
                handling_fee=Decimal("5"),
                estimated_days_min=2,
                estimated_days_max=4,
            ),
        )
        shipping_config.upsert_consolidation_settings(
            db,
            forwarder.id,
            ConsolidationSettingsUpdate(
                is_enabled=True, holding_period_days=14, discount_percentage=Decimal("20")
            ),
        )

        customer = db.query(Customer).filter(Customer.email == "sam@example.com").first()
        if not customer:
            customer = Customer(name="Sam Tan", email="sam@example.com", country="MY")
            db.add(customer)
            db.commit()

        print(f"Created forwarder: {forwarder.business_name} (ID: {forwarder.id})")
        print(f"Warehouse: {warehouse.name} (ID: {warehouse.id})")
        print(f"Customer: {customer.name} (ID: {customer.id})")
    except ServiceError as e:
        print(f"Error: {e.message}")
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    create_sample_data()
