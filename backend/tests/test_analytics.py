from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from app.models import ActorType, OrderStatus
from app.schemas.order import ScanData, ScanRequest, StatusUpdate
from app.services import analytics, status_tracker
from app.services.errors import NotFoundError
from factories import make_customer, make_forwarder, make_order, make_staff, make_warehouse


@pytest.fixture
def setup(db):
    forwarder = make_forwarder(db)
    warehouse = make_warehouse(db, forwarder)
    customer = make_customer(db)
    worker = make_staff(db, forwarder, [warehouse])
    return forwarder, warehouse, customer, worker


def _move(db, order, staff, new_status):
    status_tracker.update_status(
        db, order.id, StatusUpdate(new_status=new_status, actor_id=staff.id, actor_type=ActorType.STAFF)
    )


def test_stats_for_empty_forwarder(db, setup):
    forwarder = setup[0]
    stats = analytics.get_forwarder_stats(db, forwarder.id)
    assert stats["total_orders"] == 0
    assert stats["warehouse_count"] == 1
    assert stats["total_capacity"] == 100
    assert stats["status_counts"] == {}


def test_stats_unknown_forwarder(db):
    with pytest.raises(NotFoundError):
        analytics.get_forwarder_stats(db, uuid4())


def test_stats_counts(db, setup):
    forwarder, warehouse, customer, worker = setup
    incoming = make_order(db, forwarder, warehouse, customer, tracking_number="TRK-1")
    packed = make_order(db, forwarder, warehouse, customer, tracking_number="TRK-2")
    ready = make_order(db, forwarder, warehouse, customer, tracking_number="TRK-3")
    _move(db, packed, worker, OrderStatus.PACKED)
    _move(db, ready, worker, OrderStatus.AWAITING_PICKUP)
    ready.label_printed = True
    incoming.created_at = datetime.utcnow() - timedelta(hours=72)
    db.commit()

    stats = analytics.get_forwarder_stats(db, forwarder.id)

    assert stats["total_orders"] == 3
    assert stats["pending_orders"] == 1
    assert stats["ready_to_ship"] == 1
    assert stats["pending_labels"] == 1
    assert stats["stale_orders"] == 1
    assert stats["status_counts"] == {"incoming": 1, "packed": 1, "awaiting_pickup": 1}


def test_stats_count_legacy_status_as_synonym(db, setup):
    forwarder, warehouse, customer, _ = setup
    order = make_order(db, forwarder, warehouse, customer)
    order.status = OrderStatus.SHIPPED
    db.commit()

    stats = analytics.get_forwarder_stats(db, forwarder.id)
    assert stats["status_counts"] == {"in_transit": 1}


def test_order_volume(db, setup):
    forwarder, warehouse, customer, _ = setup
    first = make_order(db, forwarder, warehouse, customer, tracking_number="TRK-1")
    make_order(db, forwarder, warehouse, customer, tracking_number="TRK-2")
    first.courier = "DHL"
    db.commit()

    volume = analytics.get_order_volume(db, forwarder.id, days=7)

    assert volume["total_orders"] == 2
    assert len(volume["daily"]) == 7
    assert volume["daily"][-1]["orders"] == 2
    assert volume["peak_day"] == volume["daily"][-1]
    assert volume["courier_breakdown"] == {"DHL": 1}
    assert volume["status_breakdown"] == {"incoming": 2}
    assert volume["estimated_revenue"] == Decimal("20.00")


def test_order_volume_without_orders(db, setup):
    volume = analytics.get_order_volume(db, setup[0].id, days=3)
    assert volume["total_orders"] == 0
    assert [d["orders"] for d in volume["daily"]] == [0, 0, 0]
    assert volume["peak_day"] is None
    assert volume["estimated_revenue"] == Decimal("0.00")


def test_performance_metrics(db, setup):
    forwarder, warehouse, customer, _ = setup
    order = make_order(db, forwarder, warehouse, customer)
    now = datetime.utcnow()
    order.received_at = now - timedelta(hours=10)
    order.packed_at = now - timedelta(hours=4)
    order.shipped_at = now - timedelta(hours=1)
    db.commit()

    metrics = analytics.get_performance_metrics(db, forwarder.id)

    assert metrics["orders_measured"] == 1
    assert metrics["avg_receive_to_pack_hours"] == 6.0
    assert metrics["avg_pack_to_ship_hours"] == 3.0
    assert metrics["avg_receive_to_ship_hours"] == 9.0


def test_performance_metrics_without_orders(db, setup):
    assert analytics.get_performance_metrics(db, setup[0].id) == {"orders_measured": 0}


def test_staff_performance(db, setup):
    forwarder, warehouse, customer, worker = setup
    idle = make_staff(db, forwarder, [warehouse], email="idle@example.com")
    order = make_order(db, forwarder, warehouse, customer)
    _move(db, order, worker, OrderStatus.ARRIVED_AT_WAREHOUSE)
    status_tracker.log_scan(
        db, order.id, ScanRequest(staff_id=worker.id, scan_data=ScanData(barcode_value="TRK-0001"))
    )

    results = analytics.get_staff_performance(db, forwarder.id)

    assert [r["staff_id"] for r in results] == [worker.id, idle.id]
    assert results[0]["scans"] == 1
    assert results[0]["status_updates"] == 1
    assert results[0]["orders_touched"] == 1
    assert results[1]["scans"] == 0
