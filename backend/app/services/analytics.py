"""
Dashboard analytics for forwarders.

Orders and staff activity are loaded into pandas frames and aggregated there.
Timestamps are stored as naive UTC; daily buckets use ANALYTICS_TIMEZONE.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

import pandas as pd
from sqlalchemy.orm import Session

from app.db.database import settings
from app.models import ActivityType, Order, OrderStatus, Staff, StaffActivity, Warehouse
from app.services.shipping_config import get_forwarder
from app.services.status_tracker import canonical_status

logger = logging.getLogger(__name__)

ORDER_COLUMNS = [
    "id",
    "status",
    "courier",
    "declared_value",
    "label_printed",
    "created_at",
    "received_at",
    "packed_at",
    "shipped_at",
]


def _orders_to_dataframe(orders: List[Order]) -> pd.DataFrame:
    if not orders:
        return pd.DataFrame(columns=ORDER_COLUMNS)
    data = [
        {
            "id": order.id,
            "status": canonical_status(order.status).value,
            "courier": order.courier,
            "declared_value": order.declared_value,
            "label_printed": bool(order.label_printed),
            "created_at": order.created_at,
            "received_at": order.received_at,
            "packed_at": order.packed_at,
            "shipped_at": order.shipped_at,
        }
        for order in orders
    ]
    df = pd.DataFrame(data)
    for column in ("created_at", "received_at", "packed_at", "shipped_at"):
        df[column] = pd.to_datetime(df[column])
    return df


def _load_orders(db: Session, forwarder_id: UUID, since: Optional[datetime] = None) -> pd.DataFrame:
    query = db.query(Order).filter(Order.forwarder_id == forwarder_id)
    if since is not None:
        query = query.filter(Order.created_at >= since)
    return _orders_to_dataframe(query.all())


def get_forwarder_stats(db: Session, forwarder_id: UUID) -> Dict:
    get_forwarder(db, forwarder_id)
    df = _load_orders(db, forwarder_id)
    now = datetime.utcnow()

    warehouses = db.query(Warehouse).filter(Warehouse.forwarder_id == forwarder_id).all()
    stats = {
        "total_orders": int(len(df)),
        "pending_orders": 0,
        "ready_to_ship": 0,
        "pending_labels": 0,
        "stale_orders": 0,
        "orders_this_month": 0,
        "warehouse_count": len(warehouses),
        "total_capacity": sum(w.max_parcels or 0 for w in warehouses),
        "used_capacity": sum(w.current_capacity or 0 for w in warehouses),
        "status_counts": {},
    }
    if df.empty:
        return stats

    status = df["status"]
    stale_cutoff = pd.Timestamp(now - timedelta(hours=settings.stale_order_hours))
    month_start = pd.Timestamp(now.replace(day=1, hour=0, minute=0, second=0, microsecond=0))

    stats["pending_orders"] = int((status == OrderStatus.INCOMING.value).sum())
    stats["ready_to_ship"] = int((status == OrderStatus.AWAITING_PICKUP.value).sum())
    stats["pending_labels"] = int(
        (status.isin([OrderStatus.PACKED.value, OrderStatus.AWAITING_PICKUP.value]) & ~df["label_printed"]).sum()
    )
    stats["stale_orders"] = int(
        (
            status.isin([OrderStatus.INCOMING.value, OrderStatus.ARRIVED_AT_WAREHOUSE.value])
            & (df["created_at"] < stale_cutoff)
        ).sum()
    )
    stats["orders_this_month"] = int((df["created_at"] >= month_start).sum())
    stats["status_counts"] = {key: int(value) for key, value in status.value_counts().items()}
    return stats


def get_order_volume(db: Session, forwarder_id: UUID, days: int = 30) -> Dict:
    """Daily order volume for the last `days` local days, zero-filled."""
    get_forwarder(db, forwarder_id)
    tz = settings.analytics_timezone

    today = pd.Timestamp.now(tz=tz).normalize()
    start_local = today - pd.Timedelta(days=days - 1)
    since = start_local.tz_convert("UTC").tz_localize(None).to_pydatetime()
    df = _load_orders(db, forwarder_id, since=since)

    all_days = pd.date_range(start=start_local, periods=days, freq="D").strftime("%Y-%m-%d")
    if df.empty:
        daily_counts = pd.Series(0, index=all_days)
        courier_breakdown: Dict[str, int] = {}
        status_breakdown: Dict[str, int] = {}
        declared_total = Decimal("0")
    else:
        local_day = df["created_at"].dt.tz_localize("UTC").dt.tz_convert(tz).dt.strftime("%Y-%m-%d")
        daily_counts = local_day.value_counts().reindex(all_days, fill_value=0)
        courier_breakdown = {k: int(v) for k, v in df["courier"].dropna().value_counts().items()}
        status_breakdown = {k: int(v) for k, v in df["status"].value_counts().items()}
        declared_total = sum(
            (Decimal(str(value)) for value in df["declared_value"].dropna()), Decimal("0")
        )

    daily = [{"date": day, "orders": int(count)} for day, count in daily_counts.items()]
    peak_day = None
    if daily_counts.sum() > 0:
        peak_date = daily_counts.idxmax()
        peak_day = {"date": peak_date, "orders": int(daily_counts[peak_date])}

    return {
        "days": days,
        "timezone": tz,
        "total_orders": int(daily_counts.sum()),
        "daily": daily,
        "courier_breakdown": courier_breakdown,
        "status_breakdown": status_breakdown,
        "estimated_revenue": (declared_total * settings.revenue_fee_rate).quantize(Decimal("0.01")),
        "peak_day": peak_day,
    }


def _mean_hours(end: pd.Series, start: pd.Series) -> Optional[float]:
    hours = ((end - start).dt.total_seconds() / 3600).dropna()
    if hours.empty:
        return None
    return round(float(hours.mean()), 1)


def get_performance_metrics(db: Session, forwarder_id: UUID, days: int = 30) -> Dict:
    """Average warehouse handling times in hours over the last `days` days."""
    get_forwarder(db, forwarder_id)
    df = _load_orders(db, forwarder_id, since=datetime.utcnow() - timedelta(days=days))
    if df.empty:
        return {"orders_measured": 0}
    return {
        "orders_measured": int(len(df)),
        "avg_receive_to_pack_hours": _mean_hours(df["packed_at"], df["received_at"]),
        "avg_pack_to_ship_hours": _mean_hours(df["shipped_at"], df["packed_at"]),
        "avg_receive_to_ship_hours": _mean_hours(df["shipped_at"], df["received_at"]),
    }


def get_staff_performance(db: Session, forwarder_id: UUID, days: int = 7) -> List[Dict]:
    """Scans, status updates and distinct orders per active staff member, busiest first."""
    get_forwarder(db, forwarder_id)
    since = datetime.utcnow() - timedelta(days=days)
    staff_members = (
        db.query(Staff)
        .filter(Staff.forwarder_id == forwarder_id, Staff.is_active.is_(True))
        .all()
    )
    activities = (
        db.query(StaffActivity)
        .filter(StaffActivity.forwarder_id == forwarder_id, StaffActivity.created_at >= since)
        .all()
    )
    df = pd.DataFrame(
        [
            {
                "staff_id": a.staff_id,
                "activity_type": ActivityType(a.activity_type).value,
                "order_id": a.order_id,
            }
            for a in activities
        ],
        columns=["staff_id", "activity_type", "order_id"],
    )

    results = []
    for member in staff_members:
        own = df[df["staff_id"] == member.id]
        results.append(
            {
                "staff_id": member.id,
                "staff_name": member.name,
                "scans": int((own["activity_type"] == ActivityType.SCAN.value).sum()),
                "status_updates": int((own["activity_type"] == ActivityType.STATUS_UPDATE.value).sum()),
                "orders_touched": int(own["order_id"].dropna().nunique()),
            }
        )
    results.sort(key=lambda r: (r["scans"] + r["status_updates"]), reverse=True)
    return results
