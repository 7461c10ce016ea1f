"""
Dashboard analytics schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from decimal import Decimal
from typing import Optional, List, Dict


class ForwarderStats(BaseModel):
    total_orders: int = 0
    pending_orders: int = 0
    ready_to_ship: int = 0
    pending_labels: int = 0
    stale_orders: int = 0
    orders_this_month: int = 0
    warehouse_count: int = 0
    total_capacity: int = 0
    used_capacity: int = 0
    status_counts: Dict[str, int] = {}


class DailyVolume(BaseModel):
    date: str  # YYYY-MM-DD in the analytics timezone
    orders: int


class OrderVolume(BaseModel):
    days: int
    timezone: str
    total_orders: int
    daily: List[DailyVolume]
    courier_breakdown: Dict[str, int]
    status_breakdown: Dict[str, int]
    estimated_revenue: Decimal
    peak_day: Optional[DailyVolume] = None


class PerformanceMetrics(BaseModel):
    orders_measured: int
    avg_receive_to_pack_hours: Optional[float] = None
    avg_pack_to_ship_hours: Optional[float] = None
    avg_receive_to_ship_hours: Optional[float] = None


class StaffPerformance(BaseModel):
    staff_id: UUID
    staff_name: str
    scans: int
    status_updates: int
    orders_touched: int


class StatusUpdateStats(BaseModel):
    days: int
    total_updates: int
    by_actor_type: Dict[str, int]
    by_status: Dict[str, int]
    by_staff: Dict[str, int]
