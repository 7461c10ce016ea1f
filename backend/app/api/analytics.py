"""
Forwarder dashboard analytics API endpoints.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from app.db.database import get_db
from app.schemas.analytics import (
    ForwarderStats,
    OrderVolume,
    PerformanceMetrics,
    StaffPerformance,
    StatusUpdateStats,
)
from app.schemas.order import OrderStatusHistoryResponse
from app.services import analytics, status_tracker
from app.services.shipping_config import get_forwarder

router = APIRouter()


@router.get("/{forwarder_id}/stats", response_model=ForwarderStats)
async def get_forwarder_stats(
    forwarder_id: UUID,
    db: Session = Depends(get_db)
):
    return analytics.get_forwarder_stats(db, forwarder_id)


@router.get("/{forwarder_id}/volume", response_model=OrderVolume)
async def get_order_volume(
    forwarder_id: UUID,
    days: int = Query(30, ge=1, le=366),
    db: Session = Depends(get_db)
):
    return analytics.get_order_volume(db, forwarder_id, days=days)


@router.get("/{forwarder_id}/performance", response_model=PerformanceMetrics)
async def get_performance_metrics(
    forwarder_id: UUID,
    days: int = Query(30, ge=1, le=366),
    db: Session = Depends(get_db)
):
    return analytics.get_performance_metrics(db, forwarder_id, days=days)


@router.get("/{forwarder_id}/staff-performance", response_model=List[StaffPerformance])
async def get_staff_performance(
    forwarder_id: UUID,
    days: int = Query(7, ge=1, le=366),
    db: Session = Depends(get_db)
):
    return analytics.get_staff_performance(db, forwarder_id, days=days)


@router.get("/{forwarder_id}/status-updates", response_model=List[OrderStatusHistoryResponse])
async def get_recent_status_updates(
    forwarder_id: UUID,
    days: int = Query(7, ge=1, le=366),
    warehouse_id: Optional[UUID] = None,
    staff_id: Optional[UUID] = None,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """Recent status changes and scans, newest first."""
    get_forwarder(db, forwarder_id)
    return status_tracker.get_recent_status_updates(
        db, forwarder_id, days=days, warehouse_id=warehouse_id, staff_id=staff_id, limit=limit
    )


@router.get("/{forwarder_id}/status-update-stats", response_model=StatusUpdateStats)
async def get_status_update_stats(
    forwarder_id: UUID,
    days: int = Query(7, ge=1, le=366),
    db: Session = Depends(get_db)
):
    get_forwarder(db, forwarder_id)
    return status_tracker.get_status_update_stats(db, forwarder_id, days=days)
