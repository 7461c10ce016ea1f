"""
Order and order status API endpoints.
"""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from app.db.database import get_db
from app.models import OrderStatus
from app.models.shipping import ServiceType
from app.schemas.order import (
    ActorAction,
    BulkCourierAssign,
    BulkCourierAssignResponse,
    CourierAssign,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusHistoryResponse,
    ScanRequest,
    StatusUpdate,
)
from app.schemas.shipping import RateQuoteResponse
from app.services import order_service, status_tracker
from app.services.rate_resolver import quote_order

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db)
):
    """Create an order in the incoming state."""
    logger.info(f"Creating order: customer_id={order_data.customer_id}, forwarder_id={order_data.forwarder_id}")
    return order_service.create_order(db, order_data)


@router.post("/bulk-courier", response_model=BulkCourierAssignResponse)
async def bulk_assign_courier(
    assignment: BulkCourierAssign,
    db: Session = Depends(get_db)
):
    updated = order_service.bulk_assign_courier(db, assignment)
    return {"updated": len(updated), "order_ids": updated}


@router.get("/forwarder/{forwarder_id}", response_model=OrderListResponse)
async def list_forwarder_orders(
    forwarder_id: UUID,
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    warehouse_id: Optional[UUID] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=order_service.MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    """List a forwarder's orders, newest first."""
    orders, total = order_service.list_forwarder_orders(
        db,
        forwarder_id,
        status=status_filter,
        warehouse_id=warehouse_id,
        search=search,
        page=page,
        page_size=page_size,
    )
    return {"orders": orders, "total": total, "page": page, "page_size": page_size}


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    db: Session = Depends(get_db)
):
    return status_tracker.get_order(db, order_id)


@router.post("/{order_id}/status", response_model=OrderStatusHistoryResponse)
async def update_order_status(
    order_id: UUID,
    update: StatusUpdate,
    db: Session = Depends(get_db)
):
    """Change the order status. Returns the new history record."""
    return status_tracker.update_status(db, order_id, update)


@router.post("/{order_id}/scan", response_model=OrderStatusHistoryResponse, status_code=status.HTTP_201_CREATED)
async def log_scan(
    order_id: UUID,
    scan: ScanRequest,
    db: Session = Depends(get_db)
):
    """Record a barcode scan without changing the status."""
    return status_tracker.log_scan(db, order_id, scan)


@router.get("/{order_id}/history", response_model=List[OrderStatusHistoryResponse])
async def get_order_history(
    order_id: UUID,
    db: Session = Depends(get_db)
):
    return status_tracker.get_order_history(db, order_id)


@router.post("/{order_id}/courier", response_model=OrderResponse)
async def assign_courier(
    order_id: UUID,
    assignment: CourierAssign,
    db: Session = Depends(get_db)
):
    return order_service.assign_courier(db, order_id, assignment)


@router.post("/{order_id}/label-printed", response_model=OrderResponse)
async def mark_label_printed(
    order_id: UUID,
    action: ActorAction,
    db: Session = Depends(get_db)
):
    return order_service.mark_label_printed(db, order_id, action)


@router.get("/{order_id}/quote", response_model=RateQuoteResponse)
async def get_order_quote(
    order_id: UUID,
    service_type: ServiceType = ServiceType.STANDARD,
    db: Session = Depends(get_db)
):
    """Quote an order with its destination, courier and declared weight."""
    return quote_order(db, order_id, service_type).to_dict()
