"""
Order and status history schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any
from app.models.order import OrderStatus, ShippingType
from app.models.order_status_history import ActorType


class OrderCreate(BaseModel):
    customer_id: UUID
    forwarder_id: UUID
    warehouse_id: UUID
    shipping_address: str
    destination_country: Optional[str] = None
    tracking_number: Optional[str] = None
    merchant_name: Optional[str] = None
    declared_weight: Optional[Decimal] = None
    declared_value: Optional[Decimal] = None
    currency: str = "USD"
    shipping_type: ShippingType = ShippingType.IMMEDIATE
    notes: Optional[str] = None


class OrderResponse(BaseModel):
    id: UUID
    customer_id: UUID
    forwarder_id: UUID
    warehouse_id: UUID
    customer_name: str
    customer_email: str
    shipping_address: str
    destination_country: Optional[str] = None
    tracking_number: Optional[str] = None
    merchant_name: Optional[str] = None
    declared_weight: Optional[Decimal] = None
    declared_value: Optional[Decimal] = None
    currency: str
    shipping_type: ShippingType
    courier: Optional[str] = None
    courier_tracking_number: Optional[str] = None
    status: OrderStatus
    label_printed: bool
    notes: Optional[str] = None
    received_at: Optional[datetime] = None
    packed_at: Optional[datetime] = None
    awaiting_pickup_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    total: int
    page: int
    page_size: int


class ScanData(BaseModel):
    barcode_value: str
    scan_location: Optional[str] = None
    device_info: Optional[Dict[str, Any]] = None


class StatusUpdate(BaseModel):
    new_status: OrderStatus
    actor_id: UUID
    actor_type: ActorType
    notes: Optional[str] = None
    scan_data: Optional[ScanData] = None


class ScanRequest(BaseModel):
    staff_id: UUID
    scan_data: ScanData
    notes: Optional[str] = None


class ActorAction(BaseModel):
    actor_id: UUID
    actor_type: ActorType


class CourierAssign(ActorAction):
    courier: str
    courier_tracking_number: Optional[str] = None


class BulkCourierAssign(ActorAction):
    order_ids: List[UUID]
    courier: str


class BulkCourierAssignResponse(BaseModel):
    updated: int
    order_ids: List[UUID]


class OrderStatusHistoryResponse(BaseModel):
    id: UUID
    order_id: UUID
    previous_status: Optional[OrderStatus] = None
    new_status: OrderStatus
    actor_id: Optional[UUID] = None
    actor_type: ActorType
    staff_name: Optional[str] = None
    warehouse_name: Optional[str] = None
    notes: Optional[str] = None
    scan_data: Optional[Dict[str, Any]] = None
    changed_at: datetime

    class Config:
        from_attributes = True
