"""
Staff schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional, List
from app.models.staff import StaffRole


class StaffCreate(BaseModel):
    name: str
    email: str
    role: StaffRole = StaffRole.WAREHOUSE_WORKER
    warehouse_ids: List[UUID] = []
    can_update_order_status: bool = True
    can_print_labels: bool = True
    can_scan_barcodes: bool = True
    can_view_reports: bool = False


class StaffResponse(BaseModel):
    id: UUID
    forwarder_id: UUID
    name: str
    email: str
    role: StaffRole
    warehouse_ids: List[UUID] = []
    can_update_order_status: bool
    can_print_labels: bool
    can_scan_barcodes: bool
    can_view_reports: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
