"""
Forwarder, warehouse and consolidation settings schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from decimal import Decimal
from typing import Optional
from app.models.forwarder import ConsolidationFrequency


class ForwarderCreate(BaseModel):
    business_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    max_parcel_weight: Optional[Decimal] = None
    max_parcels_per_month: Optional[int] = None


class ForwarderResponse(BaseModel):
    id: UUID
    business_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    max_parcel_weight: Optional[Decimal] = None
    max_parcels_per_month: Optional[int] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class WarehouseCreate(BaseModel):
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    max_parcels: int = 0


class WarehouseResponse(BaseModel):
    id: UUID
    forwarder_id: UUID
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    max_parcels: int
    current_capacity: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ConsolidationSettingsUpdate(BaseModel):
    is_enabled: bool
    holding_period_days: int
    discount_percentage: Optional[Decimal] = None
    minimum_packages: Optional[int] = None
    maximum_packages: Optional[int] = None
    consolidation_frequency: Optional[ConsolidationFrequency] = None


class ConsolidationSettingsResponse(BaseModel):
    id: UUID
    forwarder_id: UUID
    is_enabled: bool
    holding_period_days: int
    discount_percentage: Optional[Decimal] = None
    minimum_packages: Optional[int] = None
    maximum_packages: Optional[int] = None
    consolidation_frequency: Optional[ConsolidationFrequency] = None
    updated_at: datetime

    class Config:
        from_attributes = True
